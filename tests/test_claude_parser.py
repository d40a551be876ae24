"""
Tests for the Claude share page decoder.
"""

import json
from typing import Callable

import pytest

from journey_import.services.scraper.claude_parser import (
    ClaudeParserService,
    extract_claude_messages,
    extract_role_attributes,
    extract_rsc_chunks,
    extract_state_blobs,
    extract_turn_classes,
    reassemble_rsc_stream,
)
from journey_import.services.scraper.errors import AccessBlockedError, NoStructureFoundError

CHAT_STREAM = (
    '5:["$","div",null,{"conversation":{"name":"Closures","chat_messages":['
    '{"uuid":"1","sender":"human","text":"Explain closures"},'
    '{"uuid":"2","sender":"assistant","content":[{"type":"text","text":"A closure captures scope."}]}'
    "]}}]\n"
)


def test_reassembles_and_unescapes_push_chunks(build_rsc_page: Callable[..., str]) -> None:
    page = build_rsc_page(CHAT_STREAM, chunks=5)
    assert reassemble_rsc_stream(page) == CHAT_STREAM


def test_rsc_chunks_read_chat_messages_array(build_rsc_page: Callable[..., str]) -> None:
    result = extract_rsc_chunks(build_rsc_page(CHAT_STREAM))
    assert [(m.role, m.content) for m in result.messages] == [
        ("user", "Explain closures"),
        ("assistant", "A closure captures scope."),
    ]


def test_rsc_chunks_pair_senders_with_nearest_following_text(
    build_rsc_page: Callable[..., str],
) -> None:
    stream = (
        '{"sender":"human","index":0,"text":"What is a monad, briefly?"}'
        '{"sender":"assistant","index":1,"content":"A way to chain computations."}'
        '{"sender":"human","index":2,"text":"ok"}'
    )
    result = extract_rsc_chunks(build_rsc_page(stream))

    # the final message is too short to keep
    assert [(m.role, m.content) for m in result.messages] == [
        ("user", "What is a monad, briefly?"),
        ("assistant", "A way to chain computations."),
    ]


def test_parse_html_uses_page_title_for_rsc_pages(build_rsc_page: Callable[..., str]) -> None:
    conversation = ClaudeParserService().parse_html(build_rsc_page(CHAT_STREAM))

    assert conversation.platform == "claude"
    assert conversation.title == "Closures"
    assert len(conversation.messages) == 2


def test_cloudflare_challenge_is_rejected_before_strategies() -> None:
    page = "<html><head><title>Just a moment...</title></head><body>cf-browser-verification</body></html>"
    with pytest.raises(AccessBlockedError) as exc_info:
        ClaudeParserService().parse_html(page)
    assert "bot detection" in exc_info.value.message
    assert exc_info.value.kind == "access_blocked"


def test_state_blob_with_key_synonyms() -> None:
    blob = {
        "props": {
            "pageProps": {
                "chat": {
                    "name": "Recursion help",
                    "turns": [
                        {"sender": "human", "text": "What is recursion?"},
                        {"sender": "assistant", "text": "A function calling itself."},
                    ],
                }
            }
        }
    }
    page = f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(blob)}</script>'
    result = extract_state_blobs(page)

    assert result.title == "Recursion help"
    assert [m.role for m in result.messages] == ["user", "assistant"]


def test_window_state_assignment() -> None:
    state = {"conversation": {"messages": [
        {"role": "user", "content": "Hi Claude, a question"},
        {"role": "assistant", "content": "Sure, go ahead."},
    ]}}
    page = f"<script>window.__INITIAL_STATE__ = {json.dumps(state)};</script>"
    result = extract_state_blobs(page)
    assert [m.content for m in result.messages] == ["Hi Claude, a question", "Sure, go ahead."]


def test_claude_messages_fall_back_to_any_message_array() -> None:
    data = {"payload": {"items": [
        {"author": {"role": "user"}, "text": "Question text"},
        {"author": {"role": "assistant"}, "text": "Answer text"},
    ]}}
    assert [m.role for m in extract_claude_messages(data)] == ["user", "assistant"]


def test_turn_classes_keep_page_order() -> None:
    page = (
        '<div class="font-user-message human-turn">Explain closures to me</div>'
        '<div class="assistant-message">A closure captures its scope.</div>'
        '<div class="human-turn">And in Python?</div>'
        '<div class="assistant-message">Inner functions close over locals.</div>'
    )
    result = extract_turn_classes(page)
    assert [m.role for m in result.messages] == ["user", "assistant", "user", "assistant"]
    assert result.messages[2].content == "And in Python?"


def test_role_attributes() -> None:
    page = (
        '<div data-role="human">What is a monad in FP?</div>'
        '<div data-role="assistant">A monoid in the category of endofunctors.</div>'
    )
    result = extract_role_attributes(page)
    assert [(m.role, m.content) for m in result.messages] == [
        ("user", "What is a monad in FP?"),
        ("assistant", "A monoid in the category of endofunctors."),
    ]


def test_empty_share_page_raises_no_structure() -> None:
    page = "<html><head><title>Claude</title></head><body>" + "x" * 30000 + "</body></html>"
    with pytest.raises(NoStructureFoundError) as exc_info:
        ClaudeParserService().parse_html(page)
    assert "Claude" in exc_info.value.message
