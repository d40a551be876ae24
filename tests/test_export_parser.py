"""
Tests for ChatGPT export file decoding (conversations.json and chat.html).
"""

import json
from typing import Any, Dict

import pytest

from journey_import.services.export_parser import (
    export_source,
    linearize_mapping,
    parse_export_file,
)
from journey_import.services.scraper.errors import InvalidInputError


def test_follows_current_node_branch(branched_export: Dict[str, Any]) -> None:
    conversations = parse_export_file("conversations.json", json.dumps([branched_export]))

    assert len(conversations) == 1
    conversation = conversations[0]
    assert conversation.title == "Regenerated answer"
    assert conversation.platform == "chatgpt"
    # System message and the abandoned "Four." branch are left out
    assert [(m.role, m.content) for m in conversation.messages] == [
        ("user", "Name a prime number."),
        ("assistant", "Seven is prime."),
    ]


def test_reads_mapping_order_without_current_node(linear_export: Dict[str, Any]) -> None:
    conversations = parse_export_file("conversations.json", json.dumps([linear_export]))
    assert [m.content for m in conversations[0].messages] == [
        "How do I sort a list?",
        "Use sorted(items).",
        "And descending?",
        "Add reverse=True.",
    ]


def test_single_conversation_object_is_accepted(linear_export: Dict[str, Any]) -> None:
    assert len(parse_export_file("export.JSON", json.dumps(linear_export))) == 1


def test_skips_conversations_with_too_few_messages(linear_export: Dict[str, Any]) -> None:
    lonely = {
        "title": "Lonely",
        "mapping": {
            "u1": {
                "message": {"author": {"role": "user"}, "content": {"parts": ["Anyone there?"]}},
                "parent": None,
                "children": [],
            }
        },
    }
    conversations = parse_export_file("conversations.json", json.dumps([lonely, linear_export]))
    assert [c.title for c in conversations] == ["Sorting lists"]


def test_missing_title_defaults(linear_export: Dict[str, Any]) -> None:
    del linear_export["title"]
    conversations = parse_export_file("conversations.json", json.dumps([linear_export]))
    assert conversations[0].title == "Untitled"


def test_linearize_mapping_stops_on_cycles() -> None:
    mapping = {
        "a": {"parent": "b"},
        "b": {"parent": "a"},
    }
    assert linearize_mapping(mapping, "a") == ["b", "a"]


def test_invalid_json_is_rejected() -> None:
    with pytest.raises(InvalidInputError) as exc_info:
        parse_export_file("conversations.json", "{not json")
    assert exc_info.value.message == "Invalid JSON file format"


def test_unsupported_extension_is_rejected() -> None:
    with pytest.raises(InvalidInputError):
        parse_export_file("notes.txt", "User: hi\nChatGPT: hello")


def test_export_source_tags() -> None:
    assert export_source("conversations.json") == "chatgpt-json"
    assert export_source("chat.html") == "chatgpt-html"
    assert export_source("chat.HTM") == "chatgpt-html"


def test_html_export_reads_embedded_json(
    branched_export: Dict[str, Any], linear_export: Dict[str, Any]
) -> None:
    page = (
        "<html><head><title>ChatGPT Data Export</title></head><body>"
        f"<script>var jsonData = {json.dumps([branched_export, linear_export])};</script>"
        "<div id=\"root\"></div></body></html>"
    )
    conversations = parse_export_file("chat.html", page)
    assert [c.title for c in conversations] == ["Regenerated answer", "Sorting lists"]


def test_html_export_reads_label_lines_under_heading() -> None:
    page = (
        "<h1>Sorting chat</h1>\n"
        "<p>User: How do I sort a list</p>\n"
        "<p>ChatGPT: Use the sorted function</p>\n"
    )
    conversations = parse_export_file("chat.html", page)

    assert len(conversations) == 1
    assert conversations[0].title == "Sorting chat"
    assert [(m.role, m.content) for m in conversations[0].messages] == [
        ("user", "How do I sort a list"),
        ("assistant", "Use the sorted function"),
    ]


def test_html_export_alternates_unlabelled_message_divs() -> None:
    page = (
        '<div class="conversation">'
        '<div class="message">What is a closure in Python</div>'
        '<div class="message">A function that captures variables</div>'
        "</div>"
    )
    conversations = parse_export_file("chat.htm", page)

    assert [m.role for m in conversations[0].messages] == ["user", "assistant"]
    assert conversations[0].messages[1].content == "A function that captures variables"


def test_html_export_without_conversations_is_empty() -> None:
    assert parse_export_file("chat.html", "<html><body><p>Nothing here</p></body></html>") == []
