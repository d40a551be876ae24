"""
Unit tests for pairing messages into steps.
"""

import itertools

import pytest

from journey_import.models import ParsedConversation, RawMessage
from journey_import.services.step_builder import build_journey, build_steps, step_title


def _messages(*roles: str) -> list[RawMessage]:
    return [RawMessage(role=role, content=f"{role} message {i}") for i, role in enumerate(roles)]


def test_pairs_user_with_following_assistant() -> None:
    steps = build_steps(_messages("user", "assistant", "user", "assistant"))
    assert [(s.prompt, s.result) for s in steps] == [
        ("user message 0", "assistant message 1"),
        ("user message 2", "assistant message 3"),
    ]
    assert all(s.notes == "" for s in steps)


def test_consecutive_user_messages_are_not_merged() -> None:
    steps = build_steps(_messages("user", "user", "assistant"))
    assert [(s.prompt, s.result) for s in steps] == [
        ("user message 0", ""),
        ("user message 1", "assistant message 2"),
    ]


def test_trailing_user_message_has_empty_result() -> None:
    steps = build_steps(_messages("user", "assistant", "user"))
    assert steps[-1].prompt == "user message 2"
    assert steps[-1].result == ""


def test_leading_and_orphan_assistant_messages_are_dropped() -> None:
    steps = build_steps(_messages("assistant", "user", "assistant", "assistant"))
    assert [(s.prompt, s.result) for s in steps] == [("user message 1", "assistant message 2")]


def test_system_message_does_not_count_as_response() -> None:
    steps = build_steps(_messages("user", "system", "assistant"))
    assert [(s.prompt, s.result) for s in steps] == [("user message 0", "")]


def test_empty_input_yields_no_steps() -> None:
    assert build_steps([]) == []


@pytest.mark.parametrize("length", range(1, 6))
def test_ordering_and_pairing_laws_hold_for_all_role_sequences(length: int) -> None:
    """Exhaustively check the step laws over every role sequence of a given length."""
    for roles in itertools.product(("user", "assistant"), repeat=length):
        messages = _messages(*roles)
        steps = build_steps(messages)
        user_contents = [m.content for m in messages if m.role == "user"]

        assert len(steps) <= len(user_contents)
        assert [s.prompt for s in steps] == user_contents

        for idx, message in enumerate(messages):
            if message.role != "user":
                continue
            step = next(s for s in steps if s.prompt == message.content)
            followed_by_assistant = idx + 1 < len(messages) and messages[idx + 1].role == "assistant"
            if followed_by_assistant:
                assert step.result == messages[idx + 1].content
            else:
                assert step.result == ""


def test_step_titles_are_numbered_and_truncated() -> None:
    long_prompt = "x" * 61
    assert step_title(1, "Short prompt") == "Step 1: Short prompt"
    assert step_title(2, "y" * 60) == f"Step 2: {'y' * 60}"
    assert step_title(3, long_prompt) == f"Step 3: {'x' * 60}..."


def test_step_ids_are_unique_and_content_is_repeatable() -> None:
    messages = _messages("user", "assistant", "user", "assistant")
    first = build_steps(messages)
    second = build_steps(messages)

    assert len({s.id for s in first + second}) == 4
    assert [(s.title, s.prompt, s.result) for s in first] == [
        (s.title, s.prompt, s.result) for s in second
    ]


def test_build_journey_describes_the_share_import() -> None:
    conversation = ParsedConversation(
        title="Closures",
        platform="claude",
        messages=_messages("user", "assistant"),
    )
    journey = build_journey(conversation)

    assert journey.title == "Closures"
    assert journey.platform == "claude"
    assert journey.description == "Imported from Claude shared link with 1 steps."
    assert journey.source == "claude-share-url"
    assert journey.confidence == 0.9
    assert len(journey.steps) == 1
