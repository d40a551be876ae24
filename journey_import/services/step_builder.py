"""
Step Builder.

Turns an ordered message list into prompt/response steps. A user message is
only ever paired with the message directly after it, and only when that
message is from the assistant.
"""

import uuid
from typing import Dict, List, Sequence

from journey_import.models import ImportedJourney, ParsedConversation, RawMessage, Step

STEP_TITLE_PROMPT_CHARS = 60
URL_IMPORT_CONFIDENCE = 0.9

PLATFORM_LABELS: Dict[str, str] = {
    "chatgpt": "ChatGPT",
    "claude": "Claude",
    "copilot": "Copilot",
    "gemini": "Gemini",
    "generic": "AI",
    "unknown": "AI",
}


def platform_label(platform: str) -> str:
    return PLATFORM_LABELS.get(platform, "AI")


def step_title(number: int, prompt: str) -> str:
    """Return "Step n: <prompt>", truncating the prompt to 60 characters."""
    if len(prompt) > STEP_TITLE_PROMPT_CHARS:
        return f"Step {number}: {prompt[:STEP_TITLE_PROMPT_CHARS]}..."
    return f"Step {number}: {prompt}"


def build_steps(messages: Sequence[RawMessage]) -> List[Step]:
    """
    Pair each user message with the assistant message that directly follows it.

    Consecutive user messages each become their own step with an empty result.
    Assistant or system messages that do not follow a user message are dropped.

    Args:
        messages: Messages in conversational order

    Returns:
        Steps in the order of their user messages
    """
    steps: List[Step] = []
    idx = 0
    while idx < len(messages):
        message = messages[idx]
        idx += 1
        if message.role != "user":
            continue

        result = ""
        if idx < len(messages) and messages[idx].role == "assistant":
            result = messages[idx].content
            idx += 1

        steps.append(
            Step(
                id=str(uuid.uuid4()),
                title=step_title(len(steps) + 1, message.content),
                prompt=message.content,
                result=result,
            )
        )
    return steps


def build_journey(conversation: ParsedConversation) -> ImportedJourney:
    """Build the journey returned for a shared conversation link."""
    steps = build_steps(conversation.messages)
    label = platform_label(conversation.platform)
    return ImportedJourney(
        title=conversation.title,
        description=f"Imported from {label} shared link with {len(steps)} steps.",
        platform=conversation.platform,
        steps=steps,
        source=f"{conversation.platform}-share-url",
        confidence=URL_IMPORT_CONFIDENCE,
    )
