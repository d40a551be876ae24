"""
Smart-Paste Parser.

Structures raw pasted conversation text. The classifier picks a vocabulary of
role labels ("You:"/"ChatGPT:", "Human:"/"Assistant:", ...); the text is split
at every line starting with one of those labels. Text without recognisable
labels falls back to pairing blank-line separated blocks, with reduced
confidence.
"""

import logging
import re
from typing import Dict, List, Pattern, Tuple

from journey_import.models import PastedConversationResult, RawMessage, Step
from journey_import.services.platform_classifier import classify_text
from journey_import.services.step_builder import build_steps, platform_label

logger = logging.getLogger(__name__)

# (user label, assistant label) per platform vocabulary
ROLE_PATTERNS: Dict[str, Tuple[str, str]] = {
    "chatgpt": (
        r"^(?:You|User|Human|Me)\s*:\s*",
        r"^(?:ChatGPT|Assistant|GPT(?:-?[34o](?:\.\d)?)?|AI)\s*:\s*",
    ),
    "claude": (
        r"^(?:Human|H|You|User)\s*[:\]]\s*",
        r"^(?:Assistant|A|Claude)\s*[:\]]\s*",
    ),
    "copilot": (
        r"^(?:User|You|Me|>\s*)\s*:\s*",
        r"^(?:Copilot|GitHub Copilot|Assistant)\s*:\s*",
    ),
    "gemini": (
        r"^(?:You|User|Human)\s*:\s*",
        r"^(?:Gemini|Bard|Model|Google\s*AI)\s*:\s*",
    ),
    "generic": (
        r"^(?:User|You|Human|Me|Q|Question|Prompt)\s*[:\]]\s*",
        r"^(?:Assistant|AI|Bot|Answer|Response|A|Model)\s*[:\]]\s*",
    ),
}

BLOCK_SEPARATOR = re.compile(r"\n\s*\n")
MIN_BLOCK_LENGTH = 10
UNSTRUCTURED_CONFIDENCE_PENALTY = 0.3
TITLE_PROMPT_CHARS = 80
MAX_TITLE_LENGTH = 200


def role_marker_pattern(platform: str) -> Pattern:
    """Compile one pattern matching either role label, tagged by named group."""
    user, assistant = ROLE_PATTERNS[platform]
    return re.compile(rf"(?P<user>{user})|(?P<assistant>{assistant})", re.M | re.I)


def split_on_role_labels(text: str, platform: str) -> List[RawMessage]:
    """
    Cut text at each role label line and tag each segment with that label's role.

    Text before the first label and segments left empty are discarded.
    """
    matches = list(role_marker_pattern(platform).finditer(text))
    messages: List[RawMessage] = []
    for idx, match in enumerate(matches):
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
        content = text[match.end() : end].strip()
        if content:
            messages.append(RawMessage(role=match.lastgroup, content=content))
    return messages


def split_into_blocks(text: str) -> List[RawMessage]:
    """Alternate user/assistant over blank-line separated blocks of meaningful length."""
    blocks = [block.strip() for block in BLOCK_SEPARATOR.split(text)]
    blocks = [block for block in blocks if len(block) > MIN_BLOCK_LENGTH]
    return [
        RawMessage(role="user" if idx % 2 == 0 else "assistant", content=block)
        for idx, block in enumerate(blocks)
    ]


def _conversation_title(label: str, steps: List[Step]) -> str:
    if not steps:
        return f"Imported {label} Conversation"
    prompt = steps[0].prompt
    title = f"{label} Conversation: {prompt[:TITLE_PROMPT_CHARS]}"
    if len(prompt) > TITLE_PROMPT_CHARS:
        title += "..."
    return title[:MAX_TITLE_LENGTH]


def parse_pasted_text(text: str) -> PastedConversationResult:
    """
    Classify pasted text and turn it into steps.

    Args:
        text: The pasted conversation

    Returns:
        The platform guess, a title and description, and the steps (possibly none)
    """
    classification = classify_text(text)
    platform = classification.platform
    label = platform_label(platform)

    messages = split_on_role_labels(text, platform)
    if len(messages) >= 2:
        steps = build_steps(messages)
        return PastedConversationResult(
            platform=platform,
            confidence=classification.confidence,
            title=_conversation_title(label, steps),
            description=f"Imported from {label} conversation with {len(steps)} steps.",
            steps=steps,
        )

    logger.debug(f"No {platform} role labels found, pairing blank-line blocks")
    steps = build_steps(split_into_blocks(text))
    return PastedConversationResult(
        platform=platform,
        confidence=max(classification.confidence - UNSTRUCTURED_CONFIDENCE_PENALTY, 0.0),
        title=f"Imported Conversation ({len(steps)} steps)",
        description=f"Auto-parsed conversation with {len(steps)} prompt-response pairs.",
        steps=steps,
    )
