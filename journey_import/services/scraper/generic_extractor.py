"""
Generic Fallback Extractor.

Platform-agnostic heuristics shared by every decoder: a bounded recursive
search of embedded JSON for message-shaped arrays, and a pass over the raw
markup for role-bearing attributes and class names.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from journey_import.models import RawMessage
from journey_import.services.scraper.markup import iter_json_scripts, slice_turns
from journey_import.services.scraper.strategies import ExtractionStrategy, StrategyResult

logger = logging.getLogger(__name__)

MAX_JSON_DEPTH = 10
MAX_TITLE_DEPTH = 5
MIN_MARKUP_CONTENT_LENGTH = 5

ROLE_SYNONYMS: Dict[str, str] = {
    "user": "user",
    "human": "user",
    "assistant": "assistant",
    "model": "assistant",
    "bot": "assistant",
}

GENERIC_MARKUP_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r'data-message-author-role="(user|assistant|human|model)"[^>]*>', re.I),
    re.compile(
        r'class="[^"]*\b(user|assistant|human|model)-(?:message|turn|content)[^"]*"[^>]*>', re.I
    ),
    re.compile(r'role="(user|assistant|human|model)"[^>]*>', re.I),
)


def normalize_role(raw_role: Any) -> Optional[str]:
    """Map vendor role names onto "user"/"assistant"; None for anything else."""
    if not isinstance(raw_role, str):
        return None
    return ROLE_SYNONYMS.get(raw_role.strip().lower())


def extract_text_content(item: Dict[str, Any]) -> str:
    """Pull message text out of the many shapes vendors use for content."""
    for key in ("content", "text", "body"):
        if isinstance(item.get(key), str):
            return item[key]

    content = item.get("content")
    if isinstance(content, dict):
        if isinstance(content.get("text"), str):
            return content["text"]
        if isinstance(content.get("parts"), list):
            return "\n".join(p for p in content["parts"] if isinstance(p, str))
        if isinstance(content.get("value"), str):
            return content["value"]

    # Content blocks, e.g. [{"type": "text", "text": "..."}]
    if isinstance(content, list):
        pieces: List[str] = []
        for block in content:
            if isinstance(block, str):
                pieces.append(block)
            elif isinstance(block, dict) and isinstance(block.get("text"), str):
                pieces.append(block["text"])
        return "\n".join(p for p in pieces if p)

    return ""


def _item_role(item: Dict[str, Any]) -> Any:
    author = item.get("author")
    if isinstance(author, dict):
        author = author.get("role")
    return item.get("role") or author or item.get("sender")


def looks_like_message(value: Any) -> bool:
    return isinstance(value, dict) and bool(
        value.get("role") or value.get("author") or value.get("sender")
    )


def messages_from_items(items: List[Any]) -> List[RawMessage]:
    messages: List[RawMessage] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        role = normalize_role(_item_role(item))
        content = extract_text_content(item).strip()
        if role and content:
            messages.append(RawMessage(role=role, content=content))
    return messages


def messages_from_mapping(mapping: Dict[str, Any]) -> List[RawMessage]:
    """Read a ChatGPT-style {node_id: {"message": ...}} map in insertion order."""
    messages: List[RawMessage] = []
    for node in mapping.values():
        message = node.get("message") if isinstance(node, dict) else None
        if not isinstance(message, dict):
            continue
        author = message.get("author")
        role = author.get("role") if isinstance(author, dict) else None
        content = message.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if role not in ("user", "assistant") or not isinstance(parts, list):
            continue
        text = "\n".join(p for p in parts if isinstance(p, str)).strip()
        if text:
            messages.append(RawMessage(role=role, content=text))
    return messages


def extract_messages_from_json(data: Any, depth: int = 0) -> List[RawMessage]:
    """Depth-bounded search for the first message-shaped array or node mapping."""
    if depth > MAX_JSON_DEPTH or not isinstance(data, dict):
        return []

    for key, value in data.items():
        if isinstance(value, list) and value and looks_like_message(value[0]):
            messages = messages_from_items(value)
            if messages:
                return messages

        if key == "mapping" and isinstance(value, dict):
            messages = messages_from_mapping(value)
            if messages:
                return messages

        if isinstance(value, dict):
            messages = extract_messages_from_json(value, depth + 1)
            if messages:
                return messages
    return []


def find_nested_array(data: Any, key: str, depth: int = 0) -> Optional[List[Any]]:
    """Return the first list stored under `key` anywhere in nested dicts."""
    if depth > MAX_JSON_DEPTH or not isinstance(data, dict):
        return None
    if isinstance(data.get(key), list):
        return data[key]
    for value in data.values():
        found = find_nested_array(value, key, depth + 1)
        if found is not None:
            return found
    return None


def extract_title(data: Any, depth: int = 0) -> str:
    """Return the first non-empty "title" (or "name") found in nested data."""
    if depth > MAX_TITLE_DEPTH or not isinstance(data, dict):
        return ""
    for key in ("title", "name"):
        if isinstance(data.get(key), str) and data[key]:
            return data[key]
    for value in data.values():
        found = extract_title(value, depth + 1)
        if found:
            return found
    return ""


def extract_embedded_json(page: str) -> StrategyResult:
    """Strategy: search every JSON script block for message arrays."""
    for body in iter_json_scripts(page):
        try:
            data = json.loads(body)
        except ValueError:
            continue
        messages = extract_messages_from_json(data)
        if messages:
            return StrategyResult(messages=messages, title=extract_title(data))
    return StrategyResult()


def messages_from_markup(
    page: str, patterns: Tuple[Pattern, ...] = GENERIC_MARKUP_PATTERNS
) -> List[RawMessage]:
    """Slice markup at role-bearing markers; the first pattern with results wins."""
    for pattern in patterns:
        messages: List[RawMessage] = []
        for raw_role, content in slice_turns(page, pattern):
            role = normalize_role(raw_role)
            if role and len(content) > MIN_MARKUP_CONTENT_LENGTH:
                messages.append(RawMessage(role=role, content=content))
        if messages:
            return messages
    return []


def extract_generic_markup(page: str) -> StrategyResult:
    """Strategy: generic role attribute/class patterns over raw markup."""
    return StrategyResult(messages=messages_from_markup(page))


GENERIC_STRATEGIES: List[ExtractionStrategy] = [
    ExtractionStrategy("embedded_json", extract_embedded_json),
    ExtractionStrategy("generic_markup", extract_generic_markup),
]
