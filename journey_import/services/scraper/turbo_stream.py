"""
Streaming tuple payload decoder.

Some share pages (ChatGPT since 2025) ship their loader data as a React Router
"turbo-stream": a flat JSON array of values, where objects are stored as small
descriptors like {"_12": 13} meaning "the key at position 12 maps to the value
at position 13". The payload is embedded through one or more
`streamController.enqueue("...")` calls, each holding an escaped JS string.
"""

import json
import logging
import re
from typing import Any, Dict, Iterator, List, Optional

from journey_import.models import RawMessage
from journey_import.services.scraper.markup import unescape_js_string
from journey_import.services.scraper.strategies import StrategyResult

logger = logging.getLogger(__name__)

ENQUEUE_PATTERN = re.compile(r'streamController\.enqueue\("((?:[^"\\]|\\.)*)"\)')
MIN_PAYLOAD_LENGTH = 50
MAX_TITLE_LENGTH = 300


def _is_position(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_descriptor(payload: List[Any], descriptor: Any) -> Optional[Dict[str, Any]]:
    """Expand a {"_keyPos": valuePos} descriptor into a plain dict."""
    if not isinstance(descriptor, dict):
        return None
    resolved: Dict[str, Any] = {}
    for ref_key, value_pos in descriptor.items():
        if not isinstance(ref_key, str) or not ref_key.startswith("_"):
            continue
        try:
            key_pos = int(ref_key[1:])
        except ValueError:
            continue
        if not 0 <= key_pos < len(payload):
            continue
        key = payload[key_pos]
        if not isinstance(key, str) or not _is_position(value_pos):
            continue
        if value_pos < 0:
            # Negative positions are sentinels (null/undefined)
            resolved[key] = None
        elif value_pos < len(payload):
            resolved[key] = payload[value_pos]
    return resolved


def resolve_positions(payload: List[Any], refs: List[Any]) -> List[Any]:
    """Replace in-range positions in `refs` with the values they point at."""
    return [
        payload[ref] if _is_position(ref) and 0 <= ref < len(payload) else ref for ref in refs
    ]


def iter_payloads(page: str) -> Iterator[List[Any]]:
    """Reassemble all enqueue chunks and yield each large top-level array."""
    chunks = [unescape_js_string(m.group(1)) for m in ENQUEUE_PATTERN.finditer(page)]
    if not chunks:
        return
    decoder = json.JSONDecoder()
    for line in "".join(chunks).splitlines():
        pos = line.find("[")
        while pos != -1:
            try:
                value, end = decoder.raw_decode(line, pos)
            except ValueError:
                break
            if isinstance(value, list) and len(value) >= MIN_PAYLOAD_LENGTH:
                yield value
            pos = line.find("[", end)


def _value_after(payload: List[Any], key: str, kind: type) -> Any:
    for idx in range(len(payload) - 1):
        if payload[idx] == key and isinstance(payload[idx + 1], kind):
            return payload[idx + 1]
    return None


def find_title(payload: List[Any]) -> str:
    for idx in range(len(payload) - 1):
        candidate = payload[idx + 1]
        if payload[idx] == "title" and isinstance(candidate, str):
            if 0 < len(candidate) < MAX_TITLE_LENGTH:
                return candidate
    return ""


def _node_message(payload: List[Any], node_ref: Any) -> Optional[RawMessage]:
    """Follow node -> message -> author/content -> parts; None when any link is missing."""
    if not _is_position(node_ref) or not 0 <= node_ref < len(payload):
        return None
    node = resolve_descriptor(payload, payload[node_ref])
    if not node or not node.get("message"):
        return None
    message = resolve_descriptor(payload, node["message"])
    if not message or not message.get("author"):
        return None
    author = resolve_descriptor(payload, message["author"])
    if author is None:
        return None
    role = author.get("role")
    if role not in ("user", "assistant"):
        return None
    content = resolve_descriptor(payload, message.get("content"))
    if not content or not isinstance(content.get("parts"), list):
        return None

    parts = [
        part.strip()
        for part in resolve_positions(payload, content["parts"])
        if isinstance(part, str) and part.strip()
    ]
    if not parts:
        return None
    return RawMessage(role=role, content="\n".join(parts))


def messages_from_payload(payload: List[Any]) -> List[RawMessage]:
    """Extract messages from the ordered node list, else from the unordered node map."""
    node_refs: List[Any] = _value_after(payload, "linear_conversation", list) or []
    if not node_refs:
        mapping = _value_after(payload, "mapping", dict)
        if mapping:
            node_refs = [ref for ref in mapping.values() if _is_position(ref) and ref >= 0]

    messages: List[RawMessage] = []
    for node_ref in node_refs:
        message = _node_message(payload, node_ref)
        if message is not None:
            messages.append(message)
    return messages


def extract_turbo_stream(page: str) -> StrategyResult:
    """Strategy: decode the streamed loader payload."""
    for payload in iter_payloads(page):
        try:
            messages = messages_from_payload(payload)
        except Exception as e:
            logger.debug(f"Skipping malformed stream payload: {e}")
            continue
        if messages:
            return StrategyResult(messages=messages, title=find_title(payload))
    return StrategyResult()
