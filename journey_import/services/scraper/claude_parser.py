"""
Claude Share Decoder

Decodes claude.ai share pages. Claude renders with React Server Components, so
the conversation is usually spread over many `self.__next_f.push(...)` script
chunks; structured data blobs and markup classes are older fallbacks.
"""

import json
import logging
import re
from typing import Any, List, Tuple

from journey_import.models import RawMessage
from journey_import.services.scraper.base import BaseShareParser, vendor_suffix
from journey_import.services.scraper.errors import AccessBlockedError
from journey_import.services.scraper.generic_extractor import (
    extract_generic_markup,
    extract_messages_from_json,
    extract_title,
    find_nested_array,
    messages_from_items,
    messages_from_markup,
)
from journey_import.services.scraper.markup import (
    detect_access_block,
    iter_json_scripts,
    iter_scripts,
    slice_turns,
    unescape_js_string,
)
from journey_import.services.scraper.strategies import ExtractionStrategy, StrategyResult
from journey_import.services.scraper.turbo_stream import extract_turbo_stream

logger = logging.getLogger(__name__)

RSC_PUSH_PATTERN = re.compile(r'self\.__next_f\.push\(\[(\d+),"((?:[^"\\]|\\.)*)"\]\)')
CHAT_MESSAGES_PATTERN = re.compile(r'"chat_messages"\s*:\s*\[')
SENDER_PATTERN = re.compile(r'"sender"\s*:\s*"(human|assistant)"')
CONTENT_FIELD_PATTERN = re.compile(r'"(?:text|content)"\s*:\s*"((?:[^"\\]|\\.)*)"')
SENDER_WINDOW = 50000
MIN_SENDER_CONTENT_LENGTH = 5

MESSAGE_ARRAY_KEYS = ("chat_messages", "messages", "conversation", "turns")

STATE_BLOB_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r'<script[^>]*id="__(?:NEXT|NUXT|SVELTE)_DATA__"[^>]*>([\s\S]*?)</script>'),
    re.compile(
        r"<script[^>]*>window\.__(?:data|INITIAL_STATE|claude)_*\s*=\s*(\{[\s\S]*?\});?\s*</script>"
    ),
    re.compile(r'<script[^>]*type="application/json"[^>]*data-sveltekit[^>]*>([\s\S]*?)</script>'),
)

TURN_CLASS_PATTERN = re.compile(
    r'class="[^"]*\b(human|user|assistant|ai)-(?:turn|message|content)[^"]*"[^>]*>', re.I
)
ROLE_ATTRIBUTE_PATTERN = re.compile(r'(?:data-)?role="(human|user|assistant)"[^>]*>', re.I)


def reassemble_rsc_stream(page: str) -> str:
    """Concatenate and unescape every RSC push chunk on the page."""
    pieces: List[str] = []
    for _attrs, body in iter_scripts(page):
        if "self.__next_f" not in body:
            continue
        for match in RSC_PUSH_PATTERN.finditer(body):
            pieces.append(unescape_js_string(match.group(2)))
    return "".join(pieces)


def _messages_from_chat_array(stream: str) -> List[RawMessage]:
    match = CHAT_MESSAGES_PATTERN.search(stream)
    if not match:
        return []
    try:
        items, _end = json.JSONDecoder().raw_decode(stream, match.end() - 1)
    except ValueError:
        return []
    if not isinstance(items, list):
        return []
    return messages_from_items(items)


def _messages_near_senders(stream: str) -> List[RawMessage]:
    """Pair each sender marker with the first text/content field that follows it."""
    messages: List[RawMessage] = []
    for sender in SENDER_PATTERN.finditer(stream):
        window = stream[sender.start() : sender.start() + SENDER_WINDOW]
        content = CONTENT_FIELD_PATTERN.search(window)
        if not content:
            continue
        text = unescape_js_string(content.group(1)).strip()
        if len(text) > MIN_SENDER_CONTENT_LENGTH:
            role = "user" if sender.group(1) == "human" else "assistant"
            messages.append(RawMessage(role=role, content=text))
    return messages


def extract_rsc_chunks(page: str) -> StrategyResult:
    """Strategy: reassemble server component chunks and find the chat messages."""
    stream = reassemble_rsc_stream(page)
    if not stream:
        return StrategyResult()
    messages = _messages_from_chat_array(stream) or _messages_near_senders(stream)
    return StrategyResult(messages=messages)


def extract_claude_messages(data: Any) -> List[RawMessage]:
    """Look for Claude's message arrays by key name, then for any message-shaped array."""
    if not isinstance(data, dict):
        return []
    for key in MESSAGE_ARRAY_KEYS:
        items = find_nested_array(data, key)
        if items:
            messages = messages_from_items(items)
            if messages:
                return messages
    return extract_messages_from_json(data)


def _result_from_json(body: str) -> StrategyResult:
    try:
        data = json.loads(body)
    except ValueError:
        return StrategyResult()
    messages = extract_claude_messages(data)
    if not messages:
        return StrategyResult()
    return StrategyResult(messages=messages, title=extract_title(data))


def extract_state_blobs(page: str) -> StrategyResult:
    """Strategy: framework state blobs (Next/Nuxt/SvelteKit, window.__data)."""
    for pattern in STATE_BLOB_PATTERNS:
        match = pattern.search(page)
        if not match:
            continue
        result = _result_from_json(match.group(1))
        if result.messages:
            return result
    return StrategyResult()


def extract_json_scripts(page: str) -> StrategyResult:
    """Strategy: every JSON script on the page."""
    for body in iter_json_scripts(page):
        result = _result_from_json(body)
        if result.messages:
            return result
    return StrategyResult()


def extract_turn_classes(page: str) -> StrategyResult:
    """Strategy: `human-turn` / `assistant-message` style class names, in page order."""
    messages: List[RawMessage] = []
    for raw_role, content in slice_turns(page, TURN_CLASS_PATTERN):
        if not content:
            continue
        role = "user" if raw_role.lower() in ("human", "user") else "assistant"
        messages.append(RawMessage(role=role, content=content))
    return StrategyResult(messages=messages)


def extract_role_attributes(page: str) -> StrategyResult:
    """Strategy: `role=` / `data-role=` attributes."""
    return StrategyResult(messages=messages_from_markup(page, (ROLE_ATTRIBUTE_PATTERN,)))


class ClaudeParserService(BaseShareParser):
    """Service for decoding Claude share pages."""

    platform = "claude"
    label = "Claude"
    default_title = "Claude Shared Conversation"
    title_suffix = vendor_suffix("Claude")

    def check_access(self, page: str) -> None:
        # Claude serves a small Cloudflare interstitial to server-side clients
        if detect_access_block(page) == "challenge":
            logger.debug("Claude: Cloudflare challenge page detected")
            raise AccessBlockedError(self.blocked_message("challenge"))

    def strategies(self) -> List[ExtractionStrategy]:
        return [
            ExtractionStrategy("rsc_chunks", extract_rsc_chunks),
            ExtractionStrategy("turbo_stream", extract_turbo_stream),
            ExtractionStrategy("state_blobs", extract_state_blobs),
            ExtractionStrategy("json_scripts", extract_json_scripts),
            ExtractionStrategy("turn_classes", extract_turn_classes),
            ExtractionStrategy("role_attributes", extract_role_attributes),
            ExtractionStrategy("generic_markup", extract_generic_markup),
        ]
