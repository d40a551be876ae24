"""
Gemini Share Decoder

Decodes gemini.google.com share pages. The conversation is carried by one
opaque string in `window.WIZ_global_data["DnVkpd"]`: repeating groups of
(prompt, image url, dark image url, response) joined by a non-ASCII field
separator. The separator bytes are not stable across responses, so they are
recovered from the page itself on every parse.
"""

import json
import logging
import re
from typing import List, Optional

from journey_import.models import RawMessage
from journey_import.services.scraper.base import BaseShareParser, vendor_suffix
from journey_import.services.scraper.generic_extractor import (
    extract_generic_markup,
    extract_messages_from_json,
    extract_title,
    messages_from_markup,
)
from journey_import.services.scraper.markup import slice_turns, strip_markup
from journey_import.services.scraper.strategies import ExtractionStrategy, StrategyResult
from journey_import.services.scraper.turbo_stream import extract_turbo_stream

logger = logging.getLogger(__name__)

WIZ_GLOBAL_DATA_PATTERN = re.compile(
    r"window\.WIZ_global_data\s*=\s*(\{[\s\S]*?\})\s*;?\s*</script>"
)
WIZ_CONVERSATION_KEY = "DnVkpd"
MIN_BLOB_LENGTH = 20

# Every group carries image URLs on this CDN, so it always follows a separator
SEPARATOR_ANCHOR = "https://www.gstatic.com/lamda/"
FIELDS_PER_TURN = 4
FIRST_PRINTABLE = re.compile(r"[\x20-\x7e]")

SCRIPT_DATA_PATTERN = re.compile(
    r'<script[^>]*(?:type="application/json"|nonce)[^>]*>([\s\S]*?)</script>'
)
QUERY_RESPONSE_CLASS_PATTERN = re.compile(
    r'class="[^"]*(query-text|user-query|prompt-text|response-text|model-response|response-container)'
    r'[^"]*"[^>]*>',
    re.I,
)
USER_CLASSES = ("query-text", "user-query", "prompt-text")
DATA_ROLE_PATTERN = re.compile(
    r'data-(?:message-)?(?:author-)?role="(user|model|assistant)"[^>]*>', re.I
)


def discover_field_separator(raw: str) -> Optional[str]:
    """
    Recover the field separator from a DnVkpd blob.

    The separator is the run of non-ASCII characters directly before the first
    image CDN URL. Returns None when the anchor is missing or nothing non-ASCII
    precedes it.
    """
    anchor = raw.find(SEPARATOR_ANCHOR)
    if anchor < 1:
        return None
    start = anchor
    while start > 0 and ord(raw[start - 1]) > 127:
        start -= 1
    return raw[start:anchor] or None


def _strip_leading_noise(prompt: str) -> str:
    # Turn separators land at the start of each prompt after splitting
    match = FIRST_PRINTABLE.search(prompt)
    if match and match.start() > 0:
        prompt = prompt[match.start() :]
    return prompt.strip()


def parse_global_data_blob(raw: str) -> List[RawMessage]:
    """Split a DnVkpd blob into prompt/response messages."""
    separator = discover_field_separator(raw or "")
    if separator is None:
        logger.debug("Gemini: no field separator found in conversation blob")
        return []

    fields = raw.split(separator)
    logger.debug(f"Gemini: separator {separator!r} splits blob into {len(fields)} fields")
    messages: List[RawMessage] = []
    for idx in range(0, len(fields), FIELDS_PER_TURN):
        group = fields[idx : idx + FIELDS_PER_TURN]
        prompt = _strip_leading_noise(group[0])
        if not prompt:
            continue
        messages.append(RawMessage(role="user", content=prompt))

        response = strip_markup(group[3]) if len(group) == FIELDS_PER_TURN else ""
        if response:
            messages.append(RawMessage(role="assistant", content=response))
    return messages


def extract_wiz_global_data(page: str) -> StrategyResult:
    """Strategy: decode the WIZ_global_data conversation blob."""
    match = WIZ_GLOBAL_DATA_PATTERN.search(page)
    if not match:
        return StrategyResult()
    blob = json.loads(match.group(1)).get(WIZ_CONVERSATION_KEY)
    if not isinstance(blob, str) or len(blob) <= MIN_BLOB_LENGTH:
        return StrategyResult()
    return StrategyResult(messages=parse_global_data_blob(blob))


def extract_script_data(page: str) -> StrategyResult:
    """Strategy: JSON and nonce-tagged scripts through the generic JSON search."""
    for match in SCRIPT_DATA_PATTERN.finditer(page):
        try:
            data = json.loads(match.group(1))
        except ValueError:
            continue
        messages = extract_messages_from_json(data)
        if messages:
            return StrategyResult(messages=messages, title=extract_title(data))
    return StrategyResult()


def extract_query_response_classes(page: str) -> StrategyResult:
    """Strategy: `query-text` / `model-response` style class names, in page order."""
    messages: List[RawMessage] = []
    for class_name, content in slice_turns(page, QUERY_RESPONSE_CLASS_PATTERN):
        if not content:
            continue
        role = "user" if class_name.lower() in USER_CLASSES else "assistant"
        messages.append(RawMessage(role=role, content=content))
    return StrategyResult(messages=messages)


def extract_data_roles(page: str) -> StrategyResult:
    """Strategy: `data-role` / `data-message-author-role` attributes."""
    return StrategyResult(messages=messages_from_markup(page, (DATA_ROLE_PATTERN,)))


class GeminiParserService(BaseShareParser):
    """Service for decoding Gemini share pages."""

    platform = "gemini"
    label = "Gemini"
    default_title = "Gemini Shared Conversation"
    title_suffix = vendor_suffix(r"(?:Google\s*)?Gemini")

    def page_title(self, page: str) -> str:
        title = super().page_title(page)
        # The consent interstitial's title is not a conversation title
        if "direct access to Google" in title:
            return ""
        return title

    def strategies(self) -> List[ExtractionStrategy]:
        return [
            ExtractionStrategy("wiz_global_data", extract_wiz_global_data),
            ExtractionStrategy("turbo_stream", extract_turbo_stream),
            ExtractionStrategy("script_data", extract_script_data),
            ExtractionStrategy("query_response_classes", extract_query_response_classes),
            ExtractionStrategy("data_roles", extract_data_roles),
            ExtractionStrategy("generic_markup", extract_generic_markup),
        ]
