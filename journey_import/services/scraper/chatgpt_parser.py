"""
ChatGPT Share Decoder

Decodes chatgpt.com / chat.openai.com share pages. Current pages carry a
streamed loader payload; older ones a `__NEXT_DATA__` blob; the markup
strategies cover server-rendered fallbacks.
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from journey_import.models import RawMessage
from journey_import.services.scraper.base import BaseShareParser, vendor_suffix
from journey_import.services.scraper.generic_extractor import (
    extract_embedded_json,
    extract_generic_markup,
    messages_from_markup,
)
from journey_import.services.scraper.strategies import ExtractionStrategy, StrategyResult
from journey_import.services.scraper.turbo_stream import extract_turbo_stream

NEXT_DATA_PATTERN = re.compile(
    r'<script\s+id="__NEXT_DATA__"\s+type="application/json"[^>]*>([\s\S]*?)</script>'
)
AUTHOR_ROLE_PATTERN = re.compile(r'data-message-author-role="(user|assistant)"[^>]*>')

# Where the conversation sits inside pageProps, newest schema first
CONVERSATION_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("serverResponse", "data"),
    ("data",),
    (),
)
NODE_KEYS = ("mapping", "linear_conversation", "messages")


def _dig(data: Any, path: Tuple[str, ...]) -> Optional[Dict[str, Any]]:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data if isinstance(data, dict) and data else None


def _node_text(message: Dict[str, Any]) -> str:
    content = message.get("content")
    if isinstance(content, dict) and isinstance(content.get("parts"), list):
        return "\n".join(p for p in content["parts"] if isinstance(p, str))
    if isinstance(content, str):
        return content
    if isinstance(message.get("text"), str):
        return message["text"]
    return ""


def _messages_from_nodes(nodes: List[Any]) -> List[RawMessage]:
    messages: List[RawMessage] = []
    for node in nodes:
        if not isinstance(node, dict):
            continue
        message = node.get("message") or node
        if not isinstance(message, dict):
            continue
        author = message.get("author")
        role = (author.get("role") if isinstance(author, dict) else None) or message.get("role")
        text = _node_text(message).strip()
        if text and role in ("user", "assistant"):
            messages.append(RawMessage(role=role, content=text))
    return messages


def extract_next_data(page: str) -> StrategyResult:
    """Strategy: parse the per-page `__NEXT_DATA__` JSON blob."""
    match = NEXT_DATA_PATTERN.search(page)
    if not match:
        return StrategyResult()
    page_props = _dig(json.loads(match.group(1)), ("props", "pageProps"))
    if page_props is None:
        return StrategyResult()

    for path in CONVERSATION_PATHS:
        conversation = _dig(page_props, path)
        if conversation is None:
            continue
        for key in NODE_KEYS:
            nodes = conversation.get(key)
            if isinstance(nodes, dict):
                nodes = list(nodes.values())
            if not isinstance(nodes, list) or not nodes:
                continue
            messages = _messages_from_nodes(nodes)
            if messages:
                title = conversation.get("title")
                return StrategyResult(
                    messages=messages, title=title if isinstance(title, str) else ""
                )
    return StrategyResult()


def extract_author_role_markup(page: str) -> StrategyResult:
    """Strategy: slice server-rendered markup at `data-message-author-role`."""
    return StrategyResult(messages=messages_from_markup(page, (AUTHOR_ROLE_PATTERN,)))


class ChatGPTParserService(BaseShareParser):
    """Service for decoding ChatGPT share pages."""

    platform = "chatgpt"
    label = "ChatGPT"
    default_title = "ChatGPT Shared Conversation"
    title_suffix = vendor_suffix("ChatGPT")

    def strategies(self) -> List[ExtractionStrategy]:
        return [
            ExtractionStrategy("turbo_stream", extract_turbo_stream),
            ExtractionStrategy("next_data", extract_next_data),
            ExtractionStrategy("embedded_json", extract_embedded_json),
            ExtractionStrategy("author_role_markup", extract_author_role_markup),
            ExtractionStrategy("generic_markup", extract_generic_markup),
        ]
