"""
Export File Parser.

Reads the files produced by ChatGPT's data export: `conversations.json`, and
the `chat.html` viewer, which embeds the same JSON in a script block. Older or
hand-saved HTML files fall back to markup heuristics.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from journey_import.models import ParsedConversation, RawMessage
from journey_import.services.scraper.errors import InvalidInputError
from journey_import.services.scraper.generic_extractor import messages_from_markup
from journey_import.services.scraper.markup import iter_scripts, strip_markup, title_from_markup

logger = logging.getLogger(__name__)

JSON_EXTENSIONS = (".json",)
HTML_EXTENSIONS = (".html", ".htm")
MIN_CONVERSATION_MESSAGES = 2
MAX_TITLE_LENGTH = 200
MIN_BLOCK_MESSAGE_LENGTH = 5

VARIABLE_PREFIX = re.compile(r"^\s*(?:var\s+\w+\s*=\s*)?")
CONVERSATION_BOUNDARY = re.compile(
    r'(?:<h[1-4][^>]*>|<div[^>]*class="[^"]*conversation[^"]*"[^>]*>)', re.I
)
BLOCK_TITLE = re.compile(r"^([^<]+)|<[^>]*>([^<]{3,100})")
MESSAGE_DIV = re.compile(r'<div[^>]*class="[^"]*message[^"]*"[^>]*>', re.I)
USER_LINE = re.compile(r"^(?:User|You|Human)\s*:\s*(.*)", re.I)
ASSISTANT_LINE = re.compile(r"^(?:ChatGPT|Assistant|AI|GPT(?:-\d)?)\s*:\s*(.*)", re.I)


def is_supported_export(filename: str) -> bool:
    return filename.lower().endswith(JSON_EXTENSIONS + HTML_EXTENSIONS)


def export_source(filename: str) -> str:
    """Return the import source tag for an export file name."""
    return "chatgpt-json" if filename.lower().endswith(JSON_EXTENSIONS) else "chatgpt-html"


def linearize_mapping(mapping: Dict[str, Any], current_node: str) -> List[str]:
    """Walk parent links back from current_node to the root; return node ids root-first."""
    path: List[str] = []
    node_id: Optional[str] = current_node
    seen = set()  # Cycles in malformed exports

    while node_id and node_id not in seen:
        seen.add(node_id)
        node = mapping.get(node_id)
        if not isinstance(node, dict):
            break
        path.append(node_id)
        node_id = node.get("parent")

    return list(reversed(path))


def _text_from_parts(parts: List[Any]) -> str:
    pieces: List[str] = []
    for part in parts:
        if isinstance(part, str):
            pieces.append(part)
        elif isinstance(part, dict) and isinstance(part.get("text"), str):
            pieces.append(part["text"])
    return "\n".join(pieces).strip()


def _messages_from_nodes(nodes: Iterable[Any]) -> List[RawMessage]:
    messages: List[RawMessage] = []
    for node in nodes:
        message = node.get("message") if isinstance(node, dict) else None
        if not isinstance(message, dict):
            continue
        author = message.get("author")
        role = author.get("role") if isinstance(author, dict) else None
        content = message.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if role not in ("user", "assistant") or not isinstance(parts, list):
            continue
        text = _text_from_parts(parts)
        if text:
            messages.append(RawMessage(role=role, content=text))
    return messages


def conversation_from_export(conversation: Any) -> Optional[ParsedConversation]:
    """
    Decode one conversation object from an export.

    The active branch is followed from `current_node` when the export records
    one; otherwise every node in the mapping is read in stored order.

    Returns:
        The conversation, or None if it has fewer than two usable messages
    """
    if not isinstance(conversation, dict):
        return None
    mapping = conversation.get("mapping")
    if not isinstance(mapping, dict):
        return None

    current_node = conversation.get("current_node")
    if isinstance(current_node, str) and current_node in mapping:
        nodes = [mapping[node_id] for node_id in linearize_mapping(mapping, current_node)]
    else:
        nodes = list(mapping.values())

    messages = _messages_from_nodes(nodes)
    if len(messages) < MIN_CONVERSATION_MESSAGES:
        return None

    title = conversation.get("title")
    title = title if isinstance(title, str) and title else "Untitled"
    return ParsedConversation(title=title[:MAX_TITLE_LENGTH], messages=messages, platform="chatgpt")


def conversations_from_json_data(data: Any) -> List[ParsedConversation]:
    items = data if isinstance(data, list) else [data]
    conversations: List[ParsedConversation] = []
    for item in items:
        conversation = conversation_from_export(item)
        if conversation is not None:
            conversations.append(conversation)
    return conversations


def parse_json_export(content: str) -> List[ParsedConversation]:
    try:
        data = json.loads(content)
    except ValueError:
        raise InvalidInputError("Invalid JSON file format")
    return conversations_from_json_data(data)


def _embedded_json_conversations(page: str) -> List[ParsedConversation]:
    """Read the `var jsonData = [...]` array that chat.html embeds."""
    decoder = json.JSONDecoder()
    for _attrs, body in iter_scripts(page):
        start = VARIABLE_PREFIX.match(body).end()
        if not body.startswith("[", start):
            continue
        try:
            data, _end = decoder.raw_decode(body, start)
        except ValueError:
            continue
        conversations = conversations_from_json_data(data)
        if conversations:
            return conversations
    return []


def _markup_conversation(page: str) -> List[ParsedConversation]:
    messages = messages_from_markup(page)
    if len(messages) < MIN_CONVERSATION_MESSAGES:
        return []
    title = title_from_markup(page) or "Untitled Conversation"
    return [ParsedConversation(title=title[:MAX_TITLE_LENGTH], messages=messages, platform="chatgpt")]


def _block_title(block: str) -> str:
    match = BLOCK_TITLE.search(block)
    raw = (match.group(1) or match.group(2)) if match else ""
    return strip_markup(raw or "") or "Untitled Conversation"


def _messages_from_message_divs(block: str) -> List[RawMessage]:
    # Message divs carry no role; they alternate starting with the user
    matches = list(MESSAGE_DIV.finditer(block))
    messages: List[RawMessage] = []
    for idx, match in enumerate(matches):
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(block)
        content = strip_markup(block[match.end() : end])
        if len(content) > MIN_BLOCK_MESSAGE_LENGTH:
            role = "user" if len(messages) % 2 == 0 else "assistant"
            messages.append(RawMessage(role=role, content=content))
    return messages


def _messages_from_label_lines(block: str) -> List[RawMessage]:
    """Group lines under the most recent "User:"/"ChatGPT:" label; text before any label is ignored."""
    messages: List[RawMessage] = []
    role: Optional[str] = None
    buffer: List[str] = []

    def flush() -> None:
        content = "\n".join(buffer).strip()
        if role is not None and content:
            messages.append(RawMessage(role=role, content=content))

    for line in block.split("\n"):
        cleaned = strip_markup(line)
        if not cleaned:
            continue
        user_match = USER_LINE.match(cleaned)
        assistant_match = ASSISTANT_LINE.match(cleaned)
        if user_match or assistant_match:
            flush()
            role = "user" if user_match else "assistant"
            buffer = [(user_match or assistant_match).group(1)]
        else:
            buffer.append(cleaned)
    flush()
    return messages


def _block_conversations(page: str) -> List[ParsedConversation]:
    conversations: List[ParsedConversation] = []
    for block in CONVERSATION_BOUNDARY.split(page):
        if not block.strip():
            continue
        messages = _messages_from_message_divs(block) or _messages_from_label_lines(block)
        if len(messages) >= MIN_CONVERSATION_MESSAGES:
            conversations.append(
                ParsedConversation(
                    title=_block_title(block)[:MAX_TITLE_LENGTH],
                    messages=messages,
                    platform="chatgpt",
                )
            )
    return conversations


def parse_html_export(page: str) -> List[ParsedConversation]:
    for name, reader in (
        ("embedded_json", _embedded_json_conversations),
        ("generic_markup", _markup_conversation),
        ("conversation_blocks", _block_conversations),
    ):
        conversations = reader(page)
        if conversations:
            logger.debug(f"HTML export: '{name}' found {len(conversations)} conversations")
            return conversations
    return []


def parse_export_file(filename: str, content: str) -> List[ParsedConversation]:
    """
    Decode a ChatGPT export file into conversations with at least two messages.

    Args:
        filename: Original file name; the extension selects the decoder
        content: File contents as text

    Returns:
        Conversations in file order (possibly empty)

    Raises:
        InvalidInputError: Unsupported extension, or a `.json` file that is not JSON
    """
    if not is_supported_export(filename):
        raise InvalidInputError("Please upload an HTML or JSON file from ChatGPT export")
    if filename.lower().endswith(JSON_EXTENSIONS):
        return parse_json_export(content)
    return parse_html_export(content)
