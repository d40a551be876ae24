"""
Import Service.

The entry points the hosting application calls: one per input kind (share
link, export file, pasted text). Every failure surfaces as an ExtractionError
subclass naming what went wrong.
"""

import logging
from typing import Optional

from journey_import.config import settings
from journey_import.models import (
    ExportConversationSummary,
    ExportImportResult,
    ImportedJourney,
    ParsedConversation,
    PastedConversationResult,
)
from journey_import.services.export_parser import export_source, parse_export_file
from journey_import.services.parser_router import ParserRouterService
from journey_import.services.scraper.errors import (
    EmptyConversationError,
    InvalidInputError,
    NoStructureFoundError,
)
from journey_import.services.smart_paste_parser import parse_pasted_text
from journey_import.services.step_builder import build_journey, build_steps

logger = logging.getLogger(__name__)

NO_PAIRS_MESSAGE = "No prompt-response pairs found in the conversation."
NO_EXPORT_CONVERSATIONS_MESSAGE = (
    "No conversations found in the uploaded file. Make sure this is a ChatGPT export file."
)
NO_PASTE_STRUCTURE_MESSAGE = (
    "Could not detect conversation structure. Try using the format:\n"
    "User: your prompt\n"
    "Assistant: the response"
)


async def extract_from_url(
    url: str, router: Optional[ParserRouterService] = None
) -> ParsedConversation:
    """Fetch a share link and decode it into a conversation."""
    router = router or ParserRouterService()
    return await router.parse_conversation(url)


async def import_from_url(
    url: str, router: Optional[ParserRouterService] = None
) -> ImportedJourney:
    """
    Fetch a share link and turn it into steps.

    Raises:
        EmptyConversationError: If the conversation decoded but no step could be built
        ExtractionError: Any failure from validation, fetching or decoding
    """
    conversation = await extract_from_url(url, router=router)
    journey = build_journey(conversation)
    if not journey.steps:
        raise EmptyConversationError(NO_PAIRS_MESSAGE)
    logger.info(f"Imported {len(journey.steps)} steps from {conversation.platform} share link")
    return journey


def extract_from_export_file(filename: str, content: str) -> ExportImportResult:
    """
    Decode an export file; the first conversation becomes steps.

    Args:
        filename: Uploaded file name (`.json`, `.html` or `.htm`)
        content: File contents as text

    Raises:
        InvalidInputError: Unsupported extension or malformed JSON
        NoStructureFoundError: If the file holds no usable conversation
        EmptyConversationError: If the first conversation yields no steps
    """
    conversations = parse_export_file(filename, content)
    if not conversations:
        raise NoStructureFoundError(NO_EXPORT_CONVERSATIONS_MESSAGE)

    first = conversations[0]
    steps = build_steps(first.messages)
    if not steps:
        raise EmptyConversationError(NO_PAIRS_MESSAGE)

    logger.info(f"Export {filename}: {len(conversations)} conversations, {len(steps)} steps")
    return ExportImportResult(
        title=first.title,
        steps=steps,
        conversations=[
            ExportConversationSummary(title=c.title, message_count=len(c.messages))
            for c in conversations
        ],
        source=export_source(filename),
    )


def extract_from_pasted_text(text: str) -> PastedConversationResult:
    """
    Structure pasted conversation text into steps.

    Raises:
        InvalidInputError: If the text is shorter than the configured minimum
        NoStructureFoundError: If no step could be recovered
    """
    if len((text or "").strip()) < settings.MIN_PASTE_CHARS:
        raise InvalidInputError(
            f"Please paste at least {settings.MIN_PASTE_CHARS} characters of conversation"
        )

    result = parse_pasted_text(text)
    if not result.steps:
        raise NoStructureFoundError(NO_PASTE_STRUCTURE_MESSAGE)
    logger.info(f"Pasted text: {result.platform} ({result.confidence:.2f}), {len(result.steps)} steps")
    return result
