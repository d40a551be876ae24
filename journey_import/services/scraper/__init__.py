from journey_import.services.scraper.chatgpt_parser import ChatGPTParserService
from journey_import.services.scraper.claude_parser import ClaudeParserService
from journey_import.services.scraper.errors import (
    AccessBlockedError,
    EmptyConversationError,
    ExtractionError,
    FetchFailedError,
    FetchTimeoutError,
    InvalidInputError,
    NoStructureFoundError,
    UnsupportedSourceError,
)
from journey_import.services.scraper.gemini_parser import GeminiParserService
from journey_import.services.scraper.generic_parser import GenericParserService

__all__ = [
    "AccessBlockedError",
    "ChatGPTParserService",
    "ClaudeParserService",
    "EmptyConversationError",
    "ExtractionError",
    "FetchFailedError",
    "FetchTimeoutError",
    "GeminiParserService",
    "GenericParserService",
    "InvalidInputError",
    "NoStructureFoundError",
    "UnsupportedSourceError",
]
