# isort: skip_file
"""
Services module for Journey Import.

This module exports the classification, retrieval, decoding and step-building
services behind the three import entry points.
"""

from journey_import.services.platform_classifier import classify_text, classify_url, is_share_url
from journey_import.services.page_retriever import PageRetrieverService
from journey_import.services.scraper.chatgpt_parser import ChatGPTParserService
from journey_import.services.scraper.claude_parser import ClaudeParserService
from journey_import.services.scraper.gemini_parser import GeminiParserService
from journey_import.services.scraper.generic_parser import GenericParserService
from journey_import.services.scraper.errors import ExtractionError
from journey_import.services.parser_router import ParserRouterService
from journey_import.services.step_builder import build_journey, build_steps
from journey_import.services.smart_paste_parser import parse_pasted_text
from journey_import.services.export_parser import parse_export_file
from journey_import.services.import_service import (
    extract_from_export_file,
    extract_from_pasted_text,
    extract_from_url,
    import_from_url,
)

__all__ = [
    "classify_text",
    "classify_url",
    "is_share_url",
    "PageRetrieverService",
    "ChatGPTParserService",
    "ClaudeParserService",
    "GeminiParserService",
    "GenericParserService",
    "ExtractionError",
    "ParserRouterService",
    "build_journey",
    "build_steps",
    "parse_pasted_text",
    "parse_export_file",
    "extract_from_export_file",
    "extract_from_pasted_text",
    "extract_from_url",
    "import_from_url",
]
