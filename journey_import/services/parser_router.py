"""
Parser Router Service.

Validates a share URL, fetches the page once and dispatches decoding to the
platform-specific parser chosen from the URL host.
"""

import logging
from typing import Dict, Optional
from urllib.parse import urlparse

from journey_import.models import ParsedConversation
from journey_import.services.page_retriever import PageRetrieverService
from journey_import.services.platform_classifier import classify_url, is_share_url
from journey_import.services.scraper.base import BaseShareParser
from journey_import.services.scraper.chatgpt_parser import ChatGPTParserService
from journey_import.services.scraper.claude_parser import ClaudeParserService
from journey_import.services.scraper.errors import InvalidInputError, UnsupportedSourceError
from journey_import.services.scraper.gemini_parser import GeminiParserService
from journey_import.services.scraper.generic_parser import GenericParserService

logger = logging.getLogger(__name__)

UNSUPPORTED_URL_MESSAGE = (
    "Unsupported URL. Please paste a shared conversation link from ChatGPT, Claude, or Gemini.\n\n"
    "Supported formats:\n"
    "• https://chatgpt.com/share/...\n"
    "• https://claude.ai/share/...\n"
    "• https://gemini.google.com/share/..."
)
NOT_A_SHARE_LINK_MESSAGE = (
    "This doesn't look like a share link. Make sure the URL contains '/share/'."
)


def validate_url(url: str) -> None:
    """Reject anything that is not an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(url.strip())
        host = parsed.hostname
    except (AttributeError, ValueError):
        raise InvalidInputError("Please enter a valid URL")
    if parsed.scheme not in ("http", "https") or not host:
        raise InvalidInputError("Please enter a valid URL")


class ParserRouterService:
    """Routes share URLs to the ChatGPT, Claude, Gemini or generic decoder."""

    def __init__(self, retriever: Optional[PageRetrieverService] = None) -> None:
        self._retriever = retriever or PageRetrieverService()
        self._parsers: Dict[str, BaseShareParser] = {
            "chatgpt": ChatGPTParserService(),
            "claude": ClaudeParserService(),
            "gemini": GeminiParserService(),
        }
        self._generic = GenericParserService()

    def parser_for(self, url: str) -> BaseShareParser:
        return self._parsers.get(classify_url(url), self._generic)

    async def parse_conversation(self, url: str) -> ParsedConversation:
        """
        Fetch and decode a share link.

        Args:
            url: A ChatGPT, Claude or Gemini share URL

        Returns:
            The decoded conversation (messages may still form zero steps)

        Raises:
            InvalidInputError: If `url` is not a well-formed http(s) URL
            UnsupportedSourceError: If the host is unknown or the path has no share segment
            FetchFailedError: If the page could not be retrieved
            AccessBlockedError: If a bot challenge or consent wall was served
            NoStructureFoundError: If no strategy recognised any messages
        """
        url = url.strip()
        validate_url(url)

        if not is_share_url(url):
            if classify_url(url) == "unknown":
                raise UnsupportedSourceError(UNSUPPORTED_URL_MESSAGE)
            raise UnsupportedSourceError(NOT_A_SHARE_LINK_MESSAGE)

        parser = self.parser_for(url)
        page = await self._retriever.fetch(url)
        logger.debug(f"Fetched {len(page)} characters from {url}; decoding as {parser.label}")
        return parser.parse_html(page)
