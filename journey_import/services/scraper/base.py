"""
Base class for share page decoders.

Each decoder is an ordered list of extraction strategies. The base class runs
them, picks a title, and turns "nothing matched" into an actionable error.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Pattern

from journey_import.models import ParsedConversation, Platform
from journey_import.services.scraper.errors import (
    COPY_PASTE_HINT,
    AccessBlockedError,
    NoStructureFoundError,
)
from journey_import.services.scraper.markup import detect_access_block, title_from_markup
from journey_import.services.scraper.strategies import ExtractionStrategy, run_strategies

logger = logging.getLogger(__name__)


class BaseShareParser(ABC):
    """
    Abstract base class for share page decoders.

    Subclasses provide the platform tag, a label for messages, a fallback title
    and their ordered strategy list.
    """

    platform: Platform = "unknown"
    label: str = "AI"
    default_title: str = "Shared Conversation"
    title_suffix: Optional[Pattern] = None

    @abstractmethod
    def strategies(self) -> List[ExtractionStrategy]:
        """Return extraction strategies in priority order."""
        pass

    def check_access(self, page: str) -> None:
        """Hook for platforms that must reject a block page before any strategy runs."""
        return None

    def page_title(self, page: str) -> str:
        return title_from_markup(page, self.title_suffix)

    def blocked_message(self, reason: str) -> str:
        if reason == "consent":
            return (
                f"{self.label}'s share page requires cookie consent and cannot be fully "
                f"accessed from a server. {COPY_PASTE_HINT}"
            )
        return (
            f"{self.label}'s share page is protected by bot detection and cannot be "
            f"accessed from a server. {COPY_PASTE_HINT}"
        )

    def no_structure_message(self) -> str:
        return (
            f"Could not extract conversation data from this {self.label} share link. "
            "The conversation may be empty, deleted, or the page structure has changed. "
            f"{COPY_PASTE_HINT}"
        )

    def parse_html(self, page: str) -> ParsedConversation:
        """
        Decode a fetched share page into a conversation.

        Raises:
            AccessBlockedError: If a bot challenge or consent wall was served
            NoStructureFoundError: If no strategy recognised any messages
        """
        self.check_access(page)

        outcome = run_strategies(self.strategies(), page, label=self.label)
        if outcome is None:
            reason = detect_access_block(page)
            if reason is not None:
                logger.debug(f"{self.label}: page looks like a {reason} page")
                raise AccessBlockedError(self.blocked_message(reason))
            raise NoStructureFoundError(self.no_structure_message())

        title = (
            outcome.result.title.strip()
            or self.page_title(page)
            or self.default_title
        )
        return ParsedConversation(
            title=title,
            messages=outcome.result.messages,
            platform=self.platform,
        )


def vendor_suffix(pattern: str) -> Pattern:
    """Compile a trailing " - Vendor" / " | Vendor" title suffix matcher."""
    return re.compile(rf"\s*[-|]?\s*(?:{pattern})\s*$", re.I)
