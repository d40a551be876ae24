"""
Scraper errors module.

Holds the exceptions shared across the extraction entry points, the page
retriever and the per-platform decoders. Each subclass names one failure kind
so callers can tell a dead link apart from a blocked page or an empty chat.
"""

from typing import Optional

COPY_PASTE_HINT = (
    "Please use the \"Paste Conversation\" tab instead: open the share link in your browser, "
    "select all text (Ctrl+A), copy (Ctrl+C), and paste it here."
)


class ExtractionError(Exception):
    """Base class for every failure surfaced to the hosting application."""

    kind = "extraction_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(ExtractionError):
    """Input is not the expected shape (bad URL, unsupported file, text too short)."""

    kind = "invalid_input"


class UnsupportedSourceError(ExtractionError):
    """URL host is not a known vendor, or the path is not a share link."""

    kind = "unsupported_source"


class FetchFailedError(ExtractionError):
    """The share page could not be retrieved."""

    kind = "fetch_failed"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FetchTimeoutError(FetchFailedError):
    """The share page did not respond within the fetch timeout."""

    kind = "fetch_timeout"


class AccessBlockedError(ExtractionError):
    """A bot challenge or consent wall was served instead of the conversation."""

    kind = "access_blocked"


class NoStructureFoundError(ExtractionError):
    """Content was retrieved but no extraction strategy recognised any messages."""

    kind = "no_structure"


class EmptyConversationError(ExtractionError):
    """Messages were found but no prompt/response pairs survived pairing."""

    kind = "empty_conversation"
