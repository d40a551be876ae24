"""Decoder for share pages on hosts that are not a known vendor."""

from typing import List

from journey_import.services.scraper.base import BaseShareParser
from journey_import.services.scraper.generic_extractor import GENERIC_STRATEGIES
from journey_import.services.scraper.strategies import ExtractionStrategy
from journey_import.services.scraper.turbo_stream import extract_turbo_stream


class GenericParserService(BaseShareParser):
    """Service for decoding share pages with the platform-agnostic heuristics only."""

    platform = "unknown"
    label = "AI"
    default_title = "Shared Conversation"

    def strategies(self) -> List[ExtractionStrategy]:
        return [ExtractionStrategy("turbo_stream", extract_turbo_stream), *GENERIC_STRATEGIES]
