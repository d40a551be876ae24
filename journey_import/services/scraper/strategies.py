"""
Extraction strategy contract.

A strategy is a named function from raw page text to a (possibly empty)
StrategyResult. Decoders hold an ordered list of strategies and run them
through `run_strategies`, which stops at the first one that yields messages.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from journey_import.models import RawMessage

logger = logging.getLogger(__name__)


@dataclass
class StrategyResult:
    """Messages recovered by one strategy, plus a title if it found one."""

    messages: List[RawMessage] = field(default_factory=list)
    title: str = ""


@dataclass(frozen=True)
class ExtractionStrategy:
    name: str
    run: Callable[[str], StrategyResult]


@dataclass(frozen=True)
class StrategyOutcome:
    strategy_name: str
    result: StrategyResult


def run_strategies(
    strategies: Sequence[ExtractionStrategy], page: str, label: str
) -> Optional[StrategyOutcome]:
    """
    Try each strategy in order and return the first non-empty outcome.

    A strategy that raises is treated as having found nothing; the remaining
    strategies still run.
    """
    for strategy in strategies:
        try:
            result = strategy.run(page)
        except Exception as e:
            logger.debug(f"{label}: strategy '{strategy.name}' failed: {e}")
            continue
        if result.messages:
            logger.debug(
                f"{label}: strategy '{strategy.name}' extracted {len(result.messages)} messages"
            )
            return StrategyOutcome(strategy_name=strategy.name, result=result)
        logger.debug(f"{label}: strategy '{strategy.name}' found nothing")
    return None
