"""
Platform Classifier.

Pure functions that guess which AI vendor a share URL or a block of pasted
text came from. URL and text classification share one rule table shape and
one decision rule: highest score wins, ties go to the most specific signal.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from journey_import.models import Platform, TextClassification, TextPlatform

# Signal specificity, used only to break score ties
MENTION = 1
COMMAND = 2
ROLE_LABEL = 3


@dataclass(frozen=True)
class ClassificationRule:
    """A weighted lexical signal voting for one platform."""

    pattern: re.Pattern
    weight: int
    platform: str
    specificity: int = MENTION


VENDOR_DOMAINS: Dict[str, Tuple[str, ...]] = {
    "chatgpt": ("chatgpt.com", "chat.openai.com"),
    "claude": ("claude.ai",),
    "gemini": ("gemini.google.com", "bard.google.com", "g.co"),
}

TEXT_RULES: List[ClassificationRule] = [
    # ChatGPT
    ClassificationRule(re.compile(r"chatgpt|openai", re.I), 3, "chatgpt"),
    ClassificationRule(re.compile(r"^(?:you|user):\s", re.I | re.M), 2, "chatgpt", ROLE_LABEL),
    ClassificationRule(re.compile(r"^chatgpt:\s", re.I | re.M), 4, "chatgpt", ROLE_LABEL),
    ClassificationRule(re.compile(r"^gpt-?[34o](?:\.\d)?", re.I | re.M), 3, "chatgpt", COMMAND),
    # Claude
    ClassificationRule(re.compile(r"claude|anthropic", re.I), 3, "claude"),
    ClassificationRule(re.compile(r"^human:\s", re.I | re.M), 4, "claude", ROLE_LABEL),
    ClassificationRule(re.compile(r"^assistant:\s", re.I | re.M), 3, "claude", ROLE_LABEL),
    ClassificationRule(re.compile(r"\[H\]|\[A\]", re.M), 2, "claude", ROLE_LABEL),
    # Copilot
    ClassificationRule(re.compile(r"copilot|github\s*copilot", re.I), 4, "copilot"),
    ClassificationRule(
        re.compile(r"^(?:@workspace|/explain|/fix|/tests)", re.M), 3, "copilot", COMMAND
    ),
    # Gemini
    ClassificationRule(re.compile(r"gemini|bard|google\s*ai", re.I), 3, "gemini"),
    ClassificationRule(re.compile(r"^model:\s", re.I | re.M), 3, "gemini", ROLE_LABEL),
]

TEXT_PLATFORMS: Tuple[str, ...] = ("chatgpt", "claude", "copilot", "gemini", "generic")
GENERIC_BASELINE_SCORE = 1
FULL_CONFIDENCE_SCORE = 5


def _decide(
    scores: Dict[str, int], specificity: Dict[str, int], order: Sequence[str]
) -> Optional[Tuple[str, int]]:
    """Return the winning (platform, score), or None when nothing scored."""
    best: Optional[Tuple[str, int]] = None
    best_key: Tuple[int, int] = (0, 0)
    for platform in order:
        score = scores.get(platform, 0)
        if score <= 0:
            continue
        key = (score, specificity.get(platform, 0))
        if best is None or key > best_key:
            best = (platform, score)
            best_key = key
    return best


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def classify_url(url: str) -> Platform:
    """Return the vendor whose share domain hosts `url`, or "unknown". Never raises."""
    try:
        host = (urlparse(str(url)).hostname or "").lower()
    except ValueError:
        return "unknown"
    if not host:
        return "unknown"

    scores: Dict[str, int] = {}
    for platform, domains in VENDOR_DOMAINS.items():
        if any(_host_matches(host, domain) for domain in domains):
            scores[platform] = 1
    winner = _decide(scores=scores, specificity={}, order=tuple(VENDOR_DOMAINS))
    if winner is None:
        return "unknown"
    platform, _score = winner
    return platform  # type: ignore[return-value]


def is_share_url(url: str) -> bool:
    """True when `url` is on a known vendor host and its path has a `share` segment."""
    if classify_url(url) == "unknown":
        return False
    try:
        path = urlparse(str(url)).path
    except ValueError:
        return False
    return "share" in path.split("/")


def classify_text(text: str) -> TextClassification:
    """Score pasted text against the lexical rule table and pick a platform."""
    scores: Dict[str, int] = {platform: 0 for platform in TEXT_PLATFORMS}
    specificity: Dict[str, int] = {}
    for rule in TEXT_RULES:
        if rule.pattern.search(text):
            scores[rule.platform] += rule.weight
            specificity[rule.platform] = max(specificity.get(rule.platform, 0), rule.specificity)

    scores["generic"] = GENERIC_BASELINE_SCORE
    platform, score = _decide(scores=scores, specificity=specificity, order=TEXT_PLATFORMS) or (
        "generic",
        GENERIC_BASELINE_SCORE,
    )
    platform_tag: TextPlatform = platform  # type: ignore[assignment]
    return TextClassification(
        platform=platform_tag,
        confidence=min(score / FULL_CONFIDENCE_SCORE, 1.0),
    )
