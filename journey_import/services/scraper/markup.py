"""
Markup helpers shared by the share page decoders.

Everything here operates on raw page text with regular expressions; no DOM is
built. HTML fragments are flattened to plain text with html2text.
"""

import html
import json
import re
import textwrap
from typing import Iterator, List, Optional, Pattern, Tuple

import html2text

SCRIPT_PATTERN = re.compile(r"<script([^>]*)>([\s\S]*?)</script>", re.I)
JSON_SCRIPT_PATTERN = re.compile(
    r"<script[^>]*type=\"application/json\"[^>]*>([\s\S]*?)</script>", re.I
)
TITLE_PATTERN = re.compile(r"<title[^>]*>([^<]+)</title>", re.I)

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "'": "'", "\\": "\\", "/": "/"}
_SIMPLE_ESCAPE = re.compile(r"\\([ntr\"'\\/])")

# html2text backslash-escapes these outside code blocks, doubling literal backslashes first
_MARKDOWN_ESCAPE = re.compile(r"\\([\\`*_{}\[\]()#+\-.!])")
_CODE_BLOCK = re.compile(r"\[code\]\n?([\s\S]*?)\n?\[/code\]")
_INLINE_CODE = re.compile(r"(`[^`\n]*`)")
_PAGE_END = re.compile(r"<footer\b|</main>|</body>", re.I)

CHALLENGE_MARKERS = ("Just a moment...", "challenge-platform", "cf-browser-verification")
CHALLENGE_PAGE_MAX_LENGTH = 20000
CONSENT_MARKER = "consent.google.com"


def _build_converter() -> html2text.HTML2Text:
    converter = html2text.HTML2Text()
    converter.ignore_links = True
    converter.ignore_images = True
    converter.ignore_emphasis = True
    converter.body_width = 0  # Disable line wrapping
    converter.single_line_break = True
    converter.mark_code = True
    return converter


def _unescape_prose(text: str) -> str:
    pieces = _INLINE_CODE.split(text)
    for idx in range(0, len(pieces), 2):
        pieces[idx] = _MARKDOWN_ESCAPE.sub(r"\1", pieces[idx])
    return "".join(pieces)


def strip_markup(fragment: str) -> str:
    """Flatten an HTML fragment to plain text with entities decoded."""
    if not fragment:
        return ""
    if "<" not in fragment and "&" not in fragment:
        return fragment.strip()
    text = _build_converter().handle(fragment)

    # Prose and code blocks alternate; code is dedented, prose loses Markdown escapes
    pieces = _CODE_BLOCK.split(text)
    for idx, piece in enumerate(pieces):
        if idx % 2:
            pieces[idx] = textwrap.dedent(piece)
        else:
            pieces[idx] = _EXCESS_NEWLINES.sub("\n\n", _unescape_prose(piece))
    return "".join(pieces).strip()


def unescape_js_string(raw: str) -> str:
    """Decode the body of a double-quoted JavaScript string literal."""
    try:
        return json.loads(f'"{raw}"')
    except ValueError:
        text = _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), raw)
        return _SIMPLE_ESCAPE.sub(lambda m: _SIMPLE_ESCAPES[m.group(1)], text)


def iter_scripts(page: str) -> Iterator[Tuple[str, str]]:
    """Yield (attributes, body) for each <script> element."""
    for match in SCRIPT_PATTERN.finditer(page):
        yield match.group(1), match.group(2)


def iter_json_scripts(page: str) -> Iterator[str]:
    """Yield the bodies of <script type="application/json"> elements."""
    for match in JSON_SCRIPT_PATTERN.finditer(page):
        yield match.group(1)


def title_from_markup(page: str, suffix: Optional[Pattern] = None) -> str:
    """Return the <title> text with an optional vendor suffix removed, or ""."""
    match = TITLE_PATTERN.search(page)
    if not match:
        return ""
    title = html.unescape(match.group(1)).strip()
    if suffix is not None:
        title = suffix.sub("", title).strip()
    return title if len(title) > 2 else ""


def segment_end(page: str, start: int, next_marker: int) -> int:
    """End a markup slice at the opening '<' of the tag holding the next marker."""
    tag_open = page.rfind("<", start, next_marker)
    return tag_open if tag_open != -1 else next_marker


def _page_end(page: str, start: int) -> int:
    match = _PAGE_END.search(page, start)
    return match.start() if match else len(page)


def slice_turns(page: str, marker: Pattern) -> List[Tuple[str, str]]:
    """
    Cut `page` into turns at each match of `marker`.

    The marker's first group is the raw role label. Each turn's content runs from
    the end of the match to the tag that carries the next match, flattened to text.
    The last turn stops at the page footer, `</main>` or `</body>`.
    """
    matches = list(marker.finditer(page))
    turns: List[Tuple[str, str]] = []
    for idx, match in enumerate(matches):
        start = match.end()
        end = (
            segment_end(page, start, matches[idx + 1].start())
            if idx + 1 < len(matches)
            else _page_end(page, start)
        )
        turns.append((match.group(1), strip_markup(page[start:end])))
    return turns


def detect_access_block(page: str) -> Optional[str]:
    """Return "challenge" or "consent" when the page is a block page, else None."""
    if len(page) < CHALLENGE_PAGE_MAX_LENGTH and any(m in page for m in CHALLENGE_MARKERS):
        return "challenge"
    if CONSENT_MARKER in page:
        return "consent"
    return None
