"""
Facets Module

Detects links and hashtags in post text and computes the byte ranges
Bluesky needs for rich-text facets. Bluesky indexes facets by UTF-8 byte
offset, so every offset here is measured on the encoded text rather than
on Python string indices.
"""

import re
from typing import Any, Dict, List

from services.protocols import RichTextSpan, SpanKind
from utils.logger import get_logger

logger = get_logger(__name__)

URL_PATTERN = re.compile(r"https?://\S+")

# ASCII word characters, Hiragana, Katakana, the iteration mark and CJK ideographs
# (unified, extension A and compatibility)
HASHTAG_PATTERN = re.compile(
    r"#[A-Za-z0-9_\u3005\u3040-\u309F\u30A0-\u30FF\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFAFF]+"
)


def utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _scan(text: str, pattern: "re.Pattern", kind: SpanKind) -> List[RichTextSpan]:
    spans = []
    for match in pattern.finditer(text):
        matched = match.group(0)
        byte_start = utf8_len(text[:match.start()])
        byte_end = byte_start + utf8_len(matched)
        value = matched if kind is SpanKind.LINK else matched[1:]
        spans.append(RichTextSpan(byte_start=byte_start, byte_end=byte_end, kind=kind, value=value))
    return spans


def find_overlaps(spans: List[RichTextSpan]) -> List[tuple]:
    """Return every pair of spans whose byte ranges intersect."""
    ordered = sorted(spans, key=lambda s: (s.byte_start, s.byte_end))
    overlaps = []
    for i, first in enumerate(ordered):
        for second in ordered[i + 1:]:
            if second.byte_start >= first.byte_end:
                break
            overlaps.append((first, second))
    return overlaps


def extract_facets(text: str) -> List[RichTextSpan]:
    """
    Extract link and hashtag spans from post text.

    Links are scanned first, then hashtags. Overlapping spans are kept as
    they are and reported in the log.

    Args:
        text: The post text

    Returns:
        List[RichTextSpan]: Spans in match order
    """
    spans = _scan(text, URL_PATTERN, SpanKind.LINK)
    spans.extend(_scan(text, HASHTAG_PATTERN, SpanKind.TAG))

    for first, second in find_overlaps(spans):
        logger.warning(
            f"Overlapping facets: {first.kind.value} '{first.value}' "
            f"[{first.byte_start}, {first.byte_end}) and {second.kind.value} '{second.value}' "
            f"[{second.byte_start}, {second.byte_end})"
        )

    return spans


def facets_to_records(spans: List[RichTextSpan]) -> List[Dict[str, Any]]:
    """Convert spans to app.bsky.richtext.facet objects."""
    return [span.to_facet() for span in spans]
