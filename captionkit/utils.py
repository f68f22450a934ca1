"""
Shared utility functions for CaptionKit.

Provides the caption text normalizer (entity decoding and markup removal)
plus small timing helpers used by the parsers.
"""

import html
import random
import re
import string
from typing import Any, Optional

# Pre-compiled regex patterns for performance
_OPENING_TEXT_TAG_PATTERN = re.compile(r'<text[^>]*>')
_AMP_ENTITY_PATTERN = re.compile(r'&amp;', re.IGNORECASE)
_MARKUP_PATTERN = re.compile(r'</?[^>]+(>|$)')

_RANDOM_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


def strip_tags(text: str) -> str:
    """
    Remove all markup tags from text.

    An unterminated tag at the end of the string is removed as well.

    Example:
        >>> strip_tags("<b>bold</b> and <i")
        'bold and '
    """
    return _MARKUP_PATTERN.sub('', text)


def decode_entities(text: str) -> str:
    """
    Decode named, decimal and hexadecimal HTML entities.

    Example:
        >>> decode_entities("Tom &amp; Jerry &#39;95")
        "Tom & Jerry '95"
    """
    return html.unescape(text)


def normalize_caption_text(fragment: str) -> str:
    """
    Turn one raw timed-text fragment into plain caption text.

    Steps run in a fixed order:
    1. Remove the opening ``<text ...>`` tag
    2. Re-escape the literal ``&amp;`` entity to ``&``
    3. Strip remaining markup
    4. Decode all HTML entities
    5. Strip markup that entity decoding produced

    Args:
        fragment: Raw fragment, e.g. ``<text start="1.2" dur="3">Hi &amp;amp; bye``

    Returns:
        Decoded, tag-free caption text

    Example:
        >>> normalize_caption_text('<text start="0" dur="1"><b>Hello &amp; world</b>')
        'Hello & world'
    """
    text = _OPENING_TEXT_TAG_PATTERN.sub('', fragment, count=1)
    text = _AMP_ENTITY_PATTERN.sub('&', text)
    text = strip_tags(text)
    text = decode_entities(text)
    return strip_tags(text)


def to_float(value: Any) -> Optional[float]:
    """Convert a numeric string/number to float, or None when not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def ms_to_seconds(milliseconds: float) -> float:
    """
    Convert milliseconds to seconds with three-decimal precision.

    Example:
        >>> ms_to_seconds(1234)
        1.234
    """
    return round(milliseconds / 1000, 3)


def generate_random_string(length: int) -> str:
    """Generate a random alphanumeric string (used for visitor ids)."""
    return ''.join(random.choice(_RANDOM_ALPHABET) for _ in range(length))
