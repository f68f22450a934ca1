"""
Timed-text package.

Provides parsing of YouTube timed-text XML payloads into caption cues and
selection of the best caption track for a requested language.
"""

from .parser import parse_caption_xml, TimedTextParser
from .selector import select_track

__all__ = [
    # Parsing
    "parse_caption_xml",
    "TimedTextParser",

    # Track selection
    "select_track",
]
