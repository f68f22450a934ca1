"""
CaptionKit - YouTube Caption Extraction Toolkit

A library for retrieving caption tracks and basic metadata (title,
description) of YouTube videos by scraping public pages and internal API
responses, with ordered fallback across strategies and client profiles.

Features:
- Innertube player API with several client impersonation profiles
- Watch page, oEmbed and yt-dlp fallbacks
- Manual > auto-generated > loose language matching of caption tracks
- Timed-text XML parsing with entity decoding and markup removal
- Transcript-panel fallback for videos without exposed caption tracks
- Per-stage timeouts and retries with exponential backoff

Example usage:
    >>> import asyncio
    >>> from captionkit import get_subtitles, get_video_details
    >>>
    >>> # Subtitles only
    >>> cues = asyncio.run(get_subtitles("dQw4w9WgXcQ", lang="en"))
    >>> print(cues[0].start, cues[0].text)
    >>>
    >>> # Title, description and subtitles
    >>> details = asyncio.run(get_video_details("dQw4w9WgXcQ"))
    >>> print(details.title)
"""

import logging

__version__ = "0.1.0"
__author__ = "CaptionKit Contributors"
__license__ = "MIT"

# Add NullHandler to prevent "No handler found" warnings
# Users should configure logging in their application if they want to see logs
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Text utilities
from .utils import (
    normalize_caption_text,
    strip_tags,
    decode_entities,
)

# Timed-text parsing and track selection
from .timedtext import parse_caption_xml, select_track, TimedTextParser

# Public API
from .extractor import CaptionExtractor, get_subtitles, get_video_details, get_api_key

# Data models
from .models import CaptionCue, CaptionTrack, VideoDetails, VideoData, ProxyConfig, ExtractorConfig

# Errors
from .errors import (
    CaptionKitError,
    UpstreamError,
    TransientUpstreamError,
    StageFailedError,
    ExhaustedFallbackError,
)

# YouTube utilities
from .youtube import (
    is_youtube_url,
    extract_youtube_id,
    ApiKeyCache,
    VideoDataFetcher,
    TranscriptPanelExtractor,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",

    # Public API
    "get_subtitles",
    "get_video_details",
    "get_api_key",
    "CaptionExtractor",

    # Parsing and selection
    "parse_caption_xml",
    "select_track",
    "TimedTextParser",
    "normalize_caption_text",
    "strip_tags",
    "decode_entities",

    # Models
    "CaptionCue",
    "CaptionTrack",
    "VideoDetails",
    "VideoData",
    "ProxyConfig",
    "ExtractorConfig",

    # Errors
    "CaptionKitError",
    "UpstreamError",
    "TransientUpstreamError",
    "StageFailedError",
    "ExhaustedFallbackError",

    # YouTube utilities
    "is_youtube_url",
    "extract_youtube_id",
    "ApiKeyCache",
    "VideoDataFetcher",
    "TranscriptPanelExtractor",
]
