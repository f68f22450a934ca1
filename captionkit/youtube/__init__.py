"""
YouTube module for CaptionKit.

Provides the upstream session, API key handling, client impersonation
profiles, acquisition strategies and the transcript-panel extractor.
"""

from .client import (
    YouTubeClient,
    is_youtube_url,
    extract_youtube_id,
    caption_tracks_from_info,
)

from .api_key import (
    ApiKeyCache,
    ApiKeyProvider,
    FALLBACK_INNERTUBE_API_KEY,
    get_default_cache,
)

from .fetcher import VideoDataFetcher
from .profiles import ClientProfile, default_profiles
from .session import UpstreamSession

from .strategies import (
    AcquisitionStrategy,
    FetchResult,
    InnertubePlayerStrategy,
    WatchPageStrategy,
    EmbedMetadataStrategy,
    YtDlpStrategy,
    default_strategies,
)

from .transcript_panel import TranscriptPanelExtractor

__all__ = [
    'YouTubeClient',
    'is_youtube_url',
    'extract_youtube_id',
    'caption_tracks_from_info',
    'ApiKeyCache',
    'ApiKeyProvider',
    'FALLBACK_INNERTUBE_API_KEY',
    'get_default_cache',
    'VideoDataFetcher',
    'ClientProfile',
    'default_profiles',
    'UpstreamSession',
    'AcquisitionStrategy',
    'FetchResult',
    'InnertubePlayerStrategy',
    'WatchPageStrategy',
    'EmbedMetadataStrategy',
    'YtDlpStrategy',
    'default_strategies',
    'TranscriptPanelExtractor',
]
