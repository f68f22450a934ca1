"""
Public extraction API for CaptionKit.

Composes the video data fetcher, track selector, timed-text parser and
transcript-panel extractor into two entry points: ``get_subtitles`` and
``get_video_details``.
"""

import dataclasses
import logging
from typing import List, Optional, Sequence

from .errors import STAGE_SUBTITLE, CaptionKitError
from .models import NO_DESCRIPTION, NO_TITLE, CaptionCue, CaptionTrack, ExtractorConfig, ProxyConfig, VideoData, VideoDetails
from .timedtext import parse_caption_xml, select_track
from .youtube.api_key import DEFAULT_TTL, ApiKeyCache, ApiKeyProvider, get_default_cache
from .youtube.fetcher import VideoDataFetcher
from .youtube.session import UpstreamSession
from .youtube.strategies import AcquisitionStrategy, default_strategies
from .youtube.transcript_panel import TranscriptPanelExtractor

logger = logging.getLogger(__name__)


def _require_video_id(video_id: str) -> str:
    if not video_id or not str(video_id).strip():
        raise ValueError("videoID is required")
    return str(video_id).strip()


class CaptionExtractor:
    """
    Caption and metadata extractor for YouTube videos.

    Holds one upstream session, API key provider and strategy list; reuse an
    instance to share the HTTP connection pool between calls.
    """

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        proxy: Optional[ProxyConfig] = None,
        session: Optional[UpstreamSession] = None,
        strategies: Optional[Sequence[AcquisitionStrategy]] = None,
        key_cache: Optional[ApiKeyCache] = None,
    ):
        """
        Initialize caption extractor.

        Args:
            config: Extractor configuration (default: read from environment)
            proxy: Proxy for outbound requests, overriding the config's proxy
            session: Pre-built upstream session (its config takes precedence)
            strategies: Acquisition strategies in fallback order (default: all built-in)
            key_cache: API key cache (default: the process-wide cache)
        """
        if session is None:
            config = config or ExtractorConfig.from_env()
            if proxy is not None:
                config = dataclasses.replace(config, proxy=proxy)
            session = UpstreamSession(config)

        self.session = session
        self.config = session.config

        if key_cache is None:
            if self.config.api_key_ttl == DEFAULT_TTL:
                key_cache = get_default_cache()
            else:
                key_cache = ApiKeyCache(ttl=self.config.api_key_ttl)

        self.key_provider = ApiKeyProvider(session, key_cache)
        self.fetcher = VideoDataFetcher(
            strategies if strategies is not None else default_strategies(session, self.key_provider, self.config)
        )
        self.transcript_panel = TranscriptPanelExtractor(session, self.key_provider)

    async def fetch_caption_payload(self, track: CaptionTrack) -> List[CaptionCue]:
        """
        Download and parse the timed-text payload of a caption track.

        Args:
            track: Track to fetch

        Returns:
            List of CaptionCue parsed from the payload

        Raises:
            StageFailedError: If every download attempt failed
        """
        # Drop the srv3 format flag so the endpoint serves plain timed-text XML
        url = track.base_url.replace('&fmt=srv3', '')

        async def _fetch() -> List[CaptionCue]:
            transcript = await self.session.fetch_text(url, timeout=self.config.subtitle_timeout)
            logger.debug(f"Subtitle XML length: {len(transcript)} characters")
            return parse_caption_xml(transcript)

        return await self.session.run_with_retry(_fetch, STAGE_SUBTITLE)

    async def _transcript_panel_cues(self, data: VideoData) -> List[CaptionCue]:
        try:
            return await self.transcript_panel.extract_for_video(data.video_id, data.initial_data)
        except CaptionKitError as e:
            logger.warning(f"Transcript panel fallback failed for {data.video_id}: {e}")
            return []

    async def _subtitles_for(self, data: VideoData, lang: str, best_effort: bool) -> List[CaptionCue]:
        tracks = data.caption_tracks

        if not tracks:
            logger.warning(f"No captions found for video: {data.video_id}, trying transcript panel")
            return await self._transcript_panel_cues(data)

        logger.debug(f"Available caption tracks: {[track.vss_id for track in tracks]}")
        track = select_track(tracks, lang, best_effort=best_effort)

        if track is None:
            logger.warning(
                f"Could not find {lang} captions for {data.video_id} "
                f"(available: {', '.join(t.vss_id for t in tracks)})"
            )
            return []

        logger.debug(f"Selected subtitle track: {track.vss_id}")
        cues = await self.fetch_caption_payload(track)

        if not cues:
            logger.info(f"Caption track {track.vss_id} yielded no cues, trying transcript panel")
            return await self._transcript_panel_cues(data)

        logger.info(f"Extracted {len(cues)} subtitle lines for {data.video_id}")
        return cues

    async def get_subtitles(self, video_id: str, lang: str = "en", best_effort: bool = False) -> List[CaptionCue]:
        """
        Get the subtitles of a video in the requested language.

        Args:
            video_id: YouTube video ID
            lang: Language code (default: "en")
            best_effort: Use the first available track when ``lang`` has none

        Returns:
            Ordered list of CaptionCue; empty when no captions are available

        Raises:
            ValueError: If video_id is empty
            ExhaustedFallbackError: If no strategy produced any video data
            StageFailedError: If the caption payload could not be downloaded
        """
        video_id = _require_video_id(video_id)
        data = await self.fetcher.fetch(video_id)
        return await self._subtitles_for(data, lang, best_effort)

    async def get_video_details(self, video_id: str, lang: str = "en", best_effort: bool = False) -> VideoDetails:
        """
        Get title, description and subtitles of a video.

        Missing title or description are reported as "No title found" and
        "No description found".

        Args:
            video_id: YouTube video ID
            lang: Language code (default: "en")
            best_effort: Use the first available track when ``lang`` has none

        Returns:
            VideoDetails instance

        Raises:
            ValueError: If video_id is empty
            ExhaustedFallbackError: If no strategy produced any video data
            StageFailedError: If the caption payload could not be downloaded
        """
        video_id = _require_video_id(video_id)
        data = await self.fetcher.fetch(video_id)

        title = data.title or NO_TITLE
        description = data.description or NO_DESCRIPTION
        logger.debug(f"Video title: {title}")

        subtitles = await self._subtitles_for(data, lang, best_effort)
        return VideoDetails(title=title, description=description, subtitles=subtitles)

    async def get_api_key(self) -> str:
        """Return the innertube API key (dynamic, falling back to the hardcoded key)."""
        return await self.key_provider.get_api_key()

    def close(self) -> None:
        self.session.close()


# Convenience functions wrapping CaptionExtractor
async def get_subtitles(
    video_id: str,
    lang: str = "en",
    *,
    best_effort: bool = False,
    config: Optional[ExtractorConfig] = None,
    proxy: Optional[ProxyConfig] = None,
) -> List[CaptionCue]:
    """Get subtitles for a video. Convenience function wrapping CaptionExtractor."""
    extractor = CaptionExtractor(config=config, proxy=proxy)
    try:
        return await extractor.get_subtitles(video_id, lang, best_effort=best_effort)
    finally:
        extractor.close()


async def get_video_details(
    video_id: str,
    lang: str = "en",
    *,
    best_effort: bool = False,
    config: Optional[ExtractorConfig] = None,
    proxy: Optional[ProxyConfig] = None,
) -> VideoDetails:
    """Get title, description and subtitles. Convenience function wrapping CaptionExtractor."""
    extractor = CaptionExtractor(config=config, proxy=proxy)
    try:
        return await extractor.get_video_details(video_id, lang, best_effort=best_effort)
    finally:
        extractor.close()


async def get_api_key(config: Optional[ExtractorConfig] = None) -> str:
    """Get the innertube API key. Convenience function wrapping CaptionExtractor."""
    extractor = CaptionExtractor(config=config)
    try:
        return await extractor.get_api_key()
    finally:
        extractor.close()
