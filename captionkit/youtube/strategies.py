"""
Acquisition strategies for video data.

Every strategy exposes the same capability, ``try_fetch(video_id)``, and
reports one of three outcomes:

- ``valid``: identifiable video/caption data, stop here
- ``insufficient``: the call succeeded but returned near-empty or
  error-status data, keep it as a last resort
- ``failed``: the request itself errored or timed out
"""

import asyncio
import concurrent.futures
import html
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..errors import STAGE_VIDEO_DATA, CaptionKitError, UpstreamError
from ..models import CaptionTrack, ExtractorConfig, VideoData
from . import probes
from .api_key import ApiKeyCache, ApiKeyProvider
from .client import YouTubeClient, caption_tracks_from_info
from .profiles import ClientProfile, default_profiles
from .session import YOUTUBE, UpstreamSession

logger = logging.getLogger(__name__)

VALID = "valid"
INSUFFICIENT = "insufficient"
FAILED = "failed"

PLAYER_URL = f"{YOUTUBE}/youtubei/v1/player"
WATCH_URL = f"{YOUTUBE}/watch"
OEMBED_URL = f"{YOUTUBE}/oembed"

_API_KEY_PATTERN = re.compile(r'"INNERTUBE_API_KEY"\s*:\s*"([A-Za-z0-9_\-]+)"')
_CAPTION_TRACKS_PATTERN = re.compile(r'"captionTracks"\s*:\s*\[')
_META_PATTERNS = {
    'title': re.compile(r'<meta name="title" content="([^"]*)"\s*/?>'),
    'description': re.compile(r'<meta name="description" content="([^"]*)"\s*/?>'),
}


@dataclass
class FetchResult:
    """Outcome of one strategy attempt."""
    outcome: str
    data: Optional[VideoData] = None
    error: Optional[str] = None

    @property
    def score(self) -> Tuple[bool, bool, bool]:
        """Ranking of a retained candidate: tracks, then video details, then title."""
        if self.data is None:
            return (False, False, False)
        return (
            bool(self.data.caption_tracks),
            probes.has_video_details(self.data.player_response),
            bool(self.data.title),
        )


class AcquisitionStrategy:
    """Base interface for strategies that obtain video data."""
    name: str = "strategy"

    async def try_fetch(self, video_id: str) -> FetchResult:
        raise NotImplementedError


def finalize_video_data(data: VideoData) -> VideoData:
    """Fill title and description from the documents held by ``data``."""
    data.title = probes.run_probes(probes.TITLE_PROBES, data)
    data.description = probes.run_probes(probes.DESCRIPTION_PROBES, data)
    return data


def classify_player_response(data: VideoData) -> FetchResult:
    """
    Classify video data built around a player response.

    Caption tracks, or an ``OK`` playability status with video details,
    make the result valid. Anything else (bot checks, login walls, error
    statuses) is insufficient.
    """
    player_response = data.player_response
    if not data.caption_tracks:
        data.caption_tracks = probes.find_caption_tracks(player_response)
    finalize_video_data(data)

    if data.caption_tracks:
        return FetchResult(VALID, data)

    status = probes.playability_status(player_response)
    if status == 'OK' and probes.has_video_details(player_response):
        return FetchResult(VALID, data)

    reason = probes.playability_reason(player_response) or 'no video data'
    return FetchResult(INSUFFICIENT, data, error=f"playability {status or 'UNKNOWN'}: {reason}")


class InnertubePlayerStrategy(AcquisitionStrategy):
    """Calls the internal player API while impersonating one client profile."""

    def __init__(self, session: UpstreamSession, key_provider: ApiKeyProvider, profile: ClientProfile):
        self.session = session
        self.key_provider = key_provider
        self.profile = profile
        self.name = f"innertube:{profile.name}"

    async def _request_player(self, video_id: str, api_key: str) -> Dict[str, Any]:
        config = self.session.config
        payload = {
            'context': self.profile.build_context(config),
            'videoId': video_id,
            'playbackContext': {
                'contentPlaybackContext': {
                    'vis': 0,
                    'splay': False,
                    'lactMilliseconds': '-1',
                },
            },
            'racyCheckOk': True,
            'contentCheckOk': True,
        }
        player_response = await self.session.fetch_json(
            'POST',
            PLAYER_URL,
            params={'key': api_key, 'prettyPrint': 'false'},
            headers=self.profile.build_headers(config),
            json_body=payload,
            timeout=config.player_timeout,
        )
        if not isinstance(player_response, dict):
            raise UpstreamError("Player endpoint returned a non-object payload")
        return player_response

    async def try_fetch(self, video_id: str) -> FetchResult:
        api_key = await self.key_provider.get_api_key()

        try:
            player_response = await self.session.run_with_retry(
                lambda: self._request_player(video_id, api_key),
                f"{STAGE_VIDEO_DATA} ({self.profile.name})",
            )
        except CaptionKitError as e:
            return FetchResult(FAILED, error=str(e))

        logger.debug(f"[{self.name}] player response keys: {sorted(player_response)}")
        return classify_player_response(VideoData(
            video_id=video_id,
            source=self.name,
            player_response=player_response,
        ))


def extract_json_assignment(page: str, variable: str) -> Optional[Dict[str, Any]]:
    """
    Extract a JSON object assigned to a JavaScript variable in an HTML page.

    Finds ``variable = {...}`` and decodes exactly one JSON value from the
    opening brace, so trailing script does not confuse the parser.

    Args:
        page: HTML source
        variable: Variable name, e.g. "ytInitialPlayerResponse"

    Returns:
        Decoded object, or None if absent or invalid
    """
    match = re.search(rf'{re.escape(variable)}\s*=\s*{{', page)
    if not match:
        return None
    try:
        value, _ = json.JSONDecoder().raw_decode(page, match.end() - 1)
    except ValueError:
        logger.debug(f"Failed to decode {variable} from watch page")
        return None
    return value if isinstance(value, dict) else None


def extract_page_meta(page: str) -> Dict[str, str]:
    """Extract the HTML-decoded ``<meta name="title|description">`` values."""
    meta = {}
    for key, pattern in _META_PATTERNS.items():
        match = pattern.search(page)
        if match and match.group(1):
            meta[key] = html.unescape(match.group(1))
    return meta


def extract_caption_tracks_from_page(page: str) -> List[CaptionTrack]:
    """
    Last-ditch extraction of the ``captionTracks`` array from raw HTML.

    Decodes one JSON array from the opening bracket, so nested arrays such as
    ``name.runs`` inside a track do not cut the match short.
    """
    match = _CAPTION_TRACKS_PATTERN.search(page)
    if not match:
        return []
    try:
        raw_tracks, _ = json.JSONDecoder().raw_decode(page, match.end() - 1)
    except ValueError:
        logger.debug("Failed to decode captionTracks from watch page")
        return []
    if not isinstance(raw_tracks, list):
        return []
    return [CaptionTrack.from_dict(track) for track in raw_tracks if isinstance(track, dict)]


class WatchPageStrategy(AcquisitionStrategy):
    """Scrapes the public watch page for its embedded player and page data."""
    name = "watch_page"

    def __init__(self, session: UpstreamSession, key_cache: Optional[ApiKeyCache] = None):
        self.session = session
        self.key_cache = key_cache

    async def _request_page(self, video_id: str) -> str:
        headers = self.session.browser_headers({
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Cookie': f'CONSENT=YES+1; PREF=hl=en&tz=UTC; VISITOR_INFO1_LIVE={self.session.visitor_id};',
        })
        return await self.session.fetch_text(
            WATCH_URL,
            params={'v': video_id, 'hl': self.session.config.hl},
            headers=headers,
            timeout=self.session.config.player_timeout,
        )

    def parse_page(self, video_id: str, page: str) -> FetchResult:
        """Build a classified result from watch page HTML."""
        api_key_match = _API_KEY_PATTERN.search(page)
        if api_key_match and self.key_cache is not None:
            # A key scraped from the page is as good as one from sw.js_data
            self.key_cache.set(api_key_match.group(1))

        data = VideoData(
            video_id=video_id,
            source=self.name,
            player_response=extract_json_assignment(page, 'ytInitialPlayerResponse'),
            initial_data=extract_json_assignment(page, 'ytInitialData'),
            page_meta=extract_page_meta(page),
        )

        if data.player_response is None:
            data.caption_tracks = extract_caption_tracks_from_page(page)

        logger.debug(
            f"[{self.name}] page length={len(page)}, "
            f"player_response={data.player_response is not None}, "
            f"initial_data={data.initial_data is not None}"
        )
        return classify_player_response(data)

    async def try_fetch(self, video_id: str) -> FetchResult:
        try:
            page = await self.session.run_with_retry(
                lambda: self._request_page(video_id),
                f"{STAGE_VIDEO_DATA} (watch page)",
            )
        except CaptionKitError as e:
            return FetchResult(FAILED, error=str(e))

        return self.parse_page(video_id, page)


class EmbedMetadataStrategy(AcquisitionStrategy):
    """
    Queries the public oEmbed endpoint.

    oEmbed only carries a title and author, never captions, so its result is
    always insufficient: useful as a metadata candidate, never a final answer.
    """
    name = "embed_metadata"

    def __init__(self, session: UpstreamSession):
        self.session = session

    async def _request_oembed(self, video_id: str) -> Dict[str, Any]:
        oembed = await self.session.fetch_json(
            'GET',
            OEMBED_URL,
            params={'url': f'{WATCH_URL}?v={video_id}', 'format': 'json'},
            timeout=self.session.config.player_timeout,
        )
        if not isinstance(oembed, dict):
            raise UpstreamError("oEmbed endpoint returned a non-object payload")
        return oembed

    async def try_fetch(self, video_id: str) -> FetchResult:
        try:
            oembed = await self.session.run_with_retry(
                lambda: self._request_oembed(video_id),
                f"{STAGE_VIDEO_DATA} (embed metadata)",
            )
        except CaptionKitError as e:
            return FetchResult(FAILED, error=str(e))

        data = finalize_video_data(VideoData(video_id=video_id, source=self.name, oembed=oembed))
        return FetchResult(INSUFFICIENT, data, error="embed metadata carries no caption tracks")


class YtDlpStrategy(AcquisitionStrategy):
    """
    Delegates extraction to yt-dlp, run in a worker thread.

    Each attempt gets its own single-thread executor, shut down without
    waiting. A timed-out extraction cannot be interrupted and keeps running
    in the background, but it no longer holds up ``asyncio.run`` shutdown,
    which joins only the loop's default executor.
    """
    name = "yt_dlp"

    def __init__(self, client: YouTubeClient, timeout: float):
        self.client = client
        self.timeout = timeout

    async def try_fetch(self, video_id: str) -> FetchResult:
        loop = asyncio.get_running_loop()
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="captionkit-ytdlp")
        try:
            info = await asyncio.wait_for(
                loop.run_in_executor(executor, self.client.extract_info, video_id),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return FetchResult(FAILED, error=f"yt-dlp timeout after {self.timeout}s")
        except UpstreamError as e:
            return FetchResult(FAILED, error=str(e))
        finally:
            executor.shutdown(wait=False)

        data = VideoData(
            video_id=video_id,
            source=self.name,
            caption_tracks=caption_tracks_from_info(info),
            title=info.get('title') or None,
            description=info.get('description') or None,
        )
        if data.caption_tracks or data.title:
            return FetchResult(VALID, data)
        return FetchResult(INSUFFICIENT, data, error="yt-dlp returned no captions or title")


def default_strategies(
    session: UpstreamSession,
    key_provider: ApiKeyProvider,
    config: Optional[ExtractorConfig] = None,
) -> List[AcquisitionStrategy]:
    """
    Build the default ordered strategy list.

    Order: innertube player once per client profile, watch page scrape,
    oEmbed metadata, then yt-dlp (unless disabled in config).
    """
    config = config or session.config
    strategies: List[AcquisitionStrategy] = [
        InnertubePlayerStrategy(session, key_provider, profile)
        for profile in default_profiles(config)
    ]
    strategies.append(WatchPageStrategy(session, key_cache=key_provider.cache))
    strategies.append(EmbedMetadataStrategy(session))

    if config.enable_ytdlp:
        client = YouTubeClient(proxy=config.proxy, socket_timeout=config.player_timeout)
        strategies.append(YtDlpStrategy(client, timeout=config.player_timeout * 2))

    return strategies
