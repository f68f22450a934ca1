"""
YouTube client for CaptionKit.

Provides yt-dlp based metadata extraction, used as the last acquisition
strategy when the innertube and page-scraping strategies come up empty,
plus helpers for recognizing YouTube URLs.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import yt_dlp

from ..errors import UpstreamError
from ..models import CaptionTrack, ProxyConfig

logger = logging.getLogger(__name__)

_YOUTUBE_URL_REGEX = re.compile(
    r'^(https?://)?(www\.|m\.)?(youtube\.com/(watch\?v=|shorts/|embed/)|youtu\.be/)([A-Za-z0-9_-]+)'
)

# yt-dlp caption format carrying the <text start= dur=> timed-text XML
TIMEDTEXT_XML_EXT = 'srv1'


def is_youtube_url(url: str) -> bool:
    """
    Check if the provided string is a YouTube video URL.

    Example:
        >>> is_youtube_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
        True
        >>> is_youtube_url("dQw4w9WgXcQ")
        False
    """
    return bool(_YOUTUBE_URL_REGEX.match(url))


def extract_youtube_id(url_or_id: str) -> str:
    """
    Extract a YouTube video ID from a URL, passing bare IDs through unchanged.

    Args:
        url_or_id: YouTube URL or video ID

    Returns:
        The video ID

    Example:
        >>> extract_youtube_id("https://youtu.be/dQw4w9WgXcQ")
        'dQw4w9WgXcQ'
    """
    match = _YOUTUBE_URL_REGEX.match(url_or_id.strip())
    return match.group(5) if match else url_or_id.strip()


def caption_tracks_from_info(info: Dict[str, Any]) -> List[CaptionTrack]:
    """
    Map yt-dlp ``subtitles``/``automatic_captions`` to caption track descriptors.

    Manual subtitles get ``.{lang}`` ids and automatic captions ``a.{lang}``,
    matching the upstream ``vssId`` convention. Only languages offering the
    timed-text XML format are kept.

    Args:
        info: Info dict returned by ``YoutubeDL.extract_info``

    Returns:
        List of CaptionTrack, manual tracks first
    """
    tracks: List[CaptionTrack] = []

    for key, prefix, kind in (('subtitles', '.', None), ('automatic_captions', 'a.', 'asr')):
        for lang, formats in (info.get(key) or {}).items():
            for fmt in formats or []:
                if fmt.get('ext') == TIMEDTEXT_XML_EXT and fmt.get('url'):
                    tracks.append(CaptionTrack(
                        base_url=fmt['url'],
                        vss_id=f"{prefix}{lang}",
                        language_code=lang,
                        name=fmt.get('name'),
                        kind=kind,
                    ))
                    break

    return tracks


class YouTubeClient:
    """
    Client for YouTube metadata extraction through yt-dlp.

    yt-dlp keeps its own, frequently updated knowledge of the player API,
    which makes it a useful last resort when the lighter strategies fail.
    """

    def __init__(
        self,
        cookies_path: Optional[str] = None,
        proxy: Optional[ProxyConfig] = None,
        socket_timeout: float = 20.0,
    ):
        """
        Initialize YouTube client.

        Args:
            cookies_path: Optional path to cookies file for authentication
            proxy: Optional proxy for yt-dlp's requests
            socket_timeout: Per-socket timeout in seconds
        """
        self.cookies_path = cookies_path
        self.proxy = proxy
        self.socket_timeout = socket_timeout

    def _get_ydl_opts(self, **overrides) -> Dict:
        """
        Get default yt-dlp options with optional overrides.

        Args:
            **overrides: Options to override defaults

        Returns:
            Dictionary of yt-dlp options
        """
        opts = {
            'quiet': True,
            'no_warnings': True,
            'skip_download': True,
            'socket_timeout': self.socket_timeout,
        }

        if self.cookies_path:
            opts['cookiefile'] = self.cookies_path
        if self.proxy:
            opts['proxy'] = self.proxy.url

        opts.update(overrides)
        return opts

    def extract_info(self, video_id: str) -> Dict[str, Any]:
        """
        Extract video metadata and caption listings without downloading.

        Args:
            video_id: YouTube video ID

        Returns:
            yt-dlp info dictionary

        Raises:
            UpstreamError: If yt-dlp fails to extract the video
        """
        url = f"https://www.youtube.com/watch?v={video_id}"

        try:
            logger.info(f"Extracting info with yt-dlp for: {video_id}")

            ydl_opts = self._get_ydl_opts(writesubtitles=True, writeautomaticsub=True)

            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(url, download=False)

        except yt_dlp.utils.YoutubeDLError as e:
            logger.error(f"Failed to extract YouTube info for {video_id}: {str(e)}")
            raise UpstreamError(f"YouTube info extraction failed: {str(e)}") from e

        if not isinstance(info, dict):
            raise UpstreamError(f"YouTube info extraction returned no data for {video_id}")

        return info
