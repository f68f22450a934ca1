"""
Transcript-panel extraction.

Some videos expose no caption tracks in their player response but still
offer the "Show transcript" panel on the watch page. This module finds the
panel's continuation token inside the page data, requests the transcript
segments with it, and maps them to caption cues.
"""

import logging
from typing import Any, Dict, List, Optional

from yt_dlp.utils import traverse_obj

from ..errors import STAGE_TRANSCRIPT_PANEL, UpstreamError
from ..models import CaptionCue
from ..utils import decode_entities, ms_to_seconds, strip_tags, to_float
from . import probes
from .api_key import ApiKeyProvider
from .profiles import ClientProfile, web_profile
from .session import YOUTUBE, UpstreamSession

logger = logging.getLogger(__name__)

NEXT_URL = f"{YOUTUBE}/youtubei/v1/next"
GET_TRANSCRIPT_URL = f"{YOUTUBE}/youtubei/v1/get_transcript"


def _segment_timing(item: Dict[str, Any]):
    """Return (renderer, start_ms, dur_ms) for one segment entry, or None."""
    renderer = item.get('transcriptSegmentRenderer')
    if isinstance(renderer, dict):
        start_ms = to_float(renderer.get('startMs'))
        end_ms = to_float(renderer.get('endMs'))
        if start_ms is None or end_ms is None:
            return None
        return renderer, start_ms, end_ms - start_ms

    # Legacy layout: cue groups wrapping a single cue renderer
    renderer = traverse_obj(item, ('transcriptCueGroupRenderer', 'cues', 0, 'transcriptCueRenderer'), expected_type=dict)
    if isinstance(renderer, dict):
        start_ms = to_float(renderer.get('startOffsetMs'))
        dur_ms = to_float(renderer.get('durationMs'))
        if start_ms is None or dur_ms is None:
            return None
        return renderer, start_ms, dur_ms

    # Section headers and other non-cue entries
    return None


def segments_to_cues(response: Dict[str, Any]) -> List[CaptionCue]:
    """
    Map a ``get_transcript`` response to caption cues.

    Millisecond offsets become seconds with three-decimal precision.
    Entries without timing are dropped; order is preserved.

    Args:
        response: Decoded ``get_transcript`` JSON

    Returns:
        List of CaptionCue objects
    """
    segments = probes.run_probes(probes.TRANSCRIPT_SEGMENT_PROBES, response) or []
    cues: List[CaptionCue] = []

    for item in segments:
        if not isinstance(item, dict):
            continue
        timing = _segment_timing(item)
        if timing is None:
            continue
        renderer, start_ms, dur_ms = timing
        text = probes.run_probes(probes.SEGMENT_TEXT_PROBES, renderer) or ''
        cues.append(CaptionCue(
            start=ms_to_seconds(max(start_ms, 0.0)),
            dur=ms_to_seconds(max(dur_ms, 0.0)),
            text=strip_tags(decode_entities(text)),
        ))

    return cues


class TranscriptPanelExtractor:
    """Fallback cue source built on the watch page transcript panel."""

    def __init__(
        self,
        session: UpstreamSession,
        key_provider: ApiKeyProvider,
        profile: Optional[ClientProfile] = None,
    ):
        self.session = session
        self.key_provider = key_provider
        self.profile = profile or web_profile(session.config)

    def find_continuation_token(self, document: Optional[Dict[str, Any]]) -> Optional[str]:
        """Locate the transcript continuation token in page data."""
        return probes.run_probes(probes.TRANSCRIPT_PARAMS_PROBES, document)

    async def _post(self, url: str, body: Dict[str, Any], api_key: str) -> Dict[str, Any]:
        config = self.session.config
        payload = {'context': self.profile.build_context(config)}
        payload.update(body)
        response = await self.session.fetch_json(
            'POST',
            url,
            params={'key': api_key, 'prettyPrint': 'false'},
            headers=self.profile.build_headers(config),
            json_body=payload,
            timeout=config.player_timeout,
        )
        if not isinstance(response, dict):
            raise UpstreamError(f"Non-object payload from {url}")
        return response

    async def load_document(self, video_id: str) -> Dict[str, Any]:
        """
        Fetch the watch-next document, which carries the engagement panels.

        Raises:
            StageFailedError: If every attempt failed
        """
        api_key = await self.key_provider.get_api_key()
        return await self.session.run_with_retry(
            lambda: self._post(NEXT_URL, {'videoId': video_id}, api_key),
            STAGE_TRANSCRIPT_PANEL,
        )

    async def extract(self, document: Optional[Dict[str, Any]]) -> List[CaptionCue]:
        """
        Extract cues through the transcript panel of a page-data document.

        Args:
            document: ``ytInitialData`` or an equivalent watch-next response

        Returns:
            List of CaptionCue; empty when the document has no transcript panel

        Raises:
            StageFailedError: If the transcript request failed on every attempt
        """
        token = self.find_continuation_token(document)
        if not token:
            logger.info("No transcript panel continuation token found")
            return []

        api_key = await self.key_provider.get_api_key()
        response = await self.session.run_with_retry(
            lambda: self._post(GET_TRANSCRIPT_URL, {'params': token}, api_key),
            STAGE_TRANSCRIPT_PANEL,
        )
        cues = segments_to_cues(response)
        logger.info(f"Extracted {len(cues)} cues from transcript panel")
        return cues

    async def extract_for_video(
        self,
        video_id: str,
        document: Optional[Dict[str, Any]] = None,
    ) -> List[CaptionCue]:
        """Extract cues, loading the page-data document first when none is given."""
        if document is None:
            document = await self.load_document(video_id)
        return await self.extract(document)
