"""Caption track selection by language."""

import logging
from typing import List, Optional

from ..models import CaptionTrack

logger = logging.getLogger(__name__)


def select_track(
    tracks: List[CaptionTrack],
    lang: str,
    best_effort: bool = False,
) -> Optional[CaptionTrack]:
    """
    Pick the caption track that best matches a language code.

    Selection order (first match wins):
    1. Manual captions: ``vss_id == "." + lang``
    2. Auto-generated captions: ``vss_id == "a." + lang``
    3. Any ``vss_id`` containing ``"." + lang``
    4. The first track, only when ``best_effort`` is set

    Tracks without a ``base_url`` cannot be fetched and are ignored.

    Args:
        tracks: Available caption tracks
        lang: Requested language code, e.g. "en"
        best_effort: Fall back to the first track when nothing matches

    Returns:
        The selected CaptionTrack, or None if no track qualifies

    Example:
        >>> tracks = [CaptionTrack("u1", ".fr"), CaptionTrack("u2", "a.en"), CaptionTrack("u3", ".en")]
        >>> select_track(tracks, "en").vss_id
        '.en'
    """
    usable = [track for track in tracks if track.base_url]
    if not usable:
        return None

    manual_id = f".{lang}"
    auto_id = f"a.{lang}"

    for predicate in (
        lambda t: t.vss_id == manual_id,
        lambda t: t.vss_id == auto_id,
        lambda t: manual_id in t.vss_id,
    ):
        match = next((track for track in usable if predicate(track)), None)
        if match is not None:
            return match

    if best_effort:
        logger.info(f"No '{lang}' track found, using first available track {usable[0].vss_id!r}")
        return usable[0]

    return None
