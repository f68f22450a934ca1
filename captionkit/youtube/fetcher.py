"""
Video data fetcher.

Runs an ordered list of acquisition strategies until one produces valid
data, retaining insufficient results as last-resort candidates.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..errors import ExhaustedFallbackError
from ..models import VideoData
from .strategies import FAILED, INSUFFICIENT, VALID, AcquisitionStrategy, FetchResult

logger = logging.getLogger(__name__)


class VideoDataFetcher:
    """
    Generic fallback runner over acquisition strategies.

    For each strategy in order:
    - valid result: returned immediately
    - insufficient result: retained, next strategy tried
    - failed attempt: nothing retained, next strategy tried

    When every strategy is exhausted, the best retained candidate is
    returned (caption tracks beat video details beat a bare title, earliest
    wins ties); with no candidate at all, ``ExhaustedFallbackError`` is
    raised naming every attempted strategy.
    """

    def __init__(self, strategies: Sequence[AcquisitionStrategy], log: Optional[logging.Logger] = None):
        if not strategies:
            raise ValueError("VideoDataFetcher requires at least one strategy")
        self.strategies = list(strategies)
        self.log = log or logger

    async def fetch(self, video_id: str) -> VideoData:
        """
        Obtain video data for a video ID.

        Args:
            video_id: YouTube video ID

        Returns:
            VideoData from the first valid strategy, or the best retained candidate

        Raises:
            ExhaustedFallbackError: If no strategy produced any usable data
        """
        attempts: List[Tuple[str, str]] = []
        best: Optional[FetchResult] = None

        for strategy in self.strategies:
            self.log.debug(f"Trying strategy {strategy.name} for {video_id}")
            result = await strategy.try_fetch(video_id)

            if result.outcome == VALID and result.data is not None:
                self.log.info(
                    f"Strategy {strategy.name} succeeded for {video_id} "
                    f"({len(result.data.caption_tracks)} caption tracks)"
                )
                return result.data

            reason = result.error or result.outcome
            attempts.append((strategy.name, reason))

            if result.outcome == INSUFFICIENT and result.data is not None:
                self.log.info(f"Strategy {strategy.name} returned insufficient data for {video_id}: {reason}")
                if best is None or result.score > best.score:
                    best = result
            elif result.outcome == FAILED:
                self.log.warning(f"Strategy {strategy.name} failed for {video_id}: {reason}")

        if best is not None:
            self.log.warning(
                f"All strategies exhausted for {video_id}, "
                f"using best retained candidate from {best.data.source}"
            )
            return best.data

        raise ExhaustedFallbackError(video_id, attempts)
