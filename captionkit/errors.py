"""
Exception hierarchy for CaptionKit.

Empty results (no tracks, no language match, no transcript panel) are not
errors; these exceptions cover upstream failures only.
"""

from typing import List, Optional, Tuple

STAGE_API_KEY = "Dynamic API key fetch"
STAGE_VIDEO_DATA = "Video data fetch"
STAGE_SUBTITLE = "Subtitle fetch"
STAGE_TRANSCRIPT_PANEL = "Transcript panel fetch"


class CaptionKitError(Exception):
    """Base class for all CaptionKit errors."""
    pass


class UpstreamError(CaptionKitError):
    """One upstream attempt failed: non-2xx status, bad payload or transport error."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class TransientUpstreamError(UpstreamError):
    """Timeout, connection error, rate limit or server error. Worth retrying."""
    pass


class StageFailedError(CaptionKitError):
    """An acquisition stage ran out of attempts."""

    def __init__(self, stage: str, attempts: int, cause: BaseException):
        super().__init__(f"{stage} failed after {attempts} attempts: {cause}")
        self.stage = stage
        self.attempts = attempts
        self.cause = cause


class ExhaustedFallbackError(CaptionKitError):
    """Every strategy/profile failed and nothing usable was retained."""

    def __init__(self, video_id: str, attempts: List[Tuple[str, str]]):
        names = ", ".join(name for name, _ in attempts) or "none"
        details = "; ".join(f"{name}: {reason}" for name, reason in attempts)
        message = f"All strategies exhausted for video {video_id} (tried: {names})"
        if details:
            message += f". {details}"
        super().__init__(message)
        self.video_id = video_id
        self.attempts = attempts

    @property
    def attempted(self) -> List[str]:
        return [name for name, _ in self.attempts]
