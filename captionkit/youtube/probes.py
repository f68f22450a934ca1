"""
Path probes over loosely-typed upstream documents.

YouTube's player responses and page data change shape between requests and
experiments. Every location the core reads from is a named probe: a pure
function ``(doc) -> value or None``. Probes for the same datum are kept in
priority-ordered tuples and evaluated with :func:`run_probes`.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from yt_dlp.utils import traverse_obj

from ..models import CaptionTrack, VideoData

Probe = Callable[[Any], Any]


def run_probes(probes: Sequence[Probe], doc: Any) -> Any:
    """
    Evaluate probes in order and return the first populated value.

    Empty strings, lists and dicts count as absent.

    Args:
        probes: Probe functions, most preferred first
        doc: Document handed to every probe

    Returns:
        First non-empty probe result, or None
    """
    if doc is None:
        return None
    for probe in probes:
        value = probe(doc)
        if value not in (None, "", [], {}):
            return value
    return None


def _first(doc: Any, path: tuple, expected_type: Optional[type] = None) -> Any:
    if not doc:
        return None
    return traverse_obj(doc, path, expected_type=expected_type, get_all=False)


# Player response: caption tracks

def caption_tracks_from_renderer(player_response: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    return _first(player_response, ('captions', 'playerCaptionsTracklistRenderer', 'captionTracks'), list)


def caption_tracks_from_adaptive_formats(player_response: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    formats = _first(player_response, ('streamingData', 'adaptiveFormats'), list) or []
    text_formats = [
        fmt for fmt in formats
        if isinstance(fmt, dict) and 'text/' in (fmt.get('mimeType') or '') and fmt.get('url')
    ]
    return [
        {'baseUrl': fmt['url'], 'vssId': fmt.get('languageCode') or 'unknown'}
        for fmt in text_formats
    ] or None


CAPTION_TRACK_PROBES = (
    caption_tracks_from_renderer,
    caption_tracks_from_adaptive_formats,
)


def find_caption_tracks(player_response: Optional[Dict[str, Any]]) -> List[CaptionTrack]:
    """Extract caption track descriptors from a player response."""
    raw_tracks = run_probes(CAPTION_TRACK_PROBES, player_response) or []
    return [CaptionTrack.from_dict(track) for track in raw_tracks if isinstance(track, dict)]


# Player response: status

def playability_status(player_response: Optional[Dict[str, Any]]) -> Optional[str]:
    return _first(player_response, ('playabilityStatus', 'status'), str)


def playability_reason(player_response: Optional[Dict[str, Any]]) -> Optional[str]:
    return _first(player_response, ('playabilityStatus', 'reason'), str)


def has_video_details(player_response: Optional[Dict[str, Any]]) -> bool:
    return bool(_first(player_response, ('videoDetails', 'videoId'), str))


# Title and description, over VideoData

def title_from_video_details(data: VideoData) -> Optional[str]:
    return _first(data.player_response, ('videoDetails', 'title'), str)


def title_from_microformat(data: VideoData) -> Optional[str]:
    return _first(data.player_response, ('microformat', 'playerMicroformatRenderer', 'title', 'simpleText'), str)


def title_from_page_meta(data: VideoData) -> Optional[str]:
    return data.page_meta.get('title')


def title_from_oembed(data: VideoData) -> Optional[str]:
    return _first(data.oembed, ('title',), str)


def description_from_video_details(data: VideoData) -> Optional[str]:
    return _first(data.player_response, ('videoDetails', 'shortDescription'), str)


def description_from_microformat(data: VideoData) -> Optional[str]:
    return _first(
        data.player_response,
        ('microformat', 'playerMicroformatRenderer', 'description', 'simpleText'),
        str,
    )


def description_from_page_meta(data: VideoData) -> Optional[str]:
    return data.page_meta.get('description')


TITLE_PROBES = (
    title_from_video_details,
    title_from_microformat,
    title_from_page_meta,
    title_from_oembed,
)

DESCRIPTION_PROBES = (
    description_from_video_details,
    description_from_microformat,
    description_from_page_meta,
)


# Initial data: transcript continuation token

def transcript_params_from_panel_continuation(initial_data: Dict[str, Any]) -> Optional[str]:
    return _first(initial_data, (
        'engagementPanels', ..., 'engagementPanelSectionListRenderer', 'content',
        'continuationItemRenderer', 'continuationEndpoint', 'getTranscriptEndpoint', 'params',
    ), str)


def transcript_params_from_panel_renderer(initial_data: Dict[str, Any]) -> Optional[str]:
    return _first(initial_data, (
        'engagementPanels', ..., 'engagementPanelSectionListRenderer', 'content',
        'transcriptRenderer', 'params',
    ), str)


def transcript_params_from_menu(initial_data: Dict[str, Any]) -> Optional[str]:
    return _first(initial_data, (
        'contents', 'twoColumnWatchNextResults', 'results', 'results', 'contents', ...,
        'videoPrimaryInfoRenderer', 'videoActions', 'menuRenderer', 'items', ...,
        'menuServiceItemRenderer', 'serviceEndpoint', 'getTranscriptEndpoint', 'params',
    ), str)


def transcript_params_from_description(initial_data: Dict[str, Any]) -> Optional[str]:
    return _first(initial_data, (
        'engagementPanels', ..., 'engagementPanelSectionListRenderer', 'content',
        'structuredDescriptionContentRenderer', 'items', ...,
        'videoDescriptionTranscriptSectionRenderer', 'primaryButton', 'buttonRenderer',
        'command', 'commandExecutorCommand', 'commands', ..., 'getTranscriptEndpoint', 'params',
    ), str)


TRANSCRIPT_PARAMS_PROBES = (
    transcript_params_from_panel_continuation,
    transcript_params_from_panel_renderer,
    transcript_params_from_menu,
    transcript_params_from_description,
)


# get_transcript response: segments

def transcript_segments(response: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    return _first(response, (
        'actions', 0, 'updateEngagementPanelAction', 'content', 'transcriptRenderer',
        'content', 'transcriptSearchPanelRenderer', 'body', 'transcriptSegmentListRenderer',
        'initialSegments',
    ), list)


def transcript_cue_groups(response: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    return _first(response, (
        'actions', 0, 'updateEngagementPanelAction', 'content', 'transcriptRenderer',
        'body', 'transcriptBodyRenderer', 'cueGroups',
    ), list)


TRANSCRIPT_SEGMENT_PROBES = (
    transcript_segments,
    transcript_cue_groups,
)


# Segment text, over one segment/cue renderer

def segment_text_from_runs(renderer: Dict[str, Any]) -> Optional[str]:
    runs = _first(renderer, ('snippet', 'runs'), list)
    if not runs:
        return None
    return ''.join(run.get('text', '') for run in runs if isinstance(run, dict))


def segment_text_from_simple_text(renderer: Dict[str, Any]) -> Optional[str]:
    return _first(renderer, ('snippet', 'simpleText'), str)


def cue_text_from_simple_text(renderer: Dict[str, Any]) -> Optional[str]:
    return _first(renderer, ('cue', 'simpleText'), str)


def cue_text_from_runs(renderer: Dict[str, Any]) -> Optional[str]:
    runs = _first(renderer, ('cue', 'runs'), list)
    if not runs:
        return None
    return ''.join(run.get('text', '') for run in runs if isinstance(run, dict))


SEGMENT_TEXT_PROBES = (
    segment_text_from_runs,
    segment_text_from_simple_text,
    cue_text_from_simple_text,
    cue_text_from_runs,
)
