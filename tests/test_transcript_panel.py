import asyncio

from captionkit.models import CaptionCue
from captionkit.youtube.transcript_panel import TranscriptPanelExtractor, segments_to_cues

from conftest import make_response

INITIAL_DATA = {"engagementPanels": [
    {"engagementPanelSectionListRenderer": {"content": {"continuationItemRenderer": {
        "continuationEndpoint": {"getTranscriptEndpoint": {"params": "TOKEN123"}},
    }}}},
]}


def _transcript_response(*segments):
    return {"actions": [{"updateEngagementPanelAction": {"content": {"transcriptRenderer": {"content": {
        "transcriptSearchPanelRenderer": {"body": {"transcriptSegmentListRenderer": {
            "initialSegments": list(segments),
        }}},
    }}}}}]}


def _segment(start_ms, end_ms, text):
    return {"transcriptSegmentRenderer": {
        "startMs": str(start_ms),
        "endMs": str(end_ms),
        "snippet": {"runs": [{"text": text}]},
    }}


def test_segments_to_cues_converts_milliseconds():
    response = _transcript_response(
        _segment(1234, 3456, "Hello &amp; welcome"),
        {"transcriptSectionHeaderRenderer": {"startMs": "0"}},
        _segment(3456, 5000, "<b>second</b>"),
    )
    assert segments_to_cues(response) == [
        CaptionCue(start=1.234, dur=2.222, text="Hello & welcome"),
        CaptionCue(start=3.456, dur=1.544, text="second"),
    ]


def test_segments_to_cues_legacy_cue_groups():
    response = {"actions": [{"updateEngagementPanelAction": {"content": {"transcriptRenderer": {"body": {
        "transcriptBodyRenderer": {"cueGroups": [
            {"transcriptCueGroupRenderer": {"cues": [{"transcriptCueRenderer": {
                "startOffsetMs": "500", "durationMs": "1500", "cue": {"simpleText": "legacy"},
            }}]}},
        ]},
    }}}}}]}
    assert segments_to_cues(response) == [CaptionCue(start=0.5, dur=1.5, text="legacy")]


def test_segments_to_cues_empty_response():
    assert segments_to_cues({}) == []


def test_extract_without_token_returns_empty(upstream, fake_session, key_provider):
    extractor = TranscriptPanelExtractor(upstream, key_provider)
    assert asyncio.run(extractor.extract({"engagementPanels": []})) == []
    assert asyncio.run(extractor.extract(None)) == []
    assert fake_session.calls == []


def test_extract_posts_continuation_token(upstream, fake_session, key_provider):
    fake_session.add("POST", "/get_transcript", make_response(json_data=_transcript_response(_segment(0, 1000, "hi"))))
    extractor = TranscriptPanelExtractor(upstream, key_provider)

    cues = asyncio.run(extractor.extract(INITIAL_DATA))

    assert cues == [CaptionCue(start=0.0, dur=1.0, text="hi")]
    call = fake_session.calls[0]
    assert call["json"]["params"] == "TOKEN123"
    assert call["params"]["key"] == "TEST_KEY"


def test_extract_for_video_loads_document(upstream, fake_session, key_provider):
    fake_session.add("POST", "/youtubei/v1/next", make_response(json_data=INITIAL_DATA))
    fake_session.add("POST", "/get_transcript", make_response(json_data=_transcript_response(_segment(0, 1000, "hi"))))
    extractor = TranscriptPanelExtractor(upstream, key_provider)

    cues = asyncio.run(extractor.extract_for_video("vid123"))

    assert [cue.text for cue in cues] == ["hi"]
    assert fake_session.calls[0]["json"]["videoId"] == "vid123"
