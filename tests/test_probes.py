from captionkit.models import VideoData
from captionkit.youtube import probes

from conftest import player_response


def test_run_probes_skips_empty_values():
    result = probes.run_probes((lambda d: None, lambda d: "", lambda d: [], lambda d: "x"), {})
    assert result == "x"
    assert probes.run_probes((lambda d: "x",), None) is None


def test_find_caption_tracks_from_renderer():
    response = player_response(tracks=[
        {"baseUrl": "https://example.com/en", "vssId": ".en", "languageCode": "en"},
        {"baseUrl": "https://example.com/fr", "vssId": "a.fr", "languageCode": "fr", "kind": "asr"},
    ])
    tracks = probes.find_caption_tracks(response)
    assert [track.vss_id for track in tracks] == [".en", "a.fr"]
    assert tracks[1].is_auto_generated


def test_find_caption_tracks_from_adaptive_formats():
    response = {
        "streamingData": {"adaptiveFormats": [
            {"mimeType": "video/mp4", "url": "https://example.com/video"},
            {"mimeType": "text/vtt", "url": "https://example.com/sub", "languageCode": "de"},
            {"mimeType": "text/xml", "url": "https://example.com/sub2"},
        ]},
    }
    tracks = probes.find_caption_tracks(response)
    assert [(t.base_url, t.vss_id) for t in tracks] == [
        ("https://example.com/sub", "de"),
        ("https://example.com/sub2", "unknown"),
    ]


def test_find_caption_tracks_absent():
    assert probes.find_caption_tracks(player_response()) == []
    assert probes.find_caption_tracks(None) == []
    assert probes.find_caption_tracks({"captions": {"playerCaptionsTracklistRenderer": {"captionTracks": []}}}) == []


def test_playability_probes():
    blocked = player_response(status="LOGIN_REQUIRED")
    assert probes.playability_status(blocked) == "LOGIN_REQUIRED"
    assert probes.playability_reason(blocked).startswith("Sign in")
    assert not probes.has_video_details(blocked)
    assert probes.has_video_details(player_response())


def test_title_probe_priority():
    data = VideoData(
        video_id="vid123",
        source="test",
        player_response={"microformat": {"playerMicroformatRenderer": {
            "title": {"simpleText": "Microformat title"},
            "description": {"simpleText": "Microformat description"},
        }}},
        page_meta={"title": "Meta title", "description": "Meta description"},
        oembed={"title": "oEmbed title"},
    )
    assert probes.run_probes(probes.TITLE_PROBES, data) == "Microformat title"
    assert probes.run_probes(probes.DESCRIPTION_PROBES, data) == "Microformat description"

    data.player_response = player_response(title="Details title", description="")
    assert probes.run_probes(probes.TITLE_PROBES, data) == "Details title"
    assert probes.run_probes(probes.DESCRIPTION_PROBES, data) == "Meta description"


def test_title_probe_falls_back_to_oembed():
    data = VideoData(video_id="vid123", source="test", oembed={"title": "oEmbed title"})
    assert probes.run_probes(probes.TITLE_PROBES, data) == "oEmbed title"
    assert probes.run_probes(probes.DESCRIPTION_PROBES, data) is None


def test_transcript_params_from_engagement_panel():
    initial_data = {"engagementPanels": [
        {"engagementPanelSectionListRenderer": {"content": {"structuredDescriptionContentRenderer": {}}}},
        {"engagementPanelSectionListRenderer": {"content": {"continuationItemRenderer": {
            "continuationEndpoint": {"getTranscriptEndpoint": {"params": "TOKEN123"}},
        }}}},
    ]}
    assert probes.run_probes(probes.TRANSCRIPT_PARAMS_PROBES, initial_data) == "TOKEN123"


def test_transcript_params_from_menu():
    initial_data = {"contents": {"twoColumnWatchNextResults": {"results": {"results": {"contents": [
        {"videoPrimaryInfoRenderer": {"videoActions": {"menuRenderer": {"items": [
            {"menuServiceItemRenderer": {"serviceEndpoint": {"shareEndpoint": {}}}},
            {"menuServiceItemRenderer": {"serviceEndpoint": {"getTranscriptEndpoint": {"params": "MENU_TOKEN"}}}},
        ]}}}},
    ]}}}}}
    assert probes.run_probes(probes.TRANSCRIPT_PARAMS_PROBES, initial_data) == "MENU_TOKEN"


def test_transcript_params_absent():
    assert probes.run_probes(probes.TRANSCRIPT_PARAMS_PROBES, {"engagementPanels": []}) is None


def test_segment_text_probes():
    assert probes.run_probes(probes.SEGMENT_TEXT_PROBES, {"snippet": {"runs": [{"text": "a "}, {"text": "b"}]}}) == "a b"
    assert probes.run_probes(probes.SEGMENT_TEXT_PROBES, {"snippet": {"simpleText": "plain"}}) == "plain"
    assert probes.run_probes(probes.SEGMENT_TEXT_PROBES, {"cue": {"simpleText": "legacy"}}) == "legacy"
