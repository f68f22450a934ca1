import json

import pytest

from captionkit import cli
from captionkit.errors import ExhaustedFallbackError
from captionkit.models import CaptionCue, VideoDetails


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    async def fake_get_subtitles(video_id, lang="en", **kwargs):
        recorded.append(("subtitles", video_id, lang, kwargs))
        return [CaptionCue(start=0.5, dur=1.0, text="hi")]

    async def fake_get_video_details(video_id, lang="en", **kwargs):
        recorded.append(("details", video_id, lang, kwargs))
        return VideoDetails(title="Title", subtitles=[CaptionCue(start=0.5, dur=1.0, text="hi")])

    monkeypatch.setattr(cli, "get_subtitles", fake_get_subtitles)
    monkeypatch.setattr(cli, "get_video_details", fake_get_video_details)
    return recorded


def test_subtitles_command_prints_cues(calls, capsys):
    assert cli.main(["subtitles", "https://youtu.be/dQw4w9WgXcQ", "--lang", "fr", "--best-effort"]) == 0

    assert json.loads(capsys.readouterr().out) == [{"start": 0.5, "dur": 1.0, "text": "hi"}]
    kind, video_id, lang, kwargs = calls[0]
    assert (kind, video_id, lang) == ("subtitles", "dQw4w9WgXcQ", "fr")
    assert kwargs["best_effort"] is True


def test_details_command_prints_video_details(calls, capsys):
    assert cli.main(["details", "dQw4w9WgXcQ", "--proxy", "http://10.0.0.1:3128"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["videoDetails"]["title"] == "Title"
    assert output["videoDetails"]["description"] == "No description found"
    assert calls[0][3]["proxy"].port == 3128


def test_missing_video_id_exits_with_usage_error(calls, capsys):
    assert cli.main(["subtitles", " "]) == 2
    assert json.loads(capsys.readouterr().err) == {"error": "Missing videoID"}
    assert calls == []


def test_invalid_proxy_exits_with_usage_error(calls, capsys):
    assert cli.main(["subtitles", "dQw4w9WgXcQ", "--proxy", "http://10.0.0.1"]) == 2
    assert "Invalid proxy URL" in json.loads(capsys.readouterr().err)["error"]


def test_extraction_failure_exits_with_error(monkeypatch, capsys):
    async def failing(video_id, lang="en", **kwargs):
        raise ExhaustedFallbackError(video_id, [("watch_page", "HTTP 429")])

    monkeypatch.setattr(cli, "get_subtitles", failing)

    assert cli.main(["subtitles", "dQw4w9WgXcQ"]) == 1
    assert "All strategies exhausted" in json.loads(capsys.readouterr().err)["error"]


def test_invalid_environment_exits_with_usage_error(calls, capsys, monkeypatch):
    monkeypatch.setenv("CAPTIONKIT_MAX_RETRIES", "abc")

    assert cli.main(["subtitles", "dQw4w9WgXcQ"]) == 2

    assert json.loads(capsys.readouterr().err)["error"].startswith("Invalid configuration:")
    assert calls == []
