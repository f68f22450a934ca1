import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from captionkit.models import ExtractorConfig
from captionkit.youtube.api_key import ApiKeyCache, ApiKeyProvider
from captionkit.youtube.session import UpstreamSession


def make_response(status: int = 200, text: str = "", json_data: Any = None, url: str = "https://www.youtube.com/") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    body = json.dumps(json_data) if json_data is not None else text
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    response.url = url
    response.reason = "OK" if status < 400 else "Error"
    return response


class FakeSession:
    """Stands in for requests.Session, answering from scripted routes."""

    def __init__(self):
        self.routes: List[Dict[str, Any]] = []
        self.calls: List[Dict[str, Any]] = []

    def add(self, method: str, url_part: str, *responses):
        """Queue responses (or exceptions) for URLs containing url_part; the last one repeats."""
        self.routes.append({"method": method, "url_part": url_part, "responses": list(responses)})
        return self

    def request(self, method, url, headers=None, params=None, json=None, timeout=None, proxies=None):
        self.calls.append({
            "method": method, "url": url, "headers": headers, "params": params,
            "json": json, "timeout": timeout, "proxies": proxies,
        })
        for route in self.routes:
            if route["method"] == method and route["url_part"] in url:
                responses = route["responses"]
                response = responses.pop(0) if len(responses) > 1 else responses[0]
                if isinstance(response, Exception):
                    raise response
                return response
        raise requests.ConnectionError(f"No route for {method} {url}")

    def calls_to(self, url_part: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if url_part in call["url"]]

    def close(self):
        pass


@pytest.fixture
def config() -> ExtractorConfig:
    return ExtractorConfig(max_retries=1, initial_delay=0.0, enable_ytdlp=False)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def upstream(config, fake_session) -> UpstreamSession:
    return UpstreamSession(config, session=fake_session)


@pytest.fixture
def key_cache() -> ApiKeyCache:
    cache = ApiKeyCache()
    cache.set("TEST_KEY")
    return cache


@pytest.fixture
def key_provider(upstream, key_cache) -> ApiKeyProvider:
    return ApiKeyProvider(upstream, key_cache)


def player_response(
    video_id: str = "vid123",
    tracks: Optional[List[Dict[str, Any]]] = None,
    status: str = "OK",
    title: Optional[str] = "Test Video",
    description: Optional[str] = "A description",
) -> Dict[str, Any]:
    data: Dict[str, Any] = {"playabilityStatus": {"status": status}}
    if status != "OK":
        data["playabilityStatus"]["reason"] = "Sign in to confirm you're not a bot"
    details: Dict[str, Any] = {"videoId": video_id}
    if title is not None:
        details["title"] = title
    if description is not None:
        details["shortDescription"] = description
    if status == "OK":
        data["videoDetails"] = details
    if tracks is not None:
        data["captions"] = {"playerCaptionsTracklistRenderer": {"captionTracks": tracks}}
    return data


TIMEDTEXT_XML = (
    '<?xml version="1.0" encoding="utf-8" ?><transcript>'
    '<text start="0.5" dur="2.1">Hello &amp;amp; welcome</text>'
    '<text start="2.6" dur="1.9">&lt;i&gt;second&lt;/i&gt; line</text>'
    '<text start="4.5" dur="3">it&amp;#39;s the end</text>'
    '</transcript>'
)
