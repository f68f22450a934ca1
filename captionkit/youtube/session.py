"""
Upstream HTTP session for CaptionKit.

Wraps a ``requests.Session`` with environment-aware browser headers, an
optional proxy, per-call timeouts and a tenacity retry layer. Blocking
requests calls run in a worker thread so callers can ``await`` them without
stalling the event loop.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import requests
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import StageFailedError, TransientUpstreamError, UpstreamError
from ..models import ExtractorConfig
from ..utils import generate_random_string

logger = logging.getLogger(__name__)

T = TypeVar("T")

YOUTUBE = "https://www.youtube.com"


class UpstreamSession:
    """
    Outbound request layer shared by every acquisition strategy.

    Each call is bounded by its own timeout. A timeout, connection error,
    non-2xx status or unparsable body surfaces as an ``UpstreamError``;
    :meth:`run_with_retry` retries those with exponential backoff and turns
    an exhausted budget into a ``StageFailedError`` naming the stage.
    """

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        session: Optional[requests.Session] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Initialize upstream session.

        Args:
            config: Extractor configuration (default: read from environment)
            session: Pre-built requests session, mainly for tests
            log: Logger to report through (default: module logger)
        """
        self.config = config or ExtractorConfig.from_env()
        self._session = session or requests.Session()
        self.log = log or logger
        self._proxies = self.config.proxy.as_requests_proxies() if self.config.proxy else None
        self.visitor_id = generate_random_string(11)

    def browser_headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Build default browser-like headers with optional overrides.

        Args:
            extra: Header values to add or override

        Returns:
            Dictionary of request headers
        """
        headers = {
            'User-Agent': self.config.user_agent,
            'Accept-Language': 'en-US,en;q=0.9',
            'Accept': '*/*',
            'Origin': YOUTUBE,
            'Referer': f'{YOUTUBE}/',
            'DNT': '1',
            'Sec-GPC': '1',
            'Cookie': f'PREF=tz=UTC;VISITOR_INFO1_LIVE={self.visitor_id};',
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        url: str,
        *,
        timeout: float,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Send a single HTTP request without retrying.

        On timeout the awaiting task gives up, but the worker thread keeps
        running until the ``requests`` call returns. The same ``timeout`` is
        passed to ``requests`` as its connect/read timeout, which bounds
        how long that thread can linger.

        Args:
            method: HTTP method
            url: Target URL
            timeout: Timeout in seconds for the whole call
            headers: Request headers (default: browser headers)
            params: Query string parameters
            json_body: JSON payload for POST requests

        Returns:
            The successful (2xx) response

        Raises:
            TransientUpstreamError: On timeout, connection error, 429 or 5xx
            UpstreamError: On any other non-2xx status or request error
        """
        def _send() -> requests.Response:
            return self._session.request(
                method,
                url,
                headers=headers if headers is not None else self.browser_headers(),
                params=params,
                json=json_body,
                timeout=timeout,
                proxies=self._proxies,
            )

        try:
            response = await asyncio.wait_for(asyncio.to_thread(_send), timeout=timeout)
        except asyncio.TimeoutError:
            raise TransientUpstreamError(f"Request timeout after {timeout}s", url=url)
        except (requests.Timeout, requests.ConnectionError) as e:
            raise TransientUpstreamError(f"Request to {url[:100]} failed: {e}", url=url) from e
        except requests.RequestException as e:
            raise UpstreamError(f"Request to {url[:100]} failed: {e}", url=url) from e

        status = response.status_code
        if status == 429 or status >= 500:
            raise TransientUpstreamError(f"HTTP {status} {response.reason or ''}".strip(), status_code=status, url=url)
        if not 200 <= status < 300:
            raise UpstreamError(f"HTTP {status} {response.reason or ''}".strip(), status_code=status, url=url)

        return response

    async def fetch_text(self, url: str, *, timeout: float, **kwargs: Any) -> str:
        """GET a URL and return the response body as text."""
        response = await self.request('GET', url, timeout=timeout, **kwargs)
        return response.text

    async def fetch_json(self, method: str, url: str, *, timeout: float, **kwargs: Any) -> Any:
        """
        Send a request and decode the JSON response body.

        Raises:
            UpstreamError: If the body is not valid JSON
        """
        response = await self.request(method, url, timeout=timeout, **kwargs)
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise UpstreamError(f"Malformed JSON response from {url[:100]}: {e}", url=url) from e

    async def run_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        stage: str,
        max_retries: Optional[int] = None,
    ) -> T:
        """
        Run an async operation with exponential backoff on upstream errors.

        Waits ``initial_delay * backoff_factor ** (attempt - 1)`` seconds
        between attempts. Errors other than ``UpstreamError`` propagate
        immediately.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            stage: Stage name used in log messages and the final error
            max_retries: Retries after the first attempt (default: from config)

        Returns:
            The operation's result

        Raises:
            StageFailedError: If every attempt failed
        """
        max_retries = self.config.max_retries if max_retries is None else max_retries
        total_attempts = max_retries + 1
        attempts = 0
        result: Any = None

        def _log_retry(retry_state) -> None:
            error = retry_state.outcome.exception()
            delay = retry_state.next_action.sleep if retry_state.next_action else 0
            self.log.warning(
                f"{stage} failed (attempt {retry_state.attempt_number}/{total_attempts}): "
                f"{error}. Retrying in {delay:.1f}s..."
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(total_attempts),
            wait=wait_exponential(multiplier=self.config.initial_delay, exp_base=self.config.backoff_factor),
            retry=retry_if_exception_type(UpstreamError),
            before_sleep=_log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts += 1
                    result = await operation()
        except UpstreamError as e:
            raise StageFailedError(stage, attempts, e) from e

        return result

    def close(self) -> None:
        """Close the underlying requests session."""
        self._session.close()
