"""HTTP client abstraction for the App Store Connect API.

This module provides:
- HttpClient: Protocol for JSON requests (injectable for tests)
- RealHttpClient: urllib implementation with retry on transient failures
- MockHttpClient: scripted responses for tests
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from time import sleep
from typing import Literal, Protocol, runtime_checkable

from ascnext.core.result import Err, Ok, Result
from ascnext.core.structured import StrDict, as_obj_list, as_str_dict, get_str

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpMethod",
    "MockHttpClient",
    "RealHttpClient",
]

HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})

type Params = Mapping[str, str | int]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"

    @property
    def transient(self) -> bool:
        return self.status == 0 or self.status in RETRYABLE_STATUSES


@runtime_checkable
class HttpClient(Protocol):
    def request_json(
        self,
        method: HttpMethod,
        url: str,
        *,
        params: Params | None = None,
        body: StrDict | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[StrDict, HttpError]:
        """Send a request and parse the JSON object response.

        Returns:
            Ok with the decoded object (empty for 204), or Err with HttpError
        """
        ...


def build_url(url: str, params: Params | None) -> str:
    if not params:
        return url
    return f"{url}?{urllib.parse.urlencode({k: str(v) for k, v in params.items()})}"


def _api_error_message(raw: bytes, default: str) -> str:
    """First ``errors[].detail`` (or ``title``) of a JSON:API error body."""
    try:
        obj: object = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return default
    data = as_str_dict(obj)
    if data is None:
        return default
    errors = as_obj_list(data.get("errors")) or []
    if not errors:
        return default
    first = as_str_dict(errors[0])
    if first is None:
        return default
    return get_str(first, "detail") or get_str(first, "title") or default


class RealHttpClient:
    """HTTP client using urllib.

    Network errors and 429/5xx responses are retried ``retry_attempts``
    times with exponential backoff (``retry_delay * 2**attempt``).
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        user_agent: str = "ascnext",
        on_request: Callable[[str, str], None] | None = None,
    ) -> None:
        self.timeout = timeout
        self.retry_attempts = max(0, retry_attempts)
        self.retry_delay = retry_delay
        self.user_agent = user_agent
        self._on_request = on_request
        self._ssl_context = ssl.create_default_context()

    def _send(self, req: urllib.request.Request) -> Result[bytes, HttpError]:
        url = req.full_url
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            raw = e.read() if e.fp is not None else b""
            default = f"API request failed with status {e.code}"
            return Err(HttpError(url=url, status=e.code, message=_api_error_message(raw, default)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=f"Network error: {e.reason}"))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=f"Network error: {e}"))

    def request_json(
        self,
        method: HttpMethod,
        url: str,
        *,
        params: Params | None = None,
        body: StrDict | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[StrDict, HttpError]:
        full_url = build_url(url, params)
        all_headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
            **(headers or {}),
        }
        data: bytes | None = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            all_headers["Content-Type"] = "application/json"

        unsent = HttpError(url=full_url, status=0, message="not sent")
        result: Result[bytes, HttpError] = Err(unsent)
        for attempt in range(self.retry_attempts + 1):
            if self._on_request is not None:
                self._on_request(method, full_url)
            req = urllib.request.Request(full_url, data=data, headers=all_headers, method=method)
            result = self._send(req)
            if isinstance(result, Ok):
                break
            if attempt < self.retry_attempts and result.error.transient:
                sleep(self.retry_delay * (2**attempt))
                continue
            return result

        if isinstance(result, Err):
            return result

        if not result.value:
            return Ok({})
        try:
            obj: object = json.loads(result.value.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=full_url, status=0, message=f"JSON parse error: {e}"))
        decoded = as_str_dict(obj)
        if decoded is None:
            return Err(HttpError(url=full_url, status=0, message="Expected JSON object"))
        return Ok(decoded)


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by method and URL path (query string ignored);
    ``calls`` records ``(method, url, params, body)`` and ``headers`` the
    request headers, both in call order.

    Usage:
        client = MockHttpClient()
        client.set("GET", "https://api.example.com/v1/apps", {"data": []})
        result = client.request_json("GET", "https://api.example.com/v1/apps")
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], list[StrDict | HttpError]] = {}
        self.calls: list[tuple[str, str, dict[str, str], StrDict | None]] = []
        self.headers: list[dict[str, str]] = []

    def set(self, method: HttpMethod, url: str, *responses: StrDict | HttpError) -> None:
        """Queue responses; the last one repeats once the queue is drained."""
        self._responses[(method, url)] = list(responses)

    def request_json(
        self,
        method: HttpMethod,
        url: str,
        *,
        params: Params | None = None,
        body: StrDict | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[StrDict, HttpError]:
        self.calls.append((method, url, {k: str(v) for k, v in (params or {}).items()}, body))
        self.headers.append(dict(headers or {}))
        queue = self._responses.get((method, url))
        if not queue:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def calls_to(self, url: str) -> list[tuple[str, str, dict[str, str], StrDict | None]]:
        return [c for c in self.calls if c[1] == url]
