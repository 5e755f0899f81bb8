"""HTTP client abstraction.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from gr import __version__
from gr.core.result import Err, Ok, Result

__all__ = [
    "HTTP_TIMEOUT_SECONDS",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]

HTTP_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Response body of a non-2xx answer, if any
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    text: str

    def json(self) -> object:
        """Decode the body; raises ValueError on malformed JSON."""
        return json.loads(self.text) if self.text else None


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Non-2xx answers are returned as ``Err(HttpError)`` with the status set.
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        payload: object = None,
    ) -> Result[HttpResponse, HttpError]:
        """Send a request with an optional JSON payload."""
        ...

    def get_text(self, url: str) -> Result[str, HttpError]:
        """Fetch URL and return the body as text."""
        ...


class RealHttpClient:
    """Real HTTP client using urllib."""

    def __init__(
        self,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        user_agent: str = f"goravel-release/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        payload: object = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        data: bytes | None = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            all_headers["Content-Type"] = "application/json"

        try:
            req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                text = response.read().decode("utf-8")
                return Ok(HttpResponse(status=response.status, text=text))
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except UnicodeDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"Decode error: {e}"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_text(self, url: str) -> Result[str, HttpError]:
        result = self.request("GET", url)
        if isinstance(result, Err):
            return result
        return Ok(result.value.text)


@dataclass(frozen=True, slots=True)
class RecordedCall:
    method: str
    url: str
    payload: object = None


def _empty_calls() -> list[RecordedCall]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_json("GET", "https://api.example.com/data", {"key": "value"})
        client.set_text("https://raw.example.com/file", "content")
    """

    calls: list[RecordedCall] = field(default_factory=_empty_calls)
    _responses: dict[tuple[str, str], HttpResponse | HttpError] = field(
        default_factory=lambda: {}
    )

    def set_json(self, method: str, url: str, body: object, *, status: int = 200) -> None:
        self._responses[(method, url)] = HttpResponse(status=status, text=json.dumps(body))

    def set_text(self, url: str, response: str | HttpError) -> None:
        if isinstance(response, HttpError):
            self._responses[("GET", url)] = response
        else:
            self._responses[("GET", url)] = HttpResponse(status=200, text=response)

    def set_error(self, method: str, url: str, status: int, message: str = "") -> None:
        body = json.dumps({"message": message}) if message else ""
        self._responses[(method, url)] = HttpError(
            url=url, status=status, message=message or "error", body=body
        )

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        payload: object = None,
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append(RecordedCall(method, url, payload))

        response = self._responses.get((method, url))
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_text(self, url: str) -> Result[str, HttpError]:
        result = self.request("GET", url)
        if isinstance(result, Err):
            return result
        return Ok(result.value.text)

    # Test helpers

    def methods(self) -> list[str]:
        return [c.method for c in self.calls]

    def mutating_calls(self) -> list[RecordedCall]:
        """Calls other than GET (POST/PATCH/PUT/DELETE)."""
        return [c for c in self.calls if c.method != "GET"]
