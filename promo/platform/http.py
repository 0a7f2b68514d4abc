"""HTTP client abstraction for notification webhooks.

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
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from promo import __version__
from promo.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
]


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


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations."""

    def post_json(self, url: str, payload: dict[str, Any]) -> Result[str, HttpError]:
        """POST ``payload`` as a JSON body.

        Returns:
            Ok with the response body, or Err with HttpError
        """
        ...


class RealHttpClient:
    """Real HTTP client using urllib."""

    def __init__(self, timeout: float = 10.0, user_agent: str = f"promo/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def post_json(self, url: str, payload: dict[str, Any]) -> Result[str, HttpError]:
        body = json.dumps(payload).encode("utf-8")
        try:
            req = urllib.request.Request(
                url,
                data=body,
                method="POST",
                headers={
                    "User-Agent": self.user_agent,
                    "Content-Type": "application/json; charset=utf-8",
                },
            )
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read().decode("utf-8", errors="replace"))
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.fail_with(HttpError(url=url, status=500, message="boom"))
        result = client.post_json(url, {"text": "hi"})
        assert client.posts == [(url, {"text": "hi"})]
    """

    def __init__(self) -> None:
        self.posts: list[tuple[str, dict[str, Any]]] = []
        self._error: HttpError | None = None

    def fail_with(self, error: HttpError | None) -> None:
        """Make every following post fail with ``error`` (None restores success)."""
        self._error = error

    def post_json(self, url: str, payload: dict[str, Any]) -> Result[str, HttpError]:
        self.posts.append((url, payload))
        if self._error is not None:
            return Err(self._error)
        return Ok("ok")
