"""Typed access to the ambient cookie jar.

``CookieStore`` is the only persistent storage the flow uses. ``CookieJar``
is an in-memory implementation seeded from a ``document.cookie``-style
header, suitable for embedding the flow outside a browser and for tests.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol
from urllib.parse import quote, unquote

from authflow.auth.models.errors import CookieError

logger = logging.getLogger(__name__)

# RFC 6265 token separators that can never appear in a cookie name
_INVALID_NAME_CHARS = set(' \t\r\n()<>@,;:\\"/[]?={}')


class CookieStore(Protocol):
    """Read, write-with-expiry and delete cookies by name."""

    def get(self, name: str) -> str | None: ...

    def set(
        self,
        name: str,
        value: str,
        *,
        expires_in: float | None = None,
        path: str = "/",
    ) -> None: ...

    def remove(self, name: str) -> None: ...

    def to_header(self) -> str:
        """Render the cookies sent with credentialed requests."""
        ...


@dataclass(frozen=True)
class _Cookie:
    value: str
    path: str = "/"
    expires_at: float | None = None  # None means session cookie

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class CookieJar:
    """In-memory cookie jar with tolerant header parsing."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._cookies: dict[str, _Cookie] = {}

    @classmethod
    def from_header(
        cls, header: str | None, clock: Callable[[], float] = time.time
    ) -> CookieJar:
        """Build a jar from a ``name=value; name2=value2`` header.

        A malformed header yields an empty jar instead of raising.
        """
        jar = cls(clock=clock)
        if not header:
            return jar

        parsed = _parse_header(header)
        if parsed is None:
            logger.warning("Ignoring malformed cookie header")
            return jar

        for name, value in parsed.items():
            jar._cookies[name] = _Cookie(value=value)
        return jar

    def get(self, name: str) -> str | None:
        cookie = self._cookies.get(name)
        if cookie is None:
            return None
        if cookie.is_expired(self._clock()):
            del self._cookies[name]
            return None
        return cookie.value

    def set(
        self,
        name: str,
        value: str,
        *,
        expires_in: float | None = None,
        path: str = "/",
    ) -> None:
        if not name or any(c in _INVALID_NAME_CHARS for c in name):
            raise CookieError(f"Invalid cookie name: {name!r}")
        if not isinstance(value, str):
            raise CookieError(f"Cookie {name} value must be a string")

        expires_at = None
        if expires_in is not None:
            expires_at = self._clock() + expires_in
        self._cookies[name] = _Cookie(value=value, path=path, expires_at=expires_at)

    def remove(self, name: str) -> None:
        self._cookies.pop(name, None)

    def names(self) -> list[str]:
        now = self._clock()
        return [n for n, c in self._cookies.items() if not c.is_expired(now)]

    def to_header(self) -> str:
        """Render live cookies as a ``Cookie`` request header value."""
        parts = []
        for name in self.names():
            parts.append(f"{name}={quote(self._cookies[name].value, safe='')}")
        return "; ".join(parts)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None


def _parse_header(header: str) -> dict[str, str] | None:
    """Split a cookie header into decoded values, or None if malformed."""
    cookies: dict[str, str] = {}
    for segment in header.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        name, sep, value = segment.partition("=")
        name = name.strip()
        if not sep or not name:
            return None
        # First occurrence wins, as in browsers
        cookies.setdefault(name, unquote(value.strip()))
    return cookies
