"""HTTP collaborator used for the profile fetch and the sign-out call."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from authflow.auth.primitives.cookies import CookieStore

logger = logging.getLogger(__name__)


class HttpRequester(Protocol):
    """Issues a request and returns the decoded JSON body.

    Failures are raised unchanged; callers decide how to surface them.
    """

    async def request(
        self, url: str, *, method: str = "GET", credentials: str = "include"
    ) -> Any: ...


class HttpxRequester:
    """``HttpRequester`` backed by ``httpx.AsyncClient``.

    With ``credentials="include"`` the store's cookies are sent along, which is
    how the authorization server recognizes the session.
    """

    def __init__(self, cookies: CookieStore | None = None, timeout: float = 30.0):
        self.timeout = timeout
        self._cookies = cookies
        self._http_client = httpx.AsyncClient(timeout=timeout)

    async def request(
        self, url: str, *, method: str = "GET", credentials: str = "include"
    ) -> Any:
        headers = {"Accept": "application/json"}
        if credentials == "include" and self._cookies is not None:
            cookie_header = self._cookies.to_header()
            if cookie_header:
                headers["Cookie"] = cookie_header

        logger.debug(f"{method} {url}")
        response = await self._http_client.request(method, url, headers=headers)
        response.raise_for_status()

        if not response.content:
            return {}
        return response.json()

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()
