"""Current user population from cookies or the profile endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any

from authflow.auth.models.config import AuthConfig
from authflow.auth.models.flow import UserFetchResult
from authflow.auth.primitives.cookies import CookieStore
from authflow.auth.services.transport import HttpRequester

logger = logging.getLogger(__name__)


class UserFetcher:
    """Resolves the current user profile once per mounted flow.

    The ``user`` cookie snapshot wins when present; otherwise the session
    marker cookie triggers a single credentialed request to ``me_path``.
    Nothing here raises: failures come back in the ``UserFetchResult``.
    """

    def __init__(
        self, config: AuthConfig, cookies: CookieStore, requester: HttpRequester
    ):
        self.config = config
        self._cookies = cookies
        self._requester = requester

    def user_from_cookie(self) -> dict[str, Any] | None:
        """Parse the ``user`` cookie snapshot.

        Returns:
            The profile, ``{}`` if the cookie is unparsable, or None if absent
        """
        raw = self._cookies.get(self.config.user_cookie)
        if raw is None:
            return None

        try:
            user = json.loads(raw)
        except ValueError:
            logger.warning(f"Cookie {self.config.user_cookie} is not valid JSON")
            return {}

        if not isinstance(user, dict):
            logger.warning(f"Cookie {self.config.user_cookie} is not a JSON object")
            return {}
        return user

    def has_session_marker(self) -> bool:
        # Presence only; the marker value is opaque
        return self._cookies.get(self.config.id_token_cookie) is not None

    async def fetch(self) -> UserFetchResult:
        """Populate the user from the cookie snapshot or the profile endpoint."""
        cached = self.user_from_cookie()
        if cached is not None:
            return UserFetchResult(user=cached)

        if not self.has_session_marker():
            return UserFetchResult()

        url = self.config.endpoint(self.config.me_path)
        logger.debug(f"Fetching current user from {url}")
        try:
            body = await self._requester.request(url, credentials="include")
        except Exception as e:
            logger.warning(f"Failed to fetch current user: {e!r}")
            return UserFetchResult(requested=True, failed=True, error=e)

        if not isinstance(body, dict):
            logger.warning("Profile endpoint did not return a JSON object")
            body = {}

        logger.info("Fetched current user profile")
        return UserFetchResult(user=body, requested=True)
