"""State parameter encoding and pending-flow persistence.

The OAuth ``state`` sent to the authorization server is
``<anti-forgery token>:<caller state>``. Before navigating away, the
``lastState`` cookie is written as ``<verifier>:<caller state>`` so that the
redirect back can be correlated with the flow that started it.
"""

from __future__ import annotations

import logging

from authflow.auth.models.flow import PendingFlow
from authflow.auth.models.security import StateParameter
from authflow.auth.primitives.cookies import CookieStore
from authflow.auth.primitives.pkce import STATE_TOKEN_BYTES, PKCEManager, random_string

logger = logging.getLogger(__name__)

SEPARATOR = ":"


def split_state(state_param: str) -> tuple[str, str] | None:
    """Split an encoded state into ``(token, caller_state)``.

    Only the first separator is significant; the caller state may itself
    contain colons. Returns None when no separator is present.
    """
    token, sep, caller_state = state_param.partition(SEPARATOR)
    if not sep:
        return None
    return token, caller_state


class StateEncoder:
    """Builds ``state`` values and keeps the pending flow in a cookie."""

    def __init__(
        self,
        cookies: CookieStore,
        cookie_name: str = "lastState",
        pkce_manager: PKCEManager | None = None,
    ):
        self._cookies = cookies
        self.cookie_name = cookie_name
        self._pkce_manager = pkce_manager or PKCEManager()

    def build_state(self, caller_state: str) -> StateParameter:
        """Generate a fresh anti-forgery token and PKCE verifier.

        Raises:
            PKCEError: If the entropy source is unavailable
        """
        token = random_string(STATE_TOKEN_BYTES)
        pkce = self._pkce_manager.generate_parameters()
        return StateParameter(
            state_param=f"{token}{SEPARATOR}{caller_state}",
            token=token,
            caller_state=caller_state,
            pkce=pkce,
        )

    def persist_pending_flow(self, correlation_value: str, caller_state: str) -> None:
        # Session cookie: the flow must complete within the browsing session
        self._cookies.set(
            self.cookie_name, f"{correlation_value}{SEPARATOR}{caller_state}"
        )
        logger.debug(f"Persisted pending flow in cookie {self.cookie_name}")

    def has_pending_flow(self) -> bool:
        return self._cookies.get(self.cookie_name) is not None

    def consume_pending_flow(self) -> PendingFlow | None:
        """Read and invalidate the pending flow cookie.

        Returns:
            The pending flow, or None if the cookie is missing or malformed
        """
        raw = self._cookies.get(self.cookie_name)
        if raw is None:
            return None

        self._cookies.remove(self.cookie_name)

        parts = split_state(raw)
        if parts is None:
            logger.warning(
                f"Discarding malformed {self.cookie_name} cookie without separator"
            )
            return None

        correlation_value, caller_state = parts
        return PendingFlow(correlation_value=correlation_value, caller_state=caller_state)
