"""Post-redirect resolution with a single-fire callback guarantee.

The resolver decides, from cookies alone, whether the application has just
returned from the authorization server. If so it holds the pending flow until
the caller reports success or failure, fires exactly one of the two redirect
callbacks and then stays in ``DONE``. Every later transition is a no-op, so a
hosting runtime that schedules initialization more than once cannot re-fire
callbacks or consume ``lastState`` twice.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable

from authflow.auth.models.config import AuthConfig
from authflow.auth.models.flow import PendingFlow, ResolutionState
from authflow.auth.primitives.cookies import CookieStore
from authflow.auth.services.security import StateEncoder

logger = logging.getLogger(__name__)


class SessionResolver:
    def __init__(
        self,
        config: AuthConfig,
        cookies: CookieStore,
        state_encoder: StateEncoder,
    ):
        self.config = config
        self._cookies = cookies
        self._state_encoder = state_encoder
        self._state = ResolutionState.IDLE
        self._pending: PendingFlow | None = None

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def pending_flow(self) -> PendingFlow | None:
        return self._pending

    def is_resolving(self) -> bool:
        return self._state is ResolutionState.RESOLVING

    def begin(self) -> ResolutionState:
        """Inspect cookies and consume a pending flow if one is waiting.

        Only the first call does anything; later calls return the current
        state unchanged.
        """
        if self._state is not ResolutionState.IDLE:
            logger.debug(f"Resolver already started ({self._state.value}), ignoring")
            return self._state

        has_marker = self._cookies.get(self.config.id_token_cookie) is not None
        if not has_marker or not self._state_encoder.has_pending_flow():
            self._state = ResolutionState.NO_PENDING_FLOW
            return self._state

        pending = self._state_encoder.consume_pending_flow()
        if pending is None:
            self._state = ResolutionState.NO_PENDING_FLOW
            return self._state

        self._pending = pending
        self._state = ResolutionState.RESOLVING
        logger.info("Returned from authorization server, resolving pending flow")
        return self._state

    async def succeed(self) -> bool:
        """Fire ``on_redirect_success`` with the caller state, at most once.

        Returns:
            True if the callback was fired by this call
        """
        if not self.is_resolving():
            return False

        self._state = ResolutionState.RESOLVED_SUCCESS
        caller_state = self._pending.caller_state
        logger.info("Redirect flow resolved successfully")
        await self._invoke(self.config.on_redirect_success, caller_state)
        self._state = ResolutionState.DONE
        return True

    async def fail(self, error: Any) -> bool:
        """Fire ``on_redirect_fail`` with the raw error, at most once.

        Returns:
            True if the callback was fired by this call
        """
        if not self.is_resolving():
            return False

        self._state = ResolutionState.RESOLVED_FAILURE
        logger.warning(f"Redirect flow failed: {error!r}")
        await self._invoke(self.config.on_redirect_fail, error)
        self._state = ResolutionState.DONE
        return True

    async def _invoke(self, callback: Callable[[Any], Any], argument: Any) -> None:
        try:
            result = callback(argument)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Redirect callback raised")
