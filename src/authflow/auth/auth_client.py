"""Authentication state machine for the browser redirect flow.

Coordinates cookie inspection, post-redirect resolution, user population and
the navigation operations (login, register, logout) behind a small observable
state container that UI code subscribes to.
"""

from __future__ import annotations

import dataclasses
import logging
import webbrowser
from typing import Any, Callable, Protocol

from authflow.auth.models.config import AuthConfig
from authflow.auth.models.flow import AuthState
from authflow.auth.primitives.cookies import CookieJar, CookieStore
from authflow.auth.services.security import StateEncoder
from authflow.auth.services.session import SessionResolver
from authflow.auth.services.transport import HttpRequester, HttpxRequester
from authflow.auth.services.urls import AuthUrlBuilder
from authflow.auth.services.user import UserFetcher

logger = logging.getLogger(__name__)

StateListener = Callable[[AuthState], None]


class NavigationSink(Protocol):
    """Changes the current document location. Never awaited for a result."""

    def navigate(self, url: str) -> None: ...


class BrowserNavigator:
    """Navigation sink that opens URLs in the system web browser."""

    def navigate(self, url: str) -> None:
        webbrowser.open(url)


class AuthStateStore:
    """Observable holder of the current ``AuthState`` snapshot."""

    def __init__(self):
        self._state = AuthState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes: Any) -> AuthState:
        new_state = dataclasses.replace(self._state, **changes)
        if new_state == self._state:
            return self._state
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Auth state listener failed")
        return new_state


class AuthStateMachine:
    """Public entry point: current user state plus login/register/logout.

    One instance corresponds to one mounted flow. ``initialize`` runs at most
    once per instance regardless of how often the host schedules it.
    """

    def __init__(
        self,
        config: AuthConfig,
        cookies: CookieStore | None = None,
        navigator: NavigationSink | None = None,
        requester: HttpRequester | None = None,
    ):
        """Initialize the state machine.

        Args:
            config: Provider configuration
            cookies: Cookie jar shared with the browsing context
            navigator: Sink for location changes
            requester: HTTP collaborator for profile and sign-out requests
        """
        self.config = config
        self.cookies = cookies if cookies is not None else CookieJar()
        self.navigator = navigator or BrowserNavigator()
        if requester is None:
            requester = HttpxRequester(cookies=self.cookies, timeout=config.timeout)
        self.requester = requester

        self.store = AuthStateStore()
        self.state_encoder = StateEncoder(self.cookies, config.last_state_cookie)
        self.url_builder = AuthUrlBuilder(config)
        self.resolver = SessionResolver(config, self.cookies, self.state_encoder)
        self.user_fetcher = UserFetcher(config, self.cookies, self.requester)
        self._initialized = False

    @property
    def state(self) -> AuthState:
        return self.store.state

    @property
    def is_loading(self) -> bool:
        return self.store.state.is_loading

    @property
    def is_authenticated(self) -> bool:
        return self.store.state.is_authenticated

    @property
    def user(self) -> dict[str, Any]:
        return self.store.state.user

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    async def initialize(self) -> AuthState:
        """Resolve any pending redirect and populate the current user.

        Safe to call repeatedly; only the first call has any effect.
        """
        # Guard is set before the first await
        if self._initialized:
            logger.debug("Auth state already initialized, ignoring")
            return self.store.state
        self._initialized = True

        self.resolver.begin()

        result = await self.user_fetcher.fetch()
        self.store.update(user=result.user, is_loading=False)

        if result.is_error():
            await self.resolver.fail(result.error)
        else:
            await self.resolver.succeed()

        state = self.store.state
        logger.debug(
            f"Auth state initialized (authenticated={state.is_authenticated}, "
            f"profile requested={result.requested})"
        )
        return state

    def login(self, caller_state: str = "") -> None:
        """Navigate to the authorization server's login page."""
        state = self.state_encoder.build_state(caller_state)
        url = self.url_builder.login_url(state)
        self._start_flow(state.verifier, caller_state, url)

    def register(self, caller_state: str = "") -> None:
        """Navigate to the authorization server's registration page."""
        state = self.state_encoder.build_state(caller_state)
        url = self.url_builder.register_url(state)
        self._start_flow(state.verifier, caller_state, url)

    async def logout(self) -> None:
        """Sign out on the server (best effort) and navigate to logout."""
        sign_out_url = self.config.endpoint(self.config.sign_out_path)
        try:
            await self.requester.request(
                sign_out_url, method="POST", credentials="include"
            )
        except Exception as e:
            logger.warning(f"Sign-out request failed, continuing logout: {e!r}")

        self.cookies.remove(self.config.user_cookie)
        self.store.update(user={})

        logger.info("Navigating to logout")
        self.navigator.navigate(self.url_builder.logout_url())

    async def close(self) -> None:
        """Close the HTTP collaborator if it holds connections."""
        if isinstance(self.requester, HttpxRequester):
            await self.requester.close()

    def _start_flow(self, verifier: str, caller_state: str, url: str) -> None:
        self.state_encoder.persist_pending_flow(verifier, caller_state)
        logger.info(
            f"Redirecting to authorization server for client {self.config.client_id}"
        )
        self.navigator.navigate(url)
