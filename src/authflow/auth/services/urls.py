"""Authorization server URL construction.

Builds the login, register and logout navigation targets. Query strings are
form-encoded (space as ``+``) with a fixed parameter order.
"""

from __future__ import annotations

import logging

from authflow.auth.models.config import AuthConfig
from authflow.auth.models.flow import ProviderRedirect
from authflow.auth.models.security import StateParameter

logger = logging.getLogger(__name__)


class AuthUrlBuilder:
    def __init__(self, config: AuthConfig):
        self.config = config

    def login_url(self, state: StateParameter) -> str:
        return self._authorization_redirect(self.config.login_path, state).build_url()

    def register_url(self, state: StateParameter) -> str:
        return self._authorization_redirect(
            self.config.register_path, state
        ).build_url()

    def logout_url(self) -> str:
        redirect = ProviderRedirect(
            endpoint=self.config.endpoint(self.config.logout_path),
            params={
                "client_id": self.config.client_id,
                "post_logout_redirect_uri": self.config.post_logout_redirect_uri,
            },
        )
        return redirect.build_url()

    def _authorization_redirect(
        self, path: str, state: StateParameter
    ) -> ProviderRedirect:
        params = {
            "client_id": self.config.client_id,
            "scope": self.config.scope,
            "redirect_uri": self.config.redirect_uri,
            "state": state.state_param,
        }

        if self.config.use_pkce:
            params["code_challenge"] = state.pkce.code_challenge
            params["code_challenge_method"] = state.pkce.code_challenge_method

        logger.debug(
            f"Built authorization redirect to {path} for client {self.config.client_id}"
        )
        return ProviderRedirect(endpoint=self.config.endpoint(path), params=params)
