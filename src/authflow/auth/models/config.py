"""Provider configuration for the redirect flow."""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from authflow.auth.models.errors import ConfigurationError


def _noop(*args: Any) -> None:
    return None


class AuthConfig(BaseModel):
    """Immutable per-provider settings supplied once at construction.

    Endpoint paths and cookie names default to the hosted login pages of the
    authorization server; override them when the server is mounted elsewhere.
    """

    model_config = ConfigDict(frozen=True)

    server_url: str
    client_id: str
    redirect_uri: str
    post_logout_redirect_uri: str
    scope: str = "openid offline_access"
    me_path: str = "/app/me"

    login_path: str = "/app/login"
    register_path: str = "/app/register"
    logout_path: str = "/app/logout"
    sign_out_path: str = "/app/signout"

    # Cookie names shared with the authorization server
    id_token_cookie: str = "app.idt"
    user_cookie: str = "user"
    last_state_cookie: str = "lastState"

    use_pkce: bool = False
    timeout: float = Field(default=30.0, gt=0)

    on_redirect_success: Callable[[str], Any] = _noop
    on_redirect_fail: Callable[[Any], Any] = _noop

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        if not v.strip():
            raise ConfigurationError("server_url must not be empty")
        return v.rstrip("/")

    @field_validator("client_id")
    @classmethod
    def validate_client_id(cls, v: str) -> str:
        if not v:
            raise ConfigurationError("client_id must not be empty")
        return v

    @field_validator("on_redirect_success", "on_redirect_fail", mode="before")
    @classmethod
    def default_callbacks(cls, v: Any) -> Any:
        # Explicit None means "not supplied"
        return _noop if v is None else v

    def endpoint(self, path: str) -> str:
        """Join ``server_url`` with an endpoint path."""
        return f"{self.server_url}{path}"
