"""Flow models for redirect navigation, pending callbacks and auth state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlencode


@dataclass(frozen=True)
class ProviderRedirect:
    """A navigation target on the authorization server.

    ``params`` keeps insertion order so every URL of the same kind is encoded
    identically.
    """

    endpoint: str
    params: dict[str, str]

    def build_url(self) -> str:
        """Build the complete URL with a form-encoded query string."""
        return f"{self.endpoint}?{urlencode(self.params)}"


@dataclass(frozen=True)
class PendingFlow:
    """Correlation data persisted across the provider redirect."""

    correlation_value: str
    caller_state: str


class ResolutionState(str, Enum):
    IDLE = "idle"
    NO_PENDING_FLOW = "no_pending_flow"
    RESOLVING = "resolving"
    RESOLVED_SUCCESS = "resolved_success"
    RESOLVED_FAILURE = "resolved_failure"
    DONE = "done"


@dataclass(frozen=True)
class AuthState:
    """Snapshot of the user's authentication state.

    ``is_authenticated`` is derived from ``user`` and cannot be set on its own.
    """

    is_loading: bool = True
    user: dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user)


@dataclass(frozen=True)
class UserFetchResult:
    """Outcome of populating the current user.

    ``error`` holds the raw failure value when the profile request failed.
    """

    user: dict[str, Any] = field(default_factory=dict)
    requested: bool = False
    failed: bool = False
    error: Any = None

    def is_error(self) -> bool:
        return self.failed
