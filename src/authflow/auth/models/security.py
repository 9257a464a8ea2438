"""Security-related models for the redirect flow.

Contains PKCE parameters and the encoded OAuth ``state`` value that carries
the caller's opaque state through the authorization server.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PKCEParameters:
    """PKCE (Proof Key for Code Exchange) parameters (RFC 7636).

    Generated fresh for every login or register navigation. The verifier never
    leaves the client in the authorization request.
    """

    code_verifier: str = field()
    code_challenge: str = field()
    code_challenge_method: str = field(default="S256")

    def __post_init__(self) -> None:
        """Validate PKCE parameters meet RFC 7636 requirements."""
        if not (43 <= len(self.code_verifier) <= 128):
            raise ValueError("code_verifier must be 43-128 characters")
        if not (43 <= len(self.code_challenge) <= 128):
            raise ValueError("code_challenge must be 43-128 characters")
        if self.code_challenge_method != "S256":
            raise ValueError("Only S256 code challenge method is supported")


@dataclass(frozen=True)
class StateParameter:
    """An encoded ``state`` value and the PKCE material generated with it.

    ``state_param`` is ``<anti-forgery token>:<caller state>``.
    """

    state_param: str
    token: str
    caller_state: str
    pkce: PKCEParameters

    @property
    def verifier(self) -> str:
        return self.pkce.code_verifier
