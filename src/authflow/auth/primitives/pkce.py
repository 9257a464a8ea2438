"""PKCE (Proof Key for Code Exchange) and random token primitives.

Implements the RFC 7636 S256 transformation and the URL-safe random strings
used both as PKCE verifiers and as the anti-forgery prefix of ``state``.

Nothing in this module logs verifiers, challenges or tokens.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from authflow.auth.models.errors import PKCEError
from authflow.auth.models.security import PKCEParameters

# 45 random bytes encode to exactly 60 base64url characters
STATE_TOKEN_BYTES = 45
VERIFIER_BYTES = 64


def random_string(byte_length: int) -> str:
    """Return ``byte_length`` secure random bytes, base64url-encoded.

    Args:
        byte_length: Number of random bytes to draw

    Returns:
        URL-safe string without ``=`` padding

    Raises:
        PKCEError: If the entropy source is unavailable
    """
    if byte_length <= 0:
        raise ValueError("byte_length must be positive")
    try:
        raw = secrets.token_bytes(byte_length)
    except Exception as e:
        raise PKCEError(f"Entropy source unavailable: {e}") from e
    return _b64url(raw)


def derive_challenge(verifier: str) -> str:
    """Generate code challenge from code verifier using S256 method.

    RFC 7636 Section 4.2: For S256, the code challenge is:
    BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))

    Raises:
        PKCEError: If the verifier cannot be hashed
    """
    try:
        digest = hashlib.sha256(verifier.encode("ascii")).digest()
    except Exception as e:
        raise PKCEError(f"Failed to derive code challenge: {e}") from e
    return _b64url(digest)


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


class PKCEManager:
    """Generates PKCE parameters for authorization code flows.

    Each call produces a fresh verifier (86 characters, within the 43-128
    range RFC 7636 allows) and its S256 challenge.
    """

    def __init__(self, verifier_bytes: int = VERIFIER_BYTES):
        self.verifier_bytes = verifier_bytes

    def generate_parameters(self) -> PKCEParameters:
        """Generate new PKCE parameters for an authorization flow.

        Returns:
            PKCEParameters: Immutable parameters for the authorization flow

        Raises:
            PKCEError: If parameter generation fails
        """
        code_verifier = random_string(self.verifier_bytes)
        try:
            return PKCEParameters(
                code_verifier=code_verifier,
                code_challenge=derive_challenge(code_verifier),
                code_challenge_method="S256",
            )
        except ValueError as e:
            raise PKCEError(f"Failed to generate PKCE parameters: {e}") from e
