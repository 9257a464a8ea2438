"""Exception hierarchy for the authorization-code redirect flow.

Cookie and session-derived problems are recovered locally and never cross the
public operation boundary; the types below cover the failures that do.
"""

from __future__ import annotations


class AuthFlowError(Exception):
    """Base exception for all redirect flow errors."""

    pass


class ConfigurationError(AuthFlowError, ValueError):
    """Raised when the provider configuration is unusable.

    Subclasses ``ValueError`` so pydantic reports it as a ``ValidationError``.
    """

    pass


class PKCEError(AuthFlowError):
    """Raised when PKCE material or random tokens cannot be generated.

    The entropy or hash source failing is fatal; callers should not retry.
    """

    pass


class CookieError(AuthFlowError):
    """Raised when a cookie write is given an invalid name or value."""

    pass
