"""
Exception hierarchy for the gateway.

Policy and consent errors are meant to reach the caller (the HTTP layer
turns them into 4xx responses).  Redaction errors only surface when the
middleware runs fail-closed.
"""

from __future__ import annotations
from enum import Enum


class GatewayError(Exception):
    """Base exception for gateway operations."""


class ForbiddenUseCaseError(GatewayError):
    """Raised when a use case is forbidden or not in the allowlist."""

    def __init__(self, message: str, use_case: str):
        super().__init__(message)
        self.use_case = use_case


class ConsentFailure(str, Enum):
    MISSING_CONTEXT = "missing_context"
    NOT_FOUND = "not_found"
    DENIED = "denied"
    REVOKED = "revoked"


class ConsentError(GatewayError):
    """Raised when the user has not (or no longer) consented to a purpose."""

    def __init__(self, message: str, reason: ConsentFailure):
        super().__init__(message)
        self.reason = reason


class RedactionError(GatewayError):
    """Raised when redaction fails and the middleware is configured fail-closed."""


class ProviderError(GatewayError):
    """Raised by a provider when it cannot handle the request."""


class ConfigurationError(GatewayError):
    """Raised when configuration is invalid."""
