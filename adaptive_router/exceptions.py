"""
Router Exceptions
=================

Every terminal routing failure is a RouterError carrying a kind and a
message, so callers can decide whether to retry, reconfigure or abort.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .providers import APIResponse


class ErrorKind(Enum):
    """Kinds of terminal routing errors"""

    NO_PROVIDERS = "no_providers"
    PROVIDER_NOT_FOUND = "provider_not_found"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    NO_VISION_PROVIDER = "no_vision_provider"
    ALL_PROVIDERS_FAILED = "all_providers_failed"
    INVALID_REQUEST = "invalid_request"
    CONFIGURATION = "configuration"
    PROVIDER_CALL_FAILED = "provider_call_failed"


class RouterError(Exception):
    """
    Base exception for all routing errors.

    Attributes:
        message: Human-readable description
        kind: ErrorKind used by callers to branch on the failure
        provider: Provider name involved, if any
        retryable: True when a later retry may succeed without reconfiguration
        details: Extra structured context for logging
    """

    kind: ErrorKind = ErrorKind.NO_PROVIDERS
    retryable: bool = False

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.provider = provider
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for telemetry collaborators."""
        return {
            "error": self.kind.value,
            "message": self.message,
            "provider": self.provider,
            "retryable": self.retryable,
            "details": self.details,
        }


class NoProvidersAvailableError(RouterError):
    """No provider passed its connectivity probe during scoring."""

    kind = ErrorKind.NO_PROVIDERS

    def __init__(self, message: str = "No available providers", **kwargs: Any):
        super().__init__(message, **kwargs)


class ProviderNotFoundError(RouterError):
    """Named provider is not registered. Configuration error, never retried."""

    kind = ErrorKind.PROVIDER_NOT_FOUND

    def __init__(self, provider: str, **kwargs: Any):
        super().__init__(f"Provider {provider} not found", provider=provider, **kwargs)


class ProviderUnavailableError(RouterError):
    """Preferred provider is registered but failed its connectivity probe."""

    kind = ErrorKind.PROVIDER_UNAVAILABLE

    def __init__(self, provider: str, **kwargs: Any):
        super().__init__(
            f"Provider {provider} not available", provider=provider, **kwargs
        )


class NoVisionProviderError(RouterError):
    """Vision routing exhausted its candidate list."""

    kind = ErrorKind.NO_VISION_PROVIDER

    def __init__(
        self, message: str = "No vision-capable provider available", **kwargs: Any
    ):
        super().__init__(message, **kwargs)


class AllProvidersFailedError(RouterError):
    """Fallback traversal exhausted the priority list."""

    kind = ErrorKind.ALL_PROVIDERS_FAILED
    retryable = True

    def __init__(
        self,
        attempted: list[str] | None = None,
        provider: str | None = None,
        **kwargs: Any,
    ):
        self.attempted = list(attempted or [])
        super().__init__(
            "All providers failed",
            provider=provider,
            details={"attempted": self.attempted},
            **kwargs,
        )


class InvalidRequestError(RouterError, ValueError):
    """Request is malformed and cannot be routed."""

    kind = ErrorKind.INVALID_REQUEST


class ConfigurationError(RouterError):
    """Router configuration violates an invariant."""

    kind = ErrorKind.CONFIGURATION


class ProviderCallError(RouterError):
    """A provider returned an unsuccessful APIResponse instead of raising."""

    kind = ErrorKind.PROVIDER_CALL_FAILED

    def __init__(self, response: APIResponse):
        self.response = response
        super().__init__(
            response.error or "Provider returned an unsuccessful response",
            provider=response.provider or None,
        )
