"""
Provider Contract
=================
Defines the interface every backend provider must implement to be routed to.

Providers own their transport (HTTP calls, authentication, streaming);
the router only sees this contract:

- initialize() / list_models() at registry start-up
- validate_connection() before every use
- chat(messages, options) for completion requests
- vision(image, instruction, options) when vision-capable (optional)
- estimate_cost(tokens) when pricing is known (optional)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from .validation import sanitize_for_logging


class ProviderType(Enum):
    """Where a provider executes requests"""

    LOCAL = "local"
    CLOUD = "cloud"


@dataclass(frozen=True)
class ModelDescriptor:
    """Immutable description of a model exposed by a provider"""

    id: str
    context_length: int
    capabilities: tuple[str, ...] = ()
    name: str | None = None

    def has_capability(self, capability: str) -> bool:
        return capability.lower() in (c.lower() for c in self.capabilities)


@dataclass
class APIResponse:
    """Standardized response container returned by providers"""

    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0
    success: bool = True
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class BaseProvider(ABC):
    """
    Abstract base class for backend providers.

    Subclasses set the capability flags as class attributes and implement
    the abstract coroutines. ``vision`` and ``estimate_cost`` are optional:
    a provider only counts as exposing them when it overrides them.
    """

    provider_type: ProviderType = ProviderType.CLOUD
    supports_vision: bool = False
    supports_code: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def initialize(self) -> bool | None:
        """Prepare the provider. Returning False marks initialization as failed."""
        pass

    @abstractmethod
    async def list_models(self) -> list[ModelDescriptor]:
        """List models currently served by this provider"""
        pass

    @abstractmethod
    async def validate_connection(self) -> bool:
        """Connectivity probe"""
        pass

    @abstractmethod
    async def chat(self, messages: list[dict[str, Any]], options: dict[str, Any]) -> Any:
        """Send a chat completion request"""
        pass

    async def vision(
        self, image: bytes | str, instruction: str, options: dict[str, Any]
    ) -> Any:
        raise NotImplementedError(f"{self.name} does not implement vision")

    def estimate_cost(self, tokens: int) -> float:
        raise NotImplementedError(f"{self.name} does not implement cost estimation")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, type={self.provider_type.value})"


def _overrides(provider: BaseProvider, method: str) -> bool:
    return getattr(type(provider), method, None) is not getattr(BaseProvider, method)


def has_vision_capability(provider: BaseProvider) -> bool:
    """Vision flag set and a vision operation actually implemented"""
    return provider.supports_vision and _overrides(provider, "vision")


def has_code_capability(provider: BaseProvider) -> bool:
    return provider.supports_code


def has_cost_estimate(provider: BaseProvider) -> bool:
    return _overrides(provider, "estimate_cost")


def format_http_error(exc: httpx.HTTPStatusError) -> str:
    """Format detailed error message from HTTP exception."""
    response = exc.response
    status_code = response.status_code
    message = response.reason_phrase or str(exc)
    retry_after = response.headers.get("Retry-After")

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error_info = payload.get("error")
        if isinstance(error_info, dict):
            error_message = error_info.get("message")
            if error_message:
                message = error_message
        elif isinstance(error_info, str) and error_info:
            message = error_info

    if retry_after:
        message = f"{message} Retry-After: {retry_after}."

    return f"HTTP {status_code}: {message}"


def describe_error(exc: BaseException) -> str:
    """Render a provider failure for logs, with credentials redacted."""
    if isinstance(exc, httpx.HTTPStatusError):
        text = format_http_error(exc)
    elif isinstance(exc, httpx.TimeoutException):
        text = f"timeout: {exc}"
    elif isinstance(exc, httpx.TransportError):
        text = f"connection error: {exc}"
    else:
        text = str(exc) or type(exc).__name__
    return sanitize_for_logging(text, max_len=300)
