"""
Adaptive Router - Multi-Backend Request Router
==============================================

Routes chat and vision requests to the most suitable backend provider,
scoring candidates on task fit, capability, cost, privacy and observed
performance, with failover across a priority-ordered provider list.

Example Usage:
    >>> import asyncio
    >>> from adaptive_router import AdaptiveRouter, RouterConfig, RoutingRequest
    >>>
    >>> async def main():
    ...     config = RouterConfig(
    ...         providers=[ollama_provider, openai_provider],
    ...         privacy_first=True,
    ...     )
    ...     router = await AdaptiveRouter.create(config)
    ...     response = await router.route(
    ...         RoutingRequest(messages=[{"role": "user", "content": "Fix my function"}])
    ...     )
    ...     print(response.content)
    >>>
    >>> asyncio.run(main())
"""

__version__ = "1.0.0"

from .classifier import TaskClassifier, resolve_task_type
from .config import RouterConfig, load_user_config, setup_logging
from .exceptions import (
    AllProvidersFailedError,
    ConfigurationError,
    ErrorKind,
    InvalidRequestError,
    NoProvidersAvailableError,
    NoVisionProviderError,
    ProviderCallError,
    ProviderNotFoundError,
    ProviderUnavailableError,
    RouterError,
)
from .fallback import FallbackExecutor
from .ledger import PerformanceLedger, PerformanceRecord
from .providers import (
    APIResponse,
    BaseProvider,
    ModelDescriptor,
    ProviderType,
    has_code_capability,
    has_vision_capability,
)
from .registry import ProviderRegistry
from .request import RoutingRequest, TaskType, estimate_token_count
from .router import AdaptiveRouter
from .scoring import ScoreResult, ScoringEngine

__all__ = [
    # Version
    "__version__",

    # Router
    "AdaptiveRouter",
    "RouterConfig",
    "RoutingRequest",
    "TaskType",
    "TaskClassifier",
    "resolve_task_type",
    "estimate_token_count",
    "ScoringEngine",
    "ScoreResult",
    "FallbackExecutor",
    "ProviderRegistry",
    "PerformanceLedger",
    "PerformanceRecord",

    # Provider contract
    "BaseProvider",
    "ProviderType",
    "ModelDescriptor",
    "APIResponse",
    "has_code_capability",
    "has_vision_capability",

    # Configuration
    "load_user_config",
    "setup_logging",

    # Errors
    "RouterError",
    "ErrorKind",
    "NoProvidersAvailableError",
    "ProviderNotFoundError",
    "ProviderUnavailableError",
    "NoVisionProviderError",
    "AllProvidersFailedError",
    "InvalidRequestError",
    "ConfigurationError",
    "ProviderCallError",
]
