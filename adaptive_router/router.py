"""
Adaptive Router
===============
Top-level entry point that decides which provider serves a request.

Decision order:
1. Explicit ``preferred_provider``: probe and call it directly (no scoring,
   no fallback; an explicit preference is a hard constraint)
2. Image-bearing request: vision routing over vision-capable providers
3. Otherwise: classify the task, score every reachable provider and run
   the winner through the fallback executor
"""

from __future__ import annotations

import functools
import logging
from typing import Any

from .classifier import resolve_task_type
from .config import RouterConfig
from .exceptions import (
    InvalidRequestError,
    NoProvidersAvailableError,
    NoVisionProviderError,
    ProviderNotFoundError,
    ProviderUnavailableError,
)
from .fallback import FallbackExecutor
from .ledger import PerformanceLedger
from .providers import describe_error, has_vision_capability
from .registry import ProviderRegistry
from .request import RoutingRequest, TaskType, content_text
from .scoring import ScoreResult, ScoringEngine
from .validation import InputValidator

logger = logging.getLogger(__name__)

# Priority order for vision tasks
VISION_PRIORITY_LOCAL_FIRST = ("ollama", "vllm", "openai", "google", "anthropic")
VISION_PRIORITY_CLOUD_FIRST = ("openai", "google", "anthropic", "ollama", "vllm")


class AdaptiveRouter:
    """
    Routes requests to the most suitable backend provider.

    The router owns its registry, scoring engine, fallback executor and
    performance ledger. Providers are supplied through RouterConfig and are
    never created or disposed of here.

    Call ``initialize()`` (or build with ``await AdaptiveRouter.create(...)``)
    before routing so the model cache is populated; without it every
    provider is treated as having no known context capacity.
    """

    def __init__(
        self,
        config: RouterConfig,
        ledger: PerformanceLedger | None = None,
    ) -> None:
        self.ledger = ledger or PerformanceLedger()
        self._apply_config(config)

    def _apply_config(self, config: RouterConfig) -> None:
        self.config = config
        self.registry = ProviderRegistry(config.providers)
        self.scoring = ScoringEngine(self.registry, self.ledger, config)
        self.executor = FallbackExecutor(self.registry, self.ledger, config)

    @classmethod
    async def create(cls, config: RouterConfig) -> AdaptiveRouter:
        router = cls(config)
        await router.initialize()
        return router

    async def initialize(self) -> None:
        await self.registry.initialize()

    async def refresh_providers(self) -> None:
        """Re-list models on every provider"""
        await self.registry.refresh()

    async def reconfigure(self, config: RouterConfig) -> None:
        """
        Replace providers and policy wholesale.

        The ledger is kept: its records are keyed by provider name and stay
        meaningful for providers present in both configurations.
        """
        logger.info(f"Reconfiguring router with providers: {list(config.providers)}")
        self._apply_config(config)
        await self.registry.initialize()

    async def route(self, request: RoutingRequest) -> Any:
        """Route a request to the optimal provider and return its response"""
        is_valid, error = InputValidator.validate_messages(request.messages)
        if not is_valid:
            raise InvalidRequestError(error)

        # Check for explicit provider preference
        if request.preferred_provider:
            return await self._route_to_provider(request.preferred_provider, request)

        if request.is_image_bearing:
            return await self._route_to_vision_provider(request)

        task_type = resolve_task_type(request)
        logger.debug(f"Task type: {task_type.value}")

        selected = await self.select_optimal_provider(request, task_type)
        return await self.executor.execute_with_fallback(selected.provider, request)

    async def score_providers(
        self, request: RoutingRequest, task_type: TaskType | None = None
    ) -> list[ScoreResult]:
        """Scores for every reachable provider, best first"""
        if task_type is None:
            task_type = resolve_task_type(request)
        reachable = await self.registry.reachable()
        return self.scoring.rank(reachable, request, task_type)

    async def select_optimal_provider(
        self, request: RoutingRequest, task_type: TaskType
    ) -> ScoreResult:
        scores = await self.score_providers(request, task_type)
        if not scores:
            raise NoProvidersAvailableError()

        selected = scores[0]
        logger.info(f"Selected {selected.provider} (score: {selected.score})")
        logger.info(f"Reasons: {', '.join(selected.reasons)}")
        return selected

    async def _route_to_provider(self, provider_name: str, request: RoutingRequest) -> Any:
        """
        Call an explicitly named provider, with no scoring and no fallback.

        The provider's response is returned as-is, except that an
        ``APIResponse`` with ``success=False`` is raised as
        ``ProviderCallError`` (the response stays available on
        ``error.response``) so every path reports failures the same way.
        """
        if provider_name not in self.registry:
            raise ProviderNotFoundError(provider_name)

        if not await self.registry.probe(provider_name):
            raise ProviderUnavailableError(provider_name)

        logger.info(f"Routing to preferred provider {provider_name}")
        return await self.executor.execute(provider_name, request)

    def vision_candidates(self) -> list[str]:
        """
        Vision-capable providers in routing order.

        The fixed priority list comes first (local-first when privacy-first),
        then any other registered vision provider in registration order.
        """
        priority = (
            VISION_PRIORITY_LOCAL_FIRST
            if self.config.privacy_first
            else VISION_PRIORITY_CLOUD_FIRST
        )
        ordered = [name for name in priority if name in self.registry]
        ordered += [name for name in self.registry.names() if name not in priority]

        candidates = []
        for name in ordered:
            provider = self.registry.get(name)
            if provider is not None and has_vision_capability(provider):
                candidates.append(name)
        return candidates

    async def _route_to_vision_provider(self, request: RoutingRequest) -> Any:
        image = request.image_payload
        if image is None:
            raise InvalidRequestError("Image data required for vision task")

        last_message = request.last_message or {}
        instruction = content_text(last_message.get("content"))
        options = {**request.options, "output_format": "json"}

        for provider_name in self.vision_candidates():
            if not await self.registry.probe(provider_name):
                continue

            provider = self.registry.get(provider_name)
            logger.info(f"Routing vision task to {provider_name}")
            try:
                return await self.executor.timed_call(
                    provider_name,
                    functools.partial(provider.vision, image, instruction, options),
                )
            except Exception as e:
                logger.warning(
                    f"Vision provider {provider_name} failed: {describe_error(e)}"
                )

        raise NoVisionProviderError()

    def get_statistics(self) -> dict[str, Any]:
        return self.ledger.statistics()

    def clear_metrics(self) -> None:
        self.ledger.clear()
