"""
Provider Registry
=================
Holds the configured providers and a cache of the models each one serves.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Mapping

from .providers import BaseProvider, ModelDescriptor, describe_error

logger = logging.getLogger(__name__)


class ProviderInitializationError(Exception):
    """Raised internally when a provider reports a failed initialize()"""


class ProviderRegistry:
    """
    Registered providers in registration order, plus per-provider model cache.

    A provider that fails initialization stays registered (it can still be
    probed and selected) but has no cached models, i.e. no known capacity.
    """

    def __init__(self, providers: Mapping[str, BaseProvider]) -> None:
        self._providers: dict[str, BaseProvider] = dict(providers)
        self._model_cache: dict[str, list[ModelDescriptor]] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def get(self, name: str) -> BaseProvider | None:
        return self._providers.get(name)

    def names(self) -> list[str]:
        return list(self._providers)

    def items(self) -> list[tuple[str, BaseProvider]]:
        return list(self._providers.items())

    def models_for(self, name: str) -> list[ModelDescriptor]:
        return list(self._model_cache.get(name, []))

    def is_initialized(self, name: str) -> bool:
        return name in self._model_cache

    def max_context_length(self, name: str) -> int | None:
        models = self._model_cache.get(name)
        if not models:
            return None
        return max(model.context_length for model in models)

    async def _load_models(self, name: str, provider: BaseProvider) -> list[ModelDescriptor]:
        if await provider.initialize() is False:
            raise ProviderInitializationError(f"{name} reported failed initialization")
        return list(await provider.list_models())

    async def initialize(self) -> None:
        """
        Initialize every provider and cache its models.

        Failures are logged and leave that provider without a model cache;
        they never abort initialization of the others.
        """
        names = self.names()
        results = await asyncio.gather(
            *(self._load_models(name, self._providers[name]) for name in names),
            return_exceptions=True,
        )

        for name, result in zip(names, results, strict=True):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                self._model_cache.pop(name, None)
                logger.warning(
                    f"Failed to initialize provider {name}: {describe_error(result)}"
                )
                continue

            self._model_cache[name] = result
            logger.info(f"Provider {name} ready with {len(result)} model(s)")

    async def refresh(self) -> None:
        """Re-run initialization to pick up newly available models"""
        await self.initialize()

    async def probe(self, name: str) -> bool:
        """Connectivity probe; a probe that raises counts as unreachable"""
        provider = self._providers.get(name)
        if provider is None:
            return False

        try:
            return bool(await provider.validate_connection())
        except Exception as e:
            logger.warning(f"Connectivity probe failed for {name}: {describe_error(e)}")
            return False

    async def reachable(self, names: list[str] | None = None) -> list[str]:
        """Probe providers concurrently, returning the reachable ones in order"""
        candidates = self.names() if names is None else names
        results = await asyncio.gather(*(self.probe(name) for name in candidates))
        reachable = [name for name, ok in zip(candidates, results, strict=True) if ok]
        logger.debug(f"Reachable providers: {reachable}")
        return reachable
