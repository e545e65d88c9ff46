"""
Fallback Executor
=================
Runs a request against a selected provider, records the outcome in the
performance ledger, and on failure walks the priority list once.

Fallback does not re-score candidates: it is a single linear
pass over a static priority order, starting just after the failed provider.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from .config import RouterConfig
from .exceptions import AllProvidersFailedError, ProviderCallError, ProviderNotFoundError
from .ledger import PerformanceLedger
from .providers import APIResponse, describe_error
from .registry import ProviderRegistry
from .request import RoutingRequest

logger = logging.getLogger(__name__)


def ensure_success(response: Any) -> Any:
    """Turn an unsuccessful APIResponse into an exception"""
    if isinstance(response, APIResponse) and not response.success:
        raise ProviderCallError(response)
    return response


class FallbackExecutor:
    """Executes provider calls with ledger bookkeeping and fallback traversal"""

    def __init__(
        self,
        registry: ProviderRegistry,
        ledger: PerformanceLedger,
        config: RouterConfig,
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.config = config

    async def timed_call(
        self, provider_name: str, call: Callable[[], Awaitable[Any]]
    ) -> Any:
        """
        Await a provider operation and record the outcome.

        Success adds the elapsed time to the ledger, failure counts an
        attempt only, and cancellation is tracked separately before being
        re-raised. The ledger lock is never held while awaiting.
        """
        timeout = self.config.timeout_for(provider_name)
        start_time = time.perf_counter()

        try:
            if timeout is not None:
                response = await asyncio.wait_for(call(), timeout=timeout)
            else:
                response = await call()
            ensure_success(response)
        except asyncio.CancelledError:
            self.ledger.record_cancellation(provider_name)
            raise
        except Exception:
            self.ledger.record_failure(provider_name)
            raise

        latency_ms = (time.perf_counter() - start_time) * 1000
        self.ledger.record_success(provider_name, latency_ms)
        return response

    def _chat_call(
        self, provider_name: str, request: RoutingRequest
    ) -> Callable[[], Awaitable[Any]]:
        provider = self.registry.get(provider_name)
        if provider is None:
            raise ProviderNotFoundError(provider_name)
        return functools.partial(provider.chat, request.messages, request.options)

    async def execute(self, provider_name: str, request: RoutingRequest) -> Any:
        """Run chat against one provider, without fallback"""
        return await self.timed_call(
            provider_name, self._chat_call(provider_name, request)
        )

    async def execute_with_fallback(
        self, provider_name: str, request: RoutingRequest
    ) -> Any:
        call = self._chat_call(provider_name, request)

        try:
            return await self.timed_call(provider_name, call)
        except Exception as e:
            logger.error(f"Primary provider {provider_name} failed: {describe_error(e)}")

            if not self.config.fallback_enabled:
                raise

            return await self._fallback_to_next_provider(provider_name, request, e)

    async def _fallback_to_next_provider(
        self,
        failed_provider: str,
        request: RoutingRequest,
        error: Exception,
    ) -> Any:
        priority_order = self.config.fallback_order()
        try:
            start_index = priority_order.index(failed_provider) + 1
        except ValueError:
            start_index = 0

        attempted = [failed_provider]
        for next_provider in priority_order[start_index:]:
            if next_provider == failed_provider or next_provider not in self.registry:
                continue

            if not await self.registry.probe(next_provider):
                logger.info(f"Skipping unreachable fallback provider {next_provider}")
                continue

            logger.info(f"Falling back to {next_provider}")
            attempted.append(next_provider)
            try:
                return await self.execute(next_provider, request)
            except Exception as e:
                logger.warning(
                    f"Fallback provider {next_provider} failed: {describe_error(e)}"
                )

        raise AllProvidersFailedError(
            attempted=attempted, provider=failed_provider
        ) from error
