"""
Scoring Engine
==============
Scores a reachable provider's suitability for a request.

Adjustments are additive on top of BASE_SCORE:

1. Task fit (at most one task block applies)
2. Historical performance (latency and reliability)
3. Privacy (local providers when privacy-first)
4. Cost (local or cheap providers when cost-optimizing)
5. Context capacity (penalty when no cached model fits the request)

Every adjustment records a reason so routing decisions can be explained.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import RouterConfig
from .ledger import PerformanceLedger
from .providers import (
    BaseProvider,
    ModelDescriptor,
    ProviderType,
    has_code_capability,
    has_cost_estimate,
    has_vision_capability,
)
from .registry import ProviderRegistry
from .request import RoutingRequest, TaskType, estimate_token_count

logger = logging.getLogger(__name__)

BASE_SCORE = 50

LARGE_CONTEXT_THRESHOLD = 32000
LARGE_CONTEXT_BONUS = 30
CODE_CAPABILITY_BONUS = 20
VISION_CAPABILITY_BONUS = 50
PREFERRED_VISION_BONUS = 10
MULTILINGUAL_BONUS = 40
CLOUD_CREATIVE_BONUS = 20
LOCAL_PREFERENCE_BONUS = 30

LOW_LATENCY_THRESHOLD_MS = 1000
LOW_LATENCY_BONUS = 15
HIGH_RELIABILITY_THRESHOLD = 0.95
HIGH_RELIABILITY_BONUS = 10

PRIVACY_BONUS = 25
LOCAL_COST_BONUS = 20
COST_ESTIMATE_TOKENS = 1000
LOW_COST_THRESHOLD_USD = 0.01
LOW_COST_BONUS = 10

INSUFFICIENT_CONTEXT_PENALTY = 30

MULTILINGUAL_CAPABILITY = "multilingual"
# Model families known for strong multilingual output
MULTILINGUAL_MODEL_FAMILIES = ("qwen",)

CODE_TASKS = {TaskType.CODE_GENERATION, TaskType.CODE_REVIEW}


@dataclass
class ScoreResult:
    """Score and justification for one provider"""

    provider: str
    score: int
    reasons: list[str] = field(default_factory=list)
    model: str = "unknown"


def is_multilingual(model: ModelDescriptor) -> bool:
    if model.has_capability(MULTILINGUAL_CAPABILITY):
        return True
    model_id = model.id.lower()
    return any(family in model_id for family in MULTILINGUAL_MODEL_FAMILIES)


class ScoringEngine:
    """
    Pure scoring over the registry's model cache and a ledger snapshot.

    Nothing here mutates shared state; for a fixed ledger state, request and
    config, ``score`` always returns the same result.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        ledger: PerformanceLedger,
        config: RouterConfig,
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.config = config

    def score(
        self, provider_name: str, request: RoutingRequest, task_type: TaskType
    ) -> ScoreResult:
        provider = self.registry.get(provider_name)
        if provider is None:
            raise KeyError(provider_name)

        models = self.registry.models_for(provider_name)
        result = ScoreResult(
            provider=provider_name,
            score=BASE_SCORE,
            model=models[0].id if models else "unknown",
        )

        self._score_task(result, provider, models, request, task_type)
        self._score_performance(result)
        self._score_privacy(result, provider)
        self._score_cost(result, provider)
        self._score_context(result, models, request)

        return result

    @staticmethod
    def _adjust(result: ScoreResult, points: int, reason: str) -> None:
        result.score += points
        result.reasons.append(reason)

    def _score_task(
        self,
        result: ScoreResult,
        provider: BaseProvider,
        models: list[ModelDescriptor],
        request: RoutingRequest,
        task_type: TaskType,
    ) -> None:
        if task_type in CODE_TASKS:
            if any(m.context_length >= LARGE_CONTEXT_THRESHOLD for m in models):
                self._adjust(result, LARGE_CONTEXT_BONUS, "Optimal for code tasks")
            if has_code_capability(provider):
                self._adjust(
                    result, CODE_CAPABILITY_BONUS, "Has code generation capability"
                )

        elif task_type == TaskType.VISION_ANALYSIS:
            if has_vision_capability(provider):
                self._adjust(result, VISION_CAPABILITY_BONUS, "Vision capable")
                if result.provider == self.config.preferred_vision_provider:
                    self._adjust(
                        result, PREFERRED_VISION_BONUS, "Optimized vision model"
                    )

        elif task_type == TaskType.TRANSLATION:
            if any(is_multilingual(m) for m in models):
                self._adjust(result, MULTILINGUAL_BONUS, "Multilingual optimized")

        elif task_type == TaskType.CREATIVE_WRITING:
            if provider.provider_type == ProviderType.CLOUD:
                self._adjust(
                    result, CLOUD_CREATIVE_BONUS, "Cloud models better for creativity"
                )

        elif request.prefer_local and provider.provider_type == ProviderType.LOCAL:
            self._adjust(result, LOCAL_PREFERENCE_BONUS, "Local preference")

    def _score_performance(self, result: ScoreResult) -> None:
        record = self.ledger.get(result.provider)
        if record is None or not record.has_history:
            return

        average = record.average_latency
        if average is not None and average < LOW_LATENCY_THRESHOLD_MS:
            self._adjust(result, LOW_LATENCY_BONUS, "Low latency")
        if record.success_rate > HIGH_RELIABILITY_THRESHOLD:
            self._adjust(result, HIGH_RELIABILITY_BONUS, "High reliability")

    def _score_privacy(self, result: ScoreResult, provider: BaseProvider) -> None:
        if self.config.privacy_first and provider.provider_type == ProviderType.LOCAL:
            self._adjust(result, PRIVACY_BONUS, "Privacy-first (local)")

    def _score_cost(self, result: ScoreResult, provider: BaseProvider) -> None:
        if not self.config.cost_optimization:
            return

        if provider.provider_type == ProviderType.LOCAL:
            self._adjust(result, LOCAL_COST_BONUS, "No API costs")
        elif has_cost_estimate(provider):
            estimated_cost = provider.estimate_cost(COST_ESTIMATE_TOKENS)
            if estimated_cost < LOW_COST_THRESHOLD_USD:
                self._adjust(result, LOW_COST_BONUS, "Low cost")

    def _score_context(
        self,
        result: ScoreResult,
        models: list[ModelDescriptor],
        request: RoutingRequest,
    ) -> None:
        total_tokens = estimate_token_count(request.messages)
        if not any(m.context_length >= total_tokens for m in models):
            self._adjust(
                result, -INSUFFICIENT_CONTEXT_PENALTY, "Insufficient context window"
            )

    def rank(
        self,
        provider_names: list[str],
        request: RoutingRequest,
        task_type: TaskType,
    ) -> list[ScoreResult]:
        """
        Score the given (already reachable) providers, best first.

        The sort is stable, so equal scores keep the order of
        ``provider_names``. A provider whose scoring raises is logged and
        left out.
        """
        scores: list[ScoreResult] = []
        for name in provider_names:
            try:
                scores.append(self.score(name, request, task_type))
            except Exception as e:
                logger.warning(f"Failed to score provider {name}: {e}")

        scores.sort(key=lambda s: -s.score)
        return scores
