"""
Performance Ledger
==================
Per-provider running counters that drive the latency and reliability
bonuses in scoring. Lives in memory only; cleared explicitly.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class PerformanceRecord:
    """Counters for a single provider"""

    total_requests: int = 0
    successful_requests: int = 0
    total_latency_ms: float = 0.0
    # Tracked apart from failures so cancellations don't skew success rate
    cancelled_requests: int = 0

    @property
    def failed_requests(self) -> int:
        return self.total_requests - self.successful_requests

    @property
    def average_latency(self) -> float | None:
        """Mean latency of successful requests, None before the first success"""
        if self.successful_requests == 0:
            return None
        return self.total_latency_ms / self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests

    @property
    def has_history(self) -> bool:
        return self.total_requests > 0


class PerformanceLedger:
    """
    Thread-safe store of PerformanceRecords keyed by provider name.

    The lock only covers the counter update itself; callers never hold it
    across a provider call.
    """

    def __init__(self) -> None:
        self._records: dict[str, PerformanceRecord] = {}
        self._lock = threading.Lock()

    def _get_record(self, provider: str) -> PerformanceRecord:
        if provider not in self._records:
            self._records[provider] = PerformanceRecord()
        return self._records[provider]

    def record_success(self, provider: str, latency_ms: float) -> None:
        with self._lock:
            record = self._get_record(provider)
            record.total_requests += 1
            record.successful_requests += 1
            record.total_latency_ms += latency_ms
        logger.debug(f"Recorded success for {provider} ({latency_ms:.0f}ms)")

    def record_failure(self, provider: str) -> None:
        """Count a failed attempt. Failed latency is not part of the average."""
        with self._lock:
            record = self._get_record(provider)
            record.total_requests += 1
        logger.debug(f"Recorded failure for {provider}")

    def record_cancellation(self, provider: str) -> None:
        with self._lock:
            self._get_record(provider).cancelled_requests += 1
        logger.debug(f"Recorded cancellation for {provider}")

    def get(self, provider: str) -> PerformanceRecord | None:
        """Copy of the provider's record, or None when it has never been used"""
        with self._lock:
            record = self._records.get(provider)
            return replace(record) if record is not None else None

    def snapshot(self) -> dict[str, PerformanceRecord]:
        with self._lock:
            return {name: replace(record) for name, record in self._records.items()}

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def statistics(self) -> dict[str, Any]:
        """Per-provider summary for telemetry/logging collaborators"""
        stats: dict[str, Any] = {
            "providers": {},
            "total_requests": 0,
            "average_latency_ms": 0,
        }

        total_latency = 0.0
        total_successes = 0
        for name, record in self.snapshot().items():
            average = record.average_latency
            stats["providers"][name] = {
                "requests": record.total_requests,
                "successful_requests": record.successful_requests,
                "cancelled_requests": record.cancelled_requests,
                "success_rate": round(record.success_rate * 100, 1),
                "avg_latency_ms": round(average) if average is not None else None,
            }
            stats["total_requests"] += record.total_requests
            total_latency += record.total_latency_ms
            total_successes += record.successful_requests

        if total_successes:
            stats["average_latency_ms"] = round(total_latency / total_successes)

        return stats
