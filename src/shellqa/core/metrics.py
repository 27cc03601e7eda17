# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lightweight duration metrics for tool and plugin operations."""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Final

PLUGIN_ACTIVATE: Final[str] = "plugin.activate"
PLUGIN_CHECK: Final[str] = "plugin.check"
PLUGIN_FORMAT: Final[str] = "plugin.format"
SHFMT_FORMAT: Final[str] = "shfmt.format"
SHFMT_CHECK: Final[str] = "shfmt.check"
SHELLCHECK_CHECK: Final[str] = "shellcheck.check"
DIAGNOSIS_RUN: Final[str] = "diagnosis.run"


@dataclass(slots=True)
class MetricSummary:
    """Aggregate statistics for one metric name."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def add(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)

    def to_payload(self) -> dict[str, float | int]:
        return {
            "count": self.count,
            "avg_ms": round(self.avg_ms, 3),
            "min_ms": round(self.min_ms if self.count else 0.0, 3),
            "max_ms": round(self.max_ms, 3),
        }


@dataclass(slots=True)
class PerformanceMonitor:
    """Record named durations and expose summary statistics.

    Monitors are cheap to create; the orchestration context owns one and
    passes it to the plugins and tools it builds.
    """

    enabled: bool = True
    _summaries: dict[str, MetricSummary] = field(default_factory=dict)

    def record(self, name: str, duration_ms: float) -> None:
        """Add ``duration_ms`` to the statistics for ``name``.

        Args:
            name: Metric identifier such as :data:`PLUGIN_CHECK`.
            duration_ms: Observed duration in milliseconds.
        """

        if not self.enabled:
            return
        self._summaries.setdefault(name, MetricSummary()).add(duration_ms)

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Time the enclosed block and record it under ``name``.

        The duration is recorded even when the block raises.
        """

        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, (time.perf_counter() - start) * 1000.0)

    def summary(self, name: str) -> MetricSummary | None:
        return self._summaries.get(name)

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        """Return a JSON-friendly copy of every summary keyed by metric name."""

        return {name: summary.to_payload() for name, summary in sorted(self._summaries.items())}

    def reset(self) -> None:
        self._summaries.clear()


__all__ = [
    "DIAGNOSIS_RUN",
    "MetricSummary",
    "PLUGIN_ACTIVATE",
    "PLUGIN_CHECK",
    "PLUGIN_FORMAT",
    "PerformanceMonitor",
    "SHELLCHECK_CHECK",
    "SHFMT_CHECK",
    "SHFMT_FORMAT",
]
