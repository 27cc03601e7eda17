# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the performance monitor."""

from __future__ import annotations

import pytest

from shellqa.core.metrics import PLUGIN_CHECK, PerformanceMonitor


def test_records_summary_statistics() -> None:
    monitor = PerformanceMonitor()
    for value in (10.0, 30.0, 20.0):
        monitor.record(PLUGIN_CHECK, value)

    summary = monitor.summary(PLUGIN_CHECK)
    assert summary is not None
    assert (summary.count, summary.min_ms, summary.max_ms, summary.avg_ms) == (3, 10.0, 30.0, 20.0)
    assert monitor.snapshot() == {PLUGIN_CHECK: {"count": 3, "avg_ms": 20.0, "min_ms": 10.0, "max_ms": 30.0}}


def test_timer_records_even_on_error() -> None:
    monitor = PerformanceMonitor()
    with pytest.raises(RuntimeError):
        with monitor.timer("op"):
            raise RuntimeError("boom")
    summary = monitor.summary("op")
    assert summary is not None and summary.count == 1


def test_disabled_monitor_and_reset() -> None:
    disabled = PerformanceMonitor(enabled=False)
    disabled.record("op", 1.0)
    assert disabled.snapshot() == {}

    monitor = PerformanceMonitor()
    monitor.record("op", 1.0)
    monitor.reset()
    assert monitor.summary("op") is None
