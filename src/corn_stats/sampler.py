"""Metric sampling and rate computation for corn-stats."""

import logging
import time
from collections.abc import Callable
from typing import Protocol

import psutil

from corn_stats.models import DisplayMetrics, RawSample, SampleState

logger = logging.getLogger(__name__)

KIB = 1024


class MetricsProvider(Protocol):
    """Anything that can produce a fresh RawSample on demand."""

    def read(self) -> RawSample: ...


def saturating_sub(minuend: int, subtrahend: int) -> int:
    """Subtract, clamping at zero instead of going negative."""
    return minuend - subtrahend if minuend >= subtrahend else 0


def tick(state: SampleState, raw: RawSample, now: float | None = None) -> DisplayMetrics:
    """
    Turn one raw sample into display metrics and advance the state.

    Rates are computed against the totals stored in ``state`` before it is
    overwritten with this sample's totals. A counter that went backwards
    (interface reset) yields a rate of 0.

    Args:
        state: Carried state, updated in place.
        raw: Fresh counters for this tick.
        now: Optional monotonic clock reading, used to measure elapsed time.
    """
    download = saturating_sub(raw.total_received_bytes, state.previous_received_bytes)
    upload = saturating_sub(raw.total_transmitted_bytes, state.previous_transmitted_bytes)

    if raw.total_memory_bytes > 0:
        memory_percent = raw.used_memory_bytes / raw.total_memory_bytes * 100
    else:
        memory_percent = 0.0

    elapsed = None
    if now is not None and state.previous_timestamp is not None:
        if now > state.previous_timestamp:
            elapsed = now - state.previous_timestamp

    state.previous_received_bytes = raw.total_received_bytes
    state.previous_transmitted_bytes = raw.total_transmitted_bytes
    if now is not None:
        state.previous_timestamp = now

    return DisplayMetrics(
        cpu_percent=raw.cpu_usage_percent,
        memory_percent=memory_percent,
        download_bytes_per_tick=download,
        upload_bytes_per_tick=upload,
        elapsed_seconds=elapsed,
    )


def format_label(metrics: DisplayMetrics, per_second: bool = False) -> str:
    """
    Render metrics as the one-line indicator label.

    With ``per_second`` and a known elapsed time the byte deltas are divided
    by the elapsed seconds; otherwise the per-tick delta is shown.
    """
    download = float(metrics.download_bytes_per_tick)
    upload = float(metrics.upload_bytes_per_tick)
    if per_second and metrics.elapsed_seconds:
        download /= metrics.elapsed_seconds
        upload /= metrics.elapsed_seconds

    return (
        f"⚡{metrics.cpu_percent:.0f}% · 🧠{metrics.memory_percent:.0f}% · "
        f"↓{download / KIB:.1f}KB/s ↑{upload / KIB:.1f}KB/s"
    )


class PsutilProvider:
    """Reads CPU, memory and network counters with psutil."""

    def __init__(self) -> None:
        # First call returns 0.0 and starts the measurement window
        psutil.cpu_percent(interval=None)

    def read(self) -> RawSample:
        cpu = psutil.cpu_percent(interval=None)
        mem = psutil.virtual_memory()

        total_rx = 0
        total_tx = 0
        for counters in psutil.net_io_counters(pernic=True).values():
            total_rx += counters.bytes_recv
            total_tx += counters.bytes_sent

        return RawSample(
            cpu_usage_percent=cpu,
            used_memory_bytes=mem.total - mem.available,
            total_memory_bytes=mem.total,
            total_received_bytes=total_rx,
            total_transmitted_bytes=total_tx,
        )


class MetricSampler:
    """
    Owns the sample state and drives one tick per call.

    Not thread-safe; meant to be called from a single timer callback.
    """

    def __init__(
        self,
        provider: MetricsProvider | None = None,
        state: SampleState | None = None,
        clock: Callable[[], float] = time.monotonic,
        per_second: bool = False,
    ) -> None:
        self._provider = provider if provider is not None else PsutilProvider()
        self._state = state if state is not None else SampleState()
        self._clock = clock
        self._per_second = per_second

    @property
    def state(self) -> SampleState:
        return self._state

    def tick(self) -> DisplayMetrics:
        """Read the provider and compute this tick's metrics."""
        raw = self._provider.read()
        metrics = tick(self._state, raw, now=self._clock())
        logger.debug("tick: %s", metrics)
        return metrics

    def label(self) -> str:
        """Sample once and return the formatted label."""
        return format_label(self.tick(), per_second=self._per_second)
