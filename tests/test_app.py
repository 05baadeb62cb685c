"""Tests for the corn-stats Textual application."""

import psutil
import pytest

from corn_stats.app import CornStatsApp, StatusLabel
from corn_stats.config import APP_COMMENT, SamplerConfig
from corn_stats.models import RawSample
from corn_stats.sampler import MetricSampler


class ScriptedProvider:
    """Provider returning an increasing received-bytes counter."""

    def __init__(self) -> None:
        self.calls = 0

    def read(self) -> RawSample:
        self.calls += 1
        return RawSample(
            cpu_usage_percent=42.7,
            used_memory_bytes=4_000_000_000,
            total_memory_bytes=8_000_000_000,
            total_received_bytes=100_000 * self.calls,
            total_transmitted_bytes=0,
        )


class BrokenProvider:
    def read(self) -> RawSample:
        raise psutil.AccessDenied()


def make_app(provider, interval_ms: int = 60_000) -> CornStatsApp:
    sampler = MetricSampler(provider=provider, clock=lambda: 0.0)
    return CornStatsApp(sampler=sampler, config=SamplerConfig(interval_ms=interval_ms))


@pytest.mark.asyncio
async def test_app_creation():
    """Test CornStatsApp can be instantiated."""
    app = make_app(ScriptedProvider())
    assert app.title == "Corn Stats"
    assert app.sub_title == APP_COMMENT
    assert app.sampler_config.interval_ms == 60_000


@pytest.mark.asyncio
async def test_app_compose():
    """Test CornStatsApp composes the status label."""
    app = make_app(ScriptedProvider())
    async with app.run_test() as pilot:
        label = pilot.app.query_one("#status-label", StatusLabel)
        assert label.label_text == "..."


@pytest.mark.asyncio
async def test_refresh_label_updates_indicator():
    """Test a refresh pushes the formatted metrics to the label."""
    provider = ScriptedProvider()
    app = make_app(provider)
    async with app.run_test() as pilot:
        pilot.app.refresh_label()
        label = pilot.app.query_one("#status-label", StatusLabel)
        assert label.label_text == "⚡43% · 🧠50% · ↓97.7KB/s ↑0.0KB/s"

        pilot.app.refresh_label()
        assert label.label_text == "⚡43% · 🧠50% · ↓97.7KB/s ↑0.0KB/s"
        assert provider.calls == 2


@pytest.mark.asyncio
async def test_timer_drives_sampling():
    """Test the interval timer samples without manual calls."""
    provider = ScriptedProvider()
    app = make_app(provider, interval_ms=100)
    async with app.run_test() as pilot:
        await pilot.pause(0.5)
        assert provider.calls >= 1
        label = pilot.app.query_one("#status-label", StatusLabel)
        assert label.label_text.startswith("⚡43%")


@pytest.mark.asyncio
async def test_provider_error_keeps_previous_label():
    """Test a failing provider does not crash the app."""
    app = make_app(BrokenProvider())
    async with app.run_test() as pilot:
        pilot.app.refresh_label()
        label = pilot.app.query_one("#status-label", StatusLabel)
        assert label.label_text == "..."


@pytest.mark.asyncio
async def test_app_quit_binding():
    """Test that 'q' binding triggers quit."""
    app = make_app(ScriptedProvider())
    async with app.run_test() as pilot:
        await pilot.press("q")
        # App should be exiting
        assert pilot.app._exit

