"""Tests for corn-stats configuration."""

from pathlib import Path

from corn_stats.config import (
    GLOBAL_BINARY,
    MIN_INTERVAL_MS,
    UNIT_FILE,
    UNIT_NAME,
    SamplerConfig,
    default_descriptor,
)


class TestSamplerConfig:
    """Tests for SamplerConfig."""

    def test_defaults(self):
        config = SamplerConfig()
        assert config.interval_ms == 800
        assert config.interval_seconds == 0.8
        assert config.per_second is False

    def test_interval_minimum(self):
        """Test the interval is clamped to a minimum."""
        assert SamplerConfig(interval_ms=1).interval_ms == MIN_INTERVAL_MS

    def test_from_env(self):
        config = SamplerConfig.from_env(
            {"CORN_STATS_INTERVAL_MS": "1500", "CORN_STATS_PER_SECOND": "yes"}
        )
        assert config.interval_ms == 1500
        assert config.per_second is True

    def test_from_env_empty(self):
        assert SamplerConfig.from_env({}) == SamplerConfig()

    def test_from_env_bad_interval_falls_back(self, caplog):
        config = SamplerConfig.from_env({"CORN_STATS_INTERVAL_MS": "fast"})

        assert config.interval_ms == 800
        assert "CORN_STATS_INTERVAL_MS" in caplog.text


def test_default_descriptor(tmp_path: Path):
    descriptor = default_descriptor(home=tmp_path)

    assert descriptor.unit_name == UNIT_NAME
    assert descriptor.unit_file == UNIT_FILE
    assert descriptor.global_binary == GLOBAL_BINARY
    assert descriptor.autostart_file == tmp_path / ".config" / "autostart" / "corn_stats.desktop"
