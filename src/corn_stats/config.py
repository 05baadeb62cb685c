"""Configuration values for corn-stats."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from corn_stats.models import ServiceDescriptor

logger = logging.getLogger(__name__)

APP_NAME = "Corn Stats"
APP_COMMENT = "System tray monitoring"

UNIT_NAME = "corn-stats.service"
UNIT_FILE = Path("/etc/systemd/system") / UNIT_NAME
GLOBAL_BINARY = Path("/usr/local/bin/corn-stats")
AUTOSTART_FILENAME = "corn_stats.desktop"

MIN_INTERVAL_MS = 100
INTERVAL_ENV = "CORN_STATS_INTERVAL_MS"
PER_SECOND_ENV = "CORN_STATS_PER_SECOND"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SamplerConfig:
    """Cadence of the sampling loop and how rates are shown."""

    interval_ms: int = 800
    per_second: bool = False  # Divide deltas by measured elapsed time

    def __post_init__(self) -> None:
        if self.interval_ms < MIN_INTERVAL_MS:
            object.__setattr__(self, "interval_ms", MIN_INTERVAL_MS)

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SamplerConfig:
        """Build a config from ``CORN_STATS_*`` environment variables."""
        if environ is None:
            environ = os.environ
        defaults = cls()

        interval_ms = defaults.interval_ms
        raw_interval = environ.get(INTERVAL_ENV)
        if raw_interval:
            try:
                interval_ms = int(raw_interval)
            except ValueError:
                logger.warning(
                    "Ignoring %s=%r, expected an integer", INTERVAL_ENV, raw_interval
                )

        per_second = environ.get(PER_SECOND_ENV, "").strip().lower() in _TRUTHY
        return cls(interval_ms=interval_ms, per_second=per_second)


def default_descriptor(home: Path | None = None) -> ServiceDescriptor:
    """Return the descriptor for the standard install locations."""
    if home is None:
        home = Path.home()
    return ServiceDescriptor(
        unit_name=UNIT_NAME,
        unit_file=UNIT_FILE,
        autostart_file=home / ".config" / "autostart" / AUTOSTART_FILENAME,
        global_binary=GLOBAL_BINARY,
    )
