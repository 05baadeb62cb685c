"""Data models for corn-stats."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class SampleState:
    """Counters carried from one tick to the next."""

    previous_received_bytes: int = 0
    previous_transmitted_bytes: int = 0
    previous_timestamp: float | None = None  # Monotonic seconds


@dataclass(slots=True, frozen=True)
class RawSample:
    """Raw counters read from the OS for a single tick."""

    cpu_usage_percent: float  # 0.0 - 100.0, averaged across cores
    used_memory_bytes: int
    total_memory_bytes: int
    total_received_bytes: int  # Summed over all interfaces
    total_transmitted_bytes: int


@dataclass(slots=True, frozen=True)
class DisplayMetrics:
    """Display-ready metrics derived from one tick."""

    cpu_percent: float
    memory_percent: float
    download_bytes_per_tick: int
    upload_bytes_per_tick: int
    elapsed_seconds: float | None = None


@dataclass(slots=True, frozen=True)
class ServiceDescriptor:
    """Files and names the service lifecycle manager owns."""

    unit_name: str
    unit_file: Path
    autostart_file: Path
    global_binary: Path
