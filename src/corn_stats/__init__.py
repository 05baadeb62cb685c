"""corn-stats - system tray CPU, memory and network monitor."""

__version__ = "0.1.0"
