"""corn-stats - Textual status indicator."""

import logging

import psutil
from textual.app import App, ComposeResult
from textual.widgets import Footer, Static

from corn_stats.config import APP_COMMENT, APP_NAME, SamplerConfig
from corn_stats.sampler import MetricSampler

logger = logging.getLogger(__name__)


class StatusLabel(Static):
    """Single-line indicator showing the latest metrics label."""

    DEFAULT_CSS = """
    StatusLabel {
        height: auto;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, text: str = "...", **kwargs) -> None:
        super().__init__(text, **kwargs)
        self.label_text = text

    def set_label(self, text: str) -> None:
        """Replace the shown text."""
        self.label_text = text
        self.update(text)


class CornStatsApp(App):
    """Main corn-stats application."""

    TITLE = APP_NAME
    SUB_TITLE = APP_COMMENT

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        sampler: MetricSampler | None = None,
        config: SamplerConfig | None = None,
    ) -> None:
        """Initialize the CornStatsApp."""
        super().__init__()
        self._sampler_config = config if config is not None else SamplerConfig()
        self._sampler = sampler if sampler is not None else MetricSampler(
            per_second=self._sampler_config.per_second
        )

    @property
    def sampler_config(self) -> SamplerConfig:
        return self._sampler_config

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield StatusLabel(id="status-label")
        yield Footer()

    def on_mount(self) -> None:
        """Start the fixed-cadence sampling timer."""
        self.set_interval(self._sampler_config.interval_seconds, self.refresh_label)

    def refresh_label(self) -> None:
        """Sample once and push the label to the indicator."""
        try:
            text = self._sampler.label()
        except (psutil.Error, OSError) as exc:
            # Keep the previous label; the next tick tries again
            logger.warning("Sampling failed: %s", exc)
            return
        self.query_one("#status-label", StatusLabel).set_label(text)

    def action_quit(self) -> None:
        """Handle quit action."""
        self.exit()
