"""Command-line entry point for corn-stats."""

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from enum import Enum

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from corn_stats import __version__
from corn_stats.config import SamplerConfig, default_descriptor
from corn_stats.service import ServiceError, ServiceManager

logger = logging.getLogger(__name__)

error_console = Console(stderr=True)


class Command(Enum):
    """What the process was asked to do."""

    RUN = "run"
    INSTALL = "install"
    UNINSTALL = "uninstall"
    START = "start"
    STOP = "stop"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="corn-stats",
        description="Show CPU, memory and network usage in a status indicator.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    install = subparsers.add_parser("install", help="install and enable the systemd service")
    install.add_argument(
        "--global",
        dest="global_install",
        action="store_true",
        help="copy the executable to /usr/local/bin first",
    )
    subparsers.add_parser("uninstall", help="stop, disable and remove the systemd service")
    subparsers.add_parser("start", help="start the systemd service")
    subparsers.add_parser("stop", help="stop the systemd service")
    return parser


def parse_command(args: argparse.Namespace) -> Command:
    if args.command is None:
        return Command.RUN
    return Command(args.command)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False)],
    )


def run_foreground(manager: ServiceManager, app_factory: Callable | None = None) -> int:
    """Make sure we start at login, then run the indicator until quit."""
    manager.ensure_autostart_entry()

    if app_factory is None:
        from corn_stats.app import CornStatsApp

        app_factory = CornStatsApp
    app = app_factory(config=SamplerConfig.from_env())
    app.run()
    return 0


def main(
    argv: Sequence[str] | None = None,
    manager: ServiceManager | None = None,
    app_factory: Callable | None = None,
) -> int:
    """
    Parse arguments and dispatch.

    Returns the process exit code: 0 on success, 1 on any lifecycle failure.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    command = parse_command(args)
    logger.debug("Dispatching %s", command.value)

    if manager is None:
        manager = ServiceManager(default_descriptor())

    try:
        if command is Command.RUN:
            return run_foreground(manager, app_factory)
        if command is Command.INSTALL:
            manager.install(global_install=args.global_install)
        elif command is Command.UNINSTALL:
            manager.uninstall()
        elif command is Command.START:
            manager.start()
        elif command is Command.STOP:
            manager.stop()
    except ServiceError as exc:
        error_console.print(f"[bold red]error:[/bold red] {escape(str(exc))}", highlight=False)
        return 1
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
