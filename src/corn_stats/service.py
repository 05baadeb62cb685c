"""Autostart and systemd registration for corn-stats."""

import logging
import os
import shutil
import subprocess
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from corn_stats.config import APP_COMMENT, APP_NAME
from corn_stats.models import ServiceDescriptor

logger = logging.getLogger(__name__)

Runner = Callable[[Sequence[str]], subprocess.CompletedProcess]

DESKTOP_ENTRY_TEMPLATE = """\
[Desktop Entry]
Type=Application
Exec={exec_path}
Hidden=false
NoDisplay=false
X-GNOME-Autostart-enabled=true
Name={name}
Comment={comment}
"""

UNIT_TEMPLATE = """\
[Unit]
Description={name} system tray monitor
After=network.target

[Service]
ExecStart={exec_path}
Restart=always
RestartSec=5

[Install]
WantedBy=multi-user.target
"""


class ServiceError(Exception):
    """Base class for lifecycle failures."""


class PrivilegeError(ServiceError):
    """Raised when an operation needs root and we are not root."""


class AutostartError(ServiceError):
    """Raised when the autostart entry cannot be written."""


class CommandError(ServiceError):
    """Raised when an external command fails."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"`{' '.join(self.args_list)}` exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


def _run(args: Sequence[str]) -> subprocess.CompletedProcess:
    return subprocess.run(list(args), capture_output=True, text=True, check=False)


def current_executable() -> Path:
    """Resolved absolute path of the program being run."""
    if not sys.argv or not sys.argv[0]:
        return Path(__file__).with_name("__main__.py").resolve()
    argv0 = sys.argv[0]
    if os.sep not in argv0:
        argv0 = shutil.which(argv0) or argv0
    return Path(argv0).resolve()


def is_launchable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def launch_command(executable: Path) -> str:
    """
    Command line that starts corn-stats again.

    Under `python -m corn_stats` the running file is a module, not a program,
    so the interpreter is used instead.
    """
    if is_launchable(executable):
        return str(executable)
    return f"{sys.executable} -m corn_stats"


def render_desktop_entry(exec_path: Path | str) -> str:
    return DESKTOP_ENTRY_TEMPLATE.format(
        exec_path=exec_path, name=APP_NAME, comment=APP_COMMENT
    )


def render_unit(exec_path: Path | str) -> str:
    return UNIT_TEMPLATE.format(exec_path=exec_path, name=APP_NAME)


class ServiceManager:
    """
    Installs, removes, starts and stops the corn-stats service.

    Every operation is safe to repeat. External commands run synchronously
    and a failing command raises CommandError; nothing is retried.
    """

    def __init__(
        self,
        descriptor: ServiceDescriptor,
        runner: Runner | None = None,
        euid: Callable[[], int] = os.geteuid,
        executable: Path | None = None,
    ) -> None:
        """
        Initialize the ServiceManager.

        Args:
            descriptor: Paths and unit name to manage.
            runner: Runs a command and returns the completed process.
            euid: Returns the effective user id.
            executable: Path of the running program. Resolved lazily if None.
        """
        self._descriptor = descriptor
        self._runner = runner if runner is not None else _run
        self._euid = euid
        self._executable = executable

    @property
    def descriptor(self) -> ServiceDescriptor:
        return self._descriptor

    @property
    def executable(self) -> Path:
        if self._executable is None:
            self._executable = current_executable()
        return self._executable

    def is_superuser(self) -> bool:
        return self._euid() == 0

    def require_superuser(self) -> None:
        if not self.is_superuser():
            raise PrivilegeError("this command must be run as root (try sudo)")

    def _systemctl(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        command = ["systemctl", *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = self._runner(command)
        except FileNotFoundError as exc:
            if check:
                raise CommandError(command, 127, str(exc)) from exc
            logger.debug("%s not available: %s", command[0], exc)
            return subprocess.CompletedProcess(command, 127, "", str(exc))
        if check and result.returncode != 0:
            raise CommandError(command, result.returncode, result.stderr or "")
        return result

    def ensure_autostart_entry(self) -> bool:
        """
        Write the login autostart entry if it does not exist yet.

        An existing file is left untouched so manual edits survive.
        Returns True if a new file was written.
        """
        path = self._descriptor.autostart_file
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Could not create %s: %s", path.parent, exc)

        if path.exists():
            return False

        try:
            entry = render_desktop_entry(launch_command(self.executable))
            path.write_text(entry, encoding="utf-8")
        except OSError as exc:
            raise AutostartError(f"failed to create autostart file {path}: {exc}") from exc
        logger.info("Autostart enabled.")
        return True

    def install(self, global_install: bool = False) -> str:
        """
        Register the service with systemd and enable it at boot.

        Returns the command written to ExecStart.
        """
        self.require_superuser()

        exec_path = self.executable
        exec_command = launch_command(exec_path)
        if global_install:
            target = self._descriptor.global_binary
            if exec_path != target:
                if not is_launchable(exec_path):
                    raise ServiceError(
                        f"cannot install {exec_path} globally, it is not an executable"
                        " (run the corn-stats script instead of python -m corn_stats)"
                    )
                try:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(exec_path, target)
                    target.chmod(0o755)
                except OSError as exc:
                    raise ServiceError(f"failed to copy {exec_path} to {target}: {exc}") from exc
                logger.info("Copied %s to %s", exec_path, target)
            exec_command = str(target)

        unit_file = self._descriptor.unit_file
        try:
            unit_file.write_text(render_unit(exec_command), encoding="utf-8")
        except OSError as exc:
            raise ServiceError(f"failed to write unit file {unit_file}: {exc}") from exc
        logger.info("Wrote %s", unit_file)

        self._systemctl("daemon-reload")
        self._systemctl("enable", self._descriptor.unit_name)
        logger.info("Service %s installed and enabled.", self._descriptor.unit_name)
        return exec_command

    def uninstall(self) -> None:
        """Stop, disable and remove the unit. A missing unit is not an error."""
        if not self.is_superuser():
            # Not gated; removing the unit file will likely fail without root
            logger.warning("uninstall is running without root privileges")

        name = self._descriptor.unit_name
        for action in ("stop", "disable"):
            result = self._systemctl(action, name, check=False)
            if result.returncode != 0:
                logger.debug("systemctl %s %s ignored: %s", action, name, result.stderr)

        unit_file = self._descriptor.unit_file
        try:
            unit_file.unlink()
        except FileNotFoundError:
            logger.debug("%s already absent", unit_file)
        except OSError as exc:
            raise ServiceError(f"failed to remove unit file {unit_file}: {exc}") from exc

        self._systemctl("daemon-reload")
        logger.info("Service %s uninstalled.", name)

    def start(self) -> None:
        self._systemctl("start", self._descriptor.unit_name)
        logger.info("Service %s started.", self._descriptor.unit_name)

    def stop(self) -> None:
        self._systemctl("stop", self._descriptor.unit_name)
        logger.info("Service %s stopped.", self._descriptor.unit_name)
