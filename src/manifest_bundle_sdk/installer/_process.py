"""Stopping and relaunching the application that consumes the target layout."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import psutil

from ..errors import InstallError, InstallErrorKind

logger = logging.getLogger(__name__)


class ProcessController(Protocol):
    """Port for the dependent foreground process. Calls are blocking."""

    def is_running(self) -> bool: ...
    def stop(self) -> None: ...
    def launch(self, root: Path) -> None: ...


class PsutilProcessController:
    """Finds the application by process name; relaunches its executable detached.

    executable may be absolute or relative to the install root passed to launch().
    """

    def __init__(
        self,
        process_names: Sequence[str],
        executable: str | Path | None = None,
        kill_timeout: float = 5.0,
    ) -> None:
        self._names = {name.lower() for name in process_names}
        self._executable = executable
        self._kill_timeout = kill_timeout

    def _matching(self) -> list[psutil.Process]:
        found: list[psutil.Process] = []
        for proc in psutil.process_iter(["name"]):
            name = (proc.info.get("name") or "").lower()
            if name in self._names:
                found.append(proc)
        return found

    def is_running(self) -> bool:
        return bool(self._matching())

    def stop(self) -> None:
        """Kill every matching process and wait for it to exit.

        Processes that exit on their own in the meantime count as stopped.

        Raises:
            InstallError: PROCESS_STOP_FAILED if a process refuses to die.
        """
        procs = self._matching()
        for proc in procs:
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied as e:
                raise InstallError(
                    f"Not permitted to stop {proc.info.get('name')} (pid {proc.pid})",
                    InstallErrorKind.PROCESS_STOP_FAILED,
                ) from e
        _gone, alive = psutil.wait_procs(procs, timeout=self._kill_timeout)
        if alive:
            pids = ", ".join(str(p.pid) for p in alive)
            raise InstallError(
                f"Processes still running after kill: {pids}",
                InstallErrorKind.PROCESS_STOP_FAILED,
            )
        logger.info("Stopped %d process(es)", len(procs))

    def launch(self, root: Path) -> None:
        if not self._executable:
            logger.warning("No executable configured; not relaunching")
            return
        executable = Path(self._executable)
        if not executable.is_absolute():
            executable = Path(root) / executable
        kwargs: dict = {
            "cwd": str(executable.parent),
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
            "close_fds": True,
        }
        if sys.platform == "win32":
            kwargs["creationflags"] = (
                subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
            )
        else:
            kwargs["start_new_session"] = True
        subprocess.Popen([str(executable)], **kwargs)
        logger.info("Launched %s", executable)
