"""In-memory process controller for testing (no real processes)."""

from __future__ import annotations

from pathlib import Path

from ..errors import InstallError, InstallErrorKind


class InMemoryProcessController:
    """Records every call in `calls` so tests can assert ordering."""

    def __init__(self, running: bool = False, fail_stop: bool = False) -> None:
        self.running = running
        self.fail_stop = fail_stop
        self.calls: list[str] = []
        self.launched_from: list[Path] = []

    def is_running(self) -> bool:
        self.calls.append("is_running")
        return self.running

    def stop(self) -> None:
        self.calls.append("stop")
        if self.fail_stop:
            raise InstallError("refused to stop", InstallErrorKind.PROCESS_STOP_FAILED)
        self.running = False

    def launch(self, root: Path) -> None:
        self.calls.append("launch")
        self.launched_from.append(Path(root))
        self.running = True
