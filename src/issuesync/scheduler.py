"""Steady-state triggers: a polling download thread and a file watcher.

Both triggers block on :class:`~issuesync.concurrency.LoopBridge` while their
sync operation runs, so each trigger has at most one network call in flight.
The two triggers are independent of each other and may overlap; a download
overwriting a file that an upload is reading is last-writer-wins.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from .concurrency import IssueTracker, LoopBridge
from .config import SyncConfig
from .errors import SyncError, classify_error
from .fetcher import sync_remote_to_local
from .logging import get_logger
from .models import is_issue_file
from .updater import sync_local_to_remote


def _log_cycle_failure(message: str, exc: Exception, **kw: object) -> None:
    info = classify_error(exc)
    if isinstance(exc, SyncError):
        if exc.issue_number is not None:
            kw.setdefault("issue_number", exc.issue_number)
        if exc.path is not None:
            kw.setdefault("path", str(exc.path))
    get_logger().log_error(
        message, error=info.message, category=info.category, transient=info.transient, **kw
    )


class PollTrigger:
    """Sleeps ``config.sync_interval`` seconds, then downloads; forever."""

    def __init__(
        self,
        config: SyncConfig,
        bridge: LoopBridge,
        client: IssueTracker,
        stop_event: threading.Event | None = None,
    ):
        self.config = config
        self.bridge = bridge
        self.client = client
        self._stop = stop_event or threading.Event()
        self._thread: threading.Thread | None = None
        self.logger = get_logger()

    def run_once(self) -> bool:
        self.logger.info("Performing scheduled sync from GitHub to local...")
        try:
            self.bridge.run(sync_remote_to_local(self.config, self.client))
        except Exception as exc:  # noqa: BLE001 - next tick is the retry
            _log_cycle_failure("Error syncing from GitHub", exc)
            return False
        return True

    def _loop(self) -> None:
        while not self._stop.wait(self.config.sync_interval):
            self.run_once()

    def start(self) -> None:
        self._thread = threading.Thread(target=self._loop, name="issuesync-poll", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)


class WatchTrigger(FileSystemEventHandler):
    """Uploads each ``.md`` file in the issues directory when it is modified.

    Callbacks run on the watchdog observer thread.
    """

    def __init__(
        self,
        config: SyncConfig,
        bridge: LoopBridge,
        client: IssueTracker,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ):
        super().__init__()
        self.config = config
        self.bridge = bridge
        self.client = client
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self.logger = get_logger()

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.handle_path(Path(os.fsdecode(event.src_path)))

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save through a temp file + rename land here.
        if not event.is_directory:
            self.handle_path(Path(os.fsdecode(event.dest_path)))

    def handle_path(self, path: Path) -> bool:
        if not is_issue_file(path):
            return False
        self.logger.info(f"Local file changed: {path}", path=str(path))
        try:
            self.bridge.run(sync_local_to_remote(self.config, path, self.client))
        except Exception as exc:  # noqa: BLE001 - next edit is the retry
            _log_cycle_failure("Error syncing to GitHub", exc, path=str(path))
            return False
        return True

    def start(self) -> None:
        observer = self._observer_factory()
        try:
            observer.schedule(self, str(self.config.issues_dir), recursive=False)
            observer.start()
        except OSError as exc:
            raise SyncError(
                f"Failed to watch directory: {self.config.issues_dir}",
                path=self.config.issues_dir,
            ) from exc
        self._observer = observer

    def stop(self, timeout: float | None = None) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout)
            self._observer = None


__all__ = ["PollTrigger", "WatchTrigger"]
