"""Run coordination: the mandatory initial download, then optional watch mode."""

from __future__ import annotations

import threading
from collections.abc import Callable

from .concurrency import IssueTracker, LoopBridge, create_async_github_client
from .config import SyncConfig
from .fetcher import ensure_issues_dir, sync_remote_to_local
from .logging import get_logger
from .scheduler import PollTrigger, WatchTrigger

IDLE_WAKE_SECONDS = 60.0


class SyncRunner:
    """Owns the config, the loop bridge and the two steady-state triggers.

    ``startup`` failures propagate to the caller; there is no partial watch
    fallback. Once the triggers are armed, per-cycle failures are logged by
    the triggers themselves and never reach this class.
    """

    def __init__(
        self,
        config: SyncConfig,
        client: IssueTracker | None = None,
        bridge: LoopBridge | None = None,
        *,
        poll_factory: Callable[..., PollTrigger] = PollTrigger,
        watch_factory: Callable[..., WatchTrigger] = WatchTrigger,
        idle_wake: float = IDLE_WAKE_SECONDS,
    ):
        self.config = config
        self.client = client if client is not None else create_async_github_client(config)
        self.bridge = bridge or LoopBridge()
        self._poll_factory = poll_factory
        self._watch_factory = watch_factory
        self._idle_wake = idle_wake
        self.poll: PollTrigger | None = None
        self.watch: WatchTrigger | None = None
        self.logger = get_logger()

    def startup(self) -> None:
        ensure_issues_dir(self.config.issues_dir)
        self.logger.info("Performing initial sync from GitHub to local...")
        self.bridge.run(sync_remote_to_local(self.config, self.client))

    def arm_triggers(self) -> None:
        self.watch = self._watch_factory(self.config, self.bridge, self.client)
        self.watch.start()
        self.poll = self._poll_factory(self.config, self.bridge, self.client)
        self.poll.start()

    def stop_triggers(self) -> None:
        if self.poll is not None:
            self.poll.stop(timeout=0)
        if self.watch is not None:
            self.watch.stop(timeout=5)

    def run(self, stop_event: threading.Event | None = None) -> int:
        """Run until done (one-shot) or until ``stop_event`` is set (watch mode).

        Without a ``stop_event`` watch mode only ends when the process is
        terminated.
        """
        try:
            self.startup()
            if not self.config.watch:
                self.logger.info("One-time sync completed. Use --watch for continuous sync.")
                return 0

            self.logger.info("Watch mode enabled. Monitoring for changes...")
            self.arm_triggers()
            stop = stop_event or threading.Event()
            try:
                while not stop.wait(self._idle_wake):
                    pass
            finally:
                self.stop_triggers()
            return 0
        finally:
            self.bridge.close()


__all__ = ["SyncRunner", "IDLE_WAKE_SECONDS"]
