"""Async plumbing between the trigger threads and the GitHub REST client.

The REST client is blocking (``requests``); :class:`AsyncGitHubClient` moves
each call onto an executor thread so the sync operations can be written as
coroutines. :class:`LoopBridge` owns one event loop on a background thread
and lets the poll thread and the watchdog callback thread each block on a
coroutine until it finishes.
"""

from __future__ import annotations

import asyncio
import functools
import threading
from collections.abc import Callable, Coroutine, Iterable
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType
from typing import Any, Protocol, TypeVar

from .config import SyncConfig
from .github_rest import GitHubRestClient
from .logging import get_logger

T = TypeVar("T")


class IssueTracker(Protocol):
    """The two tracker operations the sync engine depends on."""

    async def list_issues(self) -> list[dict[str, Any]]: ...

    async def update_issue(
        self,
        *,
        number: int,
        body: str,
        title: str | None = None,
        state: str | None = None,
        labels: list[str] | None = None,
    ) -> None: ...


class AsyncGitHubClient:
    """Async wrapper that runs :class:`GitHubRestClient` calls in an executor.

    A fresh REST client (and HTTP session) is built for every operation and
    closed when it finishes, so the two triggers never share a
    ``requests.Session`` across threads.
    """

    def __init__(
        self,
        rest_factory: Callable[[], GitHubRestClient],
        executor: ThreadPoolExecutor | None = None,
    ):
        self._rest_factory = rest_factory
        self._executor = executor

    async def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(fn, *args, **kwargs))

    async def list_issues(self) -> list[dict[str, Any]]:
        rest = self._rest_factory()
        try:
            return await self._call(rest.list_issues, state="all")
        finally:
            rest.close()

    async def update_issue(
        self,
        *,
        number: int,
        body: str,
        title: str | None = None,
        state: str | None = None,
        labels: Iterable[str] | None = None,
    ) -> None:
        rest = self._rest_factory()
        try:
            await self._call(
                rest.update_issue,
                number=number,
                body=body,
                title=title,
                state=state,
                labels=list(labels) if labels is not None else None,
            )
        finally:
            rest.close()


def create_async_github_client(
    config: SyncConfig, executor: ThreadPoolExecutor | None = None
) -> AsyncGitHubClient:
    """Factory function to create the async client for ``config``'s repository."""

    def _factory() -> GitHubRestClient:
        return GitHubRestClient(token=config.token, repo=config.repo, base_url=config.api_url)

    return AsyncGitHubClient(_factory, executor)


class LoopBridge:
    """Blocking bridge from plain threads into a shared asyncio loop."""

    def __init__(self, name: str = "issuesync-loop") -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._started = False
        self._lock = threading.Lock()
        self.logger = get_logger()

    def _serve(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def start(self) -> LoopBridge:
        with self._lock:
            if not self._started:
                self._thread.start()
                self._started = True
                self.logger.debug("event loop bridge started", loop_thread=self._thread.name)
        return self

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run ``coro`` on the shared loop and block until it completes.

        Exceptions raised by the coroutine propagate to the caller.
        """
        self.start()
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    def close(self) -> None:
        with self._lock:
            if self._started:
                self._loop.call_soon_threadsafe(self._loop.stop)
                self._thread.join(timeout=5)
                self._started = False
        if not self._loop.is_running() and not self._loop.is_closed():
            self._loop.close()

    def __enter__(self) -> LoopBridge:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = [
    "AsyncGitHubClient",
    "IssueTracker",
    "LoopBridge",
    "create_async_github_client",
]
