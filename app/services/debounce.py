"""Per-path debounce scheduler for file change events."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class ChangeType(Enum):
    ADDED = "added"
    CHANGED = "changed"
    DELETED = "deleted"


@dataclass
class PendingJob:
    """The latest change seen for a path, waiting for its timer."""
    path: str
    change: ChangeType
    handle: Optional[asyncio.TimerHandle] = None


JobRunner = Callable[[str, ChangeType], Awaitable[None]]


def is_under(path: str, root: str) -> bool:
    """True if `path` is `root` or lies inside it."""
    prefix = root.rstrip("/\\")
    return path == prefix or path.startswith(prefix + "/") or path.startswith(prefix + "\\")


class DebounceScheduler:
    """Collapses bursts of events per path into one job.

    Each path is Idle or Pending. An event while Pending cancels the timer and
    arms a new one with the latest change type. When the timer fires the path
    goes back to Idle and one job starts. If a job for the same path is still
    running, the new one waits for it, so a path never has more than one job
    waiting and one running.

    All state is touched on the event loop thread only. Other threads go
    through `submit_threadsafe`.
    """

    def __init__(self, runner: JobRunner, delay: float = 2.0):
        self.runner = runner
        self.delay = delay
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Dict[str, PendingJob] = {}
        self._deferred: Dict[str, ChangeType] = {}
        self._running: Dict[str, asyncio.Task] = {}
        self._closed = False

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._closed = False

    def submit(self, path: str, change: ChangeType) -> None:
        """Record an event for `path` and (re)arm its timer. Loop thread only."""
        if self._closed:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        previous = self._pending.get(path)
        if previous is not None and previous.handle is not None:
            previous.handle.cancel()
        # the new timer supersedes a job still waiting on a running one
        self._deferred.pop(path, None)
        job = PendingJob(path, change)
        job.handle = self._loop.call_later(self.delay, self._fire, job)
        self._pending[path] = job

    def submit_threadsafe(self, path: str, change: ChangeType) -> None:
        """`submit` from a watcher thread."""
        loop = self._loop
        if loop is None or loop.is_closed() or self._closed:
            logger.debug("Dropping %s event for %s: scheduler not running", change.value, path)
            return
        try:
            loop.call_soon_threadsafe(self.submit, path, change)
        except RuntimeError:
            logger.debug("Dropping %s event for %s: event loop closed", change.value, path)

    def _fire(self, job: PendingJob) -> None:
        if self._pending.get(job.path) is not job:
            return
        del self._pending[job.path]
        if job.path in self._running:
            self._deferred[job.path] = job.change
            return
        self._start(job.path, job.change)

    def _start(self, path: str, change: ChangeType) -> None:
        task = self._loop.create_task(self._run(path, change))
        task.add_done_callback(lambda t: self._forget(path, t))
        self._running[path] = task

    def _forget(self, path: str, task: asyncio.Task) -> None:
        # a task cancelled before it ever ran skips its own cleanup
        if self._running.get(path) is task:
            del self._running[path]

    async def _run(self, path: str, change: ChangeType) -> None:
        try:
            await self.runner(path, change)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Job for %s (%s) failed", path, change.value)
        finally:
            self._running.pop(path, None)
            rerun = self._deferred.pop(path, None)
            if rerun is not None and not self._closed:
                self._start(path, rerun)

    def is_pending(self, path: str) -> bool:
        return path in self._pending or path in self._deferred

    def is_running(self, path: str) -> bool:
        return path in self._running

    def pending_paths(self) -> List[str]:
        return sorted(set(self._pending) | set(self._deferred))

    def cancel(self, path: str) -> bool:
        """Drop the waiting job for `path`. A running job is left to finish."""
        job = self._pending.pop(path, None)
        if job is not None and job.handle is not None:
            job.handle.cancel()
        deferred = self._deferred.pop(path, None)
        return job is not None or deferred is not None

    def cancel_under(self, root: str, keep: Iterable[str] = ()) -> int:
        """Drop waiting jobs for every path inside `root`.

        Paths that also fall inside one of the `keep` roots are left alone.
        """
        keep = list(keep)
        doomed = [
            p for p in self.pending_paths()
            if is_under(p, root) and not any(is_under(p, k) for k in keep)
        ]
        for path in doomed:
            self.cancel(path)
        return len(doomed)

    def cancel_all(self) -> None:
        """Stop accepting events, drop waiting jobs and cancel running ones."""
        self._closed = True
        for job in self._pending.values():
            if job.handle is not None:
                job.handle.cancel()
        self._pending.clear()
        self._deferred.clear()
        for task in self._running.values():
            task.cancel()

    async def drain(self, poll_interval: float = 0.01) -> None:
        """Wait until no job is waiting or running."""
        while self._pending or self._deferred or self._running:
            running = list(self._running.values())
            if running:
                await asyncio.gather(*running, return_exceptions=True)
            else:
                await asyncio.sleep(poll_interval)
