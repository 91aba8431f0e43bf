"""Realtime pipeline: file events -> debounce -> analysis -> broadcast."""

import asyncio
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from watchdog.observers import Observer

from code_quality_checker.utils import is_code_file

from ..errors import CheckerError
from ..schemas import AnalysisReportOut, RealtimeAnalysisResult
from .broadcast import BroadcastChannel
from .checker import CheckerService
from .debounce import ChangeType, DebounceScheduler
from .watch_session import WatchSession, normalize_path

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class RealtimePipeline:
    """Wires the watch session, debounce scheduler, checker and broadcast channel.

    Must be started from inside the event loop it will run on.
    """

    def __init__(
        self,
        checker: CheckerService,
        channel: BroadcastChannel,
        debounce_seconds: float = 2.0,
        observer_factory: Callable[[], Any] = Observer,
        health_interval: float = 5.0,
        clock: Callable[[], int] = _now_ms,
    ):
        self.checker = checker
        self.channel = channel
        self.clock = clock
        self.health_interval = health_interval
        self.scheduler = DebounceScheduler(self._process, delay=debounce_seconds)
        self.session = WatchSession(self._on_fs_event, observer_factory=observer_factory)
        self._supervisor: Optional[asyncio.Task] = None
        self._started = False
        self._shut_down = False

    @property
    def healthy(self) -> bool:
        return self.session.healthy

    def start(self) -> None:
        if self._started:
            return
        loop = asyncio.get_running_loop()
        self.scheduler.bind(loop)
        if self.health_interval > 0:
            self._supervisor = loop.create_task(self._supervise())
        self._started = True
        logger.info("Realtime pipeline started")

    async def _supervise(self) -> None:
        while True:
            await asyncio.sleep(self.health_interval)
            if not self.session.ensure_alive():
                logger.error("File watching disabled; realtime analysis stopped")
                return

    # --- watched paths ---

    async def add_path(self, path: str) -> bool:
        """Watch `path`. Raises PathNotFoundError; False if already watched."""
        if not self._started:
            self.start()
        return await asyncio.to_thread(self.session.add_path, path)

    async def remove_path(self, path: str) -> bool:
        removed = await asyncio.to_thread(self.session.remove_path, path)
        self.scheduler.cancel_under(normalize_path(path), keep=self.session.watched_paths())
        return removed

    def watched_paths(self) -> List[str]:
        return self.session.watched_paths()

    # --- event flow ---

    def _on_fs_event(self, path: str, change: ChangeType) -> None:
        """Called on watchdog threads."""
        if not is_code_file(path):
            return
        self.scheduler.submit_threadsafe(path, change)

    async def _process(self, path: str, change: ChangeType) -> None:
        analysis: Optional[AnalysisReportOut] = None
        if change is not ChangeType.DELETED:
            try:
                report = await self.checker.analyze_file_async(path)
            except CheckerError as e:
                logger.warning("Skipping %s: %s", path, e.message)
                return
            analysis = AnalysisReportOut.from_report(report)
        result = RealtimeAnalysisResult(
            file_path=path,
            analysis=analysis,
            timestamp=self.clock(),
            change_type=change.value,
        )
        delivered = await self.channel.broadcast({
            "type": "realtime_analysis",
            "result": result.model_dump(by_alias=True),
        })
        logger.debug("Broadcast %s (%s) to %d client(s)", path, change.value, delivered)

    # --- control messages ---

    async def handle_message(self, raw: str) -> Dict[str, Any]:
        """Handle one inbound control message and return the reply."""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return {"error": "Invalid message format"}
        if not isinstance(data, dict):
            return {"error": "Invalid message format"}

        msg_type = data.get("type")
        try:
            if msg_type == "watch":
                path = data.get("path")
                if not path:
                    return {"error": "path is required"}
                if not isinstance(path, str):
                    return {"error": "path must be a string"}
                await self.add_path(path)
                return {"type": "watch_started", "path": path}
            if msg_type == "unwatch":
                path = data.get("path")
                if not path:
                    return {"error": "path is required"}
                if not isinstance(path, str):
                    return {"error": "path must be a string"}
                await self.remove_path(path)
                return {"type": "watch_stopped", "path": path}
            if msg_type == "analyze_file":
                file_path = data.get("filePath")
                if not file_path:
                    return {"error": "filePath is required"}
                if not isinstance(file_path, str):
                    return {"error": "filePath must be a string"}
                report = await self.checker.analyze_file_async(file_path)
                return {
                    "type": "analysis_result",
                    "result": AnalysisReportOut.from_report(report).model_dump(by_alias=True),
                }
        except CheckerError as e:
            return {"error": e.message}
        return {"error": "Unknown message type"}

    # --- lifecycle ---

    async def shutdown(self) -> None:
        """Cancel jobs, close the watch session, close subscriptions. Idempotent."""
        if self._shut_down:
            return
        self._shut_down = True
        self.scheduler.cancel_all()
        if self._supervisor is not None:
            self._supervisor.cancel()
        await asyncio.to_thread(self.session.close)
        await self.scheduler.drain()
        await self.channel.close_all()
        logger.info("Realtime pipeline stopped")
