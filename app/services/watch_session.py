"""Watch session: one watchdog Observer over a set of root paths."""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from ..errors import PathNotFoundError, ValidationError
from .debounce import ChangeType

logger = logging.getLogger(__name__)

IGNORED_NAMES = frozenset({
    "node_modules", ".git", "dist", "build", "coverage",
    "__pycache__", ".venv", "venv", ".DS_Store",
})

EventSink = Callable[[str, ChangeType], None]


def is_ignored(path: str, root: str) -> bool:
    """True if `path` (under `root`) falls in the ignore set.

    Only the components below the watched root are considered, so watching a
    directory that itself lives under e.g. ``build/`` still works.
    """
    try:
        parts = Path(path).relative_to(root).parts
    except ValueError:
        parts = Path(path).parts
    for part in parts:
        if part in IGNORED_NAMES:
            return True
    if not parts:
        return False
    name = parts[-1]
    return name == ".env" or name.startswith(".env.") or name.endswith(".log")


class _ChangeHandler(FileSystemEventHandler):
    """Maps watchdog events under one directory to (path, ChangeType) calls on the sink.

    `files` restricts delivery to those paths; None delivers everything.
    """

    def __init__(self, root: str, sink: EventSink, files: Optional[FrozenSet[str]] = None):
        super().__init__()
        self.root = root
        self.sink = sink
        self.files = files

    def _emit(self, raw_path, change: ChangeType) -> None:
        path = os.fsdecode(raw_path)
        files = self.files
        if files is not None and path not in files:
            return
        if is_ignored(path, self.root):
            return
        self.sink(path, change)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeType.ADDED)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeType.CHANGED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeType.DELETED)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._emit(event.src_path, ChangeType.DELETED)
            self._emit(event.dest_path, ChangeType.ADDED)


WatchKey = Tuple[str, bool]


class _Target:
    """One scheduled observer watch and the roots that share it.

    watchdog keys watches by (directory, recursive), so single files in the
    same directory share one watch and one handler.
    """

    def __init__(self, key: WatchKey, handler: _ChangeHandler):
        self.key = key
        self.handler = handler
        self.roots: Set[str] = set()
        self.watch: Optional[ObservedWatch] = None

    @property
    def recursive(self) -> bool:
        return self.key[1]

    def refresh(self) -> None:
        if not self.recursive:
            self.handler.files = frozenset(self.roots)


class WatchSession:
    """Owns the observer and the set of watched roots.

    The observer is created lazily on the first `add_path`. If its thread dies,
    `ensure_alive` rebuilds it once; a second death marks the session unhealthy
    and no more events are delivered.
    """

    def __init__(self, sink: EventSink, observer_factory: Callable[[], Observer] = Observer):
        self.sink = sink
        self.observer_factory = observer_factory
        self._lock = threading.Lock()
        self._observer: Optional[Observer] = None
        self._roots: Dict[str, WatchKey] = {}
        self._targets: Dict[WatchKey, _Target] = {}
        self._reinitialized = False
        self._healthy = True
        self._closed = False

    @property
    def healthy(self) -> bool:
        return self._healthy and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    def watched_paths(self) -> List[str]:
        with self._lock:
            return sorted(self._roots)

    def add_path(self, path: str) -> bool:
        """Start watching `path` recursively.

        Returns False if it is already watched. Raises PathNotFoundError if it
        does not exist and ValidationError if it is not a usable path.
        """
        root = normalize_path(path)
        if not os.path.exists(root):
            raise PathNotFoundError(path)
        with self._lock:
            if self._closed:
                raise RuntimeError("watch session is closed")
            if root in self._roots:
                return False
            if self._observer is None:
                self._observer = self.observer_factory()
                self._observer.start()
            key = _watch_key(root)
            target = self._targets.get(key)
            if target is None:
                target = _Target(key, _ChangeHandler(key[0], self.sink))
                target.watch = self._observer.schedule(target.handler, key[0], recursive=key[1])
                self._targets[key] = target
            target.roots.add(root)
            target.refresh()
            self._roots[root] = key
        logger.info("Watching %s", root)
        return True

    def remove_path(self, path: str) -> bool:
        """Stop watching `path`. Returns False if it was not watched."""
        root = normalize_path(path)
        with self._lock:
            key = self._roots.pop(root, None)
            if key is None:
                return False
            target = self._targets[key]
            target.roots.discard(root)
            if target.roots:
                target.refresh()
            else:
                del self._targets[key]
                if self._observer is not None and target.watch is not None:
                    try:
                        self._observer.unschedule(target.watch)
                    except KeyError:
                        logger.debug("Watch for %s was already gone", key[0])
        logger.info("Stopped watching %s", root)
        return True

    def ensure_alive(self) -> bool:
        """Rebuild a dead observer once. Returns the resulting health."""
        with self._lock:
            if self._closed or not self._healthy:
                return self.healthy
            if self._observer is None or self._observer.is_alive():
                return True
            if self._reinitialized:
                logger.error("File watcher stopped again after reinitialization; marking unhealthy")
                self._healthy = False
                return False
            logger.error("File watcher stopped unexpectedly; reinitializing")
            self._reinitialized = True
            try:
                observer = self.observer_factory()
                watches = {
                    key: observer.schedule(target.handler, key[0], recursive=key[1])
                    for key, target in self._targets.items()
                }
                observer.start()
            except Exception as e:
                logger.error("File watcher reinitialization failed: %s", e)
                self._healthy = False
                return False
            self._observer = observer
            for key, watch in watches.items():
                self._targets[key].watch = watch
            return True

    def close(self) -> None:
        """Stop and join the observer. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            observer, self._observer = self._observer, None
            self._roots.clear()
            self._targets.clear()
        if observer is not None:
            observer.stop()
            if observer.is_alive():
                observer.join(timeout=5)
        logger.info("Watch session closed")


def normalize_path(path: str) -> str:
    """Absolute, resolved form of `path`. Raises ValidationError for unusable input."""
    if not isinstance(path, str) or "\x00" in path:
        raise ValidationError(f"Invalid path: {path!r}")
    try:
        return str(Path(path).expanduser().resolve())
    except (TypeError, ValueError, OSError) as e:
        raise ValidationError(f"Invalid path: {path!r}") from e


def _watch_key(root: str) -> WatchKey:
    """A single file is watched through its parent directory."""
    if os.path.isfile(root):
        return os.path.dirname(root), False
    return root, True
