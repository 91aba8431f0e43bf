"""Services for the checker engine, AI summaries and realtime analysis."""

from .ai import AssessmentService
from .broadcast import BroadcastChannel, ClientSubscription
from .checker import CheckerService
from .debounce import ChangeType, DebounceScheduler
from .realtime import RealtimePipeline
from .watch_session import WatchSession

__all__ = [
    "AssessmentService",
    "BroadcastChannel",
    "ChangeType",
    "CheckerService",
    "ClientSubscription",
    "DebounceScheduler",
    "RealtimePipeline",
    "WatchSession",
]
