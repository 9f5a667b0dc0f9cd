"""
Stores: JSON-file bookmark and task stores with atomic writes, in-memory frame
and alert stores, and an optional Redis TTL cache for analytics results.
"""

from solwatch.stores.bookmarks import TokenBookmark, TokMarkService
from solwatch.stores.frames import Alert, AlertService, Frame, OutframeService
from solwatch.stores.tasks import AnalyticTask, AnalyticTaskService

__all__ = [
    "Alert",
    "AlertService",
    "AnalyticTask",
    "AnalyticTaskService",
    "Frame",
    "OutframeService",
    "TokMarkService",
    "TokenBookmark",
]
