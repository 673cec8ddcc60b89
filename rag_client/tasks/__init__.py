"""Background ingestion task tracking.

Responsibilities:
    - Registry of active tasks with snapshot notifications
    - One status poller per task with back-off on transient failures
    - Delayed removal of finished tasks
    - View-side consumer with explicit cleanup
"""

from rag_client.tasks.clock import AsyncioClock, Clock
from rag_client.tasks.notifications import UploadNotifications, upload_and_track
from rag_client.tasks.poller import PollerPool, TaskPoller
from rag_client.tasks.registry import TaskRegistry

__all__ = [
    "AsyncioClock",
    "Clock",
    "PollerPool",
    "TaskPoller",
    "TaskRegistry",
    "UploadNotifications",
    "upload_and_track",
]
