"""Upload notifications: the view-side consumer of the task registry.

A view subscribes to the registry, starts polling for every task it sees
and, when torn down, hands every poller and its subscription back. Closing a
view never changes task data; tasks keep their state for other views.
"""

import logging
from collections.abc import Callable

from rag_client.api.client import RagApiClient
from rag_client.models.schemas import STATUS_LABELS, Task, UploadResponse
from rag_client.tasks.poller import PollerPool
from rag_client.tasks.registry import TaskRegistry, TaskSnapshot

logger = logging.getLogger(__name__)


class UploadNotifications:
    """Live list of ingestion tasks for one view.

    Args:
        registry: Shared task registry.
        pollers: Shared poller pool; guarantees one poller per task id.
        on_change: Called with each new snapshot (e.g. to re-render).
        on_all_complete: Called once per task after it finished and was
            removed from the registry (e.g. to refresh a document list).
    """

    def __init__(
        self,
        registry: TaskRegistry,
        pollers: PollerPool,
        *,
        on_change: Callable[[TaskSnapshot], None] | None = None,
        on_all_complete: Callable[[], None] | None = None,
    ) -> None:
        self._registry = registry
        self._pollers = pollers
        self._on_change = on_change
        self._on_all_complete = on_all_complete
        self._releases: dict[str, Callable[[], None]] = {}
        self._unsubscribe: Callable[[], None] | None = None
        self.tasks: TaskSnapshot = ()

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    @property
    def pending_count(self) -> int:
        return sum(1 for t in self.tasks if not t.status.is_terminal)

    @staticmethod
    def label(task: Task) -> str:
        """Line shown under the filename: the error, the step, or the status label."""
        return task.error or task.step or STATUS_LABELS[task.status]

    def start(self) -> Callable[[], None]:
        """Subscribe to the registry and poll the tasks already registered.

        Returns:
            The cleanup handle (same as `close`).
        """
        if self._unsubscribe is None:
            self._unsubscribe = self._registry.subscribe(self._on_tasks)
            self._on_tasks(self._registry.tasks)
        return self.close

    def close(self) -> None:
        """Release every poller and the registry subscription."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for release in self._releases.values():
            release()
        self._releases.clear()

    def _on_tasks(self, tasks: TaskSnapshot) -> None:
        if not self.active:
            return
        self.tasks = tasks
        current = {t.task_id for t in tasks}

        for task_id in list(self._releases):
            if task_id not in current:
                self._releases.pop(task_id)()

        for task in tasks:
            if task.task_id not in self._releases:
                self._releases[task.task_id] = self._pollers.acquire(
                    task.task_id, self._on_all_complete
                )

        if self._on_change:
            self._on_change(tasks)


async def upload_and_track(
    client: RagApiClient,
    registry: TaskRegistry,
    filename: str,
    content: bytes,
    build_graph: bool = False,
) -> UploadResponse:
    """Submit a document and register the returned job for tracking.

    Returns:
        The backend's upload response.
    """
    upload = await client.upload_document(filename, content, build_graph=build_graph)
    registry.add_task(upload.task_id, upload.filename or filename)
    return upload
