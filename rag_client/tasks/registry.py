"""In-memory table of active ingestion tasks with change notification.

The registry is the single source of truth for the tasks shown to the
user. Pollers and explicit caller actions mutate it; views subscribe to it.
Construct one per application and pass it to the components that need it.
"""

import logging
from collections.abc import Callable

from rag_client.models.schemas import Task

logger = logging.getLogger(__name__)

TaskSnapshot = tuple[Task, ...]
Subscriber = Callable[[TaskSnapshot], None]

_UPDATABLE_FIELDS = frozenset({"filename", "status", "step", "error"})


class TaskRegistry:
    """Ordered set of tasks keyed by task id, plus its subscribers.

    Every call to add_task, update_task or remove_task is followed,
    synchronously, by a notification carrying a fresh snapshot. Records are
    immutable, so subscribers can keep a snapshot without copying it.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._subscribers: list[Subscriber] = []

    @property
    def tasks(self) -> TaskSnapshot:
        return tuple(self._tasks.values())

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def add_task(self, task_id: str, filename: str) -> None:
        """Register a job as queued. Adding a known task id changes nothing."""
        if task_id in self._tasks:
            logger.debug(f"Task {task_id} already registered")
        else:
            self._tasks[task_id] = Task(task_id=task_id, filename=filename)
            logger.info(f"Tracking task {task_id} ({filename})")
        self._emit()

    def update_task(self, task_id: str, **fields: object) -> None:
        """Merge fields into an existing task.

        Args:
            task_id: Task to update. Unknown ids are ignored.
            **fields: Any of filename, status, step, error.

        Raises:
            TypeError: If a field name is not updatable.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update task field(s): {', '.join(sorted(unknown))}")

        current = self._tasks.get(task_id)
        if current is not None:
            updated = Task.model_validate({**current.model_dump(), **fields})
            if current.status.can_transition_to(updated.status):
                self._tasks[task_id] = updated
            else:
                logger.warning(
                    f"Ignoring update for task {task_id}: "
                    f"{current.status.value} -> {updated.status.value} is not allowed"
                )
        self._emit()

    def remove_task(self, task_id: str) -> None:
        if self._tasks.pop(task_id, None) is not None:
            logger.info(f"Stopped tracking task {task_id}")
        self._emit()

    def pending_count(self) -> int:
        """Number of tasks that have not reached a terminal status."""
        return sum(1 for t in self._tasks.values() if not t.status.is_terminal)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback.

        Args:
            callback: Called with the full task snapshot after every mutation.

        Returns:
            A function removing the subscription. Calling it twice is harmless.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self) -> None:
        snapshot = self.tasks
        # Copy: subscribers may unsubscribe while being notified
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Task subscriber failed")
