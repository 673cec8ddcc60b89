"""Status polling for ingestion tasks.

A TaskPoller runs one polling loop for one task. The PollerPool owns every
poller of an application and guarantees that at most one loop is alive per
task id, however many views ask for it.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from rag_client.errors import RagClientError
from rag_client.models.schemas import STATUS_LABELS, TaskStatusResponse
from rag_client.tasks.clock import AsyncioClock, Clock, TimerHandle
from rag_client.tasks.registry import TaskRegistry

if TYPE_CHECKING:
    from rag_client.api.client import RagApiClient

logger = logging.getLogger(__name__)

FetchStatus = Callable[[str], Awaitable[TaskStatusResponse]]

DEFAULT_POLL_INTERVAL = 2.5
DEFAULT_REMOVAL_DELAY = 5.0

# Failures worth retrying: network errors, error responses, non-JSON bodies, invalid payloads
TRANSIENT_ERRORS = (httpx.HTTPError, RagClientError, ValidationError)


class TaskPoller:
    """Poll one task's status until it reaches a terminal state.

    After a failed query the next attempt waits twice the interval; the
    wait goes back to the plain interval after the next success.
    """

    def __init__(
        self,
        task_id: str,
        fetch_status: FetchStatus,
        on_update: Callable[[TaskStatusResponse], None],
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock: Clock | None = None,
    ) -> None:
        self.task_id = task_id
        self._fetch_status = fetch_status
        self._on_update = on_update
        self._interval = interval
        self._clock = clock or AsyncioClock()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> Callable[[], None]:
        """Start polling on the running event loop.

        Returns:
            The cleanup handle (same as `stop`).
        """
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self._run(), name=f"poll-task-{self.task_id}"
            )
            self._task.add_done_callback(self._log_crash)
        return self.stop

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            logger.debug(f"Stopping poller for task {self.task_id}")
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until the loop has finished or been cancelled."""
        if self._task is not None:
            await asyncio.wait([self._task])

    async def _run(self) -> None:
        while True:
            try:
                status = await self._fetch_status(self.task_id)
            except TRANSIENT_ERRORS as e:
                delay = self._interval * 2
                logger.warning(f"Polling task {self.task_id} failed, retrying in {delay}s: {e}")
                await self._clock.sleep(delay)
                continue

            self._on_update(status)
            if status.status.is_terminal:
                logger.info(f"Task {self.task_id} finished: {status.status.value}")
                return
            await self._clock.sleep(self._interval)

    def _log_crash(self, task: asyncio.Task[None]) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                f"Poller for task {self.task_id} crashed", exc_info=task.exception()
            )


class PollerPool:
    """Shared, reference-counted pollers feeding a TaskRegistry.

    The first `acquire` for a task id starts its poller and the last release
    stops it. Status updates are merged into the registry. Once a task turns
    terminal it is removed from the registry after `removal_delay`, and every
    completion callback registered for it fires once.
    """

    def __init__(
        self,
        registry: TaskRegistry,
        fetch_status: FetchStatus,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        removal_delay: float = DEFAULT_REMOVAL_DELAY,
        clock: Clock | None = None,
    ) -> None:
        self._registry = registry
        self._fetch_status = fetch_status
        self._interval = interval
        self._removal_delay = removal_delay
        self._clock = clock or AsyncioClock()
        self._pollers: dict[str, TaskPoller] = {}
        self._refs: dict[str, int] = {}
        self._on_complete: dict[str, list[Callable[[], None]]] = {}
        self._removals: dict[str, TimerHandle] = {}

    @classmethod
    def for_client(
        cls,
        client: "RagApiClient",
        registry: TaskRegistry,
        clock: Clock | None = None,
    ) -> "PollerPool":
        """Create a pool polling through `client` with its configured timings."""
        return cls(
            registry,
            client.get_task_status,
            interval=client.config.poll_interval,
            removal_delay=client.config.removal_delay,
            clock=clock,
        )

    @property
    def active_task_ids(self) -> list[str]:
        return [task_id for task_id, p in self._pollers.items() if p.running]

    def is_polling(self, task_id: str) -> bool:
        poller = self._pollers.get(task_id)
        return poller is not None and poller.running

    def acquire(
        self, task_id: str, on_complete: Callable[[], None] | None = None
    ) -> Callable[[], None]:
        """Make sure `task_id` is being polled.

        Args:
            task_id: Task to poll.
            on_complete: Called once, after the finished task has been
                removed from the registry, unless released before that.

        Returns:
            A release function. The poller stops when every holder released.
        """
        if not self.is_polling(task_id) and task_id not in self._removals:
            poller = TaskPoller(
                task_id,
                self._fetch_status,
                partial(self._handle_update, task_id),
                interval=self._interval,
                clock=self._clock,
            )
            poller.start()
            self._pollers[task_id] = poller
            logger.debug(f"Started poller for task {task_id}")

        self._refs[task_id] = self._refs.get(task_id, 0) + 1
        if on_complete is not None:
            self._on_complete.setdefault(task_id, []).append(on_complete)

        released = False

        def release() -> None:
            nonlocal released
            if not released:
                released = True
                self._release(task_id, on_complete)

        return release

    def close(self) -> None:
        """Stop every poller and cancel pending removals."""
        for poller in self._pollers.values():
            poller.stop()
        for handle in self._removals.values():
            handle.cancel()
        self._pollers.clear()
        self._refs.clear()
        self._on_complete.clear()
        self._removals.clear()

    def _release(self, task_id: str, on_complete: Callable[[], None] | None) -> None:
        callbacks = self._on_complete.get(task_id, [])
        if on_complete in callbacks:
            callbacks.remove(on_complete)

        refs = self._refs.get(task_id, 0) - 1
        if refs > 0:
            self._refs[task_id] = refs
            return

        self._refs.pop(task_id, None)
        self._on_complete.pop(task_id, None)
        poller = self._pollers.pop(task_id, None)
        if poller is not None:
            poller.stop()

    def _handle_update(self, task_id: str, status: TaskStatusResponse) -> None:
        self._registry.update_task(
            task_id,
            status=status.status,
            step=status.step or STATUS_LABELS[status.status],
            error=status.error or None,
        )
        if status.status.is_terminal and task_id not in self._removals:
            self._pollers.pop(task_id, None)
            self._removals[task_id] = self._clock.call_later(
                self._removal_delay, partial(self._remove_finished, task_id)
            )

    def _remove_finished(self, task_id: str) -> None:
        self._removals.pop(task_id, None)
        callbacks = self._on_complete.pop(task_id, [])
        self._registry.remove_task(task_id)
        for callback in callbacks:
            callback()
