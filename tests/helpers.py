"""Shared test utilities: a virtual clock and SSE frame builders."""

import asyncio
import heapq
import itertools
import json
from collections.abc import Callable
from typing import Any


def sse_line(**payload: Any) -> str:
    """Build one `data:` frame, newline-terminated."""
    return f"data: {json.dumps(payload)}\n"


def sse_body(*events: dict[str, Any]) -> str:
    return "".join(sse_line(**event) for event in events)


async def settle(rounds: int = 50) -> None:
    """Let ready callbacks and woken tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeTimer:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Virtual time: nothing happens until the test calls `advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[tuple[float, int, Callable[[], None], FakeTimer]] = []
        self._seq = itertools.count()

    @property
    def pending(self) -> int:
        return sum(1 for *_, timer in self._timers if not timer.cancelled)

    async def sleep(self, delay: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self.call_later(delay, lambda: future.done() or future.set_result(None))
        await future

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer()
        heapq.heappush(self._timers, (self.now + delay, next(self._seq), callback, timer))
        return timer

    async def advance(self, seconds: float) -> None:
        """Move time forward, firing due timers in order."""
        target = self.now + seconds
        await settle()
        while self._timers and self._timers[0][0] <= target:
            when, _, callback, timer = heapq.heappop(self._timers)
            self.now = when
            if not timer.cancelled:
                callback()
                await settle()
        self.now = target
