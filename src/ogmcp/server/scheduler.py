# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Per-session periodic notifications.

Each session owns one :class:`NotificationScheduler`, which runs three
:class:`PeriodicTask` jobs inside the transport's task group:

* ``resource-updates``: one ``notifications/resources/updated`` per
  subscribed URI per tick.
* ``log-sample``: one ``notifications/message`` at a randomly chosen level,
  subject to the session's log threshold.
* ``stderr``: a ``notifications/stderr`` heartbeat carrying a timestamp.

Every task runs under its own :class:`anyio.CancelScope`. Cancelling the
scheduler cancels each scope exactly once; a task cancelled before it was
ever scheduled exits at its first checkpoint.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
import random
import time
from typing import Any, Protocol

import anyio
from anyio.abc import TaskGroup

from .. import types
from ..utils import get_logger


_logger = get_logger("ogmcp.scheduler")

LOG_SAMPLES: tuple[tuple[str, str], ...] = tuple(
    (level, f"{level.capitalize()}-level message") for level in types.LOG_LEVELS
)


class SchedulerTarget(Protocol):
    id: str

    @property
    def subscriptions(self) -> Sequence[str]: ...

    async def notify_resource_updated(self, uri: str) -> None: ...

    async def log(self, level: types.LoggingLevel, data: Any, *, logger: str | None = None) -> bool: ...

    async def notify_stderr(self, content: str) -> None: ...


class PeriodicTask:
    """A repeating job with an explicit, idempotent cancel."""

    def __init__(self, name: str, interval: float, callback: Callable[[], Awaitable[None]]) -> None:
        self.name = name
        self.interval = interval
        self.ticks = 0
        self._callback = callback
        self._scope = anyio.CancelScope()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def run(self) -> None:
        with self._scope:
            while True:
                await anyio.sleep(self.interval)
                try:
                    await self._callback()
                except Exception:
                    _logger.exception("Periodic task %s failed", self.name)
                self.ticks += 1

    def cancel(self) -> bool:
        """Cancel the task. Returns ``False`` if it was already cancelled."""
        if self._cancelled:
            return False
        self._cancelled = True
        self._scope.cancel()
        return True


class NotificationScheduler:
    def __init__(
        self,
        target: SchedulerTarget,
        *,
        resource_interval: float,
        log_interval: float,
        stderr_interval: float,
        choose: Callable[[Sequence[tuple[str, str]]], tuple[str, str]] = random.choice,
    ) -> None:
        self._target = target
        self._choose = choose
        self._started = False
        self.tasks: tuple[PeriodicTask, ...] = tuple(
            task
            for task in (
                PeriodicTask("resource-updates", resource_interval, self.emit_resource_updates),
                PeriodicTask("log-sample", log_interval, self.emit_log_sample),
                PeriodicTask("stderr", stderr_interval, self.emit_stderr),
            )
            if task.interval > 0
        )

    def start(self, task_group: TaskGroup) -> None:
        if self._started:
            raise RuntimeError("Scheduler already started")
        self._started = True
        for task in self.tasks:
            task_group.start_soon(task.run, name=f"ogmcp:{self._target.id}:{task.name}")

    def cancel(self) -> int:
        """Cancel every task; returns how many were still live."""
        return sum(1 for task in self.tasks if task.cancel())

    async def emit_resource_updates(self) -> None:
        for uri in self._target.subscriptions:
            await self._target.notify_resource_updated(uri)

    async def emit_log_sample(self) -> None:
        level, data = self._choose(LOG_SAMPLES)
        await self._target.log(level, data)  # type: ignore[arg-type]

    async def emit_stderr(self) -> None:
        await self._target.notify_stderr(f"{time.strftime('%H:%M:%S')}: A stderr message")


__all__ = ["LOG_SAMPLES", "NotificationScheduler", "PeriodicTask", "SchedulerTarget"]
