"""
In-process task scheduling.

Schedules are kept in memory and fired from asyncio tasks, so they live as
long as the process that created them.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Literal

from pydantic import BaseModel

from .exceptions import InvalidOperationError
from .models import gen_id

logger = logging.getLogger(__name__)


class Schedule(BaseModel):
    id: str
    type: Literal["scheduled", "delayed"]
    time: float  # epoch seconds at which the task fires
    payload: str
    delayInSeconds: float | None = None


ScheduleCallback = Callable[[str, Schedule], Awaitable[Any]]


class TaskScheduler:
    """
    Fires a callback with a payload at a given time or after a delay.

    Args:
        callback: Coroutine function called as ``callback(payload, schedule)``
    """

    def __init__(self, callback: ScheduleCallback):
        self._callback = callback
        self._schedules: dict[str, Schedule] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def schedule(self, when: datetime | int | float, payload: str) -> Schedule:
        """
        Schedule ``payload`` for delivery.

        Args:
            when: A datetime for a fixed time, or a number of seconds for a delay

        Returns:
            The created schedule

        Raises:
            InvalidOperationError: If the time is in the past or the delay negative
        """
        now = time.time()
        if isinstance(when, datetime):
            if when.tzinfo is None:
                when = when.replace(tzinfo=timezone.utc)
            fire_at = when.timestamp()
            if fire_at < now:
                raise InvalidOperationError(f"Cannot schedule a task in the past: {when.isoformat()}")
            schedule = Schedule(id=gen_id("sch_"), type="scheduled", time=fire_at, payload=payload)
        else:
            if when < 0:
                raise InvalidOperationError(f"Delay must not be negative: {when}")
            schedule = Schedule(
                id=gen_id("sch_"),
                type="delayed",
                time=now + when,
                payload=payload,
                delayInSeconds=when,
            )

        self._schedules[schedule.id] = schedule
        self._tasks[schedule.id] = asyncio.create_task(self._fire(schedule))
        logger.info("Scheduled task %s (%s) for %s", schedule.id, schedule.type, schedule.time)
        return schedule

    async def _fire(self, schedule: Schedule) -> None:
        await asyncio.sleep(max(0.0, schedule.time - time.time()))
        self._schedules.pop(schedule.id, None)
        self._tasks.pop(schedule.id, None)
        logger.info("Running scheduled task %s", schedule.id)
        try:
            await self._callback(schedule.payload, schedule)
        except Exception:
            logger.exception("Scheduled task %s failed", schedule.id)

    def get_schedules(self) -> list[Schedule]:
        """List pending schedules, soonest first."""
        return sorted(self._schedules.values(), key=lambda s: s.time)

    def cancel_schedule(self, schedule_id: str) -> bool:
        """
        Cancel a pending schedule.

        Returns:
            True if a pending schedule was cancelled
        """
        task = self._tasks.pop(schedule_id, None)
        self._schedules.pop(schedule_id, None)
        if task is None:
            return False
        task.cancel()
        logger.info("Cancelled scheduled task %s", schedule_id)
        return True

    def shutdown(self) -> None:
        """Cancel every pending schedule."""
        for schedule_id in list(self._tasks):
            self.cancel_schedule(schedule_id)
