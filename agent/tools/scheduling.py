"""
Task scheduling tools.

The tools receive the session's TaskScheduler as run dependencies; fired
tasks come back to the session as ``Running scheduled task: ...`` messages.
"""

import logging
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_ai import RunContext

from core import InvalidOperationError, TaskScheduler

logger = logging.getLogger(__name__)


class ScheduleInput(BaseModel):
    """When a task should run."""

    type: Literal["scheduled", "delayed", "no-schedule"]
    date: datetime | None = Field(
        default=None, description="Time to run the task at, for type 'scheduled'"
    )
    delayInSeconds: int | None = Field(
        default=None, description="Seconds to wait before running, for type 'delayed'"
    )


def schedule_task(ctx: RunContext[TaskScheduler], description: str, when: ScheduleInput) -> str:
    """
    Schedule a task to be executed at a later time.

    Args:
        description: What the task should do
        when: A fixed date or a delay in seconds
    """
    if when.type == "scheduled" and when.date is not None:
        target: datetime | int = when.date
    elif when.type == "delayed" and when.delayInSeconds is not None:
        target = when.delayInSeconds
    else:
        return "Not a valid schedule input"

    try:
        schedule = ctx.deps.schedule(target, description)
    except InvalidOperationError as e:
        return f"Error scheduling task: {e}"

    fire_at = datetime.fromtimestamp(schedule.time, tz=timezone.utc).isoformat()
    return f"Task scheduled for {fire_at} (id: {schedule.id})"


def get_scheduled_tasks(ctx: RunContext[TaskScheduler]) -> str | list[dict]:
    """List all tasks that have been scheduled."""
    schedules = ctx.deps.get_schedules()
    if not schedules:
        return "No scheduled tasks found."
    return [schedule.model_dump() for schedule in schedules]


def cancel_scheduled_task(ctx: RunContext[TaskScheduler], taskId: str) -> str:
    """
    Cancel a scheduled task using its ID.

    Args:
        taskId: The ID of the task to cancel
    """
    if ctx.deps.cancel_schedule(taskId):
        return f"Task {taskId} has been successfully canceled."
    return f"No scheduled task with id {taskId}."
