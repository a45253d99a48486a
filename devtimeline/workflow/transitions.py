"""Task state transitions and work-session lifecycle.

Every function returns updated copies; callers persist them and re-run the
scheduler.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional

from ..models.block import TimeBlock
from ..models.task import CompanyConfig, Priority, Task, TaskStatus, WorkSession
from ..utils.datetime_utils import calculate_business_duration, parse_timestamp

logger = logging.getLogger(__name__)


class TaskNotFoundError(ValueError):
    """Raised when a transition names a task that is not in the given list."""


class CompletionBlockedError(ValueError):
    """Raised when an earlier pending task must be completed first."""

    def __init__(self, task_id: str, blocking_task_id: str, blocking_task_name: str = ''):
        self.task_id = task_id
        self.blocking_task_id = blocking_task_id
        self.blocking_task_name = blocking_task_name
        label = blocking_task_name or blocking_task_id
        super().__init__(
            f"Complete '{label}' before '{task_id}', or raise '{task_id}' to P0"
        )


def _aware(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _stamp(now: datetime) -> str:
    """UTC ISO timestamp with an explicit offset."""
    return _aware(now).astimezone(timezone.utc).isoformat()


def start_session(task: Task, now: datetime) -> Task:
    """Open a session unless one is already running."""
    if task.open_session() is not None:
        return task
    session = WorkSession(start_time=_stamp(now), status=TaskStatus.IN_PROGRESS.value)
    return replace(task, sessions=list(task.sessions) + [session])


def close_open_session(task: Task, now: datetime, status: Optional[str] = None) -> Task:
    """Set end_time on any open session."""
    if not any(s.is_open for s in task.sessions):
        return task
    sessions = [
        replace(s, end_time=_stamp(now), status=status or s.status) if s.is_open else s
        for s in task.sessions
    ]
    return replace(task, sessions=sessions)


def _find(tasks: Iterable[Task], task_id: str) -> Task:
    for task in tasks:
        if task.id == task_id:
            return task
    raise TaskNotFoundError(f"Task not found: {task_id}")


def pick_task(tasks: List[Task], task_id: str, now: datetime) -> List[Task]:
    """Start working on a task, pausing whatever its assignee had in progress.

    Returns the tasks that changed: paused ones first, the picked task last.
    """
    target = _find(tasks, task_id)
    stamp = _stamp(now)
    changed = []

    if target.assigned_to is not None:
        for other in tasks:
            if (
                other.id != target.id
                and other.assigned_to == target.assigned_to
                and other.status is TaskStatus.IN_PROGRESS
            ):
                paused = replace(other, status=TaskStatus.TODO, updated_at=stamp)
                changed.append(close_open_session(paused, now, status='paused'))
                logger.info("Paused %s to pick up %s", other.id, target.id)

    picked = replace(
        target,
        status=TaskStatus.IN_PROGRESS,
        assigned_date=stamp,
        updated_at=stamp,
    )
    changed.append(start_session(picked, now))
    return changed


def first_pending_task_id(blocks: Iterable[TimeBlock], tasks: Iterable[Task]) -> Optional[str]:
    """Task of the earliest block that is not done yet."""
    by_id: Dict[str, Task] = {t.id: t for t in tasks}
    for block in sorted(blocks, key=TimeBlock.sort_key):
        task = by_id.get(block.task_id)
        if task is not None and not task.is_done:
            return task.id
    return None


def complete_task(
    task: Task,
    now: datetime,
    config: CompanyConfig,
    schedule: Optional[Dict[str, List[TimeBlock]]] = None,
    tasks: Optional[List[Task]] = None,
    tz: Optional[tzinfo] = None,
) -> Task:
    """Mark a task done, recording business hours since creation as time spent.

    With a schedule, tasks must be completed in timeline order unless they
    are P0 or currently in progress.
    """
    bypass = task.priority is Priority.P0 or task.status is TaskStatus.IN_PROGRESS
    if not bypass and task.assigned_to and schedule is not None:
        known = tasks if tasks is not None else [task]
        blocking_id = first_pending_task_id(schedule.get(task.assigned_to, []), known)
        if blocking_id is not None and blocking_id != task.id:
            blocking = _find(known, blocking_id)
            raise CompletionBlockedError(task.id, blocking_id, blocking.name)

    now = _aware(now)
    started = parse_timestamp(task.created_at, tz) or now
    time_spent = calculate_business_duration(started, now, config, tz)
    stamp = _stamp(now)

    done = replace(
        task,
        status=TaskStatus.DONE,
        time_spent=time_spent,
        completed_at=stamp,
        updated_at=stamp,
    )
    logger.info("Completed %s after %.2f business hours", task.id, time_spent)
    return close_open_session(done, now, status='completed')


def hold_task(task: Task, now: datetime) -> Task:
    """Put a task on hold and stop its running session."""
    held = replace(task, status=TaskStatus.ON_HOLD, updated_at=_stamp(now))
    return close_open_session(held, now, status='paused')
