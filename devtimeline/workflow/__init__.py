"""Timeline view helpers and task state transitions."""

from .transitions import (
    CompletionBlockedError,
    TaskNotFoundError,
    close_open_session,
    complete_task,
    first_pending_task_id,
    hold_task,
    pick_task,
    start_session,
)
from .view import blocks_for_day, default_view_date, filter_timeline_tasks, simulation_start_date

__all__ = [
    'CompletionBlockedError',
    'TaskNotFoundError',
    'close_open_session',
    'complete_task',
    'first_pending_task_id',
    'hold_task',
    'pick_task',
    'start_session',
    'blocks_for_day',
    'default_view_date',
    'filter_timeline_tasks',
    'simulation_start_date',
]
