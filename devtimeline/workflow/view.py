"""Helpers for choosing what the timeline shows and from when."""

from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional, Union

from ..models.block import TimeBlock
from ..models.task import CompanyConfig, Task, TaskStatus
from ..utils.datetime_utils import hour_of_day, local_midnight, to_local

TIMELINE_STATUSES = frozenset({
    TaskStatus.IN_PROGRESS,
    TaskStatus.DONE,
    TaskStatus.TODO,
    TaskStatus.ON_HOLD,
})


def filter_timeline_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Tasks the timeline simulates; backlog stays off the timeline."""
    return [t for t in tasks if t.status in TIMELINE_STATUSES]


def simulation_start_date(
    view_date: Union[date, datetime],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """Midnight of the viewed day or of today, whichever is earlier.

    Viewing the past replays history from that day; viewing today or later
    projects the current backlog from today.
    """
    return min(local_midnight(view_date, tz), local_midnight(now, tz))


def default_view_date(now: datetime, config: CompanyConfig, tz: Optional[tzinfo] = None) -> date:
    """Today, or tomorrow once the working day is over."""
    local = to_local(now, tz)
    if hour_of_day(local, tz) >= config.end_hour:
        return local.date() + timedelta(days=1)
    return local.date()


def blocks_for_day(schedule: Dict[str, List[TimeBlock]], date_key: str) -> Dict[str, List[TimeBlock]]:
    """Each person's blocks on a single date."""
    return {
        person_id: [b for b in blocks if b.date == date_key]
        for person_id, blocks in schedule.items()
    }
