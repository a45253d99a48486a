"""Per-person schedule summaries and a human-readable report."""

from dataclasses import asdict, dataclass
from datetime import tzinfo
from typing import Any, Dict, Iterable, List, Optional

from ..models.block import BlockStatus, TimeBlock
from ..models.task import CompanyConfig, Employee, Task
from ..utils.datetime_utils import (
    calculate_business_duration,
    parse_session_timestamp,
    parse_timestamp,
)
from ..utils.duration import format_duration


@dataclass
class PersonSummary:
    """Aggregates over one person's blocks."""

    person_id: str
    task_count: int = 0
    session_hours: float = 0.0
    completed_hours: float = 0.0
    planned_hours: float = 0.0
    split_tasks: int = 0
    last_planned_date: Optional[str] = None
    average_cycle_hours: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return asdict(self)


def format_hour(hour: float) -> str:
    """Fractional hour of day as HH:MM."""
    minutes = int(round(hour * 60))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _cycle_hours(task: Task, config: CompanyConfig, tz: Optional[tzinfo]) -> Optional[float]:
    """Business hours from creation to completion of a done task."""
    created = parse_timestamp(task.created_at, tz)
    completed = parse_session_timestamp(task.completed_at)
    if created is None or completed is None or completed <= created:
        return None
    return calculate_business_duration(created, completed, config, tz)


def summarize_schedule(
    schedule: Dict[str, List[TimeBlock]],
    tasks: Iterable[Task],
    config: CompanyConfig,
    tz: Optional[tzinfo] = None,
) -> Dict[str, PersonSummary]:
    """Compute a summary for every person in the schedule."""
    tasks = list(tasks)
    summaries = {}

    for person_id, blocks in schedule.items():
        own = [t for t in tasks if t.assigned_to == person_id]
        summary = PersonSummary(person_id=person_id, task_count=len(own))

        task_dates: Dict[str, set] = {}
        for block in blocks:
            task_dates.setdefault(block.task_id, set()).add(block.date)
            if block.is_session:
                summary.session_hours += block.hours
                if block.status is BlockStatus.COMPLETED:
                    summary.completed_hours += block.hours
            else:
                summary.planned_hours += block.hours
                if summary.last_planned_date is None or block.date > summary.last_planned_date:
                    summary.last_planned_date = block.date

        summary.split_tasks = sum(1 for dates in task_dates.values() if len(dates) > 1)

        cycles = [c for c in (_cycle_hours(t, config, tz) for t in own if t.is_done) if c is not None]
        if cycles:
            summary.average_cycle_hours = round(sum(cycles) / len(cycles), 4)

        summary.session_hours = round(summary.session_hours, 4)
        summary.completed_hours = round(summary.completed_hours, 4)
        summary.planned_hours = round(summary.planned_hours, 4)
        summaries[person_id] = summary

    return summaries


def format_schedule(
    schedule: Dict[str, List[TimeBlock]],
    developers: Iterable[Employee] = (),
    tasks: Iterable[Task] = (),
) -> str:
    """Generate a human-readable listing of every person's blocks."""
    names = {d.id: d.name for d in developers}
    titles = {t.id: t.name for t in tasks}
    lines = ["=== Developer Timeline ==="]

    for person_id, blocks in schedule.items():
        label = names.get(person_id) or person_id
        lines.append("")
        lines.append(f"{label} ({person_id}):")
        if not blocks:
            lines.append("  (no blocks)")
            continue

        current_date = None
        for block in blocks:
            if block.date != current_date:
                current_date = block.date
                lines.append(f"  {current_date}")
            kind = "session" if block.is_session else "plan"
            title = titles.get(block.task_id) or block.task_id
            lines.append(
                f"    {format_hour(block.start_time)}-{format_hour(block.end_time)}"
                f"  {title:<30} {block.status.value:<12} {kind:<8} {format_duration(block.hours)}"
            )

    lines.append("=" * 50)
    return "\n".join(lines)
