"""Time block model produced by the scheduler."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List


class BlockStatus(str, Enum):
    """How a block should be rendered."""

    COMPLETED = 'completed'
    BACKLOG = 'backlog'
    IN_PROGRESS = 'in-progress'
    PLANNED = 'planned'


@dataclass
class TimeBlock:
    """One contiguous interval of one task for one person on one day."""

    task_id: str
    date: str
    start_time: float
    end_time: float
    status: BlockStatus = BlockStatus.PLANNED
    is_session: bool = False

    @property
    def hours(self) -> float:
        return self.end_time - self.start_time

    def sort_key(self):
        return (self.date, self.start_time)

    def to_dict(self) -> Dict[str, Any]:
        """Shape consumed by the timeline renderer."""
        return {
            'taskId': self.task_id,
            'date': self.date,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'status': self.status.value,
            'isSession': self.is_session,
        }


def schedule_to_dict(schedule: Dict[str, List[TimeBlock]]) -> Dict[str, List[Dict[str, Any]]]:
    """Convert a full schedule into JSON-ready data."""
    return {
        person_id: [block.to_dict() for block in blocks]
        for person_id, blocks in schedule.items()
    }
