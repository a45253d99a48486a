"""Task, session, employee and company configuration models."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from datetime import timezone as dt_timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..utils.duration import parse_duration_to_hours

Timestamp = Union[str, datetime, None]

_OFFSET = re.compile(r"^([+-])(\d{2}):?(\d{2})?$")


class TaskStatus(str, Enum):
    """Closed set of task states."""

    BACKLOG = 'backlog'
    TODO = 'todo'
    IN_PROGRESS = 'in-progress'
    DONE = 'done'
    ON_HOLD = 'on-hold'

    @classmethod
    def parse(cls, value: Any) -> 'TaskStatus':
        """Normalize a free-form status string; unknown values become BACKLOG."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.BACKLOG
        text = str(value).strip().lower().replace('_', '-').replace(' ', '-')
        text = _STATUS_ALIASES.get(text, text)
        try:
            return cls(text)
        except ValueError:
            return cls.BACKLOG


_STATUS_ALIASES = {
    'inprogress': 'in-progress',
    'completed': 'done',
    'onhold': 'on-hold',
    'to-do': 'todo',
}


class Priority(str, Enum):
    """Task priority, P0 being the most urgent."""

    P0 = 'P0'
    P1 = 'P1'
    P2 = 'P2'

    @property
    def ordinal(self) -> int:
        return int(self.value[1])

    @classmethod
    def parse(cls, value: Any) -> 'Priority':
        """Normalize a priority label; unknown values become P2."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.P2
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.P2


@dataclass
class WorkSession:
    """One contiguous interval of actual work on a task."""

    start_time: Timestamp = None
    end_time: Timestamp = None
    status: Optional[str] = None
    status_label: Optional[str] = None
    completion_status: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None or self.end_time == ''

    @property
    def display_label(self) -> Optional[str]:
        """Most specific upstream status hint, if any."""
        for label in (self.status_label, self.completion_status, self.status):
            if label:
                return str(label)
        return None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'WorkSession':
        return cls(
            start_time=record.get('start_time') or None,
            end_time=record.get('end_time') or None,
            status=record.get('status'),
            status_label=record.get('status_label'),
            completion_status=record.get('completion_status'),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            'start_time': _timestamp_to_wire(self.start_time),
            'end_time': _timestamp_to_wire(self.end_time),
            'status': self.status,
            'status_label': self.status_label,
            'completion_status': self.completion_status,
        }


@dataclass
class Task:
    """A unit of work, as supplied by the task store."""

    id: str
    name: str = ''
    status: TaskStatus = TaskStatus.BACKLOG
    assigned_to: Optional[str] = None
    priority: Priority = Priority.P2
    duration: float = 0.0
    created_at: Timestamp = None
    assigned_date: Timestamp = None
    updated_at: Timestamp = None
    due_date: Timestamp = None
    completed_at: Timestamp = None
    time_spent: Optional[float] = None
    sessions: List[WorkSession] = field(default_factory=list)

    def __post_init__(self):
        """Normalize status, priority and duration at the boundary."""
        self.status = TaskStatus.parse(self.status)
        self.priority = Priority.parse(self.priority)
        self.duration = parse_duration_to_hours(self.duration)
        if self.time_spent is not None:
            spent = parse_duration_to_hours(self.time_spent)
            self.time_spent = spent if spent > 0 else None

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE

    def open_session(self) -> Optional[WorkSession]:
        """The currently active session, if there is one."""
        for session in reversed(self.sessions):
            if session.is_open and session.start_time:
                return session
        return None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Task':
        """Build a task from the API's JSON record."""
        raw_sessions = record.get('task_sessions') or []
        sessions = []
        if isinstance(raw_sessions, list):
            sessions = [
                WorkSession.from_record(s) for s in raw_sessions if isinstance(s, dict)
            ]

        return cls(
            id=str(record.get('id', record.get('task_id', ''))),
            name=record.get('task_name') or '',
            status=record.get('task_status'),
            assigned_to=record.get('task_assigned_to') or None,
            priority=record.get('task_priority'),
            duration=record.get('task_duration'),
            created_at=record.get('task_created_at') or None,
            assigned_date=record.get('task_assigned_date') or None,
            updated_at=record.get('task_updated_at') or None,
            due_date=record.get('task_due_date') or None,
            completed_at=record.get('completed_at') or None,
            time_spent=record.get('time_spent'),
            sessions=sessions,
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialize back to the API's JSON record shape."""
        return {
            'id': self.id,
            'task_name': self.name,
            'task_status': self.status.value,
            'task_assigned_to': self.assigned_to,
            'task_assigned_date': _timestamp_to_wire(self.assigned_date),
            'task_due_date': _timestamp_to_wire(self.due_date),
            'task_priority': self.priority.value,
            'task_duration': self.duration,
            'task_created_at': _timestamp_to_wire(self.created_at),
            'task_updated_at': _timestamp_to_wire(self.updated_at),
            'time_spent': self.time_spent,
            'completed_at': _timestamp_to_wire(self.completed_at),
            'task_sessions': [s.to_record() for s in self.sessions],
        }


@dataclass
class Employee:
    """A schedulable person."""

    id: str
    name: str = ''
    designation: str = ''
    manager_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Employee':
        return cls(
            id=str(record.get('emp_id', record.get('id', ''))),
            name=record.get('emp_name') or '',
            designation=record.get('emp_designation') or '',
            manager_id=record.get('manager_id'),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            'emp_id': self.id,
            'emp_name': self.name,
            'emp_designation': self.designation,
            'manager_id': self.manager_id,
        }


@dataclass
class CompanyConfig:
    """Working-hours window shared by everyone."""

    start_hour: int = 10
    end_hour: int = 19
    timezone: Optional[str] = None

    def __post_init__(self):
        """Reject a window the simulator cannot walk."""
        if not (0 <= self.start_hour < self.end_hour <= 24):
            raise ValueError(
                f"Invalid working hours: start_hour={self.start_hour}, end_hour={self.end_hour}"
            )

    def get_tzinfo(self) -> Optional[tzinfo]:
        """Resolve the configured zone, or None for the process's local zone.

        Accepts ``UTC``, a fixed offset such as ``+05:30``, or an IANA name.
        """
        if not self.timezone:
            return None
        name = str(self.timezone).strip()
        if name.upper() in ('UTC', 'Z'):
            return dt_timezone.utc
        match = _OFFSET.match(name)
        if match:
            sign = -1 if match.group(1) == '-' else 1
            offset = timedelta(hours=int(match.group(2)), minutes=int(match.group(3) or 0))
            return dt_timezone(sign * offset)
        from zoneinfo import ZoneInfo
        return ZoneInfo(name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompanyConfig':
        """Accept either the API's camelCase keys or the config file's snake_case keys."""
        if 'company' in data and isinstance(data['company'], dict):
            data = data['company']
        start = data.get('start_hour', data.get('startHour', 10))
        end = data.get('end_hour', data.get('endHour', 19))
        return cls(
            start_hour=int(start),
            end_hour=int(end),
            timezone=data.get('timezone'),
        )


def _timestamp_to_wire(value: Timestamp) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value
