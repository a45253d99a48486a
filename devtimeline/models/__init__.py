"""Data models."""

from .block import BlockStatus, TimeBlock, schedule_to_dict
from .task import CompanyConfig, Employee, Priority, Task, TaskStatus, WorkSession

__all__ = [
    'BlockStatus',
    'TimeBlock',
    'schedule_to_dict',
    'CompanyConfig',
    'Employee',
    'Priority',
    'Task',
    'TaskStatus',
    'WorkSession',
]
