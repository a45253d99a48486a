"""Task and developer generator for demos and simulation checks."""

import random
from datetime import datetime, timedelta, timezone
from typing import List

from ..models.task import Employee, Task, WorkSession

_NAMES = ['Alice', 'Bob', 'Charlie', 'Dana', 'Eve', 'Farid', 'Grace', 'Hiro']


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).replace(tzinfo=None).isoformat()


class TaskGenerator:
    """Generates deterministic task sets, including session history."""

    def __init__(self, seed: int = 42, config: dict = None):
        """Initialize generator with seed for reproducibility."""
        self.seed = seed
        self.random = random.Random(seed)
        self.config = config or {}
        company = self.config.get('company', {})
        self.start_hour = company.get('start_hour', 10)
        self.end_hour = company.get('end_hour', 19)

    def generate_developers(self, count: int) -> List[Employee]:
        """Generate developers d1..dN."""
        return [
            Employee(
                id=f"d{i + 1}",
                name=_NAMES[i % len(_NAMES)],
                designation='developer',
            )
            for i in range(count)
        ]

    def generate_tasks(
        self,
        count: int,
        developers: List[Employee],
        now: datetime,
    ) -> List[Task]:
        """Generate tasks spread over the last few days, some already worked on."""
        tasks = []
        day_start = now.replace(hour=self.start_hour, minute=0, second=0, microsecond=0)

        for i in range(count):
            # Created within the last three working days, on the quarter hour
            created = day_start - timedelta(days=self.random.randint(0, 3))
            created += timedelta(minutes=15 * self.random.randint(0, (self.end_hour - self.start_hour) * 4 - 1))
            if created > now:
                created = day_start

            # Mix of plain hours and "H:MM" estimates
            if self.random.random() < 0.3:
                duration = f"{self.random.randint(0, 3)}:{self.random.choice(['15', '30', '45'])}"
            else:
                duration = str(self.random.randint(1, 8))

            roll = self.random.random()
            if roll < 0.2:
                status = 'done'
            elif roll < 0.35:
                status = 'in-progress'
            elif roll < 0.45:
                status = 'on-hold'
            elif roll < 0.75:
                status = 'todo'
            else:
                status = 'backlog'

            assignee = self.random.choice(developers).id if developers and self.random.random() < 0.9 else None

            sessions = []
            completed_at = None
            if status in ('done', 'in-progress', 'on-hold') and self.random.random() < 0.7:
                start = created + timedelta(minutes=15 * self.random.randint(0, 8))
                if start < now:
                    length = timedelta(minutes=30 * self.random.randint(1, 6))
                    end = min(start + length, now)
                    open_session = status == 'in-progress' and self.random.random() < 0.6
                    sessions.append(WorkSession(
                        start_time=_iso(start),
                        end_time=None if open_session else _iso(end),
                        status=status,
                    ))
                    if status == 'done':
                        completed_at = _iso(end)
            elif status == 'done':
                completed_at = _iso(min(created + timedelta(hours=2), now))

            tasks.append(Task(
                id=f"task_{i:03d}",
                name=f"Task {i}",
                status=status,
                assigned_to=assignee,
                priority=self.random.choice(['P0', 'P1', 'P1', 'P2', 'P2', 'P2', None]),
                duration=duration,
                created_at=created.isoformat(),
                completed_at=completed_at,
                sessions=sessions,
            ))

        return tasks
