"""Tests for schedule summaries, the text report and the task generator."""

from datetime import timezone

import pytest

from conftest import at, iso
from devtimeline.models.block import BlockStatus, TimeBlock
from devtimeline.models.task import Employee, Task, TaskStatus
from devtimeline.reporting import TaskGenerator, format_hour, format_schedule, summarize_schedule
from devtimeline.utils.duration import parse_duration_to_hours


@pytest.fixture
def schedule():
    return {
        "d1": [
            TimeBlock("A", "2024-03-11", 10.0, 12.0, BlockStatus.COMPLETED, True),
            TimeBlock("B", "2024-03-11", 12.0, 13.0, BlockStatus.IN_PROGRESS, True),
            TimeBlock("B", "2024-03-11", 13.0, 15.0),
            TimeBlock("B", "2024-03-12", 10.0, 11.0),
        ],
        "d2": [],
    }


@pytest.fixture
def tasks():
    return [
        Task(id="A", name="Ship release", status="done", assigned_to="d1",
             created_at=iso(10), completed_at=iso(12)),
        Task(id="B", name="Refactor auth", status="in-progress", assigned_to="d1", duration=4),
    ]


class TestSummary:
    def test_person_totals(self, schedule, tasks, config):
        summaries = summarize_schedule(schedule, tasks, config, timezone.utc)
        d1 = summaries["d1"]
        assert d1.task_count == 2
        assert d1.session_hours == pytest.approx(3.0)
        assert d1.completed_hours == pytest.approx(2.0)
        assert d1.planned_hours == pytest.approx(3.0)
        assert d1.split_tasks == 1
        assert d1.last_planned_date == "2024-03-12"
        assert d1.average_cycle_hours == pytest.approx(2.0)

    def test_empty_person(self, schedule, tasks, config):
        d2 = summarize_schedule(schedule, tasks, config)["d2"]
        assert d2.to_dict() == {
            "person_id": "d2",
            "task_count": 0,
            "session_hours": 0.0,
            "completed_hours": 0.0,
            "planned_hours": 0.0,
            "split_tasks": 0,
            "last_planned_date": None,
            "average_cycle_hours": None,
        }


class TestReport:
    @pytest.mark.parametrize("hour,expected", [
        (10.0, "10:00"),
        (9.5, "09:30"),
        (13.25, "13:15"),
        (24.0, "24:00"),
    ])
    def test_format_hour(self, hour, expected):
        assert format_hour(hour) == expected

    def test_format_schedule(self, schedule, tasks):
        report = format_schedule(schedule, [Employee(id="d1", name="Alice")], tasks)
        assert "Alice (d1):" in report
        assert "d2 (d2):" in report
        assert "(no blocks)" in report
        assert "10:00-12:00" in report
        assert "Ship release" in report
        assert "2 hrs" in report


class TestGenerator:
    def test_same_seed_same_tasks(self):
        first = TaskGenerator(seed=3)
        second = TaskGenerator(seed=3)
        devs = first.generate_developers(2)
        records_a = [t.to_record() for t in first.generate_tasks(20, devs, at(15))]
        records_b = [t.to_record() for t in second.generate_tasks(20, devs, at(15))]
        assert records_a == records_b

    def test_developer_ids(self):
        devs = TaskGenerator().generate_developers(3)
        assert [d.id for d in devs] == ["d1", "d2", "d3"]

    def test_generated_tasks_are_consistent(self):
        generator = TaskGenerator(seed=11)
        tasks = generator.generate_tasks(50, generator.generate_developers(3), at(15))
        assert len(tasks) == 50
        for task in tasks:
            assert parse_duration_to_hours(task.duration) == task.duration
            if task.status is TaskStatus.DONE:
                assert task.completed_at is not None
            for session in task.sessions:
                assert session.start_time <= (session.end_time or session.start_time)
