"""Tests for task, session and config models."""

from datetime import timedelta, timezone

import pytest

from devtimeline.models.block import BlockStatus, TimeBlock, schedule_to_dict
from devtimeline.models.task import (
    CompanyConfig,
    Employee,
    Priority,
    Task,
    TaskStatus,
    WorkSession,
)


class TestTaskStatus:
    @pytest.mark.parametrize("raw,expected", [
        ("done", TaskStatus.DONE),
        ("DONE", TaskStatus.DONE),
        ("completed", TaskStatus.DONE),
        ("In Progress", TaskStatus.IN_PROGRESS),
        ("in_progress", TaskStatus.IN_PROGRESS),
        ("on-hold", TaskStatus.ON_HOLD),
        (" todo ", TaskStatus.TODO),
        ("archived", TaskStatus.BACKLOG),
        (None, TaskStatus.BACKLOG),
    ])
    def test_parse(self, raw, expected):
        assert TaskStatus.parse(raw) is expected


class TestPriority:
    def test_ordinal(self):
        assert Priority.P0.ordinal < Priority.P1.ordinal < Priority.P2.ordinal

    def test_parse(self):
        assert Priority.parse("p0") is Priority.P0
        assert Priority.parse("P9") is Priority.P2
        assert Priority.parse(None) is Priority.P2


class TestWorkSession:
    def test_label_precedence(self):
        session = WorkSession(status="a", completion_status="b", status_label="c")
        assert session.display_label == "c"
        session = WorkSession(status="a", completion_status="b")
        assert session.display_label == "b"
        assert WorkSession(status="a").display_label == "a"
        assert WorkSession().display_label is None

    def test_open(self):
        assert WorkSession(start_time="2024-03-11T10:00:00").is_open
        assert not WorkSession(start_time="x", end_time="y").is_open


class TestTask:
    def test_normalizes_fields(self):
        task = Task(id="t", status="In Progress", priority="p1", duration="1:30", time_spent="0")
        assert task.status is TaskStatus.IN_PROGRESS
        assert task.priority is Priority.P1
        assert task.duration == 1.5
        assert task.time_spent is None

    def test_open_session(self):
        closed = WorkSession(start_time="2024-03-11T09:00:00", end_time="2024-03-11T10:00:00")
        running = WorkSession(start_time="2024-03-11T11:00:00")
        task = Task(id="t", sessions=[closed, running])
        assert task.open_session() is running
        assert Task(id="u", sessions=[closed]).open_session() is None

    def test_from_record(self):
        record = {
            "id": "42",
            "task_name": "Build login",
            "task_status": "in-progress",
            "task_assigned_to": "d1",
            "task_assigned_date": "2024-03-11T10:15:00",
            "task_priority": "P0",
            "task_duration": "2:15",
            "task_created_at": "2024-03-11T09:00:00",
            "time_spent": None,
            "completed_at": None,
            "task_sessions": [
                {"start_time": "2024-03-11T10:15:00", "end_time": None, "status": "in-progress"},
                "garbage",
            ],
        }
        task = Task.from_record(record)
        assert task.id == "42"
        assert task.name == "Build login"
        assert task.assigned_to == "d1"
        assert task.priority is Priority.P0
        assert task.duration == 2.25
        assert len(task.sessions) == 1
        assert task.sessions[0].is_open

    def test_from_record_tolerates_junk(self):
        task = Task.from_record({"id": 7, "task_duration": "soon", "task_sessions": "none"})
        assert task.id == "7"
        assert task.duration == 0
        assert task.sessions == []
        assert task.status is TaskStatus.BACKLOG

    def test_to_record_round_trip(self):
        task = Task(
            id="t1",
            name="Write docs",
            status="todo",
            assigned_to="d2",
            priority="P1",
            duration=3,
            created_at="2024-03-11T10:00:00",
            sessions=[WorkSession(start_time="2024-03-11T10:00:00", end_time="2024-03-11T11:00:00")],
        )
        assert Task.from_record(task.to_record()) == task


class TestEmployee:
    def test_from_record(self):
        emp = Employee.from_record({"emp_id": "d1", "emp_name": "Alice", "emp_designation": "developer"})
        assert emp == Employee(id="d1", name="Alice", designation="developer")
        assert Employee.from_record(emp.to_record()) == emp


class TestCompanyConfig:
    def test_invalid_window(self):
        with pytest.raises(ValueError):
            CompanyConfig(start_hour=19, end_hour=10)
        with pytest.raises(ValueError):
            CompanyConfig(start_hour=0, end_hour=25)

    def test_from_dict_camel_case(self):
        config = CompanyConfig.from_dict({"startHour": 9, "endHour": 17})
        assert (config.start_hour, config.end_hour) == (9, 17)

    def test_from_settings(self):
        config = CompanyConfig.from_dict({"company": {"start_hour": 8, "end_hour": 16, "timezone": "UTC"}})
        assert config.start_hour == 8
        assert config.get_tzinfo() is timezone.utc

    def test_offset_timezone(self):
        config = CompanyConfig(timezone="+05:30")
        assert config.get_tzinfo().utcoffset(None) == timedelta(hours=5, minutes=30)

    def test_no_timezone(self):
        assert CompanyConfig().get_tzinfo() is None


class TestTimeBlock:
    def test_to_dict(self):
        block = TimeBlock("t1", "2024-03-11", 10.0, 11.5, BlockStatus.COMPLETED, True)
        assert block.hours == 1.5
        assert block.to_dict() == {
            "taskId": "t1",
            "date": "2024-03-11",
            "startTime": 10.0,
            "endTime": 11.5,
            "status": "completed",
            "isSession": True,
        }
        assert schedule_to_dict({"d1": [block], "d2": []}) == {"d1": [block.to_dict()], "d2": []}
