"""Main entry point for the developer timeline scheduler."""

import argparse
import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

from devtimeline.engine.scheduler import Scheduler
from devtimeline.models.block import schedule_to_dict
from devtimeline.models.task import CompanyConfig, Employee, Task
from devtimeline.reporting.generator import TaskGenerator
from devtimeline.reporting.summary import format_schedule, summarize_schedule
from devtimeline.utils.config import load_config, get_default_config
from devtimeline.utils.datetime_utils import calculate_business_duration, parse_timestamp
from devtimeline.workflow.view import default_view_date, filter_timeline_tasks, simulation_start_date

logger = logging.getLogger(__name__)


def _load_records(path: str, key: str) -> list:
    """Read a JSON list, or an object holding the list under ``key``."""
    with open(path, 'r') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records in {path}")
    return data


def _load_settings(config_path: str) -> dict:
    if config_path and Path(config_path).exists():
        return load_config(config_path)
    logger.info("Config %s not found, using defaults", config_path)
    return get_default_config()


def _developers_for(tasks: List[Task]) -> List[Employee]:
    """Fallback roster: everyone who has a task assigned."""
    ids = sorted({t.assigned_to for t in tasks if t.assigned_to})
    return [Employee(id=emp_id) for emp_id in ids]


def run_scheduling(
    settings: dict,
    tasks_path: str,
    developers_path: Optional[str] = None,
    view_date: Optional[str] = None,
    now_value: Optional[str] = None,
    include_all: bool = False,
    output_dir: str = "results",
):
    """Simulate the timeline and save it as JSON."""
    scheduler = Scheduler.from_settings(settings)
    company = scheduler.config
    tz = scheduler.tz

    now = parse_timestamp(now_value, tz) if now_value else datetime.now(timezone.utc)
    if now is None:
        raise ValueError(f"Invalid --now timestamp: {now_value}")
    day = date.fromisoformat(view_date) if view_date else default_view_date(now, company, tz)

    tasks = [Task.from_record(r) for r in _load_records(tasks_path, 'tasks')]
    if developers_path:
        developers = [Employee.from_record(r) for r in _load_records(developers_path, 'developers')]
    else:
        developers = _developers_for(tasks)

    timeline_tasks = tasks if include_all else filter_timeline_tasks(tasks)
    start = simulation_start_date(day, now, tz)

    schedule = scheduler.schedule(timeline_tasks, developers, start, now)
    summaries = summarize_schedule(schedule, timeline_tasks, company, tz)

    print(format_schedule(schedule, developers, tasks))
    print(f"\nScheduled {sum(len(b) for b in schedule.values())} blocks "
          f"for {len(developers)} developers using {scheduler.policy.get_policy_name()} tie-break")

    results_dir = Path(output_dir)
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / f"schedule_{day.isoformat()}.json"
    with open(output_path, 'w') as f:
        json.dump({
            'view_date': day.isoformat(),
            'now': now.isoformat(),
            'config': {'startHour': company.start_hour, 'endHour': company.end_hour},
            'schedule': schedule_to_dict(schedule),
            'summary': {pid: s.to_dict() for pid, s in summaries.items()},
        }, f, indent=2, default=str)

    print(f"Schedule saved to: {output_path}")
    return schedule


def run_business_hours(settings: dict, start_value: str, end_value: str) -> float:
    """Print working hours between two timestamps."""
    company = CompanyConfig.from_dict(settings)
    tz = company.get_tzinfo()

    start = parse_timestamp(start_value, tz)
    end = parse_timestamp(end_value, tz)
    if start is None or end is None:
        raise ValueError(f"Invalid timestamps: {start_value!r}, {end_value!r}")

    hours = calculate_business_duration(start, end, company, tz)
    print(f"{hours} business hours")
    return hours


def run_generate(settings: dict, count: int, developer_count: int, output_dir: str = "results"):
    """Write a deterministic demo task set."""
    generator = TaskGenerator(seed=42, config=settings)
    now = datetime.now(timezone.utc)

    developers = generator.generate_developers(developer_count)
    tasks = generator.generate_tasks(count, developers, now)

    results_dir = Path(output_dir)
    results_dir.mkdir(exist_ok=True)
    with open(results_dir / "generated_tasks.json", 'w') as f:
        json.dump([t.to_record() for t in tasks], f, indent=2)
    with open(results_dir / "generated_developers.json", 'w') as f:
        json.dump([d.to_record() for d in developers], f, indent=2)

    print(f"Generated {len(tasks)} tasks for {len(developers)} developers")
    print(f"Tasks saved to: {results_dir / 'generated_tasks.json'}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Developer timeline scheduler"
    )
    parser.add_argument(
        'command',
        choices=['schedule', 'business-hours', 'generate-tasks'],
        help='Command to run'
    )
    parser.add_argument('args', nargs='*', help='START END for business-hours')
    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument('--tasks', type=str, help='JSON file of task records')
    parser.add_argument('--developers', type=str, help='JSON file of employee records')
    parser.add_argument('--date', type=str, help='Day to view, YYYY-MM-DD (default: today)')
    parser.add_argument('--now', type=str, help='Reference instant (default: current time)')
    parser.add_argument('--all-statuses', action='store_true', help='Include backlog tasks')
    parser.add_argument('--count', type=int, default=30, help='Tasks to generate')
    parser.add_argument('--developer-count', type=int, default=3, help='Developers to generate')
    parser.add_argument('--output-dir', type=str, default='results', help='Where to write results')
    parser.add_argument('--log-level', type=str, default=None, help='Logging level (default from config)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or 'INFO').upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = _load_settings(args.config)
        if not args.log_level:
            logging.getLogger().setLevel(settings.get('logging', {}).get('level', 'INFO').upper())

        if args.command == 'schedule':
            if not args.tasks:
                parser.error("schedule requires --tasks")
            run_scheduling(
                settings,
                args.tasks,
                args.developers,
                args.date,
                args.now,
                args.all_statuses,
                args.output_dir,
            )
        elif args.command == 'business-hours':
            if len(args.args) != 2:
                parser.error("business-hours requires START and END")
            run_business_hours(settings, args.args[0], args.args[1])
        elif args.command == 'generate-tasks':
            run_generate(settings, args.count, args.developer_count, args.output_dir)
    except (ValueError, OSError) as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
