"""Core scheduling engine."""

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from ..models.block import BlockStatus, TimeBlock
from ..models.task import CompanyConfig, Employee, Task, TaskStatus, WorkSession
from ..policies.base import Candidate, SelectionPolicy
from ..policies.priority import RecentFirstPolicy, get_policy
from ..utils.datetime_utils import (
    at_hour,
    attach_local,
    get_local_date_key,
    hour_of_day,
    hours_between,
    local_midnight,
    parse_session_timestamp,
    parse_timestamp,
    to_local,
)
from .context import (
    CLEANUP_THRESHOLD,
    DEFAULT_DURATION,
    EPSILON,
    MAX_DAYS,
    MIN_REMAINDER,
    SimulationContext,
)

logger = logging.getLogger(__name__)

Schedule = Dict[str, List[TimeBlock]]

# Longest stretch a single session may be split across.
MAX_SESSION_DAYS = 366

_IN_PROGRESS_LABELS = {'in-progress', 'in progress', 'in_progress', 'inprogress'}
_COMPLETED_LABELS = {'completed', 'done'}

# Longest effort a synthesized done block may cover.
MAX_SYNTHESIZED_HOURS = (MAX_SESSION_DAYS - 1) * 24


class Scheduler:
    """Simulates each person's day-by-day timeline from task state."""

    def __init__(
        self,
        config: CompanyConfig,
        policy: Optional[SelectionPolicy] = None,
        tz: Optional[tzinfo] = None,
        max_days: int = MAX_DAYS,
    ):
        """Initialize scheduler with working hours, selection policy and local zone."""
        if config is None:
            raise ValueError("A company config is required to schedule")
        if isinstance(config, dict):
            config = CompanyConfig.from_dict(config)
        self.config = config
        self.policy = policy or RecentFirstPolicy()
        self.tz = tz if tz is not None else config.get_tzinfo()
        self.max_days = max_days

    @classmethod
    def from_settings(cls, settings: dict, tz: Optional[tzinfo] = None) -> 'Scheduler':
        """Build a scheduler from the nested dict returned by ``load_config``."""
        scheduling = settings.get('scheduling', {})
        return cls(
            CompanyConfig.from_dict(settings),
            policy=get_policy(scheduling.get('tie_break', 'recent')),
            tz=tz,
            max_days=int(scheduling.get('max_days', MAX_DAYS)),
        )

    def schedule(
        self,
        tasks: Iterable[Task],
        developers: Iterable[Employee],
        start_date: Union[date, datetime, None] = None,
        now: Optional[datetime] = None,
    ) -> Schedule:
        """Compute every developer's ordered blocks."""
        now = self._resolve_now(now)
        start_at = self._resolve_start(start_date, now)
        tasks = list(tasks)

        schedule: Schedule = {}
        for dev in developers:
            if dev is None:
                continue
            own = [t for t in tasks if t.assigned_to is not None and t.assigned_to == dev.id]
            schedule[dev.id] = self._schedule_person(own, start_at, now)
            logger.debug(
                "Scheduled %d blocks for %s (%d tasks)", len(schedule[dev.id]), dev.id, len(own)
            )
        return schedule

    def _resolve_now(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return datetime.now(timezone.utc)
        if now.tzinfo is None:
            return attach_local(now, self.tz)
        return now

    def _resolve_start(self, start_date: Union[date, datetime, None], now: datetime) -> datetime:
        if start_date is None:
            return local_midnight(now, self.tz)
        if isinstance(start_date, datetime):
            return to_local(start_date, self.tz)
        return local_midnight(start_date, self.tz)

    def _schedule_person(self, tasks: List[Task], start_at: datetime, now: datetime) -> List[TimeBlock]:
        if not tasks:
            return []

        ctx = SimulationContext()
        availability = {t.id: self._availability(t, start_at) for t in tasks}

        deferred = self._find_deferred(tasks, availability)
        self._materialize_sessions(ctx, tasks, deferred, now)
        self._compute_remaining(ctx, tasks, deferred, now)
        chain_end = self._schedule_tails(ctx, tasks, availability)

        if chain_end is not None:
            # Deferred work queues behind the active chain.
            floor = at_hour(chain_end[0], chain_end[1], self.tz)
            for task_id in deferred:
                availability[task_id] = max(availability[task_id], floor)

        planned = self._simulate_forward(ctx, tasks, availability, start_at)
        return sorted(ctx.blocks + planned, key=TimeBlock.sort_key)

    def _availability(self, task: Task, start_at: datetime) -> datetime:
        """When a task may first be worked on: pick-up time, creation time, or run start."""
        for value in (task.assigned_date, task.created_at):
            parsed = parse_timestamp(value, self.tz)
            if parsed is not None:
                return parsed
        return start_at

    def _find_deferred(self, tasks: List[Task], availability: Dict[str, datetime]) -> Set[str]:
        """In-progress tasks with an open session, except the earliest picked up."""
        active = [
            t for t in tasks
            if t.status is TaskStatus.IN_PROGRESS and t.open_session() is not None
        ]
        if len(active) <= 1:
            return set()
        active.sort(key=lambda t: availability[t.id])
        return {t.id for t in active[1:]}

    def _materialize_sessions(
        self,
        ctx: SimulationContext,
        tasks: List[Task],
        deferred: Set[str],
        now: datetime,
    ) -> None:
        """Turn recorded work into fixed blocks and reserve their hours."""
        for task in tasks:
            placed: List[TimeBlock] = []
            for session in task.sessions:
                if session.is_open and task.id in deferred:
                    continue
                start = parse_session_timestamp(session.start_time)
                end = self._session_end(task, session, now)
                if start is None or end is None or end <= start:
                    continue

                status = self._session_status(task, session)
                for date_key, start_hour, end_hour in self._split_by_day(start, end):
                    block = TimeBlock(
                        task_id=task.id,
                        date=date_key,
                        start_time=start_hour,
                        end_time=end_hour,
                        status=status,
                        is_session=True,
                    )
                    ctx.add_block(block)
                    placed.append(block)

            if task.is_done:
                if not placed:
                    self._synthesize_done_block(ctx, task, now)
                elif all(b.status is not BlockStatus.COMPLETED for b in placed):
                    # A done task always shows completed work; its latest session carries it.
                    max(placed, key=TimeBlock.sort_key).status = BlockStatus.COMPLETED

        ctx.blocks.sort(key=TimeBlock.sort_key)

    def _session_end(self, task: Task, session: WorkSession, now: datetime) -> Optional[datetime]:
        if not session.is_open:
            return parse_session_timestamp(session.end_time)
        if task.is_done and task.completed_at:
            completed = parse_session_timestamp(task.completed_at)
            if completed is not None:
                return completed
        return now

    def _session_status(self, task: Task, session: WorkSession) -> BlockStatus:
        """Display status: status_label > completion_status > status > task status.

        Labels that name no block status (``paused``, ``todo``...) fall
        through to the task's own status.
        """
        label = session.display_label
        if label:
            key = label.strip().lower()
            if key in _IN_PROGRESS_LABELS or key == BlockStatus.PLANNED.value:
                return BlockStatus.PLANNED
            if key in _COMPLETED_LABELS:
                return BlockStatus.COMPLETED
            if key == BlockStatus.BACKLOG.value:
                return BlockStatus.BACKLOG

        if task.is_done:
            return BlockStatus.COMPLETED
        if session.is_open:
            return BlockStatus.IN_PROGRESS
        return BlockStatus.BACKLOG

    def _synthesize_done_block(self, ctx: SimulationContext, task: Task, now: datetime) -> None:
        """Place a done task with no recorded work so it ends at its completion time."""
        end = (
            parse_session_timestamp(task.completed_at)
            or parse_session_timestamp(task.updated_at)
            or now
        )
        hours = task.time_spent or task.duration or DEFAULT_DURATION
        if hours > MAX_SYNTHESIZED_HOURS:
            logger.warning("Done task %s claims %.0fh of effort, clamping", task.id, hours)
            hours = MAX_SYNTHESIZED_HOURS

        try:
            start = end - timedelta(hours=hours)
        except OverflowError:
            logger.warning("Completion time of task %s is out of range, using now", task.id)
            end = now
            start = end - timedelta(hours=hours)

        for date_key, start_hour, end_hour in self._split_by_day(start, end):
            ctx.add_block(TimeBlock(
                task_id=task.id,
                date=date_key,
                start_time=start_hour,
                end_time=end_hour,
                status=BlockStatus.COMPLETED,
                is_session=True,
            ))

    def _split_by_day(self, start: datetime, end: datetime) -> Iterator[Tuple[str, float, float]]:
        """Yield (date_key, start_hour, end_hour) for each local day an interval touches."""
        cursor = to_local(start, self.tz)
        end = to_local(end, self.tz)

        for _ in range(MAX_SESSION_DAYS):
            if cursor >= end:
                return
            try:
                next_midnight = local_midnight(cursor.date() + timedelta(days=1), self.tz)
            except OverflowError:
                next_midnight = end
            piece_end = min(end, next_midnight)
            start_hour = hour_of_day(cursor, self.tz)
            yield (
                get_local_date_key(cursor, self.tz),
                start_hour,
                start_hour + hours_between(cursor, piece_end),
            )
            cursor = piece_end

        if cursor < end:
            logger.warning("Interval %s -> %s truncated after %d days", start, end, MAX_SESSION_DAYS)

    def _compute_remaining(
        self,
        ctx: SimulationContext,
        tasks: List[Task],
        deferred: Set[str],
        now: datetime,
    ) -> None:
        """Estimated effort minus logged session time, floored for unfinished tasks."""
        for task in tasks:
            if task.status in (TaskStatus.DONE, TaskStatus.ON_HOLD):
                ctx.remaining[task.id] = 0.0
                continue

            worked = 0.0
            for session in task.sessions:
                if session.is_open and task.id in deferred:
                    continue
                start = parse_session_timestamp(session.start_time)
                end = now if session.is_open else parse_session_timestamp(session.end_time)
                if start is None or end is None or end <= start:
                    continue
                worked += hours_between(start, end)

            remaining = max(0.0, task.duration - worked)
            if remaining <= EPSILON:
                remaining = MIN_REMAINDER
            ctx.remaining[task.id] = remaining

    def _schedule_tails(
        self,
        ctx: SimulationContext,
        tasks: List[Task],
        availability: Dict[str, datetime],
    ) -> Optional[Tuple[date, float]]:
        """Chain started tasks' remaining effort one after another, oldest pick-up first.

        Returns where the chain ends, or None when no started task has work left.
        """
        started = [
            t for t in tasks
            if ctx.remaining.get(t.id, 0.0) > EPSILON and ctx.last_session_block(t.id) is not None
        ]
        started.sort(key=lambda t: availability[t.id])

        cursor: Optional[Tuple[date, float]] = None
        for task in started:
            last = ctx.last_session_block(task.id)
            position = (date.fromisoformat(last.date), last.end_time)
            if cursor is not None and cursor > position:
                position = cursor
            cursor = self._place_tail(ctx, task.id, position, ctx.remaining[task.id], last)
            ctx.remaining[task.id] = 0.0

        return cursor

    def _place_tail(
        self,
        ctx: SimulationContext,
        task_id: str,
        position: Tuple[date, float],
        hours: float,
        previous: TimeBlock,
    ) -> Tuple[date, float]:
        """Lay ``hours`` of work from ``position`` through free working time."""
        day, t = position
        start_hour, end_hour = self.config.start_hour, self.config.end_hour

        for _ in range(self.max_days):
            date_key = get_local_date_key(day)
            t = max(t, start_hour)

            while hours > EPSILON and t < end_hour - EPSILON:
                t = ctx.skip_occupied(date_key, t)
                if t >= end_hour - EPSILON:
                    break
                stop = min(t + hours, ctx.next_occupied_start(date_key, t, end_hour))

                if (
                    previous.task_id == task_id
                    and previous.date == date_key
                    and abs(previous.end_time - t) < EPSILON
                ):
                    previous.end_time = stop
                    ctx.occupy(date_key, t, stop)
                else:
                    previous = TimeBlock(
                        task_id=task_id,
                        date=date_key,
                        start_time=t,
                        end_time=stop,
                        status=BlockStatus.PLANNED,
                    )
                    ctx.add_block(previous)

                hours -= stop - t
                t = stop

            if hours <= EPSILON:
                return day, t
            day += timedelta(days=1)
            t = start_hour

        logger.warning("Tail of task %s still had %.2fh after %d days", task_id, hours, self.max_days)
        return day, t

    def _available_from(self, available_at: datetime, day: date) -> Optional[float]:
        """Hour of ``day`` from which a task may run, or None if not yet."""
        local = to_local(available_at, self.tz)
        if local.date() > day:
            return None
        if local.date() < day:
            return float(self.config.start_hour)
        return max(float(self.config.start_hour), hour_of_day(local, self.tz))

    def _simulate_forward(
        self,
        ctx: SimulationContext,
        tasks: List[Task],
        availability: Dict[str, datetime],
        start_at: datetime,
    ) -> List[TimeBlock]:
        """Event-driven sweep placing remaining work into free working hours."""
        planned: List[TimeBlock] = []
        pending = [t for t in tasks if ctx.remaining.get(t.id, 0.0) > EPSILON]
        if not pending:
            return planned

        start_hour, end_hour = float(self.config.start_hour), float(self.config.end_hour)
        remaining = ctx.remaining
        day = to_local(start_at, self.tz).date()

        for _ in range(self.max_days):
            if not ctx.has_remaining_work():
                break

            date_key = get_local_date_key(day)
            opens = {t.id: self._available_from(availability[t.id], day) for t in pending}

            t = start_hour
            current: Optional[str] = None
            block_start = t

            while t < end_hour - EPSILON:
                free = ctx.skip_occupied(date_key, t)
                if free > t:
                    self._commit(planned, current, date_key, block_start, t)
                    current = None
                    t = block_start = free
                    continue

                live = [task for task in pending if remaining[task.id] > EPSILON]
                candidates = [
                    Candidate(task, availability[task.id]) for task in live
                    if opens[task.id] is not None and opens[task.id] <= t + EPSILON
                ]
                next_arrival = min(
                    [end_hour] + [
                        opens[task.id] for task in live
                        if opens[task.id] is not None and opens[task.id] > t + EPSILON
                    ]
                )
                next_busy = ctx.next_occupied_start(date_key, t, end_hour)

                if not candidates:
                    self._commit(planned, current, date_key, block_start, t)
                    current = None
                    t = block_start = min(next_arrival, next_busy)
                    continue

                best = self.policy.select(candidates).task
                if best.id != current:
                    self._commit(planned, current, date_key, block_start, t)
                    current = best.id
                    block_start = t

                stop = min(t + remaining[best.id], next_arrival, next_busy)
                remaining[best.id] -= stop - t
                if remaining[best.id] < EPSILON:
                    remaining[best.id] = 0.0
                t = stop

            self._commit(planned, current, date_key, block_start, t)

            for task_id, hours in remaining.items():
                if 0 < hours < CLEANUP_THRESHOLD:
                    remaining[task_id] = 0.0

            day += timedelta(days=1)

        if ctx.has_remaining_work():
            logger.warning(
                "Simulation stopped at the %d-day cap with work remaining: %s",
                self.max_days,
                sorted(task_id for task_id, hours in remaining.items() if hours > EPSILON),
            )

        return planned

    @staticmethod
    def _commit(
        planned: List[TimeBlock],
        task_id: Optional[str],
        date_key: str,
        start: float,
        end: float,
    ) -> None:
        """Close the running block, extending the previous one when contiguous."""
        if task_id is None or end <= start + EPSILON:
            return
        last = planned[-1] if planned else None
        if (
            last is not None
            and last.task_id == task_id
            and last.date == date_key
            and abs(last.end_time - start) < EPSILON
        ):
            last.end_time = end
        else:
            planned.append(TimeBlock(
                task_id=task_id,
                date=date_key,
                start_time=start,
                end_time=end,
                status=BlockStatus.PLANNED,
            ))


def calculate_schedule(
    tasks: Iterable[Task],
    developers: Iterable[Employee],
    config: CompanyConfig,
    start_date: Union[date, datetime, None] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    policy: Optional[SelectionPolicy] = None,
) -> Schedule:
    """Map each developer id to their ordered time blocks."""
    return Scheduler(config, policy=policy, tz=tz).schedule(tasks, developers, start_date, now)
