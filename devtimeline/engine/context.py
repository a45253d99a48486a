"""Per-person simulation state."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..models.block import TimeBlock

# Tolerance for comparing fractional hours.
EPSILON = 0.01
# Smallest remainder a task that is not done may show.
MIN_REMAINDER = 0.1
# End-of-day remainders below this are rounding noise.
CLEANUP_THRESHOLD = 0.02
# Hard cap on simulated days per person.
MAX_DAYS = 60
# Effort assumed for a done task with no time_spent and no duration.
DEFAULT_DURATION = 1.0


@dataclass
class SimulationContext:
    """Accumulators for one person's run, passed between the scheduling steps."""

    blocks: List[TimeBlock] = field(default_factory=list)
    occupied: Dict[str, List[Tuple[float, float]]] = field(default_factory=dict)
    remaining: Dict[str, float] = field(default_factory=dict)

    def add_block(self, block: TimeBlock) -> None:
        """Record a fixed block and reserve its hours."""
        self.blocks.append(block)
        self.occupy(block.date, block.start_time, block.end_time)

    def occupy(self, date_key: str, start: float, end: float) -> None:
        if end > start:
            self.occupied.setdefault(date_key, []).append((start, end))

    def skip_occupied(self, date_key: str, t: float) -> float:
        """Advance ``t`` past every occupied slot that covers it."""
        slots = self.occupied.get(date_key)
        if not slots:
            return t
        moved = True
        while moved:
            moved = False
            for start, end in slots:
                if start - EPSILON <= t < end:
                    t = end
                    moved = True
        return t

    def next_occupied_start(self, date_key: str, t: float, limit: float) -> float:
        """Start of the first occupied slot after ``t``, or ``limit``."""
        starts = [
            start for start, _ in self.occupied.get(date_key, [])
            if start > t + EPSILON
        ]
        return min([limit] + starts)

    def last_session_block(self, task_id: str) -> Optional[TimeBlock]:
        """Latest fixed block for a task, by (date, end_time)."""
        own = [b for b in self.blocks if b.task_id == task_id and b.is_session]
        if not own:
            return None
        return max(own, key=lambda b: (b.date, b.end_time))

    def has_remaining_work(self) -> bool:
        return any(hours > EPSILON for hours in self.remaining.values())
