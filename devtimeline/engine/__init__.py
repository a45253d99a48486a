"""Schedule simulation engine."""

from .context import SimulationContext
from .scheduler import Scheduler, calculate_schedule

__all__ = ['Scheduler', 'SimulationContext', 'calculate_schedule']
