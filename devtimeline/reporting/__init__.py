"""Schedule reporting and demo data."""

from .generator import TaskGenerator
from .summary import PersonSummary, format_hour, format_schedule, summarize_schedule

__all__ = ['TaskGenerator', 'PersonSummary', 'format_hour', 'format_schedule', 'summarize_schedule']
