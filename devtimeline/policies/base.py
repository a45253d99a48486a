"""Base candidate selection policy interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List

from ..models.task import Task


@dataclass(frozen=True)
class Candidate:
    """A task eligible to run at the current simulated instant."""

    task: Task
    available_at: datetime

    @property
    def priority_ordinal(self) -> int:
        return self.task.priority.ordinal


class SelectionPolicy(ABC):
    """Abstract base class for choosing which eligible task runs next."""

    @abstractmethod
    def select(self, candidates: List[Candidate]) -> Candidate:
        """Pick one task from a non-empty list of candidates."""
        pass

    @abstractmethod
    def get_policy_name(self) -> str:
        """Return the name of this policy."""
        pass
