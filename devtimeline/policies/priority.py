"""Priority-first selection policies with different tie-breaks."""

from typing import Dict, List, Type

from .base import Candidate, SelectionPolicy


class RecentFirstPolicy(SelectionPolicy):
    """Lowest priority ordinal wins; among equals, the most recently available task.

    Newer work of the same priority preempts older queued work, so the task a
    person just picked up stays in focus. Older work can starve behind it.
    """

    def select(self, candidates: List[Candidate]) -> Candidate:
        # min() keeps the first of equal keys, so input order settles exact ties
        return min(
            candidates,
            key=lambda c: (c.priority_ordinal, -c.available_at.timestamp()),
        )

    def get_policy_name(self) -> str:
        return "RECENT-FIRST"


class OldestFirstPolicy(SelectionPolicy):
    """Lowest priority ordinal wins; among equals, the longest-waiting task."""

    def select(self, candidates: List[Candidate]) -> Candidate:
        return min(
            candidates,
            key=lambda c: (c.priority_ordinal, c.available_at.timestamp()),
        )

    def get_policy_name(self) -> str:
        return "OLDEST-FIRST"


POLICIES: Dict[str, Type[SelectionPolicy]] = {
    'recent': RecentFirstPolicy,
    'oldest': OldestFirstPolicy,
}


def get_policy(name: str = 'recent') -> SelectionPolicy:
    """Resolve a tie-break name from config to a policy instance."""
    key = (name or 'recent').strip().lower()
    if key not in POLICIES:
        raise ValueError(f"Unknown tie_break policy: {name}")
    return POLICIES[key]()
