"""Candidate selection policies."""

from .base import Candidate, SelectionPolicy
from .priority import OldestFirstPolicy, RecentFirstPolicy, get_policy

__all__ = ['Candidate', 'SelectionPolicy', 'RecentFirstPolicy', 'OldestFirstPolicy', 'get_policy']
