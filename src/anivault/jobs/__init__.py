"""Batch runs and their scheduling."""

from anivault.jobs.batch import BatchOrchestrator
from anivault.jobs.scheduler import PeriodicRunner
from anivault.jobs.summary import BatchSummary, FileOutcome

__all__ = [
    "BatchOrchestrator",
    "BatchSummary",
    "FileOutcome",
    "PeriodicRunner",
]
