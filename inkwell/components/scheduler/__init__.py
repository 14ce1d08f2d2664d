"""
Scheduler component - Publishing of due scheduled articles.
"""

from .component import run, run_publish_due
from .models import (
    ProcessDueInput,
    ProcessDueOutput,
    PublishOutcome,
    PublishResult,
    SchedulerError,
)
from .ports import TimePort, UnitOfWorkPort

__all__ = [
    "run",
    "run_publish_due",
    "ProcessDueInput",
    "ProcessDueOutput",
    "PublishOutcome",
    "PublishResult",
    "SchedulerError",
    "TimePort",
    "UnitOfWorkPort",
]
