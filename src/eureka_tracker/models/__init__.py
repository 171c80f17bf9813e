"""Data models for eureka-tracker."""

from .change import ChangeSet, ChangeStatistics, ChangeType, FileDiff
from .result import CompletionResult, OperationResult, PullRequestOutcome
from .session import WorkSession, WorkSessionRecord
from .task import (
    BranchSession,
    BranchSessionStatus,
    PullRequestResult,
    Task,
    TaskStatus,
)

__all__ = [
    "BranchSession",
    "BranchSessionStatus",
    "ChangeSet",
    "ChangeStatistics",
    "ChangeType",
    "CompletionResult",
    "FileDiff",
    "OperationResult",
    "PullRequestOutcome",
    "PullRequestResult",
    "Task",
    "TaskStatus",
    "WorkSession",
    "WorkSessionRecord",
]
