"""Result models returned to callers of the session and PR operations."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .change import ChangeStatistics
from .task import PullRequestResult, Task


class PullRequestOutcome(BaseModel):
    """Whether a pull request was created, and why not when it was not."""

    created: bool
    reason: Optional[str] = None
    result: Optional[PullRequestResult] = None
    auto_created_task: Optional[Task] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompletionResult(BaseModel):
    """Aggregate outcome of completing a work session.

    Per-file contents are sent to the Task API but never echoed back here.
    """

    task_id: str
    git_tracked: bool
    message: str
    statistics: Optional[ChangeStatistics] = None
    pull_request: Optional[PullRequestOutcome] = None
    pr_suggestion: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OperationResult(BaseModel):
    """Structured success/failure envelope for any operation."""

    success: bool
    message: str
    error: Optional[str] = None
    data: Optional[Any] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
