"""Task and branch-session models mirrored from the Task API."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class BranchSessionStatus(str, Enum):
    ACTIVE = "active"
    PR_CREATED = "pr_created"
    MERGED = "merged"


class Task(BaseModel):
    """A task as returned by the Task API."""

    id: str
    title: str = ""
    status: str = TaskStatus.TODO.value
    description: Optional[str] = None
    priority: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE.value


class BranchSession(BaseModel):
    """All tasks worked on one branch of one project."""

    branch_name: str
    project_id: Optional[str] = None
    task_ids: List[str] = []
    status: BranchSessionStatus = BranchSessionStatus.ACTIVE
    pr_url: Optional[str] = None
    pr_number: Optional[int] = None
    started_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    @property
    def has_pull_request(self) -> bool:
        return bool(self.pr_url)


class PullRequestResult(BaseModel):
    """Outcome of a pull request created through the Task API."""

    pr_url: str
    pr_number: int
    updated_task_count: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
