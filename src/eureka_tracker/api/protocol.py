"""Task API protocol interface."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from eureka_tracker.models.session import WorkSessionRecord
from eureka_tracker.models.task import BranchSession, PullRequestResult, Task


@runtime_checkable
class TaskAPI(Protocol):
    """Remote task tracker consumed by the session engine."""

    def get_task(self, task_id: str) -> Task:
        ...

    def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> Task:
        ...

    def update_task_status(self, task_id: str, status: str) -> Task:
        ...

    def update_task_description(self, task_id: str, description: str) -> Task:
        ...

    def create_work_session_record(
        self, task_id: str, record: WorkSessionRecord
    ) -> Dict[str, Any]:
        ...

    def create_or_update_branch_session(
        self, branch: str, task_id: str
    ) -> BranchSession:
        ...

    def get_branch_session(self, branch: str) -> Optional[BranchSession]:
        """Branch session for ``branch``, or None when there is none."""
        ...

    def touch_branch_activity(self, branch: str) -> None:
        ...

    def get_branch_tasks(self, branch: str) -> List[Task]:
        ...

    def check_branch_completion(self, branch: str) -> bool:
        ...

    def create_pull_request(
        self, branch: str, title: str, base_branch: Optional[str] = None
    ) -> PullRequestResult:
        """Create the PR and link every tracked task of ``branch`` to it."""
        ...
