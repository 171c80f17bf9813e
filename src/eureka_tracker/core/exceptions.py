"""Error taxonomy for eureka-tracker."""

from typing import Any, Optional

from eureka_tracker.models.result import OperationResult


class EurekaTrackerError(Exception):
    """Base class for all errors raised by eureka-tracker."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


class ConfigurationError(EurekaTrackerError):
    """Required configuration is missing or invalid."""


class VCSError(EurekaTrackerError):
    """A git command failed for a reason other than a missing path or revision."""


class NotARepository(VCSError):
    """The workspace is not under git version control."""


class SessionStoreError(EurekaTrackerError):
    """Local session state could not be read or written."""


class AlreadyActive(EurekaTrackerError):
    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} already has an active work session.")
        self.task_id = task_id


class NoActiveSession(EurekaTrackerError):
    def __init__(self, task_id: str, message: Optional[str] = None):
        super().__init__(
            message
            or f"No active work session found for task {task_id}. "
            "Start one with 'start' first."
        )
        self.task_id = task_id


class StaleSession(NoActiveSession):
    """The local session no longer matches the task's remote status."""

    def __init__(self, task_id: str, remote_status: Optional[str]):
        detail = (
            f"its status is now '{remote_status}'"
            if remote_status
            else "it no longer exists"
        )
        super().__init__(
            task_id,
            f"Work session for task {task_id} was discarded because {detail} "
            "on the server.",
        )
        self.remote_status = remote_status


class NoChangesDetected(EurekaTrackerError):
    def __init__(self, baseline: str, current: str):
        super().__init__(
            "No changes were detected.\n\n"
            f"Baseline: {baseline}\nCurrent HEAD: {current}\n\n"
            "Edit some files and try again, or cancel the session."
        )
        self.baseline = baseline
        self.current = current


class InvalidBranch(EurekaTrackerError):
    def __init__(self, branch: Optional[str]):
        super().__init__(
            f"Branch operations are not available on '{branch}'. "
            "Switch to a feature branch first."
        )
        self.branch = branch


class NoTrackedTasks(EurekaTrackerError):
    def __init__(self, branch: str):
        super().__init__(f"No tasks are tracked on branch '{branch}'.")
        self.branch = branch


class PRAlreadyExists(EurekaTrackerError):
    def __init__(self, branch: str, pr_url: str):
        super().__init__(
            f"A pull request already exists for branch '{branch}': {pr_url}"
        )
        self.branch = branch
        self.pr_url = pr_url


class RemoteAPIError(EurekaTrackerError):
    """Any failure reported by the Task API, with the original status kept."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def to_result(outcome: Any = None, message: str = "OK") -> OperationResult:
    """Wrap a return value or an error in an OperationResult."""
    if isinstance(outcome, EurekaTrackerError):
        return OperationResult(
            success=False, message=outcome.message, error=outcome.kind
        )
    if hasattr(outcome, "model_dump"):
        data = outcome.model_dump(mode="json", by_alias=True)
    else:
        data = outcome
    return OperationResult(success=True, message=message, data=data)
