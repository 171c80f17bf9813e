"""Create pull requests for the current branch, synthesizing a task if needed."""

import logging
from typing import List, Optional, Tuple

from eureka_tracker.api.protocol import TaskAPI
from eureka_tracker.core.branch_session import BranchSessionAggregator
from eureka_tracker.core.capture import ChangeCapture
from eureka_tracker.core.exceptions import (
    InvalidBranch,
    NoChangesDetected,
    PRAlreadyExists,
)
from eureka_tracker.core.formatting import (
    default_pr_title,
    format_branch_task_description,
    title_from_branch,
)
from eureka_tracker.core.vcs import GitAdapter
from eureka_tracker.models.result import PullRequestOutcome
from eureka_tracker.models.session import WorkSessionRecord, new_session_id, utcnow
from eureka_tracker.models.task import Task, TaskStatus

LOGGER = logging.getLogger(__name__)


class PullRequestService:
    def __init__(
        self,
        vcs: GitAdapter,
        capture: ChangeCapture,
        api: TaskAPI,
        branches: BranchSessionAggregator,
    ):
        self.vcs = vcs
        self.capture = capture
        self.api = api
        self.branches = branches

    def _feature_branch(self) -> str:
        branch = self.branches.current_branch()
        if branch is None or self.branches.is_trunk(branch):
            raise InvalidBranch(branch)
        return branch

    def list_branch_tasks(self) -> Tuple[str, List[Task]]:
        branch = self._feature_branch()
        return branch, self.branches.list_tasks()

    def create_for_branch(
        self, title: Optional[str] = None, base_branch: Optional[str] = None
    ) -> PullRequestOutcome:
        """Open a PR for the current branch.

        When no task was tracked on the branch, one task is created from the
        full branch diff (baseline = merge base with trunk) so the PR has
        something to link to.
        """
        branch = self._feature_branch()

        auto_created_task = None
        session = self.branches.get_session()
        if session is None or not session.task_ids:
            auto_created_task = self.synthesize_task(branch)
            session = self.branches.get_session()

        if session is not None and session.has_pull_request:
            raise PRAlreadyExists(branch, session.pr_url)

        pr_title = title or default_pr_title(branch, self.branches.list_tasks())
        result = self.branches.create_pull_request(pr_title, base_branch)
        return PullRequestOutcome(
            created=True, result=result, auto_created_task=auto_created_task
        )

    def synthesize_task(self, branch: str) -> Task:
        """Create a done task holding the whole branch diff and track it."""
        baseline = self.vcs.merge_base_with_trunk(self.branches.trunk_branches)
        change_set = self.capture.capture(baseline)
        if change_set.is_empty:
            raise NoChangesDetected(baseline, change_set.final_revision)

        title = title_from_branch(branch)
        task = self.api.create_task(
            title,
            description=format_branch_task_description(change_set, branch),
            status=TaskStatus.DONE.value,
            priority="medium",
        )
        record = WorkSessionRecord.from_change_set(
            new_session_id(), utcnow(), title, change_set
        )
        self.api.create_work_session_record(task.id, record)
        self.branches.track_task(task.id)
        LOGGER.info("task_synthesized task=%s branch=%s", task.id, branch)
        return task
