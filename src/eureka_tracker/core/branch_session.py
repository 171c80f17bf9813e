"""Track the tasks worked on each git branch and decide PR readiness."""

import logging
from typing import List, Optional, Sequence

from eureka_tracker.api.protocol import TaskAPI
from eureka_tracker.core.exceptions import (
    InvalidBranch,
    NoTrackedTasks,
    PRAlreadyExists,
    VCSError,
)
from eureka_tracker.core.formatting import pr_suggestion_message
from eureka_tracker.core.vcs import DETACHED_HEAD, GitAdapter
from eureka_tracker.models.task import BranchSession, PullRequestResult, Task

LOGGER = logging.getLogger(__name__)

TRUNK_BRANCHES = ("main", "master")


class BranchSessionAggregator:
    """Branch-level view over the Task API's branch sessions.

    Operations are neutral on trunk branches, on a detached HEAD and outside
    a repository, except ``list_tasks`` and ``create_pull_request`` which
    refuse them.
    The current branch is read from git on every call.
    """

    def __init__(
        self,
        vcs: GitAdapter,
        api: TaskAPI,
        trunk_branches: Sequence[str] = TRUNK_BRANCHES,
    ):
        self.vcs = vcs
        self.api = api
        self.trunk_branches = tuple(trunk_branches)

    def is_trunk(self, branch: Optional[str]) -> bool:
        return branch in self.trunk_branches

    def current_branch(self) -> Optional[str]:
        """Current branch, or None outside a repository or on a detached HEAD."""
        if not self.vcs.is_repository():
            return None
        try:
            branch = self.vcs.current_branch()
        except VCSError as e:
            LOGGER.warning("branch_unavailable error=%s", e)
            return None
        if branch == DETACHED_HEAD:
            LOGGER.info("branch_detached_head")
            return None
        return branch

    def _feature_branch(self) -> Optional[str]:
        branch = self.current_branch()
        if branch is None or self.is_trunk(branch):
            return None
        return branch

    def _require_feature_branch(self) -> str:
        branch = self.current_branch()
        if branch is None or self.is_trunk(branch):
            raise InvalidBranch(branch)
        return branch

    def track_task(self, task_id: str) -> Optional[BranchSession]:
        """Register ``task_id`` under the current branch's session."""
        branch = self._feature_branch()
        if branch is None:
            LOGGER.info("branch_tracking_skipped task=%s", task_id)
            return None
        session = self.api.create_or_update_branch_session(branch, task_id)
        LOGGER.info("branch_task_tracked task=%s branch=%s", task_id, branch)
        return session

    def touch_activity(self) -> None:
        branch = self._feature_branch()
        if branch is not None:
            self.api.touch_branch_activity(branch)

    def get_session(self) -> Optional[BranchSession]:
        branch = self._feature_branch()
        if branch is None:
            return None
        return self.api.get_branch_session(branch)

    def list_tasks(self) -> List[Task]:
        return self.api.get_branch_tasks(self._require_feature_branch())

    def all_tasks_completed(self) -> bool:
        """True iff the branch session exists and every tracked task is done."""
        branch = self._feature_branch()
        if branch is None:
            return False
        session = self.api.get_branch_session(branch)
        if session is None or not session.task_ids:
            return False
        return self.api.check_branch_completion(branch)

    def create_pull_request(
        self, title: str, base_branch: Optional[str] = None
    ) -> PullRequestResult:
        branch = self._require_feature_branch()
        session = self.api.get_branch_session(branch)
        if session is None or not session.task_ids:
            raise NoTrackedTasks(branch)
        if session.has_pull_request:
            raise PRAlreadyExists(branch, session.pr_url)

        result = self.api.create_pull_request(branch, title, base_branch)
        LOGGER.info(
            "pull_request_created branch=%s number=%s tasks=%s",
            branch,
            result.pr_number,
            result.updated_task_count,
        )
        return result

    def suggest_pull_request(self) -> Optional[str]:
        """Nudge text when every task on the branch is done and no PR exists."""
        branch = self._feature_branch()
        if branch is None:
            return None
        session = self.api.get_branch_session(branch)
        if session is None or session.has_pull_request:
            return None
        if not self.all_tasks_completed():
            return None
        return pr_suggestion_message(branch, len(session.task_ids))
