"""Work session state machine: start, complete and cancel work on a task.

A task is either idle (no session) or active (one open session). Completing
or cancelling collapses the session back to idle by removing its persisted
state; history lives in the Task API only.

The remote task status is updated before local state is written, so after a
crash the Task API is the source of truth.
"""

import logging
from typing import Dict, List, Optional

from eureka_tracker.api.protocol import TaskAPI
from eureka_tracker.core.branch_session import BranchSessionAggregator
from eureka_tracker.core.capture import ChangeCapture
from eureka_tracker.core.exceptions import (
    AlreadyActive,
    EurekaTrackerError,
    NoActiveSession,
    NoChangesDetected,
    RemoteAPIError,
    StaleSession,
)
from eureka_tracker.core.formatting import (
    completion_message,
    default_pr_title,
    format_task_description,
)
from eureka_tracker.core.session_store import SessionStore
from eureka_tracker.core.vcs import GitAdapter
from eureka_tracker.models.result import CompletionResult, PullRequestOutcome
from eureka_tracker.models.session import WorkSession, WorkSessionRecord
from eureka_tracker.models.task import TaskStatus

LOGGER = logging.getLogger(__name__)


class WorkSessionManager:
    """Guards one open session per task and persists it through a SessionStore."""

    def __init__(
        self,
        vcs: GitAdapter,
        capture: ChangeCapture,
        store: SessionStore,
        api: TaskAPI,
        branches: BranchSessionAggregator,
    ):
        self.vcs = vcs
        self.capture = capture
        self.store = store
        self.api = api
        self.branches = branches
        self._sessions: Dict[str, WorkSession] = store.load_all()
        if self._sessions:
            LOGGER.info("sessions_rehydrated count=%d", len(self._sessions))

    def get(self, task_id: str) -> Optional[WorkSession]:
        return self._sessions.get(task_id)

    def list_active(self) -> List[WorkSession]:
        return [session.model_copy() for session in self._sessions.values()]

    def start(self, task_id: str) -> WorkSession:
        if task_id in self._sessions:
            raise AlreadyActive(task_id)

        git_tracked = self.vcs.is_repository()
        baseline = branch = None
        if git_tracked:
            baseline = self.vcs.current_revision()
            branch = self.vcs.current_branch()
        else:
            LOGGER.info("untracked_session task=%s path=%s", task_id, self.vcs.workspace_path)

        session = WorkSession(
            task_id=task_id,
            git_baseline=baseline,
            branch=branch,
            git_tracked=git_tracked,
        )

        self.api.update_task_status(task_id, TaskStatus.IN_PROGRESS.value)

        if git_tracked and not self.branches.is_trunk(branch):
            try:
                self.branches.track_task(task_id)
            except EurekaTrackerError as e:
                # Branch tracking is advisory; the session still starts
                LOGGER.warning("branch_tracking_failed task=%s error=%s", task_id, e)

        self.store.persist(session)
        self._sessions[task_id] = session
        LOGGER.info("session_started task=%s baseline=%s branch=%s", task_id, baseline, branch)
        return session

    def complete(
        self, task_id: str, summary: str, create_pr: bool = False
    ) -> CompletionResult:
        session = self._require(task_id)
        self._reconcile(session)

        if not session.git_tracked:
            return self._complete_untracked(session, summary)

        change_set = self.capture.capture(session.git_baseline)
        if change_set.is_empty:
            raise NoChangesDetected(session.git_baseline, change_set.final_revision)

        record = WorkSessionRecord.from_change_set(
            session.session_id, session.started_at, summary, change_set
        )
        self.api.create_work_session_record(task_id, record)
        self.api.update_task_description(
            task_id, format_task_description(summary, change_set)
        )
        self.api.update_task_status(task_id, TaskStatus.DONE.value)

        try:
            self.branches.touch_activity()
        except EurekaTrackerError as e:
            LOGGER.warning("branch_activity_failed task=%s error=%s", task_id, e)

        self._discard(task_id)
        LOGGER.info("session_completed task=%s files=%d", task_id, change_set.statistics.files_changed)

        result = CompletionResult(
            task_id=task_id,
            git_tracked=True,
            message=completion_message(change_set.statistics),
            statistics=change_set.statistics,
        )
        if create_pr:
            result.pull_request = self._pull_request_if_ready()
        else:
            result.pr_suggestion = self._suggestion()
        return result

    def _complete_untracked(self, session: WorkSession, summary: str) -> CompletionResult:
        self.api.update_task_description(session.task_id, summary)
        self.api.update_task_status(session.task_id, TaskStatus.DONE.value)
        self._discard(session.task_id)
        LOGGER.info("session_completed task=%s untracked", session.task_id)
        return CompletionResult(
            task_id=session.task_id,
            git_tracked=False,
            message="✅ Work session completed without git tracking.",
        )

    def cancel(self, task_id: str) -> WorkSession:
        session = self._require(task_id)
        self._reconcile(session)
        self.api.update_task_status(task_id, TaskStatus.TODO.value)
        self._discard(task_id)
        LOGGER.info("session_cancelled task=%s", task_id)
        return session

    def _require(self, task_id: str) -> WorkSession:
        session = self._sessions.get(task_id)
        if session is None:
            raise NoActiveSession(task_id)
        return session

    def _reconcile(self, session: WorkSession) -> None:
        """Drop a local session whose task is no longer in progress remotely."""
        try:
            task = self.api.get_task(session.task_id)
        except RemoteAPIError as e:
            if not e.is_not_found:
                raise
            remote_status = None
        else:
            if task.status == TaskStatus.IN_PROGRESS.value:
                return
            remote_status = task.status

        LOGGER.warning("stale_session task=%s remote_status=%s", session.task_id, remote_status)
        self._discard(session.task_id)
        raise StaleSession(session.task_id, remote_status)

    def _discard(self, task_id: str) -> None:
        self.store.remove(task_id)
        self._sessions.pop(task_id, None)
        if self._sessions and not self.store.has_marker():
            # The marker must stay while any session is open
            latest = max(reversed(list(self._sessions.values())), key=lambda s: s.started_at)
            self.store.write_marker(latest)
            LOGGER.info("marker_repointed task=%s", latest.task_id)

    def _suggestion(self) -> Optional[str]:
        try:
            return self.branches.suggest_pull_request()
        except EurekaTrackerError as e:
            LOGGER.warning("pr_suggestion_failed error=%s", e)
            return None

    def _pull_request_if_ready(self) -> PullRequestOutcome:
        branch = self.branches.current_branch()
        if branch is None:
            return PullRequestOutcome(
                created=False, reason="Pull requests need a checked-out branch."
            )
        if self.branches.is_trunk(branch):
            return PullRequestOutcome(
                created=False,
                reason=f"Pull requests are not created from branch '{branch}'.",
            )

        try:
            session = self.branches.get_session()
            if session is None or not session.task_ids:
                return PullRequestOutcome(
                    created=False, reason=f"No tasks are tracked on branch '{branch}'."
                )
            if session.has_pull_request:
                return PullRequestOutcome(
                    created=False,
                    reason=f"A pull request already exists: {session.pr_url}",
                )
            if not self.branches.all_tasks_completed():
                return PullRequestOutcome(
                    created=False,
                    reason=f"Some tasks on branch '{branch}' are still pending.",
                )
            title = default_pr_title(branch, self.branches.list_tasks())
            pr = self.branches.create_pull_request(title)
        except EurekaTrackerError as e:
            # The task itself is already completed at this point
            LOGGER.warning("pull_request_failed branch=%s error=%s", branch, e)
            return PullRequestOutcome(created=False, reason=e.message)
        return PullRequestOutcome(created=True, result=pr)
