"""Shared fixtures: temporary git projects and an in-memory Task API."""

import tempfile
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest
from git import Repo

from eureka_tracker.config import Settings
from eureka_tracker.core.exceptions import RemoteAPIError
from eureka_tracker.models.session import WorkSessionRecord
from eureka_tracker.models.task import (
    BranchSession,
    BranchSessionStatus,
    PullRequestResult,
    Task,
    TaskStatus,
)
from eureka_tracker.services import build_services


class FakeTaskAPI:
    """In-memory TaskAPI with branch sessions and pull requests."""

    def __init__(self):
        self.tasks: Dict[str, Task] = {}
        self.records: Dict[str, List[WorkSessionRecord]] = defaultdict(list)
        self.branch_sessions: Dict[str, BranchSession] = {}
        self.status_updates: List[Tuple[str, str]] = []
        self.activity: List[str] = []
        self.pull_requests: List[Tuple[str, str, Optional[str]]] = []
        self.fail_on: Set[str] = set()
        self._created = 0

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise RemoteAPIError(f"{name} failed", status_code=500)

    def add_task(self, task_id: str, title: str = "", status: str = "todo") -> Task:
        task = Task(id=task_id, title=title or f"Task {task_id}", status=status)
        self.tasks[task_id] = task
        return task

    def get_task(self, task_id: str) -> Task:
        self._maybe_fail("get_task")
        if task_id not in self.tasks:
            raise RemoteAPIError("Resource not found.", status_code=404)
        return self.tasks[task_id].model_copy()

    def create_task(self, title, description=None, status=None, priority=None) -> Task:
        self._maybe_fail("create_task")
        self._created += 1
        task = Task(
            id=f"auto-{self._created}",
            title=title,
            description=description,
            status=status or TaskStatus.TODO.value,
            priority=priority,
        )
        self.tasks[task.id] = task
        return task.model_copy()

    def _upsert(self, task_id: str) -> Task:
        if task_id not in self.tasks:
            self.add_task(task_id)
        return self.tasks[task_id]

    def update_task_status(self, task_id: str, status: str) -> Task:
        self._maybe_fail("update_task_status")
        task = self._upsert(task_id)
        task.status = status
        self.status_updates.append((task_id, status))
        return task.model_copy()

    def update_task_description(self, task_id: str, description: str) -> Task:
        self._maybe_fail("update_task_description")
        task = self._upsert(task_id)
        task.description = description
        return task.model_copy()

    def create_work_session_record(self, task_id, record):
        self._maybe_fail("create_work_session_record")
        self.records[task_id].append(record)
        return {"id": record.session_id}

    def create_or_update_branch_session(self, branch, task_id) -> BranchSession:
        self._maybe_fail("create_or_update_branch_session")
        session = self.branch_sessions.setdefault(
            branch, BranchSession(branch_name=branch, project_id="proj-1")
        )
        if task_id not in session.task_ids:
            session.task_ids.append(task_id)
        return session.model_copy(deep=True)

    def get_branch_session(self, branch) -> Optional[BranchSession]:
        self._maybe_fail("get_branch_session")
        session = self.branch_sessions.get(branch)
        return session.model_copy(deep=True) if session else None

    def touch_branch_activity(self, branch) -> None:
        self._maybe_fail("touch_branch_activity")
        self.activity.append(branch)

    def get_branch_tasks(self, branch) -> List[Task]:
        session = self.branch_sessions.get(branch)
        if session is None:
            return []
        return [self.tasks[t].model_copy() for t in session.task_ids if t in self.tasks]

    def check_branch_completion(self, branch) -> bool:
        tasks = self.get_branch_tasks(branch)
        return bool(tasks) and all(task.is_done for task in tasks)

    def create_pull_request(self, branch, title, base_branch=None) -> PullRequestResult:
        self._maybe_fail("create_pull_request")
        session = self.branch_sessions[branch]
        number = len(self.pull_requests) + 1
        session.pr_url = f"https://github.com/acme/widgets/pull/{number}"
        session.pr_number = number
        session.status = BranchSessionStatus.PR_CREATED
        self.pull_requests.append((branch, title, base_branch))
        return PullRequestResult(
            pr_url=session.pr_url,
            pr_number=number,
            updated_task_count=len(session.task_ids),
        )


def commit_all(repo: Repo, message: str) -> str:
    repo.git.add("-A")
    return repo.index.commit(message).hexsha


@pytest.fixture
def git_project():
    """Create a temporary git project on ``main`` with one commit."""
    with tempfile.TemporaryDirectory() as temp_dir:
        project_path = Path(temp_dir).resolve()

        repo = Repo.init(project_path)
        with repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")
            config.set_value("commit", "gpgsign", "false")

        (project_path / "main.py").write_text("def main():\n    print('Hello')\n")
        (project_path / "README.md").write_text("# Test Project\n")
        (project_path / "src").mkdir()
        (project_path / "src" / "core.py").write_text("class Core:\n    pass\n")
        commit_all(repo, "Initial commit")
        repo.git.checkout("-B", "main")

        yield project_path, repo


@pytest.fixture
def plain_dir():
    """A temporary directory that is not a git repository."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir).resolve()


@pytest.fixture
def fake_api():
    return FakeTaskAPI()


@pytest.fixture
def settings_for():
    def _settings(path: Path) -> Settings:
        return Settings(workspace_path=path, api_url="http://api.test", api_key="k")

    return _settings


@pytest.fixture
def services(git_project, fake_api, settings_for):
    project_path, _ = git_project
    return build_services(settings_for(project_path), api=fake_api)
