"""Wire the session engine together from settings."""

from dataclasses import dataclass
from typing import Optional

from eureka_tracker.api.client import TaskAPIClient
from eureka_tracker.api.protocol import TaskAPI
from eureka_tracker.config import Settings
from eureka_tracker.core.branch_session import BranchSessionAggregator
from eureka_tracker.core.capture import ChangeCapture
from eureka_tracker.core.pull_requests import PullRequestService
from eureka_tracker.core.session_store import SessionStore
from eureka_tracker.core.vcs import GitAdapter
from eureka_tracker.core.work_session import WorkSessionManager


@dataclass
class Services:
    vcs: GitAdapter
    store: SessionStore
    api: TaskAPI
    branches: BranchSessionAggregator
    sessions: WorkSessionManager
    pull_requests: PullRequestService


def build_services(settings: Settings, api: Optional[TaskAPI] = None) -> Services:
    """Build every collaborator for one workspace; ``api`` overrides the HTTP client."""
    vcs = GitAdapter(settings.workspace_path)
    store = SessionStore(
        settings.workspace_path,
        sessions_dir_name=settings.sessions_dir_name,
        marker_file_name=settings.marker_file_name,
    )
    capture = ChangeCapture(vcs, ignored_paths=store.owned_paths)
    if api is None:
        api = TaskAPIClient.from_settings(settings)
    branches = BranchSessionAggregator(vcs, api, settings.trunk_branches)
    return Services(
        vcs=vcs,
        store=store,
        api=api,
        branches=branches,
        sessions=WorkSessionManager(vcs, capture, store, api, branches),
        pull_requests=PullRequestService(vcs, capture, api, branches),
    )
