"""HTTP client for the Eureka task API."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from eureka_tracker.config import Settings
from eureka_tracker.core.exceptions import ConfigurationError, RemoteAPIError
from eureka_tracker.models.session import WorkSessionRecord
from eureka_tracker.models.task import BranchSession, PullRequestResult, Task

LOGGER = logging.getLogger(__name__)

STATUS_MESSAGES = {
    401: "Authentication failed. Check your API key.",
    403: "Permission denied. Check API key permissions.",
    404: "Resource not found.",
}


def _branch_path(branch: str) -> str:
    return f"/api/v1/branch-sessions/{quote(branch, safe='')}"


class TaskAPIClient:
    """Task API over HTTP, authenticated with an ``X-API-Key`` header.

    The project id is resolved from the API key on first use.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not base_url:
            raise ConfigurationError("EUREKA_API_URL is required.")
        if not api_key:
            raise ConfigurationError("EUREKA_API_KEY is required.")
        self._client = httpx.Client(
            base_url=base_url,
            headers={"X-API-Key": api_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        self._project_id: Optional[str] = None

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None
    ) -> "TaskAPIClient":
        return cls(
            settings.api_url,
            settings.api_key,
            timeout=settings.api_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TaskAPIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise RemoteAPIError(
                f"No response from API server. Check if API is running. ({e})"
            ) from e

        LOGGER.debug("api method=%s url=%s status=%s", method, url, response.status_code)
        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            server_message = payload.get("error") if isinstance(payload, dict) else None
            message = STATUS_MESSAGES.get(response.status_code) or server_message
            raise RemoteAPIError(
                message or f"API error: {response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )
        if not response.content:
            return None
        return response.json()

    @property
    def project_id(self) -> str:
        if self._project_id is None:
            key_info = self._request("GET", "/api/v1/api-keys/me") or {}
            project_id = key_info.get("projectId")
            if not project_id:
                raise RemoteAPIError("API key validation failed: no project ID found")
            self._project_id = project_id
            LOGGER.info("api_initialized project=%s", project_id)
        return self._project_id

    # Tasks

    def get_task(self, task_id: str) -> Task:
        return Task.model_validate(self._request("GET", f"/api/v1/tasks/{task_id}"))

    def create_task(
        self,
        title: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> Task:
        body = {"title": title, "description": description, "status": status, "priority": priority}
        data = self._request(
            "POST",
            f"/api/v1/projects/{self.project_id}/tasks",
            json={k: v for k, v in body.items() if v is not None},
        )
        return Task.model_validate(data)

    def update_task(self, task_id: str, **fields: Any) -> Task:
        data = self._request("PATCH", f"/api/v1/tasks/{task_id}", json=fields)
        return Task.model_validate(data)

    def update_task_status(self, task_id: str, status: str) -> Task:
        return self.update_task(task_id, status=status)

    def update_task_description(self, task_id: str, description: str) -> Task:
        return self.update_task(task_id, description=description)

    # Work sessions

    def create_work_session_record(
        self, task_id: str, record: WorkSessionRecord
    ) -> Dict[str, Any]:
        return self._request(
            "POST", f"/api/v1/tasks/{task_id}/work-sessions", json=record.to_payload()
        ) or {}

    # Branch sessions

    def create_or_update_branch_session(
        self, branch: str, task_id: str
    ) -> BranchSession:
        data = self._request(
            "POST",
            "/api/v1/branch-sessions",
            json={"projectId": self.project_id, "branchName": branch, "taskId": task_id},
        ) or {}
        data.setdefault("branchName", branch)
        return BranchSession.model_validate(data)

    def get_branch_session(self, branch: str) -> Optional[BranchSession]:
        try:
            data = self._request(
                "GET", _branch_path(branch), params={"projectId": self.project_id}
            )
        except RemoteAPIError as e:
            if e.is_not_found:
                return None
            raise
        if not data:
            return None
        data.setdefault("branchName", branch)
        return BranchSession.model_validate(data)

    def touch_branch_activity(self, branch: str) -> None:
        self._request(
            "PATCH",
            f"{_branch_path(branch)}/activity",
            params={"projectId": self.project_id},
        )

    def get_branch_tasks(self, branch: str) -> List[Task]:
        data = self._request(
            "GET", f"{_branch_path(branch)}/tasks", params={"projectId": self.project_id}
        ) or {}
        return [Task.model_validate(item) for item in data.get("tasks", [])]

    def check_branch_completion(self, branch: str) -> bool:
        data = self._request(
            "GET",
            f"{_branch_path(branch)}/check-completion",
            params={"projectId": self.project_id},
        ) or {}
        return bool(data.get("allCompleted", False))

    def create_pull_request(
        self, branch: str, title: str, base_branch: Optional[str] = None
    ) -> PullRequestResult:
        body = {"projectId": self.project_id, "title": title}
        if base_branch:
            body["baseBranch"] = base_branch
        data = self._request("POST", f"{_branch_path(branch)}/pr", json=body) or {}
        return PullRequestResult(
            pr_url=data["prUrl"],
            pr_number=data["prNumber"],
            updated_task_count=data.get("updatedTasks") or 0,
        )
