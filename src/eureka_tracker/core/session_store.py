"""Durable local storage for open work sessions.

Each open session is one JSON record under the sessions directory. A single
marker file at the workspace root mirrors the most recently started session
so that an out-of-process hook can check for an active session without
reading every record. The marker is a best-effort signal, not a lock; it
carries the session id and writer pid so a checker can detect staleness.
"""

import json
import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from eureka_tracker.core.exceptions import SessionStoreError
from eureka_tracker.models.session import WorkSession

LOGGER = logging.getLogger(__name__)

DEFAULT_SESSIONS_DIR = ".eureka-sessions"
DEFAULT_MARKER_FILE = ".eureka-active-session"


def _atomic_write_json(path: Path, payload: Mapping[str, Any]) -> None:
    """Write JSON payload to path atomically (temp file + rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(
        dir=str(path.parent), prefix=".tmp_session_", suffix=".json", text=True
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
            handle.write("\n")
        os.replace(temp_path, path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def _record_name(task_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", task_id) + ".json"


class SessionStore:
    """Persist WorkSession records and the active-session marker on disk."""

    def __init__(
        self,
        workspace_path: Path,
        sessions_dir_name: str = DEFAULT_SESSIONS_DIR,
        marker_file_name: str = DEFAULT_MARKER_FILE,
    ):
        self.workspace_path = Path(workspace_path)
        self.sessions_dir = self.workspace_path / sessions_dir_name
        self.marker_path = self.workspace_path / marker_file_name

    @property
    def owned_paths(self) -> List[Path]:
        """Paths written by the store, which change capture must not report."""
        return [self.sessions_dir, self.marker_path]

    def record_path(self, task_id: str) -> Path:
        return self.sessions_dir / _record_name(task_id)

    def persist(self, session: WorkSession) -> None:
        """Upsert the record for ``session.task_id`` and point the marker at it."""
        try:
            _atomic_write_json(self.record_path(session.task_id), session.to_json_dict())
        except OSError as e:
            raise SessionStoreError(
                f"Failed to persist work session for task {session.task_id}: {e}"
            ) from e
        self.write_marker(session)
        LOGGER.debug("session_persisted task=%s", session.task_id)

    def write_marker(self, session: WorkSession) -> None:
        """Point the active-session marker at ``session``."""
        marker = session.to_json_dict()
        marker["pid"] = os.getpid()
        marker["writtenAt"] = datetime.now(timezone.utc).isoformat()
        try:
            _atomic_write_json(self.marker_path, marker)
        except OSError as e:
            raise SessionStoreError(
                f"Failed to write the active-session marker for task {session.task_id}: {e}"
            ) from e

    def remove(self, task_id: str) -> None:
        """Delete the record for ``task_id`` and the marker if it refers to it."""
        try:
            self.record_path(task_id).unlink(missing_ok=True)
            marker = self.read_marker()
            if marker is not None and marker.get("taskId") == task_id:
                self.marker_path.unlink(missing_ok=True)
        except OSError as e:
            raise SessionStoreError(
                f"Failed to remove work session for task {task_id}: {e}"
            ) from e
        LOGGER.debug("session_removed task=%s", task_id)

    def load_all(self) -> Dict[str, WorkSession]:
        """Load every stored session, skipping records that cannot be parsed."""
        sessions: Dict[str, WorkSession] = {}
        if not self.sessions_dir.is_dir():
            return sessions

        for path in sorted(self.sessions_dir.glob("*.json")):
            try:
                session = WorkSession.model_validate(
                    json.loads(path.read_text(encoding="utf-8"))
                )
            except (OSError, ValueError, ValidationError) as e:
                LOGGER.warning("corrupt_session_record path=%s error=%s", path, e)
                continue
            sessions[session.task_id] = session
        return sessions

    def read_marker(self) -> Optional[Dict[str, Any]]:
        """Parsed marker contents, or None when absent or unreadable."""
        try:
            data = json.loads(self.marker_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            LOGGER.warning("corrupt_marker path=%s error=%s", self.marker_path, e)
            return None
        return data if isinstance(data, dict) else None

    def has_marker(self) -> bool:
        return self.marker_path.exists()
