"""Work session models."""

import time
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .change import ChangeSet, ChangeStatistics, FileDiff


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    """Session identifiers follow the ``session_<epoch-ms>`` convention."""
    return f"session_{int(time.time() * 1000)}"


class WorkSession(BaseModel):
    """One open unit of work on one task."""

    task_id: str
    session_id: str = Field(default_factory=new_session_id)
    started_at: datetime = Field(default_factory=utcnow)
    git_baseline: Optional[str] = None
    branch: Optional[str] = None
    git_tracked: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class WorkSessionRecord(BaseModel):
    """Payload submitted to the Task API when a tracked session completes."""

    session_id: str
    started_at: datetime
    completed_at: datetime = Field(default_factory=utcnow)
    summary: str
    git_baseline: str
    git_final: str
    branch: str
    statistics: ChangeStatistics
    files: List[FileDiff] = []

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_change_set(
        cls,
        session_id: str,
        started_at: datetime,
        summary: str,
        change_set: ChangeSet,
    ) -> "WorkSessionRecord":
        return cls(
            session_id=session_id,
            started_at=started_at,
            summary=summary,
            git_baseline=change_set.baseline_revision,
            git_final=change_set.final_revision,
            branch=change_set.branch,
            statistics=change_set.statistics,
            files=list(change_set.files),
        )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
