"""Change models for git diffs captured between a baseline and the working tree."""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class ChangeType(str, Enum):
    """How a file changed between the baseline and the working tree."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"

    @classmethod
    def from_status(cls, status: str) -> "ChangeType":
        """Map a git name-status code (A, D, M, T, ...) to a change type."""
        code = status[:1].upper()
        if code == "A":
            return cls.ADDED
        if code == "D":
            return cls.DELETED
        return cls.MODIFIED


class FileDiff(BaseModel):
    """One changed file between two tree states."""

    path: str
    change_type: ChangeType
    lines_added: int = 0
    lines_removed: int = 0
    language: str = "text"
    old_content: str = ""
    new_content: str = ""
    unified_diff: str = ""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    @model_validator(mode="after")
    def _check_contents(self) -> "FileDiff":
        if self.lines_added < 0 or self.lines_removed < 0:
            raise ValueError("line counts must be non-negative")
        if self.change_type is ChangeType.ADDED and self.old_content:
            raise ValueError(f"added file {self.path} cannot have old content")
        if self.change_type is ChangeType.DELETED and self.new_content:
            raise ValueError(f"deleted file {self.path} cannot have new content")
        return self


class ChangeStatistics(BaseModel):
    """Aggregate line and file counts for a set of file diffs."""

    files_changed: int = 0
    lines_added: int = 0
    lines_removed: int = 0

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    @classmethod
    def from_files(cls, files: List[FileDiff]) -> "ChangeStatistics":
        return cls(
            files_changed=len(files),
            lines_added=sum(f.lines_added for f in files),
            lines_removed=sum(f.lines_removed for f in files),
        )


class ChangeSet(BaseModel):
    """Result of one capture from a baseline revision to the working tree."""

    baseline_revision: str
    final_revision: str
    branch: str
    files: List[FileDiff] = []
    statistics: ChangeStatistics = ChangeStatistics()

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    @model_validator(mode="after")
    def _check_statistics(self) -> "ChangeSet":
        if self.statistics != ChangeStatistics.from_files(self.files):
            raise ValueError("statistics do not match the captured files")
        return self

    @classmethod
    def build(
        cls,
        baseline_revision: str,
        final_revision: str,
        branch: str,
        files: List[FileDiff],
    ) -> "ChangeSet":
        """Create a change set whose statistics are derived from ``files``."""
        return cls(
            baseline_revision=baseline_revision,
            final_revision=final_revision,
            branch=branch,
            files=files,
            statistics=ChangeStatistics.from_files(files),
        )

    @property
    def is_empty(self) -> bool:
        return self.statistics.files_changed == 0
