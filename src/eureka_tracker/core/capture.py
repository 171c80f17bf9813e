"""Capture working-tree changes since a baseline revision."""

import logging
from pathlib import Path
from typing import Iterable, Tuple

from eureka_tracker.core.language import detect_language
from eureka_tracker.core.vcs import GitAdapter
from eureka_tracker.models.change import ChangeSet, ChangeType, FileDiff

LOGGER = logging.getLogger(__name__)


def count_diff_lines(unified_diff: str) -> Tuple[int, int]:
    """Count added and removed lines in unified diff text.

    Lines starting with ``+``/``-`` are counted, except the ``+++``/``---``
    file headers. This is a reporting heuristic, not an exact diff.
    """
    added = 0
    removed = 0
    for line in unified_diff.splitlines():
        if line.startswith("+") and not line.startswith("+++"):
            added += 1
        elif line.startswith("-") and not line.startswith("---"):
            removed += 1
    return added, removed


def _text_or_empty(content: str) -> str:
    # Binary blobs are not shipped as text
    return "" if "\0" in content else content


class ChangeCapture:
    """Build a ChangeSet from a baseline revision to the current working tree.

    ``ignored_paths`` are files or directories that are never reported, such
    as the session store living inside the working tree.
    """

    def __init__(self, vcs: GitAdapter, ignored_paths: Iterable[Path] = ()):
        self.vcs = vcs
        self.ignored_paths = [Path(path).resolve() for path in ignored_paths]

    def is_ignored(self, file_path: str) -> bool:
        if not self.ignored_paths:
            return False
        absolute = (self.vcs.root / file_path).resolve()
        return any(
            absolute == ignored or ignored in absolute.parents
            for ignored in self.ignored_paths
        )

    def capture(self, baseline: str) -> ChangeSet:
        final_revision = self.vcs.current_revision()
        branch = self.vcs.current_branch()

        files = [
            self.capture_file(path, status, baseline)
            for path, status in self.vcs.changed_files(baseline)
            if not self.is_ignored(path)
        ]
        change_set = ChangeSet.build(
            baseline_revision=baseline,
            final_revision=final_revision,
            branch=branch,
            files=files,
        )
        LOGGER.info(
            "captured baseline=%s final=%s files=%d +%d -%d",
            baseline[:7],
            final_revision[:7],
            change_set.statistics.files_changed,
            change_set.statistics.lines_added,
            change_set.statistics.lines_removed,
        )
        return change_set

    def capture_file(self, file_path: str, status: str, baseline: str) -> FileDiff:
        change_type = ChangeType.from_status(status)

        old_content = ""
        if change_type is not ChangeType.ADDED:
            old_content = self.vcs.file_content_at_revision(file_path, baseline)
        new_content = ""
        if change_type is not ChangeType.DELETED:
            new_content = self.vcs.current_file_content(file_path)

        unified_diff = self.vcs.unified_diff(file_path, baseline)
        lines_added, lines_removed = count_diff_lines(unified_diff)

        return FileDiff(
            path=file_path,
            change_type=change_type,
            lines_added=lines_added,
            lines_removed=lines_removed,
            language=detect_language(file_path),
            old_content=_text_or_empty(old_content),
            new_content=_text_or_empty(new_content),
            unified_diff=unified_diff,
        )
