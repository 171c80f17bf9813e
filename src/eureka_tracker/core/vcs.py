"""Git access for change capture, backed by GitPython."""

import difflib
import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import git
from git import Repo

from eureka_tracker.core.exceptions import NotARepository, VCSError

LOGGER = logging.getLogger(__name__)

# git exits with 128 when a path or revision does not exist
ABSENT_STATUS = 128

UNTRACKED_STATUS = "A"

# what `rev-parse --abbrev-ref HEAD` prints on a detached HEAD
DETACHED_HEAD = "HEAD"


def normalize_git_url(url: str) -> str:
    """Normalize a remote URL to ``https://host/owner/repo``.

    ``git@github.com:user/repo.git`` and ``https://github.com/user/repo.git``
    both become ``https://github.com/user/repo``.
    """
    normalized = re.sub(r"\.git$", "", url.strip())
    normalized = re.sub(r"^git@([^:]+):(.+)$", r"https://\1/\2", normalized)
    if not normalized.startswith(("http://", "https://")):
        normalized = "https://" + normalized
    return normalized


class GitAdapter:
    """Thin wrapper around the git command line for one working copy."""

    def __init__(self, workspace_path: Path):
        self.workspace_path = Path(workspace_path).resolve()
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        """Get the git repository containing the workspace."""
        if self._repo is None:
            try:
                self._repo = Repo(self.workspace_path, search_parent_directories=True)
            except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
                raise NotARepository(
                    f"Workspace {self.workspace_path} is not a git repository."
                ) from e
        return self._repo

    @property
    def root(self) -> Path:
        """Working tree root; paths reported by git are relative to it."""
        working_tree_dir = self.repo.working_tree_dir
        if working_tree_dir is None:
            raise NotARepository(f"{self.workspace_path} is a bare repository.")
        return Path(working_tree_dir)

    def _git(self, command: str, *args: str, absent_ok: bool = False, **kwargs) -> str:
        """Run ``git <command> <args>`` in the repository.

        With ``absent_ok`` a failure caused by a missing path or revision
        yields an empty string instead of an error.
        """
        try:
            return getattr(self.repo.git, command)(*args, **kwargs)
        except git.exc.GitCommandNotFound as e:
            raise VCSError("Git command not found. Make sure git is installed.") from e
        except git.exc.GitCommandError as e:
            if absent_ok and e.status == ABSENT_STATUS:
                LOGGER.debug("git_absent command=%s args=%s", command, args)
                return ""
            raise VCSError(f"git {command} failed: {e.stderr.strip() or e}") from e

    def is_repository(self) -> bool:
        try:
            self.repo
        except VCSError:
            return False
        return True

    def current_revision(self) -> str:
        try:
            return self._git("rev_parse", "HEAD")
        except VCSError as e:
            if isinstance(e, NotARepository):
                raise
            raise VCSError(
                f"Could not resolve HEAD in {self.workspace_path}; "
                "does the repository have any commits?"
            ) from e

    def current_branch(self) -> str:
        """Branch name, or ``HEAD`` when detached."""
        return self._git("rev_parse", "--abbrev-ref", "HEAD")

    def changed_files(self, baseline: str) -> List[Tuple[str, str]]:
        """List ``(path, status)`` pairs between ``baseline`` and the working tree.

        Uncommitted and untracked (non-ignored) files are included. Renames
        are reported as a deletion plus an addition.
        """
        output = self._git(
            "diff",
            "--name-status",
            "--no-renames",
            "--no-color",
            "-z",
            baseline,
            strip_newline_in_stdout=False,
        )
        fields = [f for f in output.split("\0") if f]
        changes = [(path, status) for status, path in zip(fields[0::2], fields[1::2])]

        seen = {path for path, _ in changes}
        for path in self.untracked_files():
            if path not in seen:
                changes.append((path, UNTRACKED_STATUS))
        return changes

    def untracked_files(self, *paths: str) -> List[str]:
        args = ["--others", "--exclude-standard", "-z"]
        if paths:
            args += ["--", *paths]
        output = self._git("ls_files", *args, strip_newline_in_stdout=False)
        return [path for path in output.split("\0") if path]

    def is_untracked(self, file_path: str) -> bool:
        return file_path in self.untracked_files(file_path)

    def _git_text(self, command: str, *args: str, absent_ok: bool = False, **kwargs) -> str:
        """Run git and decode its output as UTF-8, replacing undecodable bytes."""
        output = self._git(
            command, *args, absent_ok=absent_ok, stdout_as_string=False, **kwargs
        )
        if isinstance(output, bytes):
            return output.decode("utf-8", errors="replace")
        return output

    def file_content_at_revision(self, file_path: str, revision: str) -> str:
        """File text at ``revision``; empty when the file does not exist there."""
        return self._git_text(
            "show",
            f"{revision}:{file_path}",
            absent_ok=True,
            strip_newline_in_stdout=False,
        )

    def current_file_content(self, file_path: str) -> str:
        """File text in the working tree; empty when the file is absent."""
        full_path = self.root / file_path
        try:
            return full_path.read_bytes().decode("utf-8", errors="replace")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return ""

    def unified_diff(self, file_path: str, baseline: str) -> str:
        """Unified diff of one file between ``baseline`` and the working tree."""
        if self.is_untracked(file_path):
            return self._new_file_diff(file_path)
        return self._git_text(
            "diff",
            "--no-color",
            "--no-ext-diff",
            baseline,
            "--",
            file_path,
            absent_ok=True,
        )

    def _new_file_diff(self, file_path: str) -> str:
        """Render an untracked file as a git-style addition."""
        content = self.current_file_content(file_path)
        if not content:
            return ""
        header = [f"diff --git a/{file_path} b/{file_path}", "new file mode 100644"]
        if "\0" in content:
            return "\n".join(header + [f"Binary files /dev/null and b/{file_path} differ"])
        diff_lines = list(
            difflib.unified_diff(
                [],
                content.splitlines(),
                fromfile="/dev/null",
                tofile=f"b/{file_path}",
                lineterm="",
            )
        )
        return "\n".join(header + diff_lines)

    def has_uncommitted_changes(self) -> bool:
        return self.repo.is_dirty(untracked_files=True)

    def merge_base_with_trunk(self, trunk_branches: Sequence[str]) -> str:
        """Find where the current branch forked from a trunk branch.

        Remote-tracking trunks are preferred over local ones; the root commit
        is used when no trunk is reachable.
        """
        for trunk in trunk_branches:
            for ref in (f"origin/{trunk}", trunk):
                try:
                    base = self._git("merge_base", "HEAD", ref)
                except VCSError:
                    continue
                if base:
                    LOGGER.debug("merge_base ref=%s base=%s", ref, base)
                    return base
        roots = self._git("rev_list", "--max-parents=0", "HEAD").splitlines()
        if not roots:
            raise VCSError("Could not determine a baseline for the current branch.")
        return roots[0]

    def remote_url(self, remote: str = "origin") -> Optional[str]:
        """Normalized URL of ``remote``, or None when it is not configured."""
        try:
            url = self._git("config", "--get", f"remote.{remote}.url")
        except VCSError:
            return None
        return normalize_git_url(url) if url else None
