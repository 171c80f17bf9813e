"""Tests for change capture from a baseline to the working tree."""

from eureka_tracker.core.capture import ChangeCapture, count_diff_lines
from eureka_tracker.core.vcs import GitAdapter
from eureka_tracker.models.change import ChangeType
from tests.conftest import commit_all


def _capture(project_path):
    return ChangeCapture(GitAdapter(project_path))


def test_clean_tree_at_baseline_is_empty(git_project):
    project_path, repo = git_project
    head = repo.head.commit.hexsha

    change_set = _capture(project_path).capture(head)

    assert change_set.files == []
    assert change_set.statistics.files_changed == 0
    assert change_set.is_empty
    assert change_set.baseline_revision == head
    assert change_set.final_revision == head
    assert change_set.branch == "main"


def test_new_file_with_ten_lines(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha
    (project_path / "f.txt").write_text("".join(f"line {i}\n" for i in range(10)))

    change_set = _capture(project_path).capture(baseline)

    assert change_set.statistics.files_changed == 1
    assert change_set.statistics.lines_added == 10
    assert change_set.statistics.lines_removed == 0
    diff = change_set.files[0]
    assert diff.path == "f.txt"
    assert diff.change_type is ChangeType.ADDED
    assert diff.old_content == ""
    assert diff.new_content.startswith("line 0\n")
    assert diff.language == "text"


def test_modified_file(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha
    (project_path / "main.py").write_text(
        "def main():\n    print('Hello, World!')\n    return 0\n"
    )

    change_set = _capture(project_path).capture(baseline)

    (diff,) = change_set.files
    assert diff.change_type is ChangeType.MODIFIED
    assert diff.language == "python"
    assert diff.lines_added == 2
    assert diff.lines_removed == 1
    assert diff.old_content == "def main():\n    print('Hello')\n"
    assert "return 0" in diff.new_content
    assert "+    return 0" in diff.unified_diff


def test_deleted_file(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha
    (project_path / "src" / "core.py").unlink()

    change_set = _capture(project_path).capture(baseline)

    (diff,) = change_set.files
    assert diff.path == "src/core.py"
    assert diff.change_type is ChangeType.DELETED
    assert diff.new_content == ""
    assert diff.old_content == "class Core:\n    pass\n"
    assert diff.lines_removed == 2


def test_committed_and_uncommitted_changes_are_combined(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha

    (project_path / "lib.py").write_text("def lib():\n    return 1\n")
    commit_all(repo, "Add lib")
    (project_path / "README.md").write_text("# Test Project\n\nMore docs.\n")

    change_set = _capture(project_path).capture(baseline)

    assert change_set.final_revision == repo.head.commit.hexsha
    assert {f.path: f.change_type for f in change_set.files} == {
        "lib.py": ChangeType.ADDED,
        "README.md": ChangeType.MODIFIED,
    }
    assert change_set.statistics.lines_added == 4
    assert change_set.statistics.lines_removed == 0


def test_statistics_match_files(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha
    (project_path / "main.py").write_text("print('x')\n")
    (project_path / "a.ts").write_text("export const a = 1;\n")

    change_set = _capture(project_path).capture(baseline)

    assert change_set.statistics.files_changed == len(change_set.files)
    assert change_set.statistics.lines_added == sum(f.lines_added for f in change_set.files)
    assert change_set.statistics.lines_removed == sum(
        f.lines_removed for f in change_set.files
    )


def test_repeated_capture_is_identical(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha
    (project_path / "main.py").write_text("print('x')\n")
    (project_path / "new.md").write_text("# New\n")
    capture = _capture(project_path)

    first = capture.capture(baseline)
    second = capture.capture(baseline)

    key = lambda f: f.path  # noqa: E731
    assert sorted(first.files, key=key) == sorted(second.files, key=key)


def test_binary_content_is_not_shipped(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha
    (project_path / "blob.bin").write_bytes(b"\x00\x01\n\x02\n\x03binary\n")

    change_set = _capture(project_path).capture(baseline)

    (diff,) = change_set.files
    assert diff.change_type is ChangeType.ADDED
    assert diff.new_content == ""
    assert diff.lines_added == 0
    assert diff.lines_removed == 0
    assert "\0" not in diff.unified_diff
    assert diff.unified_diff.endswith("Binary files /dev/null and b/blob.bin differ")


def test_binary_statistics_do_not_depend_on_index_state(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha
    (project_path / "blob.bin").write_bytes(b"\x00\x01\n\x02\n\x03binary\n")
    capture = _capture(project_path)

    untracked = capture.capture(baseline)
    repo.git.add("blob.bin")
    staged = capture.capture(baseline)

    assert untracked.statistics == staged.statistics


def test_legacy_encoded_file_is_decoded_with_replacement(git_project):
    project_path, repo = git_project
    (project_path / "legacy.txt").write_bytes(b"caf\xe9\n")
    baseline = commit_all(repo, "Add legacy file")
    (project_path / "legacy.txt").write_bytes(b"caf\xe9 cr\xe8me\n")

    (diff,) = _capture(project_path).capture(baseline).files

    assert diff.old_content == "caf\ufffd\n"
    assert diff.new_content == "caf\ufffd cr\ufffdme\n"
    assert "+caf\ufffd cr\ufffdme" in diff.unified_diff
    assert (diff.lines_added, diff.lines_removed) == (1, 1)


def test_count_diff_lines_skips_headers():
    diff = "\n".join(
        [
            "diff --git a/x.py b/x.py",
            "--- a/x.py",
            "+++ b/x.py",
            "@@ -1,2 +1,2 @@",
            " keep",
            "-old",
            "+new",
            "+extra",
        ]
    )

    assert count_diff_lines(diff) == (2, 1)
    assert count_diff_lines("") == (0, 0)


def test_ignored_paths_are_not_reported(git_project):
    project_path, repo = git_project
    baseline = repo.head.commit.hexsha
    (project_path / ".eureka-sessions").mkdir()
    (project_path / ".eureka-sessions" / "T1.json").write_text("{}\n")
    (project_path / ".eureka-active-session").write_text("{}\n")
    (project_path / "real.py").write_text("pass\n")
    capture = ChangeCapture(
        GitAdapter(project_path),
        ignored_paths=[
            project_path / ".eureka-sessions",
            project_path / ".eureka-active-session",
        ],
    )

    change_set = capture.capture(baseline)

    assert [f.path for f in change_set.files] == ["real.py"]
