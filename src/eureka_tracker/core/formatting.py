"""Human-readable renderings of captured changes."""

from typing import List

from eureka_tracker.models.change import ChangeSet, ChangeStatistics, ChangeType
from eureka_tracker.models.task import Task

CHANGE_ICONS = {
    ChangeType.ADDED: "➕",
    ChangeType.MODIFIED: "✏️",
    ChangeType.DELETED: "❌",
}

BRANCH_PREFIX_TITLES = {
    "feature": "Implement {}",
    "feat": "Implement {}",
    "fix": "Fix {}",
    "bugfix": "Fix {}",
    "refactor": "Refactor {}",
    "docs": "Update documentation for {}",
    "test": "Add tests for {}",
    "chore": "Maintain {}",
}


def _statistics_lines(statistics: ChangeStatistics) -> List[str]:
    return [
        f"- **Files changed**: {statistics.files_changed}",
        f"- **Lines added**: +{statistics.lines_added}",
        f"- **Lines removed**: -{statistics.lines_removed}",
    ]


def _file_lines(change_set: ChangeSet) -> List[str]:
    return [
        f"{CHANGE_ICONS[f.change_type]} `{f.path}` (+{f.lines_added}/-{f.lines_removed})"
        for f in change_set.files
    ]


def format_task_description(summary: str, change_set: ChangeSet) -> str:
    """Markdown task description summarizing one completed work session."""
    lines = ["## 🎯 Summary", "", summary, "", "## 📊 Statistics", ""]
    lines += _statistics_lines(change_set.statistics)
    lines += [
        f"- **Branch**: `{change_set.branch}`",
        f"- **Commit**: `{change_set.final_revision[:7]}`",
        "",
        "## 📁 Changed files",
        "",
    ]
    lines += _file_lines(change_set)
    lines += ["", "---", "", "*Full diffs are available in the Work Sessions tab.*"]
    return "\n".join(lines) + "\n"


def format_branch_task_description(change_set: ChangeSet, branch: str) -> str:
    """Markdown description for a task synthesized from a whole branch diff."""
    lines = [
        "## 🎯 Summary",
        "",
        f"Completed development work on branch `{branch}`.",
        "",
        "## 📊 Statistics",
        "",
    ]
    lines += _statistics_lines(change_set.statistics)
    lines += [
        f"- **Branch**: `{branch}`",
        f"- **Base commit**: `{change_set.baseline_revision[:7]}`",
        f"- **Final commit**: `{change_set.final_revision[:7]}`",
        "",
        "## 📁 Changed files",
        "",
    ]
    lines += _file_lines(change_set)
    lines += ["", "---", "", "*This work is linked to a pull request.*"]
    return "\n".join(lines) + "\n"


def title_from_branch(branch: str) -> str:
    """Readable task title from a branch name.

    >>> title_from_branch("feature/add-auth")
    'Implement add auth'
    """
    prefix, _, rest = branch.partition("/")
    name = (rest or prefix).replace("-", " ").replace("_", " ")
    template = BRANCH_PREFIX_TITLES.get(prefix, "Work on {}") if rest else "Work on {}"
    return template.format(name)


def default_pr_title(branch: str, tasks: List[Task]) -> str:
    if len(tasks) == 1 and tasks[0].title:
        return tasks[0].title
    return f"{branch}: {len(tasks)} tasks completed"


def completion_message(statistics: ChangeStatistics) -> str:
    return (
        "✅ Work session completed.\n"
        f"- Files changed: {statistics.files_changed}\n"
        f"- Added: +{statistics.lines_added} lines\n"
        f"- Removed: -{statistics.lines_removed} lines\n\n"
        "Task description and metadata were updated."
    )


def pr_suggestion_message(branch: str, task_count: int) -> str:
    return (
        f"🎉 All {task_count} task(s) in branch \"{branch}\" are now completed!\n\n"
        "You can create a pull request with `eureka-tracker create-pr`. This will:\n"
        "- Generate a PR description from all task summaries and work sessions\n"
        "- Link the PR URL to all tasks\n"
        "- Update task status in the project"
    )
