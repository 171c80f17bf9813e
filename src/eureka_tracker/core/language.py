"""Map file paths to source-language tags."""

from pathlib import PurePosixPath

LANGUAGE_BY_EXTENSION = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "py": "python",
    "go": "go",
    "rs": "rust",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "h": "c",
    "hpp": "cpp",
    "cs": "csharp",
    "rb": "ruby",
    "php": "php",
    "swift": "swift",
    "kt": "kotlin",
    "scala": "scala",
    "md": "markdown",
    "json": "json",
    "yml": "yaml",
    "yaml": "yaml",
    "xml": "xml",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "sh": "bash",
    "bash": "bash",
    "zsh": "bash",
    "sql": "sql",
    "graphql": "graphql",
    "prisma": "prisma",
}

DEFAULT_LANGUAGE = "text"


def detect_language(file_path: str) -> str:
    """Return the language tag for ``file_path``, or ``"text"`` when unknown."""
    suffix = PurePosixPath(file_path).suffix
    return LANGUAGE_BY_EXTENSION.get(suffix[1:].lower(), DEFAULT_LANGUAGE)
