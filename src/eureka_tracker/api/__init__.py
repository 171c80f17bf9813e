"""Task API access."""

from .client import TaskAPIClient
from .protocol import TaskAPI

__all__ = ["TaskAPI", "TaskAPIClient"]
