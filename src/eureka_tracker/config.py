from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings loaded from ``EUREKA_*`` environment variables or a ``.env`` file.

    The workspace also honours a bare ``WORKSPACE_PATH`` so that host tools
    which set it for every integration keep working.
    """

    api_url: str = ""
    api_key: str = ""
    api_timeout: float = 30.0

    workspace_path: Path = Field(
        default_factory=Path.cwd,
        validation_alias=AliasChoices("EUREKA_WORKSPACE_PATH", "WORKSPACE_PATH"),
    )
    sessions_dir_name: str = Field(
        default=".eureka-sessions",
        validation_alias="EUREKA_SESSIONS_DIR",
    )
    marker_file_name: str = Field(
        default=".eureka-active-session",
        validation_alias="EUREKA_MARKER_FILE",
    )
    trunk_branches: List[str] = ["main", "master"]

    log_level: str = "WARNING"
    debug_log: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="EUREKA_", env_file=".env", extra="ignore", populate_by_name=True
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
