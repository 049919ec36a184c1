"""Application settings via pydantic-settings."""

import os

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CACHE_PATH = "~/Library/Application Support/Granola/cache-v3.json"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GRANOLA_")

    cache_path: str = Field(
        default=DEFAULT_CACHE_PATH,
        description=(
            "Path to Granola's local cache JSON file. "
            "Defaults to the standard macOS location."
        ),
    )
    log_level: str = Field(default="info", description="Logging level")
    sync_state_path: str | None = Field(
        default=None,
        description=(
            "File that remembers which documents earlier syncs have seen. "
            "Unset keeps sync state in memory, so it resets on restart."
        ),
    )

    @model_validator(mode="after")
    def _expand_paths(self) -> "Config":
        object.__setattr__(self, "cache_path", os.path.expanduser(self.cache_path))
        if self.sync_state_path:
            object.__setattr__(
                self, "sync_state_path", os.path.expanduser(self.sync_state_path)
            )
        return self
