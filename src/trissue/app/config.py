from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Annotated, Any, Mapping

from platformdirs import PlatformDirs
from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


APP_NAME = "trissue"
ENV_PREFIX = "TRISSUE_"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_cache_dir)


def split_csv(value: str) -> list[str]:
    """Split a comma-separated list, dropping whitespace and empty entries."""
    return [item for item in re.sub(r"\s+", "", value).split(",") if item]


class DirectoryConfig(BaseSettings):
    """Directory configuration with computed paths."""

    model_config = SettingsConfigDict(env_prefix=f"{ENV_PREFIX}DIRECTORIES__")

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all trissue data",
    )

    @computed_field
    @property
    def logs_dir(self) -> Path:
        """Logs directory for the JSONL run log."""
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path


class GitHubConfig(BaseSettings):
    """GitHub tracker configuration."""

    model_config = SettingsConfigDict(env_prefix=f"{ENV_PREFIX}GITHUB__")

    token: str | None = Field(
        default=None,
        description="GitHub token with issues:write on the repository",
    )

    repository: str | None = Field(
        default=None,
        description="Target repository as owner/name",
    )

    api_url: str = Field(
        default="https://api.github.com",
        description="REST API base URL (GitHub Enterprise: https://HOST/api/v3)",
    )

    timeout: float = Field(
        default=30.0,
        description="HTTP timeout in seconds for each API call",
    )


class IssueConfig(BaseSettings):
    """Issue creation settings."""

    model_config = SettingsConfigDict(env_prefix=f"{ENV_PREFIX}ISSUE__")

    filename: Path | None = Field(
        default=None,
        description="Trivy scan results in JSON format",
    )

    labels: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["trivy", "vulnerability"],
        description="Labels put on created issues; also used to find existing ones",
    )

    assignees: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Users assigned to created issues",
    )

    project_id: str | None = Field(
        default=None,
        description="Projects (v2) node ID that created issues are added to",
    )

    create_labels: bool = Field(
        default=False,
        description="Create the labels if they don't already exist",
    )

    enable_fix_label: bool = Field(
        default=False,
        description="Add the fix label to issues whose finding has a fixed version",
    )

    fix_label: str = Field(
        default="fix-available",
        description="Label added when a fix is available",
    )

    @field_validator("labels", "assignees", mode="before")
    @classmethod
    def _split_comma_separated(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value.lstrip().startswith("["):
                return json.loads(value)
            return split_csv(value)
        return value


class RunConfig(BaseSettings):
    """Per-run behavior."""

    model_config = SettingsConfigDict(env_prefix=f"{ENV_PREFIX}RUN__")

    dry_run: bool = Field(
        default=False,
        description="Log planned transitions without touching the tracker",
    )

    output_file: Path | None = Field(
        default=None,
        description="File receiving run outputs in $GITHUB_OUTPUT format",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix=f"{ENV_PREFIX}LOGGING__")

    level: str = Field(default="INFO", description="Log level")
    logger_name: str = Field(default=APP_NAME, description="Logger name")
    console_output: bool = Field(default=False, description="Mirror events to stderr")
    file_output: bool = Field(default=True, description="Append events to logs_dir/sync.jsonl")


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with TRISSUE_ prefix.
    Use double underscore for nested config: TRISSUE_GITHUB__TOKEN

    Example env vars:
        # Required for sync
        export TRISSUE_GITHUB__TOKEN=ghp_xxxxxxxxxxxxx
        export TRISSUE_GITHUB__REPOSITORY=octo/app
        export TRISSUE_ISSUE__FILENAME=trivy-results.json

        # Optional (with defaults)
        export TRISSUE_ISSUE__LABELS='["trivy", "vulnerability"]'
        export TRISSUE_ISSUE__ASSIGNEES=octocat,hubot
        export TRISSUE_ISSUE__ENABLE_FIX_LABEL=true
        export TRISSUE_RUN__DRY_RUN=true
        export TRISSUE_DIRECTORIES__HOME=/custom/path
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    issue: IssueConfig = Field(default_factory=IssueConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def with_overrides(self, **sections: Mapping[str, Any]) -> "AppConfig":
        """Return a copy with per-section overrides applied.

        None values are ignored, so unset CLI options keep the configured value.

        Example:
            config.with_overrides(run={"dry_run": True}, github={"token": None})
        """
        update: dict[str, Any] = {}
        for name, values in sections.items():
            changed = {key: value for key, value in values.items() if value is not None}
            if changed:
                update[name] = getattr(self, name).model_copy(update=changed)
        if not update:
            return self
        return self.model_copy(update=update)
