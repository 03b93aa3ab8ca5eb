from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.models import (
    CustomVariableConfiguration,
    ExecutionNotificationMode,
    OutputWrapperConfiguration,
    PromptConfiguration,
    ShellCommandConfiguration,
)

# Absolute project root so .env and config.yaml are found regardless of CWD.
_PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        env_prefix="SHELL_COMMANDS_",
        extra="ignore",
    )

    # Vault root; an empty working_directory resolves to this
    vault_path: str = "."
    working_directory: str = ""

    # Shells
    default_shells: dict[str, str] = Field(default_factory=dict)  # platform id -> shell id
    environment_variable_path_augmentations: dict[str, str] = Field(default_factory=dict)
    shell_command_wrappers: dict[str, str] = Field(default_factory=dict)  # shell id -> template

    # Notifications (durations in seconds)
    preview_variables_in_command_palette: bool = True
    execution_notification_mode: ExecutionNotificationMode = "quick"
    error_message_duration: int = 20
    notification_message_duration: int = 10

    debug: bool = False

    # Paths
    db_path: str = "~/.shell-commands/variables.db"
    log_dir: str = "~/.shell-commands/logs"

    # User-defined entities
    shell_commands: dict[str, ShellCommandConfiguration] = Field(default_factory=dict)
    prompts: dict[str, PromptConfiguration] = Field(default_factory=dict)
    custom_variables: list[CustomVariableConfiguration] = Field(default_factory=list)
    output_wrappers: dict[str, OutputWrapperConfiguration] = Field(default_factory=dict)

    @field_validator("vault_path", "db_path", "log_dir", mode="before")
    @classmethod
    def expand_path(cls, v: str) -> str:
        return str(Path(v).expanduser())

    @field_validator("error_message_duration", "notification_message_duration")
    @classmethod
    def valid_duration(cls, v: int) -> int:
        if not 1 <= v <= 180:
            raise ValueError(f"Duration must be between 1 and 180 seconds, got {v}")
        return v

    @field_validator("custom_variables")
    @classmethod
    def unique_custom_variables(
        cls, v: list[CustomVariableConfiguration]
    ) -> list[CustomVariableConfiguration]:
        ids = [c.id for c in v]
        names = [c.name for c in v]
        if len(set(ids)) != len(ids):
            raise ValueError("Custom variable ids must be unique")
        if len(set(names)) != len(names):
            raise ValueError("Custom variable names must be unique")
        return v

    @classmethod
    def from_yaml(cls, path: str | Path = "config.yaml") -> "Settings":
        """Load settings, overlaying config.yaml values on top of defaults/env."""
        yaml_path = Path(path)
        if not yaml_path.is_absolute():
            yaml_path = _PROJECT_ROOT / yaml_path
        overrides: dict = {}
        if yaml_path.exists():
            with yaml_path.open(encoding="utf-8") as f:
                overrides = yaml.safe_load(f) or {}
        return cls(**overrides)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_yaml()
