"""Pydantic models for everything a user configures: shell commands, prompts, custom variables."""
from typing import Literal

from pydantic import BaseModel, Field, field_validator

PlatformId = Literal["darwin", "linux", "win32"]
PLATFORM_NAMES: dict[str, str] = {
    "darwin": "macOS",
    "linux": "Linux",
    "win32": "Windows",
}

OutputHandlingMode = Literal["buffered", "realtime"]
ExecutionNotificationMode = Literal["disabled", "quick", "permanent", "if-long"]
VariableDefaultValueType = Literal["inherit", "value", "show-errors", "cancel-silently"]


class OutputHandlerConfiguration(BaseModel):
    handler: str = "ignore"


class OutputHandlerConfigurations(BaseModel):
    stdout: OutputHandlerConfiguration = Field(default_factory=OutputHandlerConfiguration)
    stderr: OutputHandlerConfiguration = Field(
        default_factory=lambda: OutputHandlerConfiguration(handler="notification")
    )


class OutputWrapperConfiguration(BaseModel):
    title: str = ""
    content: str = "{{output}}"


class OutputWrapperSelection(BaseModel):
    stdout: str | None = None  # output wrapper id
    stderr: str | None = None


class VariableDefaultValueConfiguration(BaseModel):
    type: VariableDefaultValueType = "inherit"
    value: str = ""


class PreactionConfiguration(BaseModel):
    type: str
    enabled: bool = True
    prompt_id: str | None = None


class EventConfiguration(BaseModel):
    enabled: bool = False
    seconds: int = 0  # every-n-seconds only

    @field_validator("seconds")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("seconds must be zero or positive")
        return v


class ShellCommandConfiguration(BaseModel):
    platform_specific_commands: dict[str, str] = Field(default_factory=lambda: {"default": ""})
    shells: dict[str, str] = Field(default_factory=dict)  # platform id -> shell id
    alias: str = ""
    confirm_execution: bool = False
    ignore_error_codes: list[int] = Field(default_factory=list)
    output_handlers: OutputHandlerConfigurations = Field(default_factory=OutputHandlerConfigurations)
    output_handling_mode: OutputHandlingMode = "buffered"
    output_wrappers: OutputWrapperSelection = Field(default_factory=OutputWrapperSelection)
    preactions: list[PreactionConfiguration] = Field(default_factory=list)
    events: dict[str, EventConfiguration] = Field(default_factory=dict)
    variable_default_values: dict[str, VariableDefaultValueConfiguration] = Field(
        default_factory=dict
    )
    stdin: str | None = None


class PromptFieldConfiguration(BaseModel):
    label: str = ""
    description: str = ""
    default_value: str = ""
    target_variable_id: str
    required: bool = True


class PromptConfiguration(BaseModel):
    title: str = ""
    description: str = ""
    execute_button_text: str = "Execute"
    fields: list[PromptFieldConfiguration] = Field(default_factory=list)


class CustomVariableConfiguration(BaseModel):
    id: str
    name: str
    description: str = ""
    default_value: VariableDefaultValueConfiguration | None = None

    @field_validator("name")
    @classmethod
    def valid_name(cls, v: str) -> str:
        # Referenced as {{_name}}, so the stored name must not carry the underscore.
        v = v.lstrip("_")
        if not v or not all(ch.isalnum() or ch in "_-" for ch in v):
            raise ValueError(f"Invalid custom variable name: {v!r}")
        return v.lower()
