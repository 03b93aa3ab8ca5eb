"""Variable contract: a named value provider referenced as {{name:arg|escape}}."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from config.models import VariableDefaultValueConfiguration

if TYPE_CHECKING:
    from core.app import ShellCommandsApp
    from core.shell_command import ShellCommand
    from events.base import BaseEvent
    from shells.base import BaseShell


class VariableError(Exception):
    """A variable could not produce a value. Collected per field, never raised past the parser."""


@dataclass(frozen=True)
class Parameter:
    name: str
    required: bool = False
    options: tuple[str, ...] = ()  # empty means free text


@dataclass(frozen=True)
class VariableContext:
    app: "ShellCommandsApp"
    shell: "BaseShell"
    t_shell_command: "ShellCommand | None" = None
    event: "BaseEvent | None" = None
    # Identifiers whose default values are being parsed, outermost first
    resolving_defaults: frozenset[str] = frozenset()


class BaseVariable(ABC):
    variable_name: str = ""
    help_text: str = ""
    always_available: bool = True
    parameters: tuple[Parameter, ...] = ()
    # Only loaded when settings.debug is on
    debug_only: bool = False

    def get_identifier(self) -> str:
        """Key used for per-command default values. Custom variables use their stable id instead."""
        return self.variable_name

    def get_full_name(self) -> str:
        return "{{" + self.variable_name + "}}"

    def get_availability_text(self) -> str:
        return "Always available." if self.always_available else ""

    def get_global_default_value(self) -> VariableDefaultValueConfiguration | None:
        return None

    def parse_arguments(self, raw_arguments: tuple[str, ...]) -> dict[str, str]:
        """Map positional arguments onto declared parameters. The last parameter absorbs any extra ':' segments."""
        if raw_arguments and not self.parameters:
            raise VariableError("This variable does not accept arguments.")

        values = list(raw_arguments)
        if len(values) > len(self.parameters):
            keep = len(self.parameters) - 1
            values = values[:keep] + [":".join(values[keep:])]

        arguments: dict[str, str] = {}
        for index, parameter in enumerate(self.parameters):
            if index >= len(values):
                if parameter.required:
                    raise VariableError(f"Missing argument: {parameter.name}")
                continue
            value = values[index]
            if parameter.options and value not in parameter.options:
                raise VariableError(
                    f"Argument {parameter.name} must be one of: {', '.join(parameter.options)}. Got: {value!r}"
                )
            arguments[parameter.name] = value
        return arguments

    def check_availability(self, context: VariableContext) -> None:
        """Raise VariableError if this variable can't be resolved in *context*."""

    async def get_value(self, context: VariableContext, arguments: dict[str, str]) -> str:
        if not self.always_available:
            self.check_availability(context)
        return await self._get_value(context, arguments)

    @abstractmethod
    async def _get_value(self, context: VariableContext, arguments: dict[str, str]) -> str:
        """Produce the raw (unescaped) value."""
