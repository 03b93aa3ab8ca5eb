"""A configured shell command bound to the running app."""
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from config.models import (
    PLATFORM_NAMES,
    EventConfiguration,
    OutputHandlerConfigurations,
    PreactionConfiguration,
    ShellCommandConfiguration,
    VariableDefaultValueConfiguration,
)
from core.parsing_process import ParsingField, ParsingProcess
from output_channels import get_output_channel_class
from preactions import PREACTION_REGISTRY, BasePreaction
from preactions.confirmation import ConfirmationPreaction
from shells.base import BaseShell
from variables.base import VariableContext
from variables.parser import get_used_variables

if TYPE_CHECKING:
    from core.app import ShellCommandsApp
    from events.base import BaseEvent

logger = logging.getLogger(__name__)

SHELL_COMMAND_CONTENT_PLACEHOLDER = "{{shell_command_content}}"


@dataclass(frozen=True)
class ShellCommandParsingResult:
    unwrapped_shell_command_content: str
    wrapped_shell_command_content: str
    alias: str
    environment_variable_path_augmentation: str
    stdin_content: str | None = None
    output_wrapper_stdout: str | None = None
    output_wrapper_stderr: str | None = None
    succeeded: bool = True
    error_messages: tuple[str, ...] = field(default_factory=tuple)


def wrap_shell_command_content(unwrapped_content: str, wrapper_content: str) -> str:
    return wrapper_content.replace(SHELL_COMMAND_CONTENT_PLACEHOLDER, unwrapped_content)


class ShellCommand:
    def __init__(
        self,
        app: "ShellCommandsApp",
        shell_command_id: str,
        configuration: ShellCommandConfiguration,
    ) -> None:
        self.app = app
        self.shell_command_id = shell_command_id
        self.configuration = configuration

    # ------------------------------------------------------------------
    # Configuration accessors
    # ------------------------------------------------------------------

    def get_shell_command(self) -> str:
        """The current platform's version, falling back to the default version."""
        commands = self.configuration.platform_specific_commands
        return commands.get(self.app.platform_id) or commands.get("default", "")

    def get_non_empty_platform_ids(self) -> list[str]:
        return [
            platform_id
            for platform_id, content in self.configuration.platform_specific_commands.items()
            if platform_id != "default" and content.strip()
        ]

    def get_shell(self) -> BaseShell:
        shell_identifier = self.configuration.shells.get(self.app.platform_id)
        if shell_identifier:
            return self.app.shells.get(shell_identifier)
        return self.app.shells.get_default_shell(self.app.platform_id)

    def get_alias(self) -> str:
        return self.configuration.alias

    def get_alias_or_shell_command(self) -> str:
        return self.get_alias() or self.get_shell_command()

    def get_preactions(self) -> list[BasePreaction]:
        preactions = []
        for configuration in self.configuration.preactions:
            if not configuration.enabled:
                continue
            preaction_cls = PREACTION_REGISTRY.get(configuration.type)
            if preaction_cls is None:
                raise KeyError(
                    f"No preaction registered under {configuration.type!r}. "
                    f"Available: {list(PREACTION_REGISTRY)}"
                )
            preactions.append(preaction_cls(self.app, self, configuration))
        return preactions

    def get_preaction_pipeline(self) -> list[BasePreaction]:
        """Configured preactions, with the confirmation step first when execution needs confirming."""
        pipeline = self.get_preactions()
        if self.configuration.confirm_execution:
            confirmation = ConfirmationPreaction(
                self.app, self, PreactionConfiguration(type="confirmation")
            )
            pipeline.insert(0, confirmation)
        return pipeline

    def get_output_handlers(self) -> OutputHandlerConfigurations:
        return self.configuration.output_handlers

    def get_output_handling_mode(self) -> str:
        return self.configuration.output_handling_mode

    def get_ignore_error_codes(self) -> list[int]:
        return self.configuration.ignore_error_codes

    def get_event_configuration(self, event_code: str) -> EventConfiguration | None:
        return self.configuration.events.get(event_code)

    def is_event_enabled(self, event_code: str) -> bool:
        event_configuration = self.get_event_configuration(event_code)
        return event_configuration is not None and event_configuration.enabled

    def get_variable_default_value(self, identifier: str) -> VariableDefaultValueConfiguration | None:
        return self.configuration.variable_default_values.get(identifier)

    def get_configuration_errors(self) -> list[str]:
        """Lookups that would fail later: shell, prompts, output wrappers, output handlers."""
        errors = []
        try:
            for preaction in self.get_preactions():
                preaction.get_dependent_variables()
            self.get_parsing_contents()
        except KeyError as exc:
            errors.append(exc.args[0])
        for stream in ("stdout", "stderr"):
            try:
                get_output_channel_class(getattr(self.configuration.output_handlers, stream).handler)
            except KeyError as exc:
                errors.append(exc.args[0])
        return errors

    def get_empty_shell_command_error_message(self) -> str:
        platform_ids = self.get_non_empty_platform_ids()
        if not platform_ids:
            return "The shell command is empty. :("
        current_platform_name = PLATFORM_NAMES.get(self.app.platform_id, self.app.platform_id)
        version_word = "versions" if len(platform_ids) > 1 else "a version"
        other_platform_names = " and ".join(PLATFORM_NAMES.get(p, p) for p in platform_ids)
        return (
            f"The shell command does not have a version for {current_platform_name}, "
            f"it only has {version_word} for {other_platform_names}."
        )

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def get_parsing_contents(self) -> dict[str, tuple[str, bool, tuple[str, ...]]]:
        """Field name -> (template, escape, passthrough names). Optional fields are left out when unset."""
        settings = self.app.settings
        shell = self.get_shell()
        contents: dict[str, tuple[str, bool, tuple[str, ...]]] = {
            "shell_command": (self.get_shell_command(), True, ()),
            "alias": (self.get_alias(), False, ()),
            "environment_variable_path_augmentation": (
                settings.environment_variable_path_augmentations.get(self.app.platform_id, ""),
                False,
                (),
            ),
        }
        wrapper = settings.shell_command_wrappers.get(shell.shell_name)
        if wrapper:
            contents["shell_command_wrapper"] = (wrapper, True, ("shell_command_content",))
        if self.configuration.stdin is not None:
            contents["stdin"] = (self.configuration.stdin, False, ())
        for stream in ("stdout", "stderr"):
            wrapper_id = getattr(self.configuration.output_wrappers, stream)
            if wrapper_id is None:
                continue
            output_wrapper = settings.output_wrappers.get(wrapper_id)
            if output_wrapper is None:
                raise KeyError(
                    f"No output wrapper registered under {wrapper_id!r}. "
                    f"Available: {list(settings.output_wrappers)}"
                )
            contents[f"output_wrapper_{stream}"] = (output_wrapper.content, False, ("output",))
        return contents

    def create_parsing_process(self, event: "BaseEvent | None" = None) -> ParsingProcess:
        """
        Build a fresh single-use ParsingProcess.

        A field is deferred to process_rest() when it uses a variable that one of the
        preactions will assign.
        """
        preaction_variable_names = {
            variable.variable_name
            for preaction in self.get_preactions()
            for variable in preaction.get_dependent_variables()
        }
        fields = {}
        for name, (content, escape, passthrough_names) in self.get_parsing_contents().items():
            used = get_used_variables([content], self.app.variables)
            fields[name] = ParsingField(
                content=content,
                escape=escape,
                requires_preaction_output=bool(preaction_variable_names & used.keys()),
                passthrough_names=passthrough_names,
            )
        context = VariableContext(
            app=self.app,
            shell=self.get_shell(),
            t_shell_command=self,
            event=event,
        )
        return ParsingProcess(fields, context)

    def build_parsing_result(self, parsing_process: ParsingProcess) -> ShellCommandParsingResult:
        """Bundle a completed process's results for execution."""
        results = parsing_process.get_parsing_results()

        def parsed(name: str) -> str | None:
            result = results.get(name)
            return None if result is None else result.parsed_content

        unwrapped = parsed("shell_command") or ""
        wrapper = parsed("shell_command_wrapper")
        return ShellCommandParsingResult(
            unwrapped_shell_command_content=unwrapped,
            wrapped_shell_command_content=(
                wrap_shell_command_content(unwrapped, wrapper) if wrapper else unwrapped
            ),
            alias=parsed("alias") or "",
            environment_variable_path_augmentation=parsed("environment_variable_path_augmentation") or "",
            stdin_content=parsed("stdin"),
            output_wrapper_stdout=parsed("output_wrapper_stdout"),
            output_wrapper_stderr=parsed("output_wrapper_stderr"),
            succeeded=all(r.succeeded for r in results.values()),
            error_messages=tuple(parsing_process.get_error_messages()),
        )
