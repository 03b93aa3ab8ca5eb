"""Application context and CLI entry point: python -m core.app <list|preview|run|event> ..."""
import asyncio
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from config.settings import Settings, get_settings
from core.db import init_db, set_custom_variable_value, setup_logging
from core.executor import ExecutionResult, ShellCommandExecutor
from core.parsing_process import ParsingProcess
from core.shell_command import ShellCommand
from core.workspace import Workspace
from events import get_event_class
from events.base import BaseEvent
from events.every_n_seconds import EveryNSecondsEvent
from events.startup import StartupEvent
from shells.base import current_platform_id
from shells.registry import ShellRegistry
from ui.base import BaseNotifier, BasePromptUI, NotificationHandle
from ui.console import ConsoleNotifier, ConsolePromptUI
from variables.custom import CustomVariable
from variables.parser import ParsingResult
from variables.registry import VariableSet

logger = logging.getLogger(__name__)


class ShellCommandsApp:
    """Holds the registries and collaborators every component looks things up from."""

    def __init__(
        self,
        settings: Settings | None = None,
        workspace: Workspace | None = None,
        notifier: BaseNotifier | None = None,
        prompt_ui: BasePromptUI | None = None,
        platform_id: str | None = None,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.platform_id = platform_id or current_platform_id()
        self.workspace = workspace or Workspace(vault_root=Path(self.settings.vault_path))
        self.notifier = notifier or ConsoleNotifier()
        self.prompt_ui = prompt_ui or ConsolePromptUI()
        self.shells = ShellRegistry(self)
        self.variables = VariableSet(
            self.settings.custom_variables,
            include_debug_variables=self.settings.debug,
        )
        self.shell_commands: dict[str, ShellCommand] = {
            shell_command_id: ShellCommand(self, shell_command_id, configuration)
            for shell_command_id, configuration in self.settings.shell_commands.items()
        }
        # Phase-one processes prepared by preview(), keyed by shell command id
        self.cached_parsing_processes: dict[str, ParsingProcess] = {}

    async def startup(self) -> list[ExecutionResult]:
        await init_db(self.settings.db_path)
        logger.info(
            "Shell commands started. platform=%s shell_commands=%d",
            self.platform_id,
            len(self.shell_commands),
        )
        return await self._trigger(StartupEvent(self))

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def new_error(self, message: str) -> None:
        logger.info("Error: %s", message)
        self.notifier.error(message, self.settings.error_message_duration)

    def new_notification(
        self,
        message: str,
        permanent: bool = False,
        on_terminate: Callable[[], None] | None = None,
    ) -> NotificationHandle:
        duration = None if permanent else self.settings.notification_message_duration
        return self.notifier.notify(message, duration, on_terminate)

    # ------------------------------------------------------------------
    # Shell commands
    # ------------------------------------------------------------------

    def get_shell_command(self, shell_command_id: str) -> ShellCommand:
        t_shell_command = self.shell_commands.get(shell_command_id)
        if t_shell_command is None:
            raise KeyError(
                f"No shell command registered under {shell_command_id!r}. Available: {list(self.shell_commands)}"
            )
        return t_shell_command

    async def preview(self, shell_command_id: str) -> dict[str, ParsingResult]:
        """Run phase one for the command palette. A successful process is kept for the next execute()."""
        t_shell_command = self.get_shell_command(shell_command_id)
        parsing_process = t_shell_command.create_parsing_process()
        succeeded = await parsing_process.process()
        if succeeded and self.settings.preview_variables_in_command_palette:
            self.cached_parsing_processes[shell_command_id] = parsing_process
        return parsing_process.get_parsing_results()

    async def execute(
        self,
        t_shell_command: ShellCommand | str,
        event: BaseEvent | None = None,
        overriding_output_channel: str | None = None,
    ) -> ExecutionResult:
        if isinstance(t_shell_command, str):
            t_shell_command = self.get_shell_command(t_shell_command)
        parsing_process = None
        if event is None:
            parsing_process = self.cached_parsing_processes.get(t_shell_command.shell_command_id)
        try:
            executor = ShellCommandExecutor(self, t_shell_command, event)
            return await executor.do_preactions_and_execute(parsing_process, overriding_output_channel)
        finally:
            # Preparsed values must never outlive one execution attempt
            self.cached_parsing_processes.clear()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def trigger_event(self, event_code: str, **data) -> list[ExecutionResult]:
        """Run every shell command that enables *event_code*. *data* goes to the event, e.g. file=..."""
        event = get_event_class(event_code)(self, **data)
        return await self._trigger(event)

    async def _trigger(self, event: BaseEvent) -> list[ExecutionResult]:
        results = []
        for t_shell_command in self.shell_commands.values():
            if event.can_trigger(t_shell_command):
                results.append(await event.trigger(t_shell_command))
        return results

    async def run_every_n_seconds(self) -> EveryNSecondsEvent:
        event = EveryNSecondsEvent(self)
        await event.run(list(self.shell_commands.values()))
        return event

    # ------------------------------------------------------------------
    # Custom variables
    # ------------------------------------------------------------------

    async def set_custom_variable_value(self, variable_id: str, value: str) -> None:
        variable = self.variables.get_by_identifier(variable_id)
        if not isinstance(variable, CustomVariable):
            raise KeyError(
                f"No custom variable registered under {variable_id!r}. "
                f"Available: {[v.variable_id for v in self.variables.custom_variables()]}"
            )
        await set_custom_variable_value(self.settings.db_path, variable_id, value)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

USAGE = (
    "Usage: python -m core.app list\n"
    "       python -m core.app preview <shell_command_id>\n"
    "       python -m core.app run <shell_command_id> [--file <path>]\n"
    "       python -m core.app event <event_code> [<path> [<old_path>]]"
)


def _print_results(results: dict[str, ParsingResult]) -> None:
    for name, result in results.items():
        if result.succeeded:
            print(f"{name}: {result.parsed_content}")
        else:
            print(f"{name}: FAILED {'; '.join(result.error_messages)}")


async def _run_cli(app: ShellCommandsApp, command: str, args: list[str]) -> int:
    await init_db(app.settings.db_path)

    if command == "list":
        for shell_command_id, t_shell_command in app.shell_commands.items():
            print(f"{shell_command_id}\t{t_shell_command.get_alias_or_shell_command()}")
        return 0

    if command == "preview":
        _print_results(await app.preview(args[0]))
        return 0

    if command == "run":
        if "--file" in args:
            app.workspace.active_file = Path(args[args.index("--file") + 1]).resolve()
        result = await app.execute(args[0])
        if result.stdout:
            print(result.stdout, end="")
        return 1 if result.error or result.state.value == "failed" else 0

    if command == "event":
        event_code = args[0]
        data: dict[str, str] = {}
        if len(args) > 1:
            key = "folder" if event_code.startswith("folder-") else "file"
            data[key] = args[1]
        if len(args) > 2:
            data["old_path"] = args[2]
        results = await app.trigger_event(event_code, **data)
        return 1 if any(r.error for r in results) else 0

    print(f"Unknown command: {command!r}.\n{USAGE}", file=sys.stderr)
    return 1


def main() -> None:
    if len(sys.argv) < 2 or (sys.argv[1] != "list" and len(sys.argv) < 3):
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    settings = get_settings()
    setup_logging(settings.log_dir, logging.DEBUG if settings.debug else logging.INFO)
    app = ShellCommandsApp(settings)
    try:
        exit_code = asyncio.run(_run_cli(app, sys.argv[1], sys.argv[2:]))
    except KeyError as exc:
        print(exc.args[0], file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        sys.exit(130)
    except Exception as exc:
        logger.exception("Command %r failed: %s", sys.argv[1], exc)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
