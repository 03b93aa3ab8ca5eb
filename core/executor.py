"""Preactions, final parsing, spawning and output handling for one execution of a shell command."""
import asyncio
import codecs
import errno
import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from config.models import OutputHandlerConfigurations
from core.parsing_process import ParsingProcess
from core.shell_command import ShellCommand, ShellCommandParsingResult
from output_channels import BaseOutputChannel, get_output_channel_class
from output_channels.base import OutputStream
from preactions.confirmation import ConfirmationPreaction
from shells.base import BuiltinShell, resolve_working_directory
from ui.base import NotificationHandle

if TYPE_CHECKING:
    from core.app import ShellCommandsApp
    from events.base import BaseEvent

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096
IF_LONG_NOTIFICATION_DELAY = 2.0  # seconds
OUTPUT_STREAMS: tuple[OutputStream, ...] = ("stdout", "stderr")

_TOO_LONG_RE = re.compile(r"argument list too long|ENAMETOOLONG|E2BIG|filename or extension is too long", re.IGNORECASE)


class ExecutionState(str, Enum):
    preparing = "preparing"
    confirming = "confirming"
    resolving_rest = "resolving_rest"
    spawning = "spawning"
    running = "running"
    done = "done"
    cancelled = "cancelled"
    failed = "failed"


@dataclass
class ExecutionResult:
    state: ExecutionState
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    # True when the exit code counts as an error after the ignore list is applied
    error: bool = False


@dataclass(frozen=True)
class BufferedOutput:
    stdout: str
    stderr: str
    exit_code: int | None
    error: bool


def classify_buffered_output(
    exit_code: int | None,
    stdout: str,
    stderr: str,
    ignore_error_codes: list[int],
) -> BufferedOutput:
    """Decide whether a finished process failed, and which stderr survives the ignore list."""
    if exit_code is None or exit_code > 0:
        if exit_code is not None and exit_code in ignore_error_codes:
            logger.debug("Exit code %s is ignored; dropping stderr", exit_code)
            return BufferedOutput(stdout=stdout, stderr="", exit_code=None, error=False)
        return BufferedOutput(stdout=stdout, stderr=stderr, exit_code=exit_code, error=True)

    if stderr and 0 in ignore_error_codes:
        stderr = ""
    return BufferedOutput(stdout=stdout, stderr=stderr, exit_code=0, error=False)


def normalize_exit_code(returncode: int | None) -> int | None:
    """asyncio reports death by signal as a negative code; treat it like no exit code at all."""
    if returncode is None or returncode < 0:
        return None
    return returncode


def is_too_long_error(exc: OSError) -> bool:
    if exc.errno in (errno.E2BIG, errno.ENAMETOOLONG):
        return True
    return bool(_TOO_LONG_RE.search(str(exc)))


class ShellCommandExecutor:
    def __init__(
        self,
        app: "ShellCommandsApp",
        t_shell_command: ShellCommand,
        event: "BaseEvent | None" = None,
    ) -> None:
        self.app = app
        self.t_shell_command = t_shell_command
        self.event = event
        self.state = ExecutionState.preparing
        self._notification_handle: NotificationHandle | None = None
        self._notification_task: asyncio.Task | None = None

    def _set_state(self, state: ExecutionState) -> None:
        logger.debug(
            "Shell command %s: %s -> %s",
            self.t_shell_command.shell_command_id,
            self.state.value,
            state.value,
        )
        self.state = state

    def _finish(self, state: ExecutionState, **kwargs) -> ExecutionResult:
        self._set_state(state)
        return ExecutionResult(state=state, **kwargs)

    async def do_preactions_and_execute(
        self,
        parsing_process: ParsingProcess | None = None,
        overriding_output_channel: str | None = None,
    ) -> ExecutionResult:
        """
        Run phase one (unless *parsing_process* has done it already), the preaction pipeline,
        phase two, and then the shell command itself.
        """
        configuration_errors = self.t_shell_command.get_configuration_errors()
        if configuration_errors:
            for message in configuration_errors[1:]:
                logger.info("Further configuration error: %s", message)
            self.app.new_error(configuration_errors[0])
            return self._finish(ExecutionState.failed)

        if parsing_process is None:
            parsing_process = self.t_shell_command.create_parsing_process(self.event)
            if not await parsing_process.process():
                logger.debug("Phase one parsing failed; not performing preactions")
                parsing_process.display_error_messages(self.app)
                return self._finish(ExecutionState.failed)

        for preaction in self.t_shell_command.get_preaction_pipeline():
            if isinstance(preaction, ConfirmationPreaction):
                self._set_state(ExecutionState.confirming)
            logger.debug("Performing preaction %r", preaction.preaction_type)
            if not await preaction.perform(parsing_process, self.event):
                return self._finish(ExecutionState.cancelled)

        self._set_state(ExecutionState.resolving_rest)
        if not await parsing_process.process_rest():
            parsing_process.display_error_messages(self.app)
            return self._finish(ExecutionState.failed)

        parsing_result = self.t_shell_command.build_parsing_result(parsing_process)
        return await self.execute_shell_command(parsing_result, overriding_output_channel)

    async def execute_shell_command(
        self,
        parsing_result: ShellCommandParsingResult,
        overriding_output_channel: str | None = None,
    ) -> ExecutionResult:
        """Spawn an already parsed shell command. No confirmation is asked here."""
        settings = self.app.settings
        shell = self.t_shell_command.get_shell()
        working_directory = resolve_working_directory(settings.working_directory, settings.vault_path)

        output_handlers = self.t_shell_command.get_output_handlers()
        if overriding_output_channel:
            # Copy so the configured handlers stay untouched
            output_handlers = OutputHandlerConfigurations(
                stdout=output_handlers.stdout.model_copy(update={"handler": overriding_output_channel}),
                stderr=output_handlers.stderr.model_copy(update={"handler": overriding_output_channel}),
            )
        # Unknown handlers must fail before anything runs
        for stream in OUTPUT_STREAMS:
            try:
                get_output_channel_class(getattr(output_handlers, stream).handler)
            except KeyError as exc:
                self.app.new_error(exc.args[0])
                return self._finish(ExecutionState.failed)

        # Check the unwrapped content so a wrapper can't make an empty command look non-empty
        if not parsing_result.unwrapped_shell_command_content.strip():
            self.app.new_error(self.t_shell_command.get_empty_shell_command_error_message())
            return self._finish(ExecutionState.failed)

        if not os.path.exists(working_directory):
            self.app.new_error(f"Working directory does not exist: {working_directory}")
            return self._finish(ExecutionState.failed)
        if not os.path.isdir(working_directory):
            self.app.new_error(f"Working directory exists but is not a folder: {working_directory}")
            return self._finish(ExecutionState.failed)

        if isinstance(shell, BuiltinShell):
            # Set every time, so clearing the setting also clears the augmentation
            shell.set_path_augmentation(parsing_result.environment_variable_path_augmentation)

        self._set_state(ExecutionState.spawning)
        wrapped_content = parsing_result.wrapped_shell_command_content
        try:
            process = await shell.spawn_child_process(
                wrapped_content,
                working_directory,
                has_stdin=parsing_result.stdin_content is not None,
            )
        except OSError as exc:
            if not is_too_long_error(exc):
                raise
            self.app.new_error(
                f"Shell command execution failed because it's too long: {len(wrapped_content)} characters. "
                "(Unfortunately the max limit is unknown)."
            )
            return self._finish(ExecutionState.failed)
        if process is None:
            return self._finish(ExecutionState.failed)

        self._set_state(ExecutionState.running)

        def process_terminator() -> None:
            if process.returncode is None:
                logger.info("Requesting termination of shell command %s", self.t_shell_command.shell_command_id)
                try:
                    process.terminate()
                except ProcessLookupError:
                    logger.debug("Process already exited")

        if settings.execution_notification_mode != "disabled":
            self._show_execution_notification(
                process,
                parsing_result.alias or parsing_result.unwrapped_shell_command_content,
                settings.execution_notification_mode,
                process_terminator,
            )

        try:
            if self.t_shell_command.get_output_handling_mode() == "realtime":
                result = await self._handle_realtime_output(
                    process, parsing_result, output_handlers, process_terminator
                )
            else:
                result = await self._handle_buffered_output(
                    process, parsing_result, output_handlers, process_terminator
                )
        finally:
            self._hide_execution_notification()
        return result

    # ------------------------------------------------------------------
    # Output handling
    # ------------------------------------------------------------------

    async def _handle_buffered_output(
        self,
        process: asyncio.subprocess.Process,
        parsing_result: ShellCommandParsingResult,
        output_handlers: OutputHandlerConfigurations,
        process_terminator,
    ) -> ExecutionResult:
        stdin = None if parsing_result.stdin_content is None else parsing_result.stdin_content.encode("utf-8")
        stdout_bytes, stderr_bytes = await process.communicate(stdin)
        exit_code = normalize_exit_code(process.returncode)
        logger.debug("Shell command %s exited with %s", self.t_shell_command.shell_command_id, process.returncode)

        output = classify_buffered_output(
            exit_code,
            stdout_bytes.decode("utf-8", errors="replace"),
            stderr_bytes.decode("utf-8", errors="replace"),
            self.t_shell_command.get_ignore_error_codes(),
        )

        # Streams sharing a channel are handed over in one call
        grouped: dict[str, dict[OutputStream, str]] = {}
        for stream in OUTPUT_STREAMS:
            content = getattr(output, stream)
            if content:
                grouped.setdefault(getattr(output_handlers, stream).handler, {})[stream] = content
        for channel_name, outputs in grouped.items():
            channel_cls = get_output_channel_class(channel_name)
            channel = channel_cls(self.app, self.t_shell_command, parsing_result, process_terminator)
            await channel.handle_buffered(outputs, output.exit_code)

        return self._finish(
            ExecutionState.done,
            exit_code=output.exit_code,
            stdout=output.stdout,
            stderr=output.stderr,
            error=output.error,
        )

    def _create_realtime_channels(
        self,
        parsing_result: ShellCommandParsingResult,
        output_handlers: OutputHandlerConfigurations,
        process_terminator,
    ) -> dict[OutputStream, BaseOutputChannel]:
        by_name: dict[str, BaseOutputChannel] = {}
        channels: dict[OutputStream, BaseOutputChannel] = {}
        for stream in OUTPUT_STREAMS:
            channel_name = getattr(output_handlers, stream).handler
            if channel_name not in by_name:
                channel_cls = get_output_channel_class(channel_name)
                by_name[channel_name] = channel_cls(
                    self.app, self.t_shell_command, parsing_result, process_terminator
                )
            channels[stream] = by_name[channel_name]
        return channels

    async def _handle_realtime_output(
        self,
        process: asyncio.subprocess.Process,
        parsing_result: ShellCommandParsingResult,
        output_handlers: OutputHandlerConfigurations,
        process_terminator,
    ) -> ExecutionResult:
        channels = self._create_realtime_channels(parsing_result, output_handlers, process_terminator)
        readers = {"stdout": process.stdout, "stderr": process.stderr}
        decoders = {
            stream: codecs.getincrementaldecoder("utf-8")(errors="replace") for stream in OUTPUT_STREAMS
        }
        collected: dict[str, list[str]] = {stream: [] for stream in OUTPUT_STREAMS}

        stdin_task = None
        if parsing_result.stdin_content is not None:
            stdin_task = asyncio.create_task(_feed_stdin(process, parsing_result.stdin_content))

        async def dispatch(stream: OutputStream, text: str) -> None:
            if text:
                collected[stream].append(text)
                await channels[stream].handle_realtime(stream, text)

        # A stream gets its next read only after its previous chunk has been dispatched, and
        # chunks are dispatched one at a time, so handlers see them in the order they were read.
        pending: dict[asyncio.Task, OutputStream] = {
            asyncio.create_task(readers[stream].read(READ_CHUNK_SIZE)): stream for stream in OUTPUT_STREAMS
        }
        while pending:
            done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in [t for t in pending if t in done]:
                stream = pending.pop(task)
                data = task.result()
                if not data:
                    await dispatch(stream, decoders[stream].decode(b"", final=True))
                    continue
                await dispatch(stream, decoders[stream].decode(data))
                pending[asyncio.create_task(readers[stream].read(READ_CHUNK_SIZE))] = stream

        if stdin_task is not None:
            await stdin_task
        exit_code = normalize_exit_code(await process.wait())
        logger.debug("Shell command %s exited with %s", self.t_shell_command.shell_command_id, process.returncode)

        # stdout and stderr may share one channel; finish each channel once
        ended: list[BaseOutputChannel] = []
        for stream in OUTPUT_STREAMS:
            channel = channels[stream]
            if channel not in ended:
                await channel.end_realtime(exit_code)
                ended.append(channel)

        error = exit_code is None or (exit_code > 0 and exit_code not in self.t_shell_command.get_ignore_error_codes())
        return self._finish(
            ExecutionState.done,
            exit_code=exit_code,
            stdout="".join(collected["stdout"]),
            stderr="".join(collected["stderr"]),
            error=error,
        )

    # ------------------------------------------------------------------
    # Execution notification
    # ------------------------------------------------------------------

    def _show_execution_notification(
        self,
        process: asyncio.subprocess.Process,
        shell_command: str,
        mode: str,
        process_terminator,
    ) -> None:
        message = "Executing: " + shell_command
        if mode == "quick":
            self.app.new_notification(message, on_terminate=process_terminator)
        elif mode == "permanent":
            self._notification_handle = self.app.new_notification(
                message, permanent=True, on_terminate=process_terminator
            )
        elif mode == "if-long":

            async def show_if_still_running() -> None:
                await asyncio.sleep(IF_LONG_NOTIFICATION_DELAY)
                if process.returncode is None:
                    self._notification_handle = self.app.new_notification(
                        message, permanent=True, on_terminate=process_terminator
                    )

            self._notification_task = asyncio.create_task(show_if_still_running())

    def _hide_execution_notification(self) -> None:
        if self._notification_task is not None:
            self._notification_task.cancel()
            self._notification_task = None
        if self._notification_handle is not None:
            self._notification_handle.hide()
            self._notification_handle = None


async def _feed_stdin(process: asyncio.subprocess.Process, content: str) -> None:
    try:
        process.stdin.write(content.encode("utf-8"))
        await process.stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        # The process exited (or closed stdin) without reading everything
        logger.debug("stdin was closed before all content was written")
    finally:
        process.stdin.close()
