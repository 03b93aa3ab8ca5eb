"""Output channel contract: where a process's stdout/stderr ends up."""
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from core.app import ShellCommandsApp
    from core.shell_command import ShellCommand, ShellCommandParsingResult

OutputStream = Literal["stdout", "stderr"]

OUTPUT_PLACEHOLDER = "{{output}}"


class BaseOutputChannel(ABC):
    channel_name: str = ""

    def __init__(
        self,
        app: "ShellCommandsApp",
        t_shell_command: "ShellCommand",
        parsing_result: "ShellCommandParsingResult",
        process_terminator: Callable[[], None] | None = None,
    ) -> None:
        self.app = app
        self.t_shell_command = t_shell_command
        self.parsing_result = parsing_result
        self.process_terminator = process_terminator

    def wrap_output(self, stream: OutputStream, output: str) -> str:
        """Insert *output* into the stream's output wrapper, if the shell command has one."""
        wrapper = (
            self.parsing_result.output_wrapper_stdout
            if stream == "stdout"
            else self.parsing_result.output_wrapper_stderr
        )
        if wrapper is None:
            return output
        return wrapper.replace(OUTPUT_PLACEHOLDER, output)

    async def handle_buffered(self, outputs: dict[OutputStream, str], exit_code: int | None) -> None:
        """Receive the whole output once the process has exited. Empty streams are left out."""
        wrapped = {stream: self.wrap_output(stream, output) for stream, output in outputs.items()}
        await self._handle_buffered(wrapped, exit_code)

    async def handle_realtime(self, stream: OutputStream, chunk: str) -> None:
        await self._handle_realtime(stream, self.wrap_output(stream, chunk))

    async def end_realtime(self, exit_code: int | None) -> None:
        """Called once per channel after the process has exited."""

    @abstractmethod
    async def _handle_buffered(self, outputs: dict[OutputStream, str], exit_code: int | None) -> None:
        """Deliver wrapped output."""

    @abstractmethod
    async def _handle_realtime(self, stream: OutputStream, chunk: str) -> None:
        """Deliver one wrapped chunk."""
