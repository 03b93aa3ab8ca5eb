"""Sends output to the application log, one record per line."""
import logging

from output_channels.base import BaseOutputChannel

logger = logging.getLogger(__name__)


class LogChannel(BaseOutputChannel):
    channel_name = "log"

    def _log(self, stream: str, text: str) -> None:
        level = logging.INFO if stream == "stdout" else logging.ERROR
        for line in text.splitlines():
            logger.log(level, "[%s] %s: %s", self.t_shell_command.shell_command_id, stream, line)

    async def _handle_buffered(self, outputs, exit_code):
        for stream, output in outputs.items():
            self._log(stream, output)
        if exit_code:
            logger.error("[%s] exited with code %s", self.t_shell_command.shell_command_id, exit_code)

    async def _handle_realtime(self, stream, chunk):
        self._log(stream, chunk)

    async def end_realtime(self, exit_code):
        logger.info("[%s] finished with exit code %s", self.t_shell_command.shell_command_id, exit_code)
