"""Shows output as notices. stderr goes to an error notice prefixed with the exit code."""
from output_channels.base import BaseOutputChannel, OutputStream


def format_error_message(output: str, exit_code: int | None) -> str:
    if exit_code is None:
        return output
    return f"[{exit_code}]: {output}"


class NotificationChannel(BaseOutputChannel):
    channel_name = "notification"

    async def _handle_buffered(self, outputs, exit_code):
        if "stdout" in outputs:
            self.app.new_notification(outputs["stdout"])
        if "stderr" in outputs:
            self.app.new_error(format_error_message(outputs["stderr"], exit_code))

    async def _handle_realtime(self, stream: OutputStream, chunk: str) -> None:
        if stream == "stdout":
            self.app.new_notification(chunk, on_terminate=self.process_terminator)
        else:
            self.app.new_error(chunk)
