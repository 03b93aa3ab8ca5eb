"""Event contract: something in the host application that can run shell commands."""
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.app import ShellCommandsApp
    from core.executor import ExecutionResult
    from core.shell_command import ShellCommand

logger = logging.getLogger(__name__)


class BaseEvent:
    event_code: str = ""
    event_title: str = ""

    # Event data read by {{event_*}} variables; which ones are set depends on the event
    file: Path | None = None
    folder: Path | None = None
    old_path: Path | None = None

    def __init__(self, app: "ShellCommandsApp") -> None:
        self.app = app

    def can_trigger(self, t_shell_command: "ShellCommand") -> bool:
        return t_shell_command.is_event_enabled(self.event_code)

    async def trigger(self, t_shell_command: "ShellCommand") -> "ExecutionResult":
        logger.info("Event %s triggers shell command %s", self.event_code, t_shell_command.shell_command_id)
        return await self.app.execute(t_shell_command, event=self)


class FileEvent(BaseEvent):
    def __init__(self, app: "ShellCommandsApp", file: str | Path, old_path: str | Path | None = None) -> None:
        super().__init__(app)
        self.file = Path(file)
        self.folder = self.file.parent
        self.old_path = None if old_path is None else Path(old_path)


class FolderEvent(BaseEvent):
    def __init__(self, app: "ShellCommandsApp", folder: str | Path, old_path: str | Path | None = None) -> None:
        super().__init__(app)
        self.folder = Path(folder)
        self.old_path = None if old_path is None else Path(old_path)
