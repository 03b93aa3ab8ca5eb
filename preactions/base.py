from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from config.models import PreactionConfiguration

if TYPE_CHECKING:
    from core.app import ShellCommandsApp
    from core.parsing_process import ParsingProcess
    from core.shell_command import ShellCommand
    from events.base import BaseEvent
    from variables.base import BaseVariable


class BasePreaction(ABC):
    preaction_type: str = ""

    def __init__(
        self,
        app: "ShellCommandsApp",
        t_shell_command: "ShellCommand",
        configuration: PreactionConfiguration,
    ) -> None:
        self.app = app
        self.t_shell_command = t_shell_command
        self.configuration = configuration

    @abstractmethod
    async def perform(self, parsing_process: "ParsingProcess", event: "BaseEvent | None") -> bool:
        """Return True to let execution continue. Side effects must be done before returning."""

    def get_dependent_variables(self) -> list["BaseVariable"]:
        """Variables whose values this preaction writes. Fields using them wait for process_rest()."""
        return []
