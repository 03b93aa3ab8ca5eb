"""Contracts for the host application's notices and modals."""
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field


class NotificationHandle(ABC):
    @abstractmethod
    def hide(self) -> None:
        """Remove the notice if it's still visible."""


@dataclass
class PromptFormField:
    label: str
    target_variable_id: str
    description: str = ""
    default_value: str = ""
    required: bool = True


@dataclass
class PromptForm:
    title: str
    fields: list[PromptFormField] = field(default_factory=list)
    description: str = ""
    execute_button_text: str = "Execute"


class BaseNotifier(ABC):
    @abstractmethod
    def error(self, message: str, duration: float) -> None:
        """Show an error notice for *duration* seconds."""

    @abstractmethod
    def notify(
        self,
        message: str,
        duration: float | None,
        on_terminate: Callable[[], None] | None = None,
    ) -> NotificationHandle:
        """
        Show a notice. *duration* None keeps it visible until hide() is called.

        When *on_terminate* is given, the notice offers a control that calls it.
        """


class BasePromptUI(ABC):
    @abstractmethod
    async def confirm(self, title: str, question: str, yes_button_text: str) -> bool:
        """Return True if the user accepted."""

    @abstractmethod
    async def ask(self, form: PromptForm) -> dict[str, str] | None:
        """Return submitted values keyed by target variable id, or None if cancelled."""
