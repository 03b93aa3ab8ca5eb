"""Terminal implementations of the notifier and prompt modals, used by the CLI."""
import asyncio
import logging
import sys
from collections.abc import Callable

from ui.base import BaseNotifier, BasePromptUI, NotificationHandle, PromptForm

logger = logging.getLogger(__name__)


class ConsoleNotificationHandle(NotificationHandle):
    def __init__(self, message: str, on_terminate: Callable[[], None] | None) -> None:
        self.message = message
        self.on_terminate = on_terminate
        self.visible = True

    def hide(self) -> None:
        if self.visible:
            self.visible = False
            logger.debug("Notification hidden: %s", self.message)

    def request_termination(self) -> None:
        if self.on_terminate is not None:
            self.on_terminate()


class ConsoleNotifier(BaseNotifier):
    def error(self, message: str, duration: float) -> None:
        logger.warning("Error shown to user: %s", message)
        print(f"[error] {message}", file=sys.stderr)

    def notify(self, message, duration, on_terminate=None):
        print(message)
        handle = ConsoleNotificationHandle(message, on_terminate)
        if duration is not None:
            try:
                asyncio.get_running_loop().call_later(duration, handle.hide)
            except RuntimeError:
                logger.debug("No running loop; notification stays until hidden")
        return handle


class ConsolePromptUI(BasePromptUI):
    async def confirm(self, title, question, yes_button_text):
        answer = await asyncio.to_thread(input, f"{title}\n{question} ({yes_button_text}? y/N) ")
        return answer.strip().lower() in ("y", "yes")

    async def ask(self, form: PromptForm) -> dict[str, str] | None:
        print(form.title)
        if form.description:
            print(form.description)
        values: dict[str, str] = {}
        try:
            for form_field in form.fields:
                suffix = f" [{form_field.default_value}]" if form_field.default_value else ""
                answer = await asyncio.to_thread(input, f"{form_field.label}{suffix}: ")
                values[form_field.target_variable_id] = answer or form_field.default_value
        except EOFError:
            logger.info("Prompt %r cancelled", form.title)
            return None
        return values
