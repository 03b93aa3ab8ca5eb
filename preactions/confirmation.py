import logging

from preactions.base import BasePreaction

logger = logging.getLogger(__name__)


class ConfirmationPreaction(BasePreaction):
    """Asks "Execute this shell command?". Put in front of the pipeline when confirm_execution is on."""

    preaction_type = "confirmation"

    async def perform(self, parsing_process, event):
        alias_result = parsing_process.get_parsing_results().get("alias")
        title = (
            alias_result.parsed_content
            if alias_result is not None and alias_result.succeeded
            else None
        ) or self.t_shell_command.get_alias_or_shell_command()

        logger.debug("Asking confirmation for shell command %s", self.t_shell_command.shell_command_id)
        confirmed = await self.app.prompt_ui.confirm(title, "Execute this shell command?", "Yes, execute")
        if confirmed:
            logger.debug("User confirmed shell command %s", self.t_shell_command.shell_command_id)
        else:
            logger.debug("User cancelled shell command %s", self.t_shell_command.shell_command_id)
        return confirmed
