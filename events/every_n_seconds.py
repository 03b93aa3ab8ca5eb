"""Periodic execution of shell commands that enable every-n-seconds."""
import asyncio
import logging

from events.base import BaseEvent

logger = logging.getLogger(__name__)


class EveryNSecondsEvent(BaseEvent):
    event_code = "every-n-seconds"
    event_title = "Execute every n seconds"

    def __init__(self, app) -> None:
        super().__init__(app)
        self._running = False

    async def run(self, shell_commands) -> None:
        """Run one loop per shell command until stop() is called."""
        self._running = True
        tasks = []
        for t_shell_command in shell_commands:
            if not self.can_trigger(t_shell_command):
                continue
            seconds = t_shell_command.get_event_configuration(self.event_code).seconds
            if seconds <= 0:
                logger.warning(
                    "Shell command %s enables every-n-seconds without a positive interval; skipped",
                    t_shell_command.shell_command_id,
                )
                continue
            tasks.append(asyncio.create_task(self._loop(t_shell_command, seconds)))
        logger.info("every-n-seconds started with %d shell command(s).", len(tasks))
        await asyncio.gather(*tasks)

    async def _loop(self, t_shell_command, seconds: int) -> None:
        await asyncio.sleep(seconds)
        while self._running:
            logger.debug("every-n-seconds firing: %s", t_shell_command.shell_command_id)
            try:
                await self.trigger(t_shell_command)
            except Exception as exc:
                logger.exception("Shell command %s failed: %s", t_shell_command.shell_command_id, exc)
            await asyncio.sleep(seconds)

    async def stop(self) -> None:
        self._running = False
