"""CMD.EXE on Windows."""
import asyncio
import logging
import os

from shells.base import BuiltinShell, normalize_separators
from shells.escapers import BaseEscaper, PassthroughEscaper

logger = logging.getLogger(__name__)


class CmdShell(BuiltinShell):
    shell_name = "cmd"
    display_name = "Command prompt (CMD)"
    aliases = ("cmd.exe",)
    supported_platforms = ("win32",)
    path_separator = ";"
    escaping_note = (
        "CMD.EXE has no reliable quoting mechanism, so {{variable}} values are inserted "
        "without escaping. Special characters in values are interpreted by CMD."
    )

    def get_binary_path(self) -> str:
        return os.environ.get("COMSPEC", r"C:\Windows\System32\cmd.exe")

    def get_spawn_arguments(self, shell_command: str) -> list[str]:
        # What create_subprocess_shell hands to COMSPEC; see _create_process
        return ["/c", shell_command]

    def get_escaper(self) -> BaseEscaper:
        return PassthroughEscaper()

    def translate_absolute_path(self, original_path: str) -> str:
        return normalize_separators(original_path, "\\")

    def translate_relative_path(self, original_path: str) -> str:
        return normalize_separators(original_path, "\\")

    async def _create_process(
        self,
        binary_path: str,
        shell_command: str,
        working_directory: str,
        has_stdin: bool,
    ) -> asyncio.subprocess.Process:
        """
        Run through create_subprocess_shell, which starts COMSPEC (the same binary get_binary_path()
        reports) with the command line as-is. create_subprocess_exec would re-quote the arguments
        with backslash escapes that CMD does not understand.
        """
        logger.debug(
            "Spawning %s %s in %s", binary_path, self.get_spawn_arguments(shell_command), working_directory
        )
        return await asyncio.create_subprocess_shell(
            shell_command,
            cwd=working_directory,
            env=self.get_environment(),
            stdin=asyncio.subprocess.PIPE if has_stdin else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
