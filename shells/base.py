"""Shell contract: binary, platforms, path translation, escaping and process spawning."""
import asyncio
import logging
import ntpath
import os
import re
import shutil
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from config.models import PLATFORM_NAMES
from shells.escapers import BaseEscaper

if TYPE_CHECKING:
    from core.app import ShellCommandsApp

logger = logging.getLogger(__name__)

DRIVE_LETTER_RE = re.compile(r"^([A-Za-z]):(?:[\\/]|$)")


def current_platform_id() -> str:
    """Map sys.platform onto one of the configured platform ids."""
    if sys.platform.startswith("win"):
        return "win32"
    if sys.platform == "darwin":
        return "darwin"
    return "linux"


def resolve_working_directory(working_directory: str, vault_path: str) -> str:
    """Return the host-side working directory: configured absolute, configured relative to the vault, or the vault."""
    if not working_directory:
        return vault_path
    if not (os.path.isabs(working_directory) or ntpath.isabs(working_directory)):
        return os.path.join(vault_path, working_directory)
    return working_directory


def normalize_separators(path: str, separator: str) -> str:
    """Replace both / and \\ with *separator* and collapse repeats."""
    return re.sub(r"[\\/]+", lambda _: separator, path)


class BaseShell(ABC):
    shell_name: str = ""
    display_name: str = ""
    # Extra names this shell is known by in configuration files
    aliases: tuple[str, ...] = ()
    supported_platforms: tuple[str, ...] = ()
    path_separator: str = ":"  # separates entries in PATH, not directories
    escaping_note: str = ""

    def __init__(self, app: "ShellCommandsApp") -> None:
        self.app = app

    def matches_identifier(self, shell_identifier: str) -> bool:
        candidates = (self.shell_name, *self.aliases)
        return shell_identifier.lower() in (c.lower() for c in candidates)

    @abstractmethod
    def get_binary_path(self) -> str:
        """Return a path to the shell's executable."""

    @abstractmethod
    def get_spawn_arguments(self, shell_command: str) -> list[str]:
        """Return the arguments that follow the binary path when spawning *shell_command*."""

    @abstractmethod
    def get_escaper(self) -> BaseEscaper:
        """Return the escaper used for {{variable}} values."""

    @abstractmethod
    def translate_absolute_path(self, original_path: str) -> str:
        """Convert a host absolute path into the form this shell understands."""

    @abstractmethod
    def translate_relative_path(self, original_path: str) -> str:
        """Convert a host relative path into the form this shell understands."""

    def escape_value(self, raw_value: str) -> str:
        return self.get_escaper().escape(raw_value)

    def get_working_directory(self) -> str:
        """Configured working directory (or the vault root) translated for this shell."""
        settings = self.app.settings
        host_directory = resolve_working_directory(settings.working_directory, settings.vault_path)
        return self.translate_absolute_path(host_directory)

    def get_environment(self) -> dict[str, str]:
        return dict(os.environ)

    def is_supported_on(self, platform_id: str) -> bool:
        return platform_id in self.supported_platforms

    async def spawn_child_process(
        self,
        shell_command: str,
        working_directory: str,
        has_stdin: bool = False,
    ) -> asyncio.subprocess.Process | None:
        """
        Start *shell_command* in this shell.

        Returns None (after reporting an error) when the shell can't be used on this machine.
        OSErrors from the spawn itself propagate to the caller.
        """
        platform_id = self.app.platform_id
        if not self.is_supported_on(platform_id):
            self.app.new_error(
                f"Shell {self.display_name} is not supported on {PLATFORM_NAMES.get(platform_id, platform_id)}."
            )
            return None

        binary_path = self.get_binary_path()
        if shutil.which(binary_path) is None and not Path(binary_path).is_file():
            self.app.new_error(f"{self.display_name} binary was not found: {binary_path}")
            return None

        return await self._create_process(binary_path, shell_command, working_directory, has_stdin)

    async def _create_process(
        self,
        binary_path: str,
        shell_command: str,
        working_directory: str,
        has_stdin: bool,
    ) -> asyncio.subprocess.Process:
        args = self.get_spawn_arguments(shell_command)
        logger.debug("Spawning %s %s in %s", binary_path, args, working_directory)
        return await asyncio.create_subprocess_exec(
            binary_path, *args,
            cwd=working_directory,
            env=self.get_environment(),
            stdin=asyncio.subprocess.PIPE if has_stdin else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )


class BuiltinShell(BaseShell):
    """Shells shipped with the application; these accept a PATH augmentation."""

    def __init__(self, app: "ShellCommandsApp") -> None:
        super().__init__(app)
        self._path_augmentation = ""

    def set_path_augmentation(self, path_augmentation: str) -> None:
        """Lines of *path_augmentation* become extra PATH entries, appended after the inherited ones."""
        entries = [line.strip() for line in path_augmentation.splitlines() if line.strip()]
        self._path_augmentation = self.path_separator.join(entries)

    def get_environment(self) -> dict[str, str]:
        env = super().get_environment()
        if self._path_augmentation:
            existing = env.get("PATH", "")
            env["PATH"] = (
                existing + self.path_separator + self._path_augmentation
                if existing
                else self._path_augmentation
            )
        return env
