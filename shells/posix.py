"""Bourne-style shells: bash, sh, zsh, dash."""
import shutil

from shells.base import DRIVE_LETTER_RE, BuiltinShell, normalize_separators
from shells.escapers import BaseEscaper, PosixEscaper


class PosixShell(BuiltinShell):
    supported_platforms = ("darwin", "linux", "win32")
    path_separator = ":"
    default_binary_path = ""

    def get_binary_path(self) -> str:
        return shutil.which(self.shell_name) or self.default_binary_path

    def get_spawn_arguments(self, shell_command: str) -> list[str]:
        return ["-c", shell_command]

    def get_escaper(self) -> BaseEscaper:
        return PosixEscaper()

    def translate_absolute_path(self, original_path: str) -> str:
        if self.app.platform_id != "win32":
            return original_path
        # Git Bash / MSYS layout: C:\Vault -> /c/Vault
        match = DRIVE_LETTER_RE.match(original_path)
        if match:
            rest = original_path[match.end():]
            original_path = "/" + match.group(1).lower() + "/" + rest
        return normalize_separators(original_path, "/")

    def translate_relative_path(self, original_path: str) -> str:
        if self.app.platform_id != "win32":
            return original_path
        return normalize_separators(original_path, "/")


class BashShell(PosixShell):
    shell_name = "bash"
    display_name = "Bash"
    aliases = ("/bin/bash", "bash.exe")
    default_binary_path = "/bin/bash"


class ShShell(PosixShell):
    shell_name = "sh"
    display_name = "Bourne shell"
    aliases = ("/bin/sh",)
    supported_platforms = ("darwin", "linux")
    default_binary_path = "/bin/sh"


class ZshShell(PosixShell):
    shell_name = "zsh"
    display_name = "Z shell"
    aliases = ("/bin/zsh",)
    supported_platforms = ("darwin", "linux")
    default_binary_path = "/bin/zsh"


class DashShell(PosixShell):
    shell_name = "dash"
    display_name = "Dash"
    aliases = ("/bin/dash",)
    supported_platforms = ("linux",)
    default_binary_path = "/bin/dash"
