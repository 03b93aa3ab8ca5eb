"""Windows PowerShell 5 and cross-platform PowerShell Core."""
import shutil

from shells.base import BuiltinShell, normalize_separators
from shells.escapers import BaseEscaper, PowerShellEscaper


class _PowerShellBase(BuiltinShell):
    executable_name = ""

    def get_binary_path(self) -> str:
        return shutil.which(self.executable_name) or self.executable_name

    def get_spawn_arguments(self, shell_command: str) -> list[str]:
        return ["-NoProfile", "-NonInteractive", "-Command", shell_command]

    def get_escaper(self) -> BaseEscaper:
        return PowerShellEscaper()

    @property
    def directory_separator(self) -> str:
        return "\\" if self.app.platform_id == "win32" else "/"

    def translate_absolute_path(self, original_path: str) -> str:
        if self.app.platform_id != "win32":
            return original_path
        return normalize_separators(original_path, self.directory_separator)

    def translate_relative_path(self, original_path: str) -> str:
        return self.translate_absolute_path(original_path)


class PowerShell5(_PowerShellBase):
    shell_name = "powershell"
    display_name = "PowerShell 5"
    aliases = ("powershell.exe",)
    supported_platforms = ("win32",)
    path_separator = ";"
    executable_name = "powershell.exe"


class PowerShellCore(_PowerShellBase):
    shell_name = "pwsh"
    display_name = "PowerShell Core"
    aliases = ("pwsh.exe",)
    supported_platforms = ("darwin", "linux", "win32")
    executable_name = "pwsh"

    @property
    def path_separator(self) -> str:  # type: ignore[override]
        return ";" if self.app.platform_id == "win32" else ":"
