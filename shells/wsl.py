"""Windows Subsystem for Linux: a Linux shell living in a foreign filesystem namespace."""
from shells.base import DRIVE_LETTER_RE, BuiltinShell, normalize_separators
from shells.escapers import BaseEscaper, PosixEscaper


class WslShell(BuiltinShell):
    shell_name = "wsl"
    display_name = "Windows Subsystem for Linux"
    aliases = ("wsl.exe",)
    supported_platforms = ("win32",)
    path_separator = ":"

    def get_binary_path(self) -> str:
        return r"C:\Windows\System32\wsl.exe"

    def get_spawn_arguments(self, shell_command: str) -> list[str]:
        return ["--exec", "bash", "-c", shell_command]

    def get_escaper(self) -> BaseEscaper:
        return PosixEscaper()

    def translate_absolute_path(self, original_path: str) -> str:
        # C:\Vault\Note.md -> /mnt/c/Vault/Note.md
        match = DRIVE_LETTER_RE.match(original_path)
        if match:
            rest = original_path[match.end():]
            original_path = "/mnt/" + match.group(1).lower() + "/" + rest
        return normalize_separators(original_path, "/").rstrip("/") or "/"

    def translate_relative_path(self, original_path: str) -> str:
        return normalize_separators(original_path, "/")
