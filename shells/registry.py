"""Auto-loading shell registry."""
import importlib
import logging
import pkgutil
from pathlib import Path
from typing import TYPE_CHECKING

from shells.base import BaseShell

if TYPE_CHECKING:
    from core.app import ShellCommandsApp

logger = logging.getLogger(__name__)

# Used when settings.default_shells has no entry for the platform
PLATFORM_DEFAULT_SHELLS = {
    "darwin": "zsh",
    "linux": "bash",
    "win32": "cmd",
}


def _concrete_subclasses(cls: type) -> list[type]:
    found = []
    for sub in cls.__subclasses__():
        found.extend(_concrete_subclasses(sub))
        if getattr(sub, "shell_name", ""):
            found.append(sub)
    return found


class ShellRegistry:
    def __init__(self, app: "ShellCommandsApp") -> None:
        self.app = app
        self._registry: dict[str, BaseShell] = {}
        self._load_all()

    def _load_all(self) -> None:
        """Import every module in shells/ to trigger subclass registration."""
        pkg_path = str(Path(__file__).parent)
        for info in pkgutil.iter_modules([pkg_path]):
            if info.name not in ("base", "registry", "escapers"):
                importlib.import_module(f"shells.{info.name}")

        for cls in _concrete_subclasses(BaseShell):
            # Instances are kept so per-shell state (PATH augmentation) survives between lookups.
            self._registry[cls.shell_name] = cls(self.app)
            logger.debug("Shell registered: %s", cls.shell_name)

    def get(self, shell_identifier: str) -> BaseShell:
        """Return the shell whose name or alias matches *shell_identifier*."""
        shell = self._registry.get(shell_identifier)
        if shell is not None:
            return shell
        for candidate in self._registry.values():
            if candidate.matches_identifier(shell_identifier):
                return candidate
        raise KeyError(
            f"No shell registered under {shell_identifier!r}. Available: {list(self._registry)}"
        )

    def get_default_shell(self, platform_id: str) -> BaseShell:
        shell_identifier = self.app.settings.default_shells.get(
            platform_id, PLATFORM_DEFAULT_SHELLS.get(platform_id, "bash")
        )
        return self.get(shell_identifier)

    def for_platform(self, platform_id: str) -> list[BaseShell]:
        return [s for s in self._registry.values() if s.is_supported_on(platform_id)]

    @property
    def available(self) -> list[str]:
        return list(self._registry.keys())
