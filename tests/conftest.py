"""Shared fixtures: an app wired to a temp vault, a temp variable store and mocked UI."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import Settings
from core.app import ShellCommandsApp
from core.db import init_db
from core.workspace import Workspace


@pytest.fixture
def vault(tmp_path):
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
async def db_path(tmp_path):
    path = str(tmp_path / "variables.db")
    await init_db(path)
    return path


@pytest.fixture
def make_app(tmp_path, vault, db_path):
    """Build a ShellCommandsApp on Linux using /bin/sh. Keyword arguments override settings."""

    def _make(platform_id: str = "linux", **overrides) -> ShellCommandsApp:
        values = {
            "vault_path": str(vault),
            "db_path": db_path,
            "log_dir": str(tmp_path / "logs"),
            "default_shells": {"linux": "sh", "darwin": "sh"},
            "execution_notification_mode": "disabled",
        }
        values.update(overrides)
        notifier = MagicMock()
        prompt_ui = MagicMock()
        prompt_ui.confirm = AsyncMock(return_value=True)
        prompt_ui.ask = AsyncMock(return_value=None)
        return ShellCommandsApp(
            settings=Settings(**values),
            workspace=Workspace(vault_root=vault),
            notifier=notifier,
            prompt_ui=prompt_ui,
            platform_id=platform_id,
        )

    return _make


def error_messages(app: ShellCommandsApp) -> list[str]:
    """Messages passed to the mocked notifier's error()."""
    return [c.args[0] for c in app.notifier.error.call_args_list]
