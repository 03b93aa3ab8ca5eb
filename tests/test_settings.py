"""Tests for config/: Settings loading and validation of the configuration models."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.models import EventConfiguration, ShellCommandConfiguration
from config.settings import Settings


def test_from_yaml_overlays_values(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(
        "vault_path: /tmp/vault\n"
        "execution_notification_mode: if-long\n"
        "shell_commands:\n"
        "  hi:\n"
        "    platform_specific_commands:\n"
        "      default: echo hi\n"
        "    ignore_error_codes: [1, 2]\n",
        encoding="utf-8",
    )
    settings = Settings.from_yaml(config)
    assert settings.vault_path == "/tmp/vault"
    assert settings.execution_notification_mode == "if-long"
    assert settings.shell_commands["hi"].ignore_error_codes == [1, 2]
    assert settings.shell_commands["hi"].output_handlers.stderr.handler == "notification"


def test_from_yaml_missing_file_uses_defaults(tmp_path):
    settings = Settings.from_yaml(tmp_path / "absent.yaml")
    assert settings.shell_commands == {}
    assert settings.execution_notification_mode == "quick"


def test_from_yaml_empty_file(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("", encoding="utf-8")
    assert Settings.from_yaml(config).custom_variables == []


def test_paths_are_expanded():
    settings = Settings(db_path="~/x/variables.db")
    assert settings.db_path == str(Path.home() / "x" / "variables.db")


@pytest.mark.parametrize("duration", [0, 181])
def test_duration_out_of_range(duration):
    with pytest.raises(ValidationError):
        Settings(error_message_duration=duration)


def test_duplicate_custom_variable_ids_rejected():
    with pytest.raises(ValidationError, match="ids must be unique"):
        Settings(custom_variables=[{"id": "a", "name": "x"}, {"id": "a", "name": "y"}])


def test_duplicate_custom_variable_names_rejected():
    with pytest.raises(ValidationError, match="names must be unique"):
        Settings(custom_variables=[{"id": "a", "name": "x"}, {"id": "b", "name": "_X"}])


def test_invalid_custom_variable_name_rejected():
    with pytest.raises(ValidationError):
        Settings(custom_variables=[{"id": "a", "name": "has space"}])


def test_unknown_notification_mode_rejected():
    with pytest.raises(ValidationError):
        Settings(execution_notification_mode="loud")


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("SHELL_COMMANDS_DEBUG", "true")
    assert Settings().debug is True


def test_negative_event_interval_rejected():
    with pytest.raises(ValidationError):
        EventConfiguration(enabled=True, seconds=-1)


def test_shell_command_defaults():
    configuration = ShellCommandConfiguration()
    assert configuration.platform_specific_commands == {"default": ""}
    assert configuration.output_handling_mode == "buffered"
    assert configuration.output_handlers.stdout.handler == "ignore"
    assert configuration.stdin is None
    assert configuration.preactions == []
