"""Tests for variables/parser.py and the built-in variables it resolves."""
import os

import pytest

from config.models import CustomVariableConfiguration, ShellCommandConfiguration
from core.db import set_custom_variable_value
from core.shell_command import ShellCommand
from events.vault import FileMovedEvent, FileRenamedEvent, FolderCreatedEvent, FolderRenamedEvent
from variables.base import VariableContext
from variables.parser import find_references, get_used_variables, parse_variables

CUSTOM_VARIABLES = [
    {"id": "cv-1", "name": "target"},
    {"id": "cv-2", "name": "with_default", "default_value": {"type": "value", "value": "fallback"}},
]


@pytest.fixture
def app(make_app):
    return make_app(custom_variables=CUSTOM_VARIABLES)


def _context(app, t_shell_command=None, event=None, shell="sh"):
    return VariableContext(app=app, shell=app.shells.get(shell), t_shell_command=t_shell_command, event=event)


# ---------------------------------------------------------------------------
# Reference syntax
# ---------------------------------------------------------------------------

def test_find_references_parses_arguments_and_escape_control():
    (reference,) = find_references("x {{date:%Y:%m|raw}} y")
    assert reference.name == "date"
    assert reference.arguments == ("%Y", "%m")
    assert reference.escape_control == "raw"
    assert reference.unescaped is True
    assert reference.span == (2, 20)


def test_find_references_plain():
    (reference,) = find_references("{{title}}")
    assert reference.arguments == ()
    assert reference.escape_control is None
    assert reference.unescaped is False


def test_find_references_ignores_non_matching_braces():
    assert find_references("{{ title }} {title} {{}}") == []


def test_get_used_variables_skips_unknown(app):
    used = get_used_variables(["{{title}} {{nope}}", "{{_target}}"], app.variables)
    assert set(used) == {"title", "_target"}


# ---------------------------------------------------------------------------
# parse_variables basics
# ---------------------------------------------------------------------------

async def test_zero_references_returns_content_unchanged(app):
    content = "echo 'hello' && ls -la {not a variable}"
    result = await parse_variables(content, _context(app))
    assert result.succeeded
    assert result.parsed_content == content
    assert result.original_content == content
    assert result.count_parsed_variables == 0
    assert result.error_messages == []


async def test_unknown_variable_fails_and_names_it(app):
    result = await parse_variables("echo {{no_such_variable}}", _context(app))
    assert not result.succeeded
    assert result.parsed_content is None
    assert result.original_content == "echo {{no_such_variable}}"
    assert len(result.error_messages) >= 1
    assert "no_such_variable" in result.error_messages[0]


async def test_all_errors_are_collected(app):
    result = await parse_variables("{{nope1}} {{title}} {{nope2}}", _context(app))
    assert not result.succeeded
    assert len(result.error_messages) == 3
    assert "No file is active" in result.error_messages[1]


async def test_values_are_escaped_by_default(app):
    app.workspace.active_file = app.workspace.vault_root / "My Note.md"
    result = await parse_variables("echo {{title}}", _context(app))
    assert result.parsed_content == "echo 'My Note'"
    assert result.count_parsed_variables == 1


async def test_raw_escape_control_skips_escaping(app):
    app.workspace.active_file = app.workspace.vault_root / "My Note.md"
    result = await parse_variables("echo {{title|raw}}", _context(app))
    assert result.parsed_content == "echo My Note"


async def test_escape_false_skips_escaping(app):
    app.workspace.active_file = app.workspace.vault_root / "My Note.md"
    result = await parse_variables("{{title}}", _context(app), escape=False)
    assert result.parsed_content == "My Note"


async def test_unknown_escape_control_is_an_error(app):
    result = await parse_variables("{{operating_system|shout}}", _context(app))
    assert not result.succeeded
    assert "shout" in result.error_messages[0]


async def test_passthrough_names_are_left_verbatim(app):
    result = await parse_variables("<b>{{output}}</b>", _context(app), escape=False, passthrough_names=("output",))
    assert result.succeeded
    assert result.parsed_content == "<b>{{output}}</b>"
    assert result.count_parsed_variables == 0


async def test_powershell_escaping_used_for_pwsh(app):
    app.workspace.active_file = app.workspace.vault_root / "it's.md"
    result = await parse_variables("{{title}}", _context(app, shell="pwsh"))
    assert result.parsed_content == "'it''s'"


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------

async def test_missing_required_argument(app):
    result = await parse_variables("{{environment}}", _context(app))
    assert not result.succeeded
    assert "Missing argument" in result.error_messages[0]


async def test_argument_not_accepted(app):
    result = await parse_variables("{{operating_system:x}}", _context(app))
    assert "does not accept arguments" in result.error_messages[0]


async def test_argument_option_validated(app):
    app.workspace.active_file = app.workspace.vault_root / "a.md"
    result = await parse_variables("{{file_path:sideways}}", _context(app))
    assert "must be one of" in result.error_messages[0]


async def test_last_argument_absorbs_colons(app):
    result = await parse_variables("{{date:%H:%M}}", _context(app), escape=False)
    assert result.succeeded
    assert len(result.parsed_content) == 5


async def test_environment_variable(app, monkeypatch):
    monkeypatch.setenv("SC_TEST_VALUE", "hello world")
    result = await parse_variables("{{environment:SC_TEST_VALUE}}", _context(app))
    assert result.parsed_content == "'hello world'"


async def test_newline_count(app):
    result = await parse_variables("a{{newline:2}}b", _context(app), escape=False)
    assert result.parsed_content == "a\n\nb"


async def test_operating_system(app):
    result = await parse_variables("{{operating_system}}", _context(app))
    assert result.parsed_content == "Linux"


async def test_passthrough_variable_only_in_debug(make_app):
    assert "passthrough" not in make_app().variables
    debug_app = make_app(debug=True)
    result = await parse_variables("{{passthrough:a b}}", _context(debug_app))
    assert result.parsed_content == "'a b'"


# ---------------------------------------------------------------------------
# File variables
# ---------------------------------------------------------------------------

async def test_file_variables(app):
    folder = app.workspace.vault_root / "notes"
    folder.mkdir()
    note = folder / "Day.md"
    note.write_text("---\ntitle: x\nauthor:\n  name: Ann\ntags: [a, b]\n---\nBody text\n", encoding="utf-8")
    app.workspace.active_file = note
    context = _context(app)

    async def value(template):
        result = await parse_variables(template, context, escape=False)
        assert result.succeeded, result.error_messages
        return result.parsed_content

    assert await value("{{file_name}}") == "Day.md"
    assert await value("{{file_extension:no-dot}}") == "md"
    assert await value("{{file_path:relative}}") == "notes/Day.md"
    assert await value("{{file_path:absolute}}") == str(note)
    assert await value("{{folder_name}}") == "notes"
    assert await value("{{note_content}}") == "Body text\n"
    assert await value("{{yaml_value:author.name}}") == "Ann"
    assert await value("{{tags:,}}") == "a,b"
    assert (await value("{{yaml_content:with-dashes}}")).startswith("---\ntitle: x")
    assert await value("{{file_uri}}") == note.as_uri()
    assert (await value("{{file_content}}")).startswith("---\ntitle: x")


async def test_yaml_value_missing_property(app):
    note = app.workspace.vault_root / "n.md"
    note.write_text("---\na: 1\n---\n", encoding="utf-8")
    app.workspace.active_file = note
    result = await parse_variables("{{yaml_value:b}}", _context(app))
    assert "'b' is not found" in result.error_messages[0]


async def test_folder_name_of_vault_root_is_dot(app):
    app.workspace.active_file = app.workspace.vault_root / "top.md"
    result = await parse_variables("{{folder_name}}", _context(app), escape=False)
    assert result.parsed_content == "."


async def test_selection_unavailable(app):
    result = await parse_variables("{{selection}}", _context(app))
    assert "Nothing is selected" in result.error_messages[0]
    app.workspace.selection = "picked text"
    result = await parse_variables("{{selection}}", _context(app))
    assert result.parsed_content == "'picked text'"


async def test_vault_path(app):
    result = await parse_variables("{{vault_path}}", _context(app), escape=False)
    assert os.path.realpath(result.parsed_content) == os.path.realpath(app.workspace.vault_root)


# ---------------------------------------------------------------------------
# Custom variables and default values
# ---------------------------------------------------------------------------

async def test_custom_variable_without_value_fails(app):
    result = await parse_variables("{{_target}}", _context(app))
    assert not result.succeeded
    assert "not been assigned" in result.error_messages[0]


async def test_custom_variable_reads_store_by_id(app):
    await set_custom_variable_value(app.settings.db_path, "cv-1", "stored value")
    result = await parse_variables("{{_target}}", _context(app))
    assert result.parsed_content == "'stored value'"


async def test_custom_variable_survives_rename(make_app):
    first = make_app(custom_variables=[{"id": "cv-1", "name": "old_name"}])
    await set_custom_variable_value(first.settings.db_path, "cv-1", "kept")
    renamed = make_app(custom_variables=[{"id": "cv-1", "name": "new_name"}])
    result = await parse_variables("{{_new_name}}", _context(renamed))
    assert result.parsed_content == "kept"


async def test_custom_variable_global_default_value(app):
    result = await parse_variables("{{_with_default}}", _context(app))
    assert result.parsed_content == "fallback"


def _command(app, **configuration):
    return ShellCommand(app, "cmd-1", ShellCommandConfiguration(**configuration))


async def test_command_default_value_is_parsed(app):
    t_shell_command = _command(
        app, variable_default_values={"title": {"type": "value", "value": "{{operating_system}} note"}}
    )
    result = await parse_variables("{{title}}", _context(app, t_shell_command))
    # The default is parsed unescaped, then escaped as the title's value
    assert result.parsed_content == "'Linux note'"


async def test_command_default_cancel_silently(app):
    t_shell_command = _command(app, variable_default_values={"title": {"type": "cancel-silently"}})
    result = await parse_variables("{{title}}", _context(app, t_shell_command))
    assert not result.succeeded
    assert result.error_messages == []


async def test_command_default_show_errors_overrides_global(app):
    t_shell_command = _command(app, variable_default_values={"cv-2": {"type": "show-errors"}})
    result = await parse_variables("{{_with_default}}", _context(app, t_shell_command))
    assert not result.succeeded
    assert "not been assigned" in result.error_messages[0]


async def test_command_default_inherit_uses_global(app):
    t_shell_command = _command(app, variable_default_values={"cv-2": {"type": "inherit"}})
    result = await parse_variables("{{_with_default}}", _context(app, t_shell_command))
    assert result.parsed_content == "fallback"


async def test_default_value_referring_to_itself_fails(make_app):
    app = make_app(
        custom_variables=[{"id": "v1", "name": "a", "default_value": {"type": "value", "value": "x{{_a}}"}}]
    )
    result = await parse_variables("echo {{_a}}", _context(app))
    assert not result.succeeded
    assert "refers to itself" in result.error_messages[0]


async def test_default_values_referring_to_each_other_fail(make_app):
    app = make_app(
        custom_variables=[
            {"id": "v1", "name": "a", "default_value": {"type": "value", "value": "{{_b}}"}},
            {"id": "v2", "name": "b", "default_value": {"type": "value", "value": "{{_a}}"}},
        ]
    )
    result = await parse_variables("{{_a}} {{_b}}", _context(app))
    assert not result.succeeded
    assert len(result.error_messages) == 2
    assert all("refers to itself" in message for message in result.error_messages)


async def test_command_default_referring_to_same_variable_fails(app):
    t_shell_command = _command(
        app, variable_default_values={"title": {"type": "value", "value": "{{title}} again"}}
    )
    result = await parse_variables("{{title}}", _context(app, t_shell_command))
    assert "refers to itself" in result.error_messages[0]


async def test_default_value_may_use_other_variables(make_app):
    app = make_app(
        custom_variables=[
            {"id": "v1", "name": "a", "default_value": {"type": "value", "value": "{{_b}}!"}},
            {"id": "v2", "name": "b", "default_value": {"type": "value", "value": "{{operating_system}}"}},
        ]
    )
    result = await parse_variables("{{_a}}", _context(app), escape=False)
    assert result.parsed_content == "Linux!"


def test_custom_variable_name_is_normalised():
    configuration = CustomVariableConfiguration(id="x", name="_My-Var")
    assert configuration.name == "my-var"


# ---------------------------------------------------------------------------
# Event variables
# ---------------------------------------------------------------------------

async def test_event_variable_without_event_fails(app):
    result = await parse_variables("{{event_file_name}}", _context(app))
    assert "can only be used during events" in result.error_messages[0]


async def test_event_variables_with_rename_event(app):
    vault = app.workspace.vault_root
    event = FileRenamedEvent(app, file=vault / "new.md", old_path=vault / "old.md")
    context = _context(app, event=event)
    result = await parse_variables("{{event_file_name}} {{event_old_file_name}}", context, escape=False)
    assert result.parsed_content == "new.md old.md"


async def test_file_event_variable_rejected_for_folder_event(app):
    event = FolderCreatedEvent(app, folder=app.workspace.vault_root / "f")
    result = await parse_variables("{{event_file_name}} {{event_folder_name}}", _context(app, event=event))
    assert len(result.error_messages) == 1
    assert "event_file_name" in result.error_messages[0]


async def test_event_file_content_variables(app):
    vault = app.workspace.vault_root
    note = vault / "new.md"
    note.write_text("---\ntitle: x\n---\nBody\n", encoding="utf-8")
    event = FileRenamedEvent(app, file=note, old_path=vault / "Old Name.md")
    context = _context(app, event=event)

    async def value(template):
        result = await parse_variables(template, context, escape=False)
        assert result.succeeded, result.error_messages
        return result.parsed_content

    assert await value("{{event_file_uri}}") == note.as_uri()
    assert await value("{{event_file_content}}") == "---\ntitle: x\n---\nBody\n"
    assert await value("{{event_yaml_content:no-dashes}}") == "title: x"
    assert await value("{{event_yaml_content:with-dashes}}") == "---\ntitle: x\n---"
    assert await value("{{event_old_title}}") == "Old Name"


async def test_event_old_folder_name_for_moved_file(app):
    vault = app.workspace.vault_root
    event = FileMovedEvent(app, file=vault / "b" / "n.md", old_path=vault / "a" / "n.md")
    result = await parse_variables("{{event_old_folder_name}}", _context(app, event=event), escape=False)
    assert result.parsed_content == "a"


async def test_event_old_folder_name_for_renamed_folder(app):
    vault = app.workspace.vault_root
    event = FolderRenamedEvent(app, folder=vault / "new", old_path=vault / "old")
    result = await parse_variables("{{event_old_folder_name}}", _context(app, event=event), escape=False)
    assert result.parsed_content == "old"


async def test_event_old_title_rejected_for_folder_event(app):
    event = FolderRenamedEvent(app, folder=app.workspace.vault_root / "new", old_path=app.workspace.vault_root / "old")
    result = await parse_variables("{{event_old_title}}", _context(app, event=event))
    assert "can only be used during events" in result.error_messages[0]
