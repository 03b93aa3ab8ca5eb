"""Tests for core/parsing_process.py."""
import pytest

from core.db import set_custom_variable_value
from core.parsing_process import ParsingField, ParsingProcess, ParsingProcessStateError, ParsingState
from variables.base import VariableContext


@pytest.fixture
def app(make_app):
    app = make_app(custom_variables=[{"id": "cv-1", "name": "answer"}])
    app.workspace.active_file = app.workspace.vault_root / "My Note.md"
    return app


def _process(app, fields):
    context = VariableContext(app=app, shell=app.shells.get("sh"))
    return ParsingProcess(fields, context)


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

async def test_phase_one_skips_fields_requiring_preaction_output(app):
    process = _process(
        app,
        {
            "command": ParsingField("echo {{title}} {{_answer}}", requires_preaction_output=True),
            "alias": ParsingField("Run {{title}}", escape=False),
        },
    )
    assert await process.process() is True
    assert process.state is ParsingState.first_pass_done
    results = process.get_parsing_results()
    assert set(results) == {"alias"}
    assert results["alias"].parsed_content == "Run My Note"


async def test_phase_two_sees_values_written_between_phases(app):
    process = _process(
        app,
        {"command": ParsingField("echo {{_answer}}", requires_preaction_output=True)},
    )
    assert await process.process()
    await set_custom_variable_value(app.settings.db_path, "cv-1", "forty two")
    assert await process.process_rest() is True
    assert process.state is ParsingState.complete
    assert process.get_parsing_results()["command"].parsed_content == "echo 'forty two'"


async def test_phase_two_only_parses_leftovers(app):
    process = _process(
        app,
        {
            "a": ParsingField("{{title}}"),
            "b": ParsingField("{{title}}", requires_preaction_output=True),
        },
    )
    await process.process()
    first_a = process.get_parsing_results()["a"]
    await process.process_rest()
    assert process.get_parsing_results()["a"] is first_a
    assert set(process.get_parsing_results()) == {"a", "b"}


async def test_phase_one_failure_fails_closed_and_keeps_partial_results(app):
    process = _process(
        app,
        {
            "good": ParsingField("{{title}}"),
            "bad": ParsingField("{{nope}} {{also_nope}}"),
        },
    )
    assert await process.process() is False
    assert process.state is ParsingState.failed
    assert process.get_parsing_results()["good"].succeeded
    assert process.get_error_messages() == [
        "Unknown variable: {{nope}}",
        "Unknown variable: {{also_nope}}",
    ]
    assert process.get_first_error_message() == "Unknown variable: {{nope}}"
    with pytest.raises(ParsingProcessStateError):
        await process.process_rest()


async def test_phase_two_failure(app):
    process = _process(app, {"command": ParsingField("{{_answer}}", requires_preaction_output=True)})
    await process.process()
    assert await process.process_rest() is False
    assert process.state is ParsingState.failed


# ---------------------------------------------------------------------------
# Single use
# ---------------------------------------------------------------------------

async def test_process_cannot_run_twice(app):
    process = _process(app, {"a": ParsingField("x")})
    await process.process()
    with pytest.raises(ParsingProcessStateError):
        await process.process()


async def test_process_rest_before_process_raises(app):
    process = _process(app, {"a": ParsingField("x")})
    with pytest.raises(ParsingProcessStateError):
        await process.process_rest()


async def test_process_rest_after_complete_raises(app):
    process = _process(app, {"a": ParsingField("x")})
    await process.process()
    await process.process_rest()
    with pytest.raises(ParsingProcessStateError):
        await process.process_rest()


async def test_recreated_process_gives_identical_results(app):
    fields = {
        "command": ParsingField("echo {{title}} {{nope}}"),
        "alias": ParsingField("{{file_name}}", escape=False),
    }
    first = _process(app, fields)
    second = _process(app, fields)
    await first.process()
    await second.process()
    assert first.get_parsing_results() == second.get_parsing_results()


# ---------------------------------------------------------------------------
# Error display
# ---------------------------------------------------------------------------

async def test_display_error_messages_shows_only_first(app):
    process = _process(app, {"a": ParsingField("{{nope}} {{nope2}}")})
    await process.process()
    process.display_error_messages(app)
    app.notifier.error.assert_called_once()
    assert app.notifier.error.call_args.args[0] == "Unknown variable: {{nope}}"


async def test_display_error_messages_silent_without_errors(app):
    process = _process(app, {"a": ParsingField("plain")})
    await process.process()
    process.display_error_messages(app)
    app.notifier.error.assert_not_called()
