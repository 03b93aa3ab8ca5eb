"""
{{variable}} reference syntax and substitution.

    {{ name ( :argument )* ( |escape-control )? }}

Escape controls: ``raw`` inserts the value as-is, ``escape`` (the default) quotes it with
the target shell's escaper. A literal ``{{name}}`` whose name is a known variable cannot be
written; there is no escape sequence for the delimiters.
"""
import dataclasses
import logging
import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

from variables.base import BaseVariable, VariableContext, VariableError
from variables.registry import VariableSet

logger = logging.getLogger(__name__)

VARIABLE_REFERENCE_RE = re.compile(
    r"\{\{(?P<name>[\w-]+)(?P<arguments>(?::[^{}|]*)*)(?:\|(?P<escape_control>[^{}|:]*))?\}\}"
)

ESCAPE_CONTROLS = {
    "escape": False,
    "raw": True,  # unescaped
}


@dataclass(frozen=True)
class VariableReference:
    name: str
    arguments: tuple[str, ...]
    escape_control: str | None
    span: tuple[int, int]

    @property
    def unescaped(self) -> bool:
        return ESCAPE_CONTROLS.get(self.escape_control or "escape", False)

    @property
    def text(self) -> str:
        suffix = "".join(":" + a for a in self.arguments)
        control = "" if self.escape_control is None else "|" + self.escape_control
        return "{{" + self.name + suffix + control + "}}"


@dataclass
class ParsingResult:
    succeeded: bool
    parsed_content: str | None
    original_content: str
    error_messages: list[str] = field(default_factory=list)
    count_parsed_variables: int = 0


def find_references(content: str) -> list[VariableReference]:
    references = []
    for match in VARIABLE_REFERENCE_RE.finditer(content):
        raw_arguments = match.group("arguments")
        references.append(
            VariableReference(
                name=match.group("name"),
                arguments=tuple(raw_arguments[1:].split(":")) if raw_arguments else (),
                escape_control=match.group("escape_control"),
                span=match.span(),
            )
        )
    return references


def get_used_variables(contents: Iterable[str], variables: VariableSet) -> dict[str, BaseVariable]:
    """Known variables referenced anywhere in *contents*, keyed by variable name."""
    used: dict[str, BaseVariable] = {}
    for content in contents:
        for reference in find_references(content):
            variable = variables.get(reference.name)
            if variable is not None:
                used[reference.name] = variable
    return used


class _Cancelled(Exception):
    """A variable's default value says to abort quietly."""


async def parse_variables(
    content: str,
    context: VariableContext,
    escape: bool = True,
    passthrough_names: Collection[str] = (),
) -> ParsingResult:
    """
    Replace every reference in *content* with its resolved value.

    All errors in *content* are collected, not just the first. Names in *passthrough_names*
    are left untouched so a later stage can fill them in (e.g. {{output}} in output wrappers).
    """
    variables: VariableSet = context.app.variables
    pieces: list[str] = []
    error_messages: list[str] = []
    cancelled = False
    count = 0
    position = 0

    for reference in find_references(content):
        start, end = reference.span
        pieces.append(content[position:start])
        position = end

        if reference.name in passthrough_names:
            pieces.append(content[start:end])
            continue
        count += 1

        variable = variables.get(reference.name)
        if variable is None:
            error_messages.append(f"Unknown variable: {{{{{reference.name}}}}}")
            continue
        if reference.escape_control is not None and reference.escape_control not in ESCAPE_CONTROLS:
            error_messages.append(
                f"{variable.get_full_name()}: Unknown escape control '{reference.escape_control}'. "
                f"Use one of: {', '.join(ESCAPE_CONTROLS)}."
            )
            continue

        try:
            value = await _resolve(variable, reference, context)
        except VariableError as exc:
            error_messages.append(f"{variable.get_full_name()}: {exc}")
            continue
        except _Cancelled:
            cancelled = True
            continue

        if escape and not reference.unescaped:
            value = context.shell.escape_value(value)
        pieces.append(value)

    pieces.append(content[position:])

    if error_messages or cancelled:
        logger.debug("Parsing failed for %r: %s", content, error_messages)
        return ParsingResult(
            succeeded=False,
            parsed_content=None,
            original_content=content,
            error_messages=error_messages,
            count_parsed_variables=count,
        )
    return ParsingResult(
        succeeded=True,
        parsed_content="".join(pieces),
        original_content=content,
        count_parsed_variables=count,
    )


async def _resolve(variable: BaseVariable, reference: VariableReference, context: VariableContext) -> str:
    # Argument errors are the user's template mistake; default values never cover them
    arguments = variable.parse_arguments(reference.arguments)
    try:
        return await variable.get_value(context, arguments)
    except VariableError:
        default = _get_default_value_configuration(variable, context)
        if default is None or default.type == "show-errors":
            raise
        if default.type == "cancel-silently":
            raise _Cancelled() from None

    # default.type == "value"
    identifier = variable.get_identifier()
    if identifier in context.resolving_defaults:
        raise VariableError("Default value refers to itself")
    default_context = dataclasses.replace(
        context, resolving_defaults=context.resolving_defaults | {identifier}
    )
    result = await parse_variables(default.value, default_context, escape=False)
    if not result.succeeded:
        raise VariableError(
            "Default value could not be parsed: " + "; ".join(result.error_messages)
        )
    return result.parsed_content  # type: ignore[return-value]


def _get_default_value_configuration(variable: BaseVariable, context: VariableContext):
    default = None
    if context.t_shell_command is not None:
        default = context.t_shell_command.get_variable_default_value(variable.get_identifier())
    if default is None or default.type == "inherit":
        default = variable.get_global_default_value()
    if default is None or default.type == "inherit":
        return None
    return default
