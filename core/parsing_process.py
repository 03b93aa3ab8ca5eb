"""Two-phase resolution of a named set of template strings."""
import logging
from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from variables.base import VariableContext
from variables.parser import ParsingResult, parse_variables

if TYPE_CHECKING:
    from core.app import ShellCommandsApp

logger = logging.getLogger(__name__)


class ParsingState(str, Enum):
    created = "created"
    first_pass_done = "first_pass_done"
    complete = "complete"
    failed = "failed"


class ParsingProcessStateError(RuntimeError):
    """A phase was run out of order, or the process was reused."""


@dataclass(frozen=True)
class ParsingField:
    content: str
    escape: bool = True
    # Resolved only in process_rest(), after preactions have written their values
    requires_preaction_output: bool = False
    passthrough_names: tuple[str, ...] = ()


class ParsingProcess:
    def __init__(self, fields: dict[str, ParsingField], context: VariableContext) -> None:
        self.fields = fields
        self.context = context
        self.state = ParsingState.created
        self._results: dict[str, ParsingResult] = {}
        self._consumed: set[str] = set()

    async def process(self) -> bool:
        """Resolve every field that doesn't wait for preaction output."""
        if self.state is not ParsingState.created:
            raise ParsingProcessStateError(f"process() called in state {self.state.value}")
        names = [n for n, f in self.fields.items() if not f.requires_preaction_output]
        succeeded = await self._parse(names)
        self.state = ParsingState.first_pass_done if succeeded else ParsingState.failed
        logger.debug("Parsing phase one: %s", self.state.value)
        return succeeded

    async def process_rest(self) -> bool:
        """Resolve the fields left over from process()."""
        if self.state is not ParsingState.first_pass_done:
            raise ParsingProcessStateError(f"process_rest() called in state {self.state.value}")
        names = [n for n in self.fields if n not in self._consumed]
        succeeded = await self._parse(names)
        self.state = ParsingState.complete if succeeded else ParsingState.failed
        logger.debug("Parsing phase two: %s", self.state.value)
        return succeeded

    async def _parse(self, names: Collection[str]) -> bool:
        succeeded = True
        for name in names:
            field = self.fields[name]
            result = await parse_variables(
                field.content,
                self.context,
                escape=field.escape,
                passthrough_names=field.passthrough_names,
            )
            self._results[name] = result
            self._consumed.add(name)
            # Keep going so every field's errors get collected
            succeeded = succeeded and result.succeeded
        return succeeded

    def get_parsing_results(self) -> dict[str, ParsingResult]:
        return dict(self._results)

    def get_error_messages(self) -> list[str]:
        messages: list[str] = []
        for result in self._results.values():
            messages.extend(result.error_messages)
        return messages

    def get_first_error_message(self) -> str | None:
        messages = self.get_error_messages()
        return messages[0] if messages else None

    def display_error_messages(self, app: "ShellCommandsApp") -> None:
        """Show the first error to the user, log the rest."""
        messages = self.get_error_messages()
        if not messages:
            return
        app.new_error(messages[0])
        for message in messages[1:]:
            logger.info("Additional parsing error: %s", message)
