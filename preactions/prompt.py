"""Prompt preaction: asks the user for values and stores them in custom variables."""
import logging
from typing import TYPE_CHECKING

from config.models import PromptConfiguration, PromptFieldConfiguration
from core.db import set_custom_variable_value
from preactions.base import BasePreaction
from ui.base import PromptForm, PromptFormField
from variables.base import VariableContext
from variables.parser import parse_variables

if TYPE_CHECKING:
    from variables.base import BaseVariable

logger = logging.getLogger(__name__)


class PromptField:
    def __init__(self, configuration: PromptFieldConfiguration) -> None:
        self.configuration = configuration

    def get_title(self) -> str:
        return self.configuration.label or "Unlabelled field"

    def validate(self, value: str) -> bool:
        """Required fields must not be blank."""
        if not self.configuration.required:
            return True
        return value.strip() != ""

    async def get_default_value(self, context: VariableContext) -> str:
        # If the default can't be parsed, show it raw so the user can see and fix it
        result = await parse_variables(self.configuration.default_value, context, escape=False)
        return result.parsed_content if result.succeeded else self.configuration.default_value


class PromptPreaction(BasePreaction):
    preaction_type = "prompt"

    def get_prompt_configuration(self) -> PromptConfiguration:
        prompt_id = self.configuration.prompt_id
        prompts = self.app.settings.prompts
        if prompt_id not in prompts:
            raise KeyError(f"No prompt registered under {prompt_id!r}. Available: {list(prompts)}")
        return prompts[prompt_id]

    def get_fields(self) -> list[PromptField]:
        return [PromptField(c) for c in self.get_prompt_configuration().fields]

    def get_dependent_variables(self) -> list["BaseVariable"]:
        variables = []
        for prompt_field in self.get_fields():
            variable = self.app.variables.get_by_identifier(prompt_field.configuration.target_variable_id)
            if variable is None:
                raise KeyError(
                    f"Prompt field {prompt_field.get_title()!r} targets unknown custom variable "
                    f"{prompt_field.configuration.target_variable_id!r}"
                )
            variables.append(variable)
        return variables

    async def perform(self, parsing_process, event):
        prompt = self.get_prompt_configuration()
        fields = self.get_fields()
        context = VariableContext(
            app=self.app,
            shell=self.t_shell_command.get_shell(),
            t_shell_command=self.t_shell_command,
            event=event,
        )

        form = PromptForm(
            title=prompt.title,
            description=prompt.description,
            execute_button_text=prompt.execute_button_text,
            fields=[
                PromptFormField(
                    label=f.get_title(),
                    target_variable_id=f.configuration.target_variable_id,
                    description=f.configuration.description,
                    default_value=await f.get_default_value(context),
                    required=f.configuration.required,
                )
                for f in fields
            ],
        )

        while True:
            submitted = await self.app.prompt_ui.ask(form)
            if submitted is None:
                logger.debug("Prompt %r cancelled", self.configuration.prompt_id)
                return False

            values, error = await self._parse_submitted_values(fields, submitted, context)
            if error is None:
                break
            self.app.new_error(error)
            # Re-ask with what the user already typed
            for form_field in form.fields:
                form_field.default_value = submitted.get(form_field.target_variable_id, "")

        for variable_id, value in values.items():
            await set_custom_variable_value(self.app.settings.db_path, variable_id, value)
        logger.debug("Prompt %r submitted %d value(s)", self.configuration.prompt_id, len(values))
        return True

    async def _parse_submitted_values(
        self,
        fields: list[PromptField],
        submitted: dict[str, str],
        context: VariableContext,
    ) -> tuple[dict[str, str], str | None]:
        values: dict[str, str] = {}
        for prompt_field in fields:
            variable_id = prompt_field.configuration.target_variable_id
            raw_value = submitted.get(variable_id, "")
            if not prompt_field.validate(raw_value):
                return values, f"The field '{prompt_field.get_title()}' is required."
            result = await parse_variables(raw_value, context, escape=False)
            if not result.succeeded:
                message = result.error_messages[0] if result.error_messages else "Cancelled."
                return values, f"{prompt_field.get_title()}: {message}"
            values[variable_id] = result.parsed_content
        return values, None
