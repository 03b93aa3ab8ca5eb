"""User-defined {{_name}} variables backed by the custom variable store."""
from config.models import CustomVariableConfiguration, VariableDefaultValueConfiguration
from core.db import get_custom_variable_value
from variables.base import BaseVariable, VariableError


class CustomVariable(BaseVariable):
    always_available = False

    def __init__(self, configuration: CustomVariableConfiguration) -> None:
        self.configuration = configuration
        self.variable_id = configuration.id
        self.variable_name = "_" + configuration.name
        self.help_text = configuration.description

    def get_identifier(self) -> str:
        # Values and defaults follow the id, so renaming the variable keeps them
        return self.variable_id

    def get_availability_text(self) -> str:
        return "Only available once a value has been assigned, e.g. by a prompt."

    def get_global_default_value(self) -> VariableDefaultValueConfiguration | None:
        return self.configuration.default_value

    async def _get_value(self, context, arguments):
        value = await get_custom_variable_value(context.app.settings.db_path, self.variable_id)
        if value is None:
            raise VariableError("This custom variable has not been assigned a value yet.")
        return value
