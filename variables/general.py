"""Variables that don't depend on the active note."""
import os
from datetime import datetime

from config.models import PLATFORM_NAMES
from variables.base import BaseVariable, Parameter, VariableError


class VaultPathVariable(BaseVariable):
    variable_name = "vault_path"
    help_text = "Gives the vault's absolute path, translated for the target shell."

    async def _get_value(self, context, arguments):
        return context.shell.translate_absolute_path(str(context.app.workspace.vault_root))


class DateVariable(BaseVariable):
    variable_name = "date"
    help_text = "Gives the current date and time in a strftime format, e.g. {{date:%Y-%m-%d %H:%M}}."
    parameters = (Parameter("format", required=True),)

    async def _get_value(self, context, arguments):
        return datetime.now().strftime(arguments["format"])


class EnvironmentVariable(BaseVariable):
    variable_name = "environment"
    help_text = "Gives the value of an environment variable of this process, e.g. {{environment:HOME}}."
    parameters = (Parameter("variable", required=True),)

    async def _get_value(self, context, arguments):
        name = arguments["variable"]
        if name not in os.environ:
            raise VariableError(f"Environment variable named '{name}' does not exist.")
        return os.environ[name]


class OperatingSystemVariable(BaseVariable):
    variable_name = "operating_system"
    help_text = "Gives the name of the current operating system."

    async def _get_value(self, context, arguments):
        return PLATFORM_NAMES.get(context.app.platform_id, context.app.platform_id)


class NewlineVariable(BaseVariable):
    variable_name = "newline"
    help_text = "Gives one or more newline characters, e.g. {{newline:3}}."
    parameters = (Parameter("count"),)

    async def _get_value(self, context, arguments):
        count = arguments.get("count", "1")
        if not count.isdigit():
            raise VariableError(f"Count must be a positive integer, got {count!r}.")
        return "\n" * int(count)


class PassthroughVariable(BaseVariable):
    variable_name = "passthrough"
    help_text = "Gives back its argument. Meant for testing escaping."
    parameters = (Parameter("value", required=True),)
    debug_only = True

    async def _get_value(self, context, arguments):
        return arguments["value"]
