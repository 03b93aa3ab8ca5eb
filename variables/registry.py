"""Variable set: custom variables first, then every built-in variable found in this package."""
import importlib
import logging
import pkgutil
from collections.abc import Iterator
from pathlib import Path

from config.models import CustomVariableConfiguration
from variables.base import BaseVariable
from variables.custom import CustomVariable

logger = logging.getLogger(__name__)

_NON_VARIABLE_MODULES = ("base", "registry", "parser", "custom")


def _builtin_variable_classes(cls: type = BaseVariable) -> list[type[BaseVariable]]:
    found = []
    for sub in cls.__subclasses__():
        if sub is CustomVariable:
            continue
        if sub.variable_name:
            found.append(sub)
        found.extend(_builtin_variable_classes(sub))
    return found


class VariableSet:
    def __init__(
        self,
        custom_variables: list[CustomVariableConfiguration] | None = None,
        include_debug_variables: bool = False,
    ) -> None:
        self._variables: dict[str, BaseVariable] = {}
        for configuration in custom_variables or []:
            self.add(CustomVariable(configuration))
        self._load_builtins(include_debug_variables)

    def _load_builtins(self, include_debug_variables: bool) -> None:
        """Import every module in variables/ to trigger subclass registration."""
        pkg_path = str(Path(__file__).parent)
        for info in pkgutil.iter_modules([pkg_path]):
            if info.name not in _NON_VARIABLE_MODULES:
                importlib.import_module(f"variables.{info.name}")

        for cls in _builtin_variable_classes():
            if cls.debug_only and not include_debug_variables:
                continue
            self.add(cls())

    def add(self, variable: BaseVariable) -> None:
        if variable.variable_name in self._variables:
            raise ValueError(f"Duplicate variable name: {variable.get_full_name()}")
        self._variables[variable.variable_name] = variable
        logger.debug("Variable registered: %s", variable.variable_name)

    def get(self, variable_name: str) -> BaseVariable | None:
        return self._variables.get(variable_name)

    def get_by_identifier(self, identifier: str) -> BaseVariable | None:
        """Look up by stable identifier (custom variable id, or built-in name)."""
        for variable in self._variables.values():
            if variable.get_identifier() == identifier:
                return variable
        return None

    def custom_variables(self) -> list[CustomVariable]:
        return [v for v in self._variables.values() if isinstance(v, CustomVariable)]

    def __contains__(self, variable_name: object) -> bool:
        return variable_name in self._variables

    def __iter__(self) -> Iterator[BaseVariable]:
        return iter(self._variables.values())

    def __len__(self) -> int:
        return len(self._variables)

    @property
    def available(self) -> list[str]:
        return list(self._variables.keys())
