"""Per-dialect quoting of a single resolved {{variable}} value."""
import re
from abc import ABC, abstractmethod


class BaseEscaper(ABC):
    @abstractmethod
    def escape(self, raw_value: str) -> str:
        """Return *raw_value* quoted so the target shell reads it back as one literal word."""


# Characters that never need quoting in a POSIX shell word
_POSIX_SAFE_RE = re.compile(r"[\w@%+=:,./-]+", re.ASCII)


class PosixEscaper(BaseEscaper):
    """Single-quote the value; embedded single quotes become '\\''."""

    def escape(self, raw_value: str) -> str:
        if raw_value and _POSIX_SAFE_RE.fullmatch(raw_value):
            return raw_value
        return "'" + raw_value.replace("'", "'\\''") + "'"


# PowerShell treats typographic single quotes the same as the ASCII one
_POWERSHELL_QUOTE_RE = re.compile("['‘’‚‛]")


class PowerShellEscaper(BaseEscaper):
    """Single-quote the value; every single-quote character is doubled."""

    def escape(self, raw_value: str) -> str:
        return "'" + _POWERSHELL_QUOTE_RE.sub(lambda m: m.group(0) * 2, raw_value) + "'"


class PassthroughEscaper(BaseEscaper):
    """For shells with no safe quoting convention (CMD.EXE). The value is returned untouched."""

    def escape(self, raw_value: str) -> str:
        return raw_value
