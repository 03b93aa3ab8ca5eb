"""The host application's view of the vault: root folder, active note, selection."""
import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_FRONT_MATTER_RE = re.compile(r"\A---\r?\n(.*?\r?\n)?---(?:\r?\n|\Z)", re.DOTALL)


@dataclass
class FrontMatter:
    data: dict | None
    raw: str | None  # YAML text between the --- lines
    body: str


def split_front_matter(text: str) -> FrontMatter:
    """Separate a leading YAML block from the note body. Invalid YAML yields data=None."""
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return FrontMatter(data=None, raw=None, body=text)
    raw = match.group(1) or ""
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        logger.warning("Invalid YAML front matter: %s", exc)
        data = None
    if data is not None and not isinstance(data, dict):
        data = None
    return FrontMatter(data=data, raw=raw, body=text[match.end():])


@dataclass
class Workspace:
    vault_root: Path
    active_file: Path | None = None  # absolute
    selection: str | None = None

    def relative_path(self, path: Path) -> str:
        """Vault-relative path with forward slashes; "" for the vault root itself."""
        try:
            relative = path.resolve().relative_to(self.vault_root.resolve())
        except ValueError:
            return path.as_posix()
        text = relative.as_posix()
        return "" if text == "." else text

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
