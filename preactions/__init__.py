"""Auto-collect all BasePreaction subclasses into PREACTION_REGISTRY at import time."""
import importlib
import pkgutil
from pathlib import Path

from preactions.base import BasePreaction

# Import every module in this package so subclasses are registered
_pkg_path = str(Path(__file__).parent)
for _info in pkgutil.iter_modules([_pkg_path]):
    if _info.name not in ("base",):
        importlib.import_module(f"preactions.{_info.name}")

PREACTION_REGISTRY: dict[str, type[BasePreaction]] = {
    cls.preaction_type: cls
    for cls in BasePreaction.__subclasses__()
    if cls.preaction_type
}

__all__ = ["BasePreaction", "PREACTION_REGISTRY"]
