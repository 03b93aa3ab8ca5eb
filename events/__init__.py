"""Auto-collect all BaseEvent subclasses into EVENT_REGISTRY at import time."""
import importlib
import pkgutil
from pathlib import Path

from events.base import BaseEvent

# Import every module in this package so subclasses are registered
_pkg_path = str(Path(__file__).parent)
for _info in pkgutil.iter_modules([_pkg_path]):
    if _info.name not in ("base",):
        importlib.import_module(f"events.{_info.name}")


def _all_subclasses(cls: type) -> list[type]:
    found = []
    for sub in cls.__subclasses__():
        found.append(sub)
        found.extend(_all_subclasses(sub))
    return found


EVENT_REGISTRY: dict[str, type[BaseEvent]] = {
    cls.event_code: cls
    for cls in _all_subclasses(BaseEvent)
    if cls.event_code
}


def get_event_class(event_code: str) -> type[BaseEvent]:
    event_cls = EVENT_REGISTRY.get(event_code)
    if event_cls is None:
        raise KeyError(f"No event registered under {event_code!r}. Available: {list(EVENT_REGISTRY)}")
    return event_cls


__all__ = ["BaseEvent", "EVENT_REGISTRY", "get_event_class"]
