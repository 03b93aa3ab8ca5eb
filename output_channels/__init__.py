"""Auto-collect all BaseOutputChannel subclasses into OUTPUT_CHANNEL_REGISTRY at import time."""
import importlib
import pkgutil
from pathlib import Path

from output_channels.base import BaseOutputChannel

# Import every module in this package so subclasses are registered
_pkg_path = str(Path(__file__).parent)
for _info in pkgutil.iter_modules([_pkg_path]):
    if _info.name not in ("base",):
        importlib.import_module(f"output_channels.{_info.name}")

OUTPUT_CHANNEL_REGISTRY: dict[str, type[BaseOutputChannel]] = {
    cls.channel_name: cls
    for cls in BaseOutputChannel.__subclasses__()
    if cls.channel_name
}


def get_output_channel_class(channel_name: str) -> type[BaseOutputChannel]:
    channel_cls = OUTPUT_CHANNEL_REGISTRY.get(channel_name)
    if channel_cls is None:
        raise KeyError(
            f"No output channel registered under {channel_name!r}. Available: {list(OUTPUT_CHANNEL_REGISTRY)}"
        )
    return channel_cls


__all__ = ["BaseOutputChannel", "OUTPUT_CHANNEL_REGISTRY", "get_output_channel_class"]
