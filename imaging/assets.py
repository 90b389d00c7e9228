from __future__ import annotations

from importlib import resources
from typing import List

from graphics import AssetNotFoundError, PixelImage

from .codec import decode

# Images bundled with the package, looked up by file name.
RESOURCE_DIR = "resources"

DEFAULT_PHOTO = "tokyo_tower.png"


def bundled_assets() -> List[str]:
    root = resources.files(__package__).joinpath(RESOURCE_DIR)
    return sorted(entry.name for entry in root.iterdir() if entry.is_file() and not entry.name.startswith("."))


def load_bundled_image(name: str = DEFAULT_PHOTO) -> PixelImage:
    """
    Load a bundled image by name (not by path).
    """
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        raise AssetNotFoundError(f"invalid asset name: {name!r}")
    entry = resources.files(__package__).joinpath(RESOURCE_DIR).joinpath(name)
    if not entry.is_file():
        raise AssetNotFoundError(f"no bundled asset named {name!r}")
    return decode(entry.read_bytes())
