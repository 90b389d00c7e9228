from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from PIL import Image

from shapes import Size


def premultiply_rgba8(rgba: np.ndarray) -> np.ndarray:
    """
    Straight RGBA8 -> premultiplied RGBA8, rounding half up.
    """
    rgba = np.asarray(rgba, dtype=np.uint32)
    alpha = rgba[..., 3:4]
    rgb = (rgba[..., :3] * alpha + 127) // 255
    return np.concatenate([rgb, alpha], axis=-1).astype(np.uint8)


def unpremultiply_rgba8(rgba: np.ndarray) -> np.ndarray:
    """
    Premultiplied RGBA8 -> straight RGBA8, rounding half up.

    premultiply_rgba8(unpremultiply_rgba8(p)) == p for every valid premultiplied p
    (color <= alpha), so the straight-alpha containers round-trip exactly.
    """
    rgba = np.asarray(rgba, dtype=np.uint32)
    alpha = rgba[..., 3:4]
    safe = np.maximum(alpha, 1)
    rgb = (rgba[..., :3] * 255 + safe // 2) // safe
    rgb = np.where(alpha == 0, 0, np.minimum(rgb, 255))
    return np.concatenate([rgb, alpha], axis=-1).astype(np.uint8)


@dataclass(frozen=True)
class PixelImage:
    """
    Premultiplied RGBA8 image, row 0 at the top.
    """
    pixels: np.ndarray  # shape (height, width, 4), uint8

    def __post_init__(self):
        px = np.asarray(self.pixels)
        if px.ndim != 3 or px.shape[2] != 4:
            raise ValueError("pixels must have shape (height, width, 4)")
        if px.dtype != np.uint8:
            raise ValueError("pixels must be uint8")
        px = np.array(px, copy=True)
        px.setflags(write=False)
        object.__setattr__(self, "pixels", px)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @staticmethod
    def from_array(pixels: np.ndarray) -> "PixelImage":
        return PixelImage(pixels=np.asarray(pixels, dtype=np.uint8))

    @staticmethod
    def from_pil(img: Image.Image) -> "PixelImage":
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return PixelImage(pixels=premultiply_rgba8(np.asarray(img, dtype=np.uint8)))

    def to_pil(self) -> Image.Image:
        """
        Straight-alpha RGBA Pillow image.
        """
        return Image.fromarray(unpremultiply_rgba8(self.pixels))

    def straight_rgba(self) -> np.ndarray:
        return unpremultiply_rgba8(self.pixels)

    def as_float(self) -> np.ndarray:
        return self.pixels.astype(float) / 255.0
