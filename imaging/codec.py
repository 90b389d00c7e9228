"""
Encoding and decoding of pixel images.

Pixel buffers are kept premultiplied in memory, while the container formats
written here (TIFF, PNG) store straight alpha. `encode` un-premultiplies and
`decode` premultiplies again with the same round-half-up integer rule, so a
premultiplied buffer survives encode -> decode byte for byte.
"""

from __future__ import annotations

from io import BytesIO
from typing import Dict

from PIL import Image, UnidentifiedImageError

from graphics import DecodeFailure, EncodeFailure, PixelImage

# format name -> (Pillow format, save options)
_FORMATS: Dict[str, tuple] = {
    "tiff": ("TIFF", {}),
    "tif": ("TIFF", {}),
    "png": ("PNG", {}),
}

SUPPORTED_FORMATS = ("tiff", "png")


def encode(image: PixelImage, fmt: str = "tiff") -> bytes:
    """
    Serialize a premultiplied image to "tiff" or "png" bytes.
    Unsupported formats and Pillow write errors raise EncodeFailure.
    """
    key = str(fmt).lower().strip().lstrip(".")
    if key not in _FORMATS:
        raise EncodeFailure(f"unsupported image format: {fmt!r}")
    pil_format, options = _FORMATS[key]
    buffer = BytesIO()
    try:
        image.to_pil().save(buffer, format=pil_format, **options)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeFailure(f"could not encode image as {pil_format}: {e}") from e
    return buffer.getvalue()


def decode(data: bytes) -> PixelImage:
    """
    Read image bytes in any Pillow-readable format into a premultiplied image.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return PixelImage.from_pil(img)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeFailure(f"could not decode image: {e}") from e


def raw_bytes(image: PixelImage) -> bytes:
    # premultiplied RGBA, row-major, stride width*4, no header
    return image.pixels.tobytes()
