from __future__ import annotations

import math

from graphics import (
    BitmapContext,
    BlendMode,
    Color,
    OriginConvention,
    PixelImage,
    create_bitmap_context,
    draw_in_bitmap_context,
)
from graphics.context import SizeLike, as_size
from shapes import Rect, Size


def _whole_pixels(size: Size) -> Size:
    # non-finite sizes pass through so the context reports them
    if not (math.isfinite(size.width) and math.isfinite(size.height)):
        return size
    return Size(*size.pixel_dims())


def draw_circle(
    radius: float,
    color: Color,
    native_origin: OriginConvention | str = OriginConvention.BOTTOM_LEFT_Y_UP,
) -> PixelImage:
    """
    Filled circle inscribed in a (2r x 2r) transparent image.
    """
    size = Size(radius * 2.0, radius * 2.0)
    context = create_bitmap_context(size, native_origin=native_origin)

    context.save_gstate()
    context.set_fill_color(color)
    context.fill_ellipse(Rect.from_size(size))
    context.restore_gstate()

    return context.make_image()


def scale(image: PixelImage, size: SizeLike) -> PixelImage:
    """
    Resample image to exactly size; the aspect ratio is not preserved.
    """
    size = _whole_pixels(as_size(size))
    context = create_bitmap_context(size)
    with context.saved_state():
        context.draw_image(image, Rect.from_size(size))
    return context.make_image()


def crop(image: PixelImage, rect: Rect) -> PixelImage:
    """
    Sub-image covering rect. Parts of rect outside the source stay transparent black.
    """
    def block(context: BitmapContext) -> None:
        with context.saved_state():
            context.translate_ctm(-rect.x, -rect.y)
            context.draw_image(image, Rect.from_size(image.size))

    return draw_in_bitmap_context(_whole_pixels(rect.size), block)


def colored(image: PixelImage, color: Color, blend_mode: BlendMode | str = BlendMode.MULTIPLY) -> PixelImage:
    """
    Fill a solid color over image using blend_mode.
    """
    full_rect = Rect.from_size(image.size)

    def block(context: BitmapContext) -> None:
        with context.saved_state():
            context.draw_image(image, full_rect)
        with context.saved_state():
            context.set_fill_color(color)
            context.set_blend_mode(blend_mode)
            context.fill_rect(full_rect)

    return draw_in_bitmap_context(image.size, block)
