from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple, Union
import math
import numpy as np

from shapes import Affine2D, Rect, Shape, Size, ellipse_shape, rect_shape

from .color import BlendMode, Color, apply_coverage
from .errors import AllocationFailure, ContextStateError
from .image import PixelImage


SizeLike = Union[Size, Tuple[float, float]]

# Subsamples per axis when anti-aliasing shape edges.
AA_SAMPLES = 4
BAND_ROWS = 64


class OriginConvention(str, Enum):
    TOP_LEFT_Y_DOWN = "top-left"
    BOTTOM_LEFT_Y_UP = "bottom-left"

    @classmethod
    def parse(cls, value: "OriginConvention | str") -> "OriginConvention":
        if isinstance(value, OriginConvention):
            return value
        key = str(value).strip().lower().replace("_", "-")
        aliases = {
            "top-left-y-down": cls.TOP_LEFT_Y_DOWN,
            "bottom-left-y-up": cls.BOTTOM_LEFT_Y_UP,
        }
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown origin convention: {value!r}") from None


class Interpolation(str, Enum):
    NEAREST = "nearest"
    BILINEAR = "bilinear"


@dataclass(frozen=True)
class GraphicsState:
    ctm: Affine2D
    fill_color: Color = Color.black()
    blend_mode: BlendMode = BlendMode.NORMAL
    alpha: float = 1.0
    interpolation: Interpolation = Interpolation.BILINEAR


def as_size(size: SizeLike) -> Size:
    if isinstance(size, Size):
        return size
    w, h = size
    return Size(float(w), float(h))


def normalized_transforms(
    native_origin: OriginConvention | str,
    height: float,
    device_origin: OriginConvention,
) -> Tuple[Affine2D, Affine2D]:
    """
    Resolve an origin convention into (device_transform, initial_ctm).

    device_transform maps the context's native coordinates onto its backing store,
    whose own convention is device_origin. initial_ctm is the one-time flip that
    lets callers draw top-left origin, Y down on a bottom-left native context.
    """
    native = OriginConvention.parse(native_origin)
    flip = Affine2D.vertical_flip(height)
    device = Affine2D.identity() if native is device_origin else flip
    if native is OriginConvention.BOTTOM_LEFT_Y_UP:
        ctm = flip
    else:
        ctm = Affine2D.identity()
    return device, ctm


class DrawingContext:
    """
    Graphics state shared by the bitmap and PDF contexts: a current transform,
    fill color, blend mode and a save/restore stack.
    """

    def __init__(self, size: Size, native_origin: OriginConvention, device_transform: Affine2D, initial_ctm: Affine2D):
        self.size = size
        self.native_origin = native_origin
        self.device_transform = device_transform
        self.state = GraphicsState(ctm=initial_ctm)
        self._stack: List[GraphicsState] = []

    # ---- State stack ----
    def save_gstate(self) -> None:
        self._stack.append(self.state)

    def restore_gstate(self) -> None:
        if not self._stack:
            raise ContextStateError("restore_gstate without matching save_gstate")
        self.state = self._stack.pop()

    @contextmanager
    def saved_state(self) -> Iterator["DrawingContext"]:
        self.save_gstate()
        try:
            yield self
        finally:
            self.restore_gstate()

    @property
    def ctm(self) -> Affine2D:
        return self.state.ctm

    @property
    def user_to_device(self) -> Affine2D:
        return self.state.ctm.then(self.device_transform)

    # ---- Transform (only inside a save/restore bracket) ----
    def concat_ctm(self, transform: Affine2D) -> None:
        if not self._stack:
            raise ContextStateError("the transform may only change between save_gstate and restore_gstate")
        self.state = replace(self.state, ctm=transform.then(self.state.ctm))

    def translate_ctm(self, dx: float, dy: float) -> None:
        self.concat_ctm(Affine2D.from_translate(dx, dy))

    def scale_ctm(self, sx: float, sy: float) -> None:
        self.concat_ctm(Affine2D.from_scale(sx, sy))

    def rotate_ctm(self, theta_radians: float) -> None:
        self.concat_ctm(Affine2D.from_rotation(theta_radians))

    # ---- Other state ----
    def set_fill_color(self, color: Color) -> None:
        self.state = replace(self.state, fill_color=color)

    def set_blend_mode(self, mode: BlendMode | str) -> None:
        self.state = replace(self.state, blend_mode=BlendMode.parse(mode))

    def set_alpha(self, alpha: float) -> None:
        self.state = replace(self.state, alpha=min(1.0, max(0.0, float(alpha))))

    def set_interpolation(self, interpolation: Interpolation | str) -> None:
        self.state = replace(self.state, interpolation=Interpolation(interpolation))

    # ---- Drawing ----
    def fill_rect(self, rect: Rect) -> None:
        raise NotImplementedError

    def fill_ellipse(self, rect: Rect) -> None:
        raise NotImplementedError

    def draw_image(self, image: PixelImage, rect: Rect) -> None:
        raise NotImplementedError


class BitmapContext(DrawingContext):
    """
    Drawing context over a zero-initialized premultiplied RGBA8 buffer.
    """

    def __init__(self, width: int, height: int, native_origin: OriginConvention, antialias: bool = True):
        device, ctm = normalized_transforms(native_origin, height, device_origin=OriginConvention.TOP_LEFT_Y_DOWN)
        super().__init__(Size(width, height), native_origin, device, ctm)
        self.width = width
        self.height = height
        self.antialias = antialias
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)

    @property
    def bytes_per_row(self) -> int:
        return self.width * 4

    def raw_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def make_image(self) -> PixelImage:
        return PixelImage(pixels=self.pixels)

    # ---- Rasterization helpers ----
    def _device_bounds(self, rect: Rect) -> Optional[Tuple[int, int, int, int]]:
        """
        Clipped device pixel window (x0, y0, x1, y1) touched by rect, or None if empty.
        """
        pts = self.user_to_device.apply_many(rect.corners())
        xmin, ymin = pts.min(axis=0)
        xmax, ymax = pts.max(axis=0)
        x0 = max(0, int(math.floor(xmin)))
        y0 = max(0, int(math.floor(ymin)))
        x1 = min(self.width, int(math.ceil(xmax)))
        y1 = min(self.height, int(math.ceil(ymax)))
        if x0 >= x1 or y0 >= y1:
            return None
        return x0, y0, x1, y1

    def _bands(self, window: Tuple[int, int, int, int]) -> Iterator[Tuple[int, int, int, int]]:
        # Row bands bound the size of the subsample arrays.
        x0, y0, x1, y1 = window
        for top in range(y0, y1, BAND_ROWS):
            yield x0, top, x1, min(y1, top + BAND_ROWS)

    def _sample_offsets(self) -> np.ndarray:
        n = AA_SAMPLES if self.antialias else 1
        return (np.arange(n, dtype=float) + 0.5) / n

    def _user_samples(self, window: Tuple[int, int, int, int]) -> Tuple[np.ndarray, int]:
        """
        User-space positions of every subsample in the window, shape (h, w, k, 2).
        """
        x0, y0, x1, y1 = window
        offs = self._sample_offsets()
        sx = (np.arange(x0, x1, dtype=float)[:, None] + offs[None, :]).ravel()
        sy = (np.arange(y0, y1, dtype=float)[:, None] + offs[None, :]).ravel()
        X, Y = np.meshgrid(sx, sy)
        dev = np.stack([X.ravel(), Y.ravel()], axis=1)
        user = self.user_to_device.inverse_apply_many(dev)
        n = len(offs)
        h, w = y1 - y0, x1 - x0
        # (h*n, w*n, 2) -> (h, w, n*n, 2)
        grid = user.reshape(h, n, w, n, 2).transpose(0, 2, 1, 3, 4).reshape(h, w, n * n, 2)
        return grid, n

    def _pixel_centers(self, window: Tuple[int, int, int, int]) -> np.ndarray:
        x0, y0, x1, y1 = window
        X, Y = np.meshgrid(np.arange(x0, x1, dtype=float) + 0.5, np.arange(y0, y1, dtype=float) + 0.5)
        dev = np.stack([X.ravel(), Y.ravel()], axis=1)
        return self.user_to_device.inverse_apply_many(dev).reshape(y1 - y0, x1 - x0, 2)

    def _blend_into(self, window: Tuple[int, int, int, int], src: np.ndarray, coverage: np.ndarray) -> None:
        x0, y0, x1, y1 = window
        dst = self.pixels[y0:y1, x0:x1].astype(float) / 255.0
        out = apply_coverage(src * self.state.alpha, dst, coverage, self.state.blend_mode)
        self.pixels[y0:y1, x0:x1] = np.clip(np.floor(out * 255.0 + 0.5), 0, 255).astype(np.uint8)

    def _fill_shape(self, shape: Shape, bounds: Rect) -> None:
        if not self.user_to_device.is_invertible:
            return
        window = self._device_bounds(bounds)
        if window is None:
            return
        src = self.state.fill_color.premultiplied()
        for band in self._bands(window):
            samples, n = self._user_samples(band)
            h, w = samples.shape[:2]
            inside = shape.contains_many(samples.reshape(-1, 2)).reshape(h, w, n * n)
            self._blend_into(band, src, inside.mean(axis=2))

    # ---- Drawing ----
    def fill_rect(self, rect: Rect) -> None:
        self._fill_shape(rect_shape(rect), rect)

    def fill_ellipse(self, rect: Rect) -> None:
        self._fill_shape(ellipse_shape(rect), rect)

    def draw_image(self, image: PixelImage, rect: Rect) -> None:
        """
        Draw image stretched to rect, its first row at rect.y. Pixels outside the
        source are left untouched.
        """
        if rect.width == 0 or rect.height == 0 or image.width == 0 or image.height == 0:
            return
        if not self.user_to_device.is_invertible:
            return
        window = self._device_bounds(rect)
        if window is None:
            return
        sx = image.width / rect.width
        sy = image.height / rect.height

        source = image.as_float()
        for band in self._bands(window):
            samples, _ = self._user_samples(band)
            u = (samples[..., 0] - rect.x) * sx
            v = (samples[..., 1] - rect.y) * sy
            inside = (u >= 0.0) & (u < image.width) & (v >= 0.0) & (v < image.height)

            centers = self._pixel_centers(band)
            uc = (centers[..., 0] - rect.x) * sx
            vc = (centers[..., 1] - rect.y) * sy
            src = _sample(source, uc, vc, self.state.interpolation)
            self._blend_into(band, src, inside.mean(axis=2))


def _sample(pixels: np.ndarray, u: np.ndarray, v: np.ndarray, interpolation: Interpolation) -> np.ndarray:
    """
    Sample premultiplied float pixels (H, W, 4) at image-space positions, edges clamped.
    """
    H, W = pixels.shape[:2]
    if interpolation is Interpolation.NEAREST:
        ix = np.clip(np.floor(u).astype(int), 0, W - 1)
        iy = np.clip(np.floor(v).astype(int), 0, H - 1)
        return pixels[iy, ix]

    fx = u - 0.5
    fy = v - 0.5
    x0 = np.floor(fx)
    y0 = np.floor(fy)
    wx = (fx - x0)[..., None]
    wy = (fy - y0)[..., None]
    x0 = x0.astype(int)
    y0 = y0.astype(int)
    xa = np.clip(x0, 0, W - 1)
    xb = np.clip(x0 + 1, 0, W - 1)
    ya = np.clip(y0, 0, H - 1)
    yb = np.clip(y0 + 1, 0, H - 1)
    top = pixels[ya, xa] * (1.0 - wx) + pixels[ya, xb] * wx
    bottom = pixels[yb, xa] * (1.0 - wx) + pixels[yb, xb] * wx
    return top * (1.0 - wy) + bottom * wy


def create_bitmap_context(
    size: SizeLike,
    native_origin: OriginConvention | str = OriginConvention.BOTTOM_LEFT_Y_UP,
    antialias: bool = True,
) -> BitmapContext:
    """
    Allocate a zero-filled RGBA8 context of int(width) x int(height) pixels.

    Callers always draw with the origin at top-left and Y increasing downward;
    for a bottom-left native origin the flip is applied here, once.
    """
    size = as_size(size)
    if not (math.isfinite(size.width) and math.isfinite(size.height)):
        raise AllocationFailure(f"context size must be finite, got {size.width}x{size.height}")
    width, height = size.pixel_dims()
    if width <= 0 or height <= 0:
        raise AllocationFailure(f"context size must be positive, got {width}x{height}")
    origin = OriginConvention.parse(native_origin)
    try:
        return BitmapContext(width, height, origin, antialias=antialias)
    except (MemoryError, ValueError) as e:
        raise AllocationFailure(f"could not allocate a {width}x{height} RGBA buffer: {e}") from e


def draw_in_bitmap_context(
    size: SizeLike,
    block: Callable[[BitmapContext], None],
    native_origin: OriginConvention | str = OriginConvention.BOTTOM_LEFT_Y_UP,
    antialias: bool = True,
) -> PixelImage:
    """
    Run block against a fresh bitmap context and return the resulting image.
    """
    context = create_bitmap_context(size, native_origin=native_origin, antialias=antialias)
    block(context)
    return context.make_image()
