from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Tuple
import numpy as np


@dataclass(frozen=True)
class Color:
    """
    Straight (non-premultiplied) RGBA color with channels in [0, 1].
    """
    r: float
    g: float
    b: float
    a: float = 1.0

    def __post_init__(self):
        for name in ("r", "g", "b", "a"):
            v = float(getattr(self, name))
            if not np.isfinite(v):
                raise ValueError(f"color channel {name} must be finite")
            object.__setattr__(self, name, min(1.0, max(0.0, v)))

    def with_alpha(self, alpha: float) -> "Color":
        return replace(self, a=alpha)

    def rgba(self) -> Tuple[float, float, float, float]:
        return self.r, self.g, self.b, self.a

    def premultiplied(self) -> np.ndarray:
        return np.array([self.r * self.a, self.g * self.a, self.b * self.a, self.a], dtype=float)

    # ---- Named colors (same component values as the platform palettes) ----
    @staticmethod
    def black() -> "Color":
        return Color(0.0, 0.0, 0.0)

    @staticmethod
    def dark_gray() -> "Color":
        return Color(1.0 / 3.0, 1.0 / 3.0, 1.0 / 3.0)

    @staticmethod
    def gray() -> "Color":
        return Color(0.5, 0.5, 0.5)

    @staticmethod
    def light_gray() -> "Color":
        return Color(2.0 / 3.0, 2.0 / 3.0, 2.0 / 3.0)

    @staticmethod
    def white() -> "Color":
        return Color(1.0, 1.0, 1.0)

    @staticmethod
    def red() -> "Color":
        return Color(1.0, 0.0, 0.0)

    @staticmethod
    def green() -> "Color":
        return Color(0.0, 1.0, 0.0)

    @staticmethod
    def blue() -> "Color":
        return Color(0.0, 0.0, 1.0)

    @staticmethod
    def cyan() -> "Color":
        return Color(0.0, 1.0, 1.0)

    @staticmethod
    def yellow() -> "Color":
        return Color(1.0, 1.0, 0.0)

    @staticmethod
    def magenta() -> "Color":
        return Color(1.0, 0.0, 1.0)

    @staticmethod
    def orange() -> "Color":
        return Color(1.0, 0.5, 0.0)

    @staticmethod
    def purple() -> "Color":
        return Color(0.5, 0.0, 0.5)

    @staticmethod
    def brown() -> "Color":
        return Color(0.6, 0.4, 0.2)

    @staticmethod
    def clear() -> "Color":
        return Color(0.0, 0.0, 0.0, 0.0)


class BlendMode(str, Enum):
    NORMAL = "normal"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    DARKEN = "darken"
    LIGHTEN = "lighten"
    COLOR_DODGE = "color_dodge"
    COLOR_BURN = "color_burn"
    SOFT_LIGHT = "soft_light"
    HARD_LIGHT = "hard_light"
    DIFFERENCE = "difference"
    EXCLUSION = "exclusion"
    CLEAR = "clear"
    COPY = "copy"
    SOURCE_IN = "source_in"
    SOURCE_OUT = "source_out"
    SOURCE_ATOP = "source_atop"
    DESTINATION_OVER = "destination_over"
    DESTINATION_IN = "destination_in"
    DESTINATION_OUT = "destination_out"
    DESTINATION_ATOP = "destination_atop"
    XOR = "xor"
    PLUS_LIGHTER = "plus_lighter"

    @classmethod
    def parse(cls, value: "BlendMode | str") -> "BlendMode":
        if isinstance(value, BlendMode):
            return value
        key = str(value).strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown blend mode: {value!r}") from None


# ---- Separable blend functions B(cb, cs) on straight colors ----

def _multiply(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return cb * cs


def _screen(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return cb + cs - cb * cs


def _hard_light(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return np.where(cs <= 0.5, _multiply(cb, 2.0 * cs), _screen(cb, 2.0 * cs - 1.0))


def _overlay(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return _hard_light(cs, cb)


def _color_dodge(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        q = np.minimum(1.0, cb / np.maximum(1.0 - cs, 1e-12))
    return np.where(cb <= 0.0, 0.0, np.where(cs >= 1.0, 1.0, q))


def _color_burn(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        q = 1.0 - np.minimum(1.0, (1.0 - cb) / np.maximum(cs, 1e-12))
    return np.where(cb >= 1.0, 1.0, np.where(cs <= 0.0, 0.0, q))


def _soft_light(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    d = np.where(cb <= 0.25, ((16.0 * cb - 12.0) * cb + 4.0) * cb, np.sqrt(cb))
    return np.where(
        cs <= 0.5,
        cb - (1.0 - 2.0 * cs) * cb * (1.0 - cb),
        cb + (2.0 * cs - 1.0) * (d - cb),
    )


_SEPARABLE: Dict[BlendMode, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    BlendMode.NORMAL: lambda cb, cs: cs,
    BlendMode.MULTIPLY: _multiply,
    BlendMode.SCREEN: _screen,
    BlendMode.OVERLAY: _overlay,
    BlendMode.DARKEN: np.minimum,
    BlendMode.LIGHTEN: np.maximum,
    BlendMode.COLOR_DODGE: _color_dodge,
    BlendMode.COLOR_BURN: _color_burn,
    BlendMode.SOFT_LIGHT: _soft_light,
    BlendMode.HARD_LIGHT: _hard_light,
    BlendMode.DIFFERENCE: lambda cb, cs: np.abs(cb - cs),
    BlendMode.EXCLUSION: lambda cb, cs: cb + cs - 2.0 * cb * cs,
}

# Porter-Duff operators as (Fa, Fb) factors of (as, ab).
_PORTER_DUFF: Dict[BlendMode, Callable[[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]] = {
    BlendMode.CLEAR: lambda a_s, a_b: (0.0 * a_s, 0.0 * a_b),
    BlendMode.COPY: lambda a_s, a_b: (1.0 + 0.0 * a_s, 0.0 * a_b),
    BlendMode.SOURCE_IN: lambda a_s, a_b: (a_b, 0.0 * a_b),
    BlendMode.SOURCE_OUT: lambda a_s, a_b: (1.0 - a_b, 0.0 * a_b),
    BlendMode.SOURCE_ATOP: lambda a_s, a_b: (a_b, 1.0 - a_s),
    BlendMode.DESTINATION_OVER: lambda a_s, a_b: (1.0 - a_b, 1.0 + 0.0 * a_s),
    BlendMode.DESTINATION_IN: lambda a_s, a_b: (0.0 * a_b, a_s),
    BlendMode.DESTINATION_OUT: lambda a_s, a_b: (0.0 * a_b, 1.0 - a_s),
    BlendMode.DESTINATION_ATOP: lambda a_s, a_b: (1.0 - a_b, a_s),
    BlendMode.XOR: lambda a_s, a_b: (1.0 - a_b, 1.0 - a_s),
}


def _unpremultiply(rgb: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.where(alpha > 0.0, rgb / np.maximum(alpha, 1e-12), 0.0)
    return np.clip(out, 0.0, 1.0)


def composite(src: np.ndarray, dst: np.ndarray, mode: BlendMode | str = BlendMode.NORMAL) -> np.ndarray:
    """
    Composite premultiplied src over premultiplied dst, both (..., 4) floats in [0, 1].
    """
    mode = BlendMode.parse(mode)
    src = np.broadcast_to(np.asarray(src, dtype=float), np.shape(dst))
    dst = np.asarray(dst, dtype=float)
    cs, a_s = src[..., :3], src[..., 3:4]
    cb, a_b = dst[..., :3], dst[..., 3:4]

    if mode in _SEPARABLE:
        B = _SEPARABLE[mode](_unpremultiply(cb, a_b), _unpremultiply(cs, a_s))
        co = cs * (1.0 - a_b) + cb * (1.0 - a_s) + a_s * a_b * B
        ao = a_s + a_b * (1.0 - a_s)
    elif mode is BlendMode.PLUS_LIGHTER:
        co = np.minimum(1.0, cs + cb)
        ao = np.minimum(1.0, a_s + a_b)
    else:
        fa, fb = _PORTER_DUFF[mode](a_s, a_b)
        co = fa * cs + fb * cb
        ao = fa * a_s + fb * a_b

    out = np.concatenate([co, ao], axis=-1)
    return np.clip(out, 0.0, 1.0)


def apply_coverage(src: np.ndarray, dst: np.ndarray, coverage: np.ndarray, mode: BlendMode | str) -> np.ndarray:
    """
    Composite where coverage (...,) in [0, 1] says how much of each pixel the source touches.
    Partially covered pixels interpolate between the untouched and the blended result.
    """
    blended = composite(src, dst, mode)
    cov = np.asarray(coverage, dtype=float)[..., None]
    return dst + cov * (blended - dst)
