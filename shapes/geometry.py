from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import math
import numpy as np


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def pixel_dims(self) -> Tuple[int, int]:
        """
        Integer pixel dimensions, truncated toward zero.
        """
        return int(self.width), int(self.height)


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @staticmethod
    def from_size(size: Size) -> "Rect":
        return Rect(0.0, 0.0, float(size.width), float(size.height))

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    def corners(self) -> np.ndarray:
        x0, y0 = self.x, self.y
        x1, y1 = self.x + self.width, self.y + self.height
        return np.array([[x0, y0], [x1, y0], [x1, y1], [x0, y1]], dtype=float)

    def unit_square_transform(self) -> "Affine2D":
        """
        Maps the unit square centered at origin onto this rect.
        """
        cx, cy = self.center
        return Affine2D(
            A=np.array([[self.width, 0.0], [0.0, self.height]], dtype=float),
            t=np.array([cx, cy], dtype=float),
        )

    def unit_disk_transform(self) -> "Affine2D":
        """
        Maps the unit disk onto the ellipse inscribed in this rect.
        """
        cx, cy = self.center
        return Affine2D(
            A=np.array([[self.width / 2.0, 0.0], [0.0, self.height / 2.0]], dtype=float),
            t=np.array([cx, cy], dtype=float),
        )


@dataclass(frozen=True)
class Affine2D:
    """
    2D affine transform x -> A x + t
    """
    A: np.ndarray  # shape (2, 2)
    t: np.ndarray  # shape (2,)

    def __post_init__(self):
        A = np.asarray(self.A, dtype=float)
        t = np.asarray(self.t, dtype=float)
        if A.shape != (2, 2):
            raise ValueError("A must be 2x2")
        if t.shape != (2,):
            raise ValueError("t must be length-2")
        object.__setattr__(self, "A", A)
        object.__setattr__(self, "t", t)
        # Precompute inverse for efficient inverse application
        det = float(np.linalg.det(A))
        object.__setattr__(self, "_Ainv", np.linalg.inv(A) if det != 0.0 else None)

    @property
    def is_invertible(self) -> bool:
        return self._Ainv is not None

    @property
    def is_axis_aligned(self) -> bool:
        return self.A[0, 1] == 0.0 and self.A[1, 0] == 0.0

    def apply(self, point_xy: np.ndarray) -> np.ndarray:
        return self.A @ point_xy + self.t

    def inverse_apply(self, point_xy: np.ndarray) -> np.ndarray:
        if self._Ainv is None:
            raise ValueError("transform is singular")
        return self._Ainv @ (point_xy - self.t)

    def apply_many(self, pts: np.ndarray) -> np.ndarray:
        """
        Apply to an (N, 2) array of points.
        """
        return pts @ self.A.T + self.t

    def inverse_apply_many(self, pts: np.ndarray) -> np.ndarray:
        if self._Ainv is None:
            raise ValueError("transform is singular")
        return (pts - self.t) @ self._Ainv.T

    def shapely_params(self) -> list[float]:
        """
        Coefficients [a, b, d, e, xoff, yoff] for shapely.affinity.affine_transform.
        """
        return [
            float(self.A[0, 0]), float(self.A[0, 1]),
            float(self.A[1, 0]), float(self.A[1, 1]),
            float(self.t[0]), float(self.t[1]),
        ]

    # ---- Constructors and composition ----
    @staticmethod
    def identity() -> "Affine2D":
        return Affine2D(A=np.eye(2), t=np.zeros(2))

    @staticmethod
    def from_translate(dx: float, dy: float) -> "Affine2D":
        return Affine2D(A=np.eye(2), t=np.array([dx, dy], dtype=float))

    @staticmethod
    def from_scale(sx: float, sy: float | None = None) -> "Affine2D":
        if sy is None:
            sy = sx
        return Affine2D(A=np.array([[sx, 0.0], [0.0, sy]], dtype=float), t=np.zeros(2))

    @staticmethod
    def from_rotation(theta_radians: float) -> "Affine2D":
        c = math.cos(theta_radians)
        s = math.sin(theta_radians)
        return Affine2D(A=np.array([[c, -s], [s, c]], dtype=float), t=np.zeros(2))

    @staticmethod
    def vertical_flip(height: float) -> "Affine2D":
        """
        Maps y -> height - y: a translate by height followed by a Y flip.
        """
        return Affine2D.from_scale(1.0, -1.0).then(Affine2D.from_translate(0.0, height))

    def then(self, after: "Affine2D") -> "Affine2D":
        """
        First apply self, then apply 'after'.
        y = after.apply(self.apply(x))
        """
        A_new = after.A @ self.A
        t_new = after.A @ self.t + after.t
        return Affine2D(A=A_new, t=t_new)


class Shape:
    def sdf(self, point_xy: np.ndarray) -> float:
        return float(self.sdf_many(np.asarray(point_xy, dtype=float).reshape(1, 2))[0])

    def sdf_many(self, pts: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def contains(self, point_xy: np.ndarray) -> bool:
        return self.sdf(point_xy) <= 0.0

    def contains_many(self, pts: np.ndarray) -> np.ndarray:
        return self.sdf_many(pts) <= 0.0

    # ---- Transform helpers ----
    def transformed(self, T: Affine2D) -> "Transformed":
        return Transformed(self, T)


class Transformed(Shape):
    def __init__(self, shape: Shape, transform: Affine2D):
        self.shape = shape
        self.transform = transform

    def sdf_many(self, pts: np.ndarray) -> np.ndarray:
        # Pullback: evaluate base shape at inverse-mapped points.
        # Only the sign is meaningful under non-uniform scale.
        return self.shape.sdf_many(self.transform.inverse_apply_many(pts))


class UnitSquare(Shape):
    """
    Axis-aligned square centered at origin with side length 1.
    """
    def sdf_many(self, pts: np.ndarray) -> np.ndarray:
        q = np.abs(pts) - 0.5
        outside = np.linalg.norm(np.maximum(q, 0.0), axis=1)
        inside = np.minimum(np.max(q, axis=1), 0.0)
        return outside + inside


class UnitDisk(Shape):
    """
    Unit circle centered at origin.
    """
    def sdf_many(self, pts: np.ndarray) -> np.ndarray:
        return np.linalg.norm(pts, axis=1) - 1.0


def rect_shape(rect: Rect) -> Shape:
    return UnitSquare().transformed(rect.unit_square_transform())


def ellipse_shape(rect: Rect) -> Shape:
    return UnitDisk().transformed(rect.unit_disk_transform())
