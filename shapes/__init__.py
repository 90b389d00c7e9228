# Re-export core geometry API for convenience
from .geometry import (
    Size,
    Rect,
    Affine2D,
    Shape,
    Transformed,
    UnitSquare,
    UnitDisk,
    rect_shape,
    ellipse_shape,
)
