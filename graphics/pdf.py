from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Union
import math
import numpy as np
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure
from shapely import affinity
from shapely.geometry import Point, Polygon, box

from shapes import Affine2D, Rect, Size

from .color import BlendMode
from .context import DrawingContext, Interpolation, OriginConvention, SizeLike, as_size, normalized_transforms
from .errors import AllocationFailure, ContextStateError, WriteFailure
from .image import PixelImage


PDFSink = Union[str, Path, BinaryIO]

# PDF user space unit.
POINTS_PER_INCH = 72.0


class PDFContext(DrawingContext):
    """
    Drawing context streaming pages into a PDF sink.

    Every page must be bracketed by begin_page()/end_page() and the context closed
    before the sink holds a complete document. Used as a context manager, exit
    ends an open page and closes the document on every path.
    """

    def __init__(self, sink: PDFSink, size: Size, native_origin: OriginConvention):
        device, ctm = normalized_transforms(native_origin, size.height, device_origin=OriginConvention.BOTTOM_LEFT_Y_UP)
        super().__init__(size, native_origin, device, ctm)
        self._initial_state = self.state
        self._pages = PdfPages(sink)
        self._fig = None
        self._ax = None
        self.page_count = 0
        self.closed = False

    def __enter__(self) -> "PDFContext":
        return self

    def __exit__(self, *exc) -> bool:
        self.close()
        return False

    @property
    def in_page(self) -> bool:
        return self._fig is not None

    # ---- Page lifecycle ----
    def begin_page(self) -> None:
        if self.closed:
            raise ContextStateError("PDF context is closed")
        if self.in_page:
            raise ContextStateError("begin_page called while a page is open")
        w, h = float(self.size.width), float(self.size.height)
        fig = Figure(figsize=(w / POINTS_PER_INCH, h / POINTS_PER_INCH), dpi=POINTS_PER_INCH)
        fig.patch.set_alpha(0.0)
        ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
        ax.set_xlim(0.0, w)
        ax.set_ylim(0.0, h)
        ax.axis("off")
        self._fig = fig
        self._ax = ax
        # Each page starts from the state set at creation.
        self.state = self._initial_state
        self._stack.clear()

    def end_page(self) -> None:
        if not self.in_page:
            raise ContextStateError("end_page called without an open page")
        fig = self._fig
        self._fig = None
        self._ax = None
        try:
            self._pages.savefig(fig)
        except OSError as e:
            raise WriteFailure(f"could not write PDF page: {e}") from e
        self.page_count += 1

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self.in_page:
                self.end_page()
        finally:
            self.closed = True
            try:
                self._pages.close()
            except OSError as e:
                raise WriteFailure(f"could not finalize PDF document: {e}") from e

    # ---- State ----
    def set_blend_mode(self, mode: BlendMode | str) -> None:
        if BlendMode.parse(mode) is not BlendMode.NORMAL:
            raise ValueError("PDF context only supports the normal blend mode")
        super().set_blend_mode(mode)

    # ---- Drawing ----
    def _require_page(self):
        if self.closed:
            raise ContextStateError("PDF context is closed")
        if not self.in_page:
            raise ContextStateError("drawing requires an open page")
        return self._ax

    def _fill_rgba(self) -> tuple:
        r, g, b, a = self.state.fill_color.rgba()
        return r, g, b, a * self.state.alpha

    def _fill_geometry(self, geom, shape_to_user: Affine2D) -> None:
        ax = self._require_page()
        T = shape_to_user.then(self.user_to_device)
        geom = affinity.affine_transform(geom, T.shapely_params())
        if geom.is_empty:
            return
        parts = geom.geoms if hasattr(geom, "geoms") else [geom]
        rgba = self._fill_rgba()
        for part in parts:
            if isinstance(part, Polygon):
                x, y = part.exterior.xy
                ax.fill(x, y, fc=rgba, ec="none", linewidth=0.0)

    def fill_rect(self, rect: Rect) -> None:
        self._fill_geometry(box(-0.5, -0.5, 0.5, 0.5), rect.unit_square_transform())

    def fill_ellipse(self, rect: Rect) -> None:
        self._fill_geometry(Point(0.0, 0.0).buffer(1.0, quad_segs=64), rect.unit_disk_transform())

    def draw_image(self, image: PixelImage, rect: Rect) -> None:
        ax = self._require_page()
        T = self.user_to_device
        if not T.is_axis_aligned:
            raise ValueError("PDF context only places images with axis-aligned transforms")
        p0 = T.apply(np.array([rect.x, rect.y], dtype=float))
        p1 = T.apply(np.array([rect.x + rect.width, rect.y + rect.height], dtype=float))
        rgba = image.straight_rgba()
        if self.state.alpha < 1.0:
            rgba = rgba.copy()
            rgba[..., 3] = np.floor(rgba[..., 3] * self.state.alpha + 0.5).astype(np.uint8)
        interpolation = "nearest" if self.state.interpolation is Interpolation.NEAREST else "bilinear"
        # origin="upper" puts the first row at extent top, which is p0's y.
        ax.imshow(
            rgba,
            extent=(p0[0], p1[0], p1[1], p0[1]),
            origin="upper",
            interpolation=interpolation,
            aspect="auto",
        )
        ax.set_xlim(0.0, float(self.size.width))
        ax.set_ylim(0.0, float(self.size.height))


def create_pdf_context(
    sink: PDFSink,
    size: SizeLike,
    native_origin: OriginConvention | str = OriginConvention.BOTTOM_LEFT_Y_UP,
) -> PDFContext:
    """
    Open a PDF page stream of the given page size (in points) on sink.
    """
    size = as_size(size)
    w, h = float(size.width), float(size.height)
    if not (math.isfinite(w) and math.isfinite(h)) or w <= 0.0 or h <= 0.0:
        raise AllocationFailure(f"PDF page size must be positive and finite, got {w}x{h}")
    origin = OriginConvention.parse(native_origin)
    try:
        return PDFContext(sink, Size(w, h), origin)
    except OSError as e:
        raise AllocationFailure(f"could not open PDF sink: {e}") from e
