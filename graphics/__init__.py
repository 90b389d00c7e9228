from .errors import (
    PlaygroundError,
    AllocationFailure,
    EncodeFailure,
    DecodeFailure,
    WriteFailure,
    AssetNotFoundError,
    ContextStateError,
)
from .color import Color, BlendMode, composite
from .image import PixelImage
from .context import (
    OriginConvention,
    Interpolation,
    GraphicsState,
    DrawingContext,
    BitmapContext,
    create_bitmap_context,
    draw_in_bitmap_context,
)
from .pdf import PDFContext, create_pdf_context
