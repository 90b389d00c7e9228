from __future__ import annotations

import argparse
import math
import os
import sys
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from graphics import (
    BlendMode,
    Color,
    OriginConvention,
    PixelImage,
    PlaygroundError,
    create_pdf_context,
)
from imaging import (
    DEFAULT_PHOTO,
    colored,
    crop,
    draw_circle,
    encode,
    load_bundled_image,
    scale,
    storage_path,
    write_atomic,
)
from plotting import render_contact_sheet
from shapes import Rect, Size


@dataclass(frozen=True)
class PlaygroundConfig:
    outdir: Path
    radius: float = 100.0
    origin: OriginConvention = OriginConvention.BOTTOM_LEFT_Y_UP
    image_format: str = "tiff"
    asset: str = DEFAULT_PHOTO
    scale_size: Tuple[int, int] = (320, 240)
    crop_rect: Tuple[float, float, float, float] = (160.0, 40.0, 160.0, 400.0)
    tint_alpha: float = 0.5
    blend_mode: BlendMode = BlendMode.MULTIPLY
    write_pdf: bool = True
    write_preview: bool = True


def _alpha(value: str) -> float:
    alpha = float(value)
    if not math.isfinite(alpha) or not 0.0 <= alpha <= 1.0:
        raise argparse.ArgumentTypeError(f"alpha must be between 0 and 1, got {value}")
    return alpha


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Draw a circle, encode it, and run scale/crop/tint on the bundled photo.")
    p.add_argument("--outdir", type=str, default="", help="output directory (default: documents directory)")
    p.add_argument("--radius", type=float, default=100.0, help="circle radius in pixels")
    p.add_argument(
        "--origin",
        type=str,
        default=OriginConvention.BOTTOM_LEFT_Y_UP.value,
        choices=[c.value for c in OriginConvention],
        help="native origin convention of the drawing contexts",
    )
    p.add_argument("--format", type=str, default="tiff", choices=["tiff", "png"], help="image container for outputs")
    p.add_argument("--asset", type=str, default=DEFAULT_PHOTO, help="bundled photo to transform")
    p.add_argument("--scale", type=int, nargs=2, default=[320, 240], metavar=("W", "H"), help="scale target size")
    p.add_argument("--crop", type=float, nargs=4, default=[160.0, 40.0, 160.0, 400.0], metavar=("X", "Y", "W", "H"), help="crop rectangle")
    p.add_argument("--tint-alpha", type=_alpha, default=0.5, help="alpha of the blue tint")
    p.add_argument("--blend", type=str, default=BlendMode.MULTIPLY.value, choices=[m.value for m in BlendMode], help="tint blend mode")
    p.add_argument("--pdf", action=argparse.BooleanOptionalAction, default=True, help="also write circle.pdf")
    p.add_argument("--preview", action=argparse.BooleanOptionalAction, default=True, help="also write a preview.png contact sheet")
    return p.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> PlaygroundConfig:
    outdir = Path(args.outdir).expanduser() if args.outdir else storage_path()
    return PlaygroundConfig(
        outdir=outdir,
        radius=float(args.radius),
        origin=OriginConvention.parse(args.origin),
        image_format=args.format,
        asset=args.asset,
        scale_size=(int(args.scale[0]), int(args.scale[1])),
        crop_rect=tuple(float(v) for v in args.crop),
        tint_alpha=float(args.tint_alpha),
        blend_mode=BlendMode.parse(args.blend),
        write_pdf=bool(args.pdf),
        write_preview=bool(args.preview),
    )


def circle_pdf(radius: float, color: Color, origin: OriginConvention) -> bytes:
    sink = BytesIO()
    size = Size(radius * 2.0, radius * 2.0)
    with create_pdf_context(sink, size, native_origin=origin) as pdf:
        pdf.begin_page()
        with pdf.saved_state():
            pdf.set_fill_color(color)
            pdf.fill_ellipse(Rect.from_size(size))
        pdf.end_page()
    return sink.getvalue()


def run(cfg: PlaygroundConfig) -> List[Path]:
    written: List[Path] = []

    def save(name: str, image: PixelImage) -> None:
        path = write_atomic(cfg.outdir / f"{name}.{cfg.image_format}", encode(image, cfg.image_format))
        print(f"Saved {image.width}x{image.height} {name} -> {path}")
        written.append(path)

    print(f"Drawing circle (radius={cfg.radius}, origin={cfg.origin.value})")
    circle = draw_circle(cfg.radius, Color.orange(), native_origin=cfg.origin)
    save("circle", circle)

    if cfg.write_pdf:
        path = write_atomic(cfg.outdir / "circle.pdf", circle_pdf(cfg.radius, Color.orange(), cfg.origin))
        print(f"Saved circle PDF -> {path}")
        written.append(path)

    print(f"Loading bundled photo {cfg.asset!r}")
    photo = load_bundled_image(cfg.asset)
    smaller = scale(photo, cfg.scale_size)
    save("smaller", smaller)
    cropped = crop(photo, Rect(*cfg.crop_rect))
    save("cropped", cropped)
    tint = Color.blue().with_alpha(cfg.tint_alpha)
    tinted = colored(smaller, tint, blend_mode=cfg.blend_mode)
    save("tinted", tinted)

    if cfg.write_preview:
        out_path = os.path.join(str(cfg.outdir), "preview.png")
        print(f"Rendering preview sheet -> {out_path}")
        render_contact_sheet(
            [("circle", circle), ("photo", photo), ("smaller", smaller), ("cropped", cropped), ("tinted", tinted)],
            out_path=out_path,
        )
        written.append(Path(out_path))
    return written


def main(argv: Optional[Sequence[str]] = None) -> int:
    cfg = config_from_args(parse_args(argv))
    try:
        run(cfg)
    except PlaygroundError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
