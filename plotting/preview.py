from __future__ import annotations

import os
from typing import Sequence, Tuple
import numpy as np
import matplotlib.pyplot as plt

from graphics import PixelImage, WriteFailure


def checkerboard(height: int, width: int, cell: int = 8) -> np.ndarray:
    """
    Light gray checkerboard (RGB floats) drawn behind transparent pixels.
    """
    ys, xs = np.indices((height, width))
    mask = ((ys // cell) + (xs // cell)) % 2 == 0
    board = np.where(mask, 0.85, 0.7)
    return np.repeat(board[:, :, None], 3, axis=2)


def flatten_on_checkerboard(image: PixelImage, cell: int = 8) -> np.ndarray:
    # premultiplied over opaque background: c + bg * (1 - a)
    px = image.as_float()
    bg = checkerboard(image.height, image.width, cell)
    return np.clip(px[:, :, :3] + bg * (1.0 - px[:, :, 3:4]), 0.0, 1.0)


def render_contact_sheet(
    items: Sequence[Tuple[str, PixelImage]],
    out_path: str,
    cols: int = 3,
    figsize_per_cell: Tuple[float, float] = (3.0, 3.0),
    dpi: int = 150,
) -> None:
    """
    Renders titled images in a grid for manual inspection and saves it as PNG.
    """
    n = len(items)
    if n == 0:
        raise ValueError("No images provided")
    cols = max(1, min(cols, n))
    rows = (n + cols - 1) // cols
    fig_w = figsize_per_cell[0] * cols
    fig_h = figsize_per_cell[1] * rows

    fig, axes = plt.subplots(rows, cols, figsize=(fig_w, fig_h), constrained_layout=True, squeeze=False)
    fig.patch.set_facecolor('white')

    for idx, (title, image) in enumerate(items):
        r = idx // cols
        c = idx % cols
        ax = axes[r, c]
        ax.imshow(flatten_on_checkerboard(image), interpolation="nearest")
        ax.set_title(f"{title} ({image.width}x{image.height})", fontsize=9, color='black')
        ax.set_xticks([])
        ax.set_yticks([])

    for idx in range(n, rows * cols):
        r = idx // cols
        c = idx % cols
        axes[r, c].axis("off")

    out_dir = os.path.dirname(out_path)
    try:
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        fig.savefig(out_path, dpi=dpi, format="png", transparent=False, facecolor='white')
    except OSError as e:
        raise WriteFailure(f"could not write preview {out_path}: {e}") from e
    finally:
        plt.close(fig)
