"""Shared fixtures for the drawing and imaging tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from graphics import PixelImage


@pytest.fixture
def documents_dir(tmp_path, monkeypatch):
    """Point the documents directory at a sandboxed location."""
    docs = tmp_path / "Documents"
    monkeypatch.setenv("PLAYGROUND_DOCUMENTS_DIR", str(docs))
    return docs


@pytest.fixture
def gradient_image():
    """Opaque 8x6 image whose pixels encode their own (x, y) position."""
    h, w = 6, 8
    ys, xs = np.indices((h, w))
    px = np.zeros((h, w, 4), dtype=np.uint8)
    px[..., 0] = xs * 30
    px[..., 1] = ys * 40
    px[..., 2] = 200
    px[..., 3] = 255
    return PixelImage.from_array(px)


@pytest.fixture
def translucent_image():
    """Premultiplied image with a spread of alpha values, including zero."""
    rng = np.random.default_rng(7)
    alpha = rng.integers(0, 256, size=(5, 7), dtype=np.int64)
    rgb = rng.integers(0, 256, size=(5, 7, 3), dtype=np.int64)
    premul = (rgb * alpha[..., None] + 127) // 255
    px = np.concatenate([premul, alpha[..., None]], axis=-1).astype(np.uint8)
    return PixelImage.from_array(px)
