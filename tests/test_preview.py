import numpy as np
import pytest
from PIL import Image

from graphics import Color, WriteFailure
from imaging import draw_circle
from plotting import checkerboard, flatten_on_checkerboard, render_contact_sheet


def test_checkerboard_alternates():
    board = checkerboard(16, 16, cell=8)
    assert board.shape == (16, 16, 3)
    assert board[0, 0, 0] != board[0, 8, 0]
    assert board[0, 0, 0] == board[8, 8, 0]


def test_flatten_shows_background_through_transparency():
    circle = draw_circle(8, Color.red())
    flat = flatten_on_checkerboard(circle)
    assert np.allclose(flat[8, 8], [1.0, 0.0, 0.0])
    assert np.allclose(flat[0, 0], checkerboard(16, 16)[0, 0])


def test_contact_sheet_written(tmp_path):
    out = tmp_path / "sheets" / "preview.png"
    items = [("circle", draw_circle(10, Color.orange())), ("blue", draw_circle(6, Color.blue()))]
    render_contact_sheet(items, str(out), cols=3)
    with Image.open(out) as img:
        assert img.format == "PNG"


def test_contact_sheet_requires_images(tmp_path):
    with pytest.raises(ValueError):
        render_contact_sheet([], str(tmp_path / "x.png"))


def test_contact_sheet_write_failure(tmp_path):
    out = tmp_path / "preview.png"
    out.mkdir()
    with pytest.raises(WriteFailure):
        render_contact_sheet([("circle", draw_circle(4, Color.orange()))], str(out))
