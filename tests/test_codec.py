from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from graphics import Color, DecodeFailure, EncodeFailure, PixelImage
from graphics.image import premultiply_rgba8, unpremultiply_rgba8
from imaging import decode, draw_circle, encode, raw_bytes


def test_tiff_container_header():
    data = encode(draw_circle(10, Color.orange()), "tiff")
    assert data[:4] in (b"II*\x00", b"MM\x00*")


@pytest.mark.parametrize("fmt", ["tiff", "png"])
def test_round_trip_is_byte_identical(fmt, translucent_image):
    back = decode(encode(translucent_image, fmt))
    assert np.array_equal(back.pixels, translucent_image.pixels)


def test_round_trip_of_antialiased_circle():
    circle = draw_circle(25, Color.orange().with_alpha(0.7))
    back = decode(encode(circle))
    assert np.array_equal(back.pixels, circle.pixels)


def test_container_stores_straight_alpha():
    px = np.array([[[0, 0, 128, 128]]], dtype=np.uint8)
    data = encode(PixelImage.from_array(px), "png")
    with Image.open(BytesIO(data)) as img:
        assert img.mode == "RGBA"
        assert img.getpixel((0, 0)) == (0, 0, 255, 128)


def test_unpremultiply_then_premultiply_is_exact_for_all_pairs():
    alpha = np.repeat(np.arange(256), 256)
    color = np.tile(np.arange(256), 256)
    valid = color <= alpha
    px = np.stack([color, color, color, alpha], axis=-1)[valid].astype(np.uint8)
    assert np.array_equal(premultiply_rgba8(unpremultiply_rgba8(px)), px)


def test_unsupported_format_raises():
    with pytest.raises(EncodeFailure):
        encode(draw_circle(4, Color.red()), "gif89")


def test_decode_garbage_raises():
    with pytest.raises(DecodeFailure):
        decode(b"definitely not an image")


def test_decode_rgb_is_opaque():
    buf = BytesIO()
    Image.new("RGB", (3, 2), color=(10, 20, 30)).save(buf, format="PNG")
    image = decode(buf.getvalue())
    assert image.size.pixel_dims() == (3, 2)
    assert image.pixels[1, 2].tolist() == [10, 20, 30, 255]


def test_raw_bytes_layout(gradient_image):
    raw = raw_bytes(gradient_image)
    assert len(raw) == 4 * gradient_image.width * gradient_image.height
    stride = gradient_image.width * 4
    # pixel (x=3, y=2) starts at row 2, column 3
    offset = 2 * stride + 3 * 4
    assert list(raw[offset:offset + 4]) == [90, 80, 200, 255]
