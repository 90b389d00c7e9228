import pytest

from graphics import AssetNotFoundError
from imaging import DEFAULT_PHOTO, bundled_assets, load_bundled_image


def test_default_photo_is_bundled():
    assert DEFAULT_PHOTO in bundled_assets()


def test_load_default_photo():
    photo = load_bundled_image()
    assert (photo.width, photo.height) == (480, 640)
    # a photo: fully opaque
    assert (photo.pixels[..., 3] == 255).all()


@pytest.mark.parametrize("name", ["missing.jpg", "", "../codec.py", "resources/tokyo_tower.png"])
def test_unknown_assets_raise(name):
    with pytest.raises(AssetNotFoundError):
        load_bundled_image(name)
