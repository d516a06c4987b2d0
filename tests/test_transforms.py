# File: tests/test_transforms.py
from io import BytesIO

import pytest
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from image_scout.crawler.models import Image
from image_scout.errors import ConfigurationError
from image_scout.transforms import (
    Transform,
    TransformType,
    grayscale_transform,
    make_transform,
    make_transforms,
    null_transform,
    tint_transform,
)


def png_bytes(color=(0, 128, 255), size=(4, 3)):
    buffer = BytesIO()
    PILImage.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def decode(image):
    return PILImage.open(BytesIO(image.data))


@pytest.fixture()
def picture():
    return Image(source="http://site.test/img/a.png", data=png_bytes())


def test_null_keeps_bytes(picture):
    result = null_transform()(picture)
    assert result.data == picture.data
    assert result.transform == "null"
    assert picture.transform is None


def test_grayscale(picture):
    result = grayscale_transform()(picture)
    decoded = decode(result)
    assert decoded.mode == "L"
    assert decoded.size == (4, 3)
    assert decoded.format == "PNG"
    assert result.transform == "grayscale"


def test_tint_shifts_towards_red(picture):
    result = tint_transform()(picture)
    r, g, b = decode(result).getpixel((0, 0))
    assert r > 0
    assert b < 255
    assert result.source == picture.source


def test_jpeg_keeps_format():
    buffer = BytesIO()
    PILImage.new("RGB", (2, 2), (10, 20, 30)).save(buffer, format="JPEG")
    source = Image(source="file:///tmp/p.jpg", data=buffer.getvalue())
    assert decode(tint_transform()(source)).format == "JPEG"


def test_broken_image_raises(picture):
    with pytest.raises(UnidentifiedImageError):
        grayscale_transform()(picture.with_data(b"not an image"))


def test_equality_by_name():
    assert Transform("x", lambda i: i) == Transform("x", lambda i: i.with_data(b""))
    assert Transform("x", lambda i: i) != Transform("y", lambda i: i)
    assert len({null_transform(), null_transform()}) == 1


def test_make_transforms_keeps_order_and_drops_repeats():
    names = [t.name for t in make_transforms(["tint", TransformType.NULL, "tint"])]
    assert names == ["tint", "null"]


def test_unknown_transform():
    with pytest.raises(ConfigurationError, match="sepia"):
        make_transform("sepia")


def test_empty_pipeline():
    with pytest.raises(ConfigurationError):
        make_transforms([])
