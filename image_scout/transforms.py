# image_scout/transforms.py
"""
Named image-to-image operations applied to every downloaded image.

A :class:`Transform` is just a name plus a function. Two transforms with the
same name are the same transform as far as caching is concerned.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from typing import Callable, Iterable, List, Sequence

from PIL import Image as PILImage
from PIL import ImageOps

from image_scout.crawler.models import Image
from image_scout.errors import ConfigurationError

__all__: Sequence[str] = (
    "Transform",
    "TransformType",
    "null_transform",
    "grayscale_transform",
    "tint_transform",
    "make_transform",
    "make_transforms",
)

TransformFunc = Callable[[Image], Image]


@dataclass(frozen=True)
class Transform:
    """Pure image operation identified by *name*."""

    name: str
    func: TransformFunc = field(compare=False, repr=False)

    def __call__(self, image: Image) -> Image:
        result = self.func(image)
        return Image(source=result.source, data=result.data, transform=self.name)


class TransformType(str, Enum):
    NULL = "null"
    GRAYSCALE = "grayscale"
    TINT = "tint"


# --------------------------------------------------------------------------- #
# Pillow helpers                                                              #
# --------------------------------------------------------------------------- #


def _decode(image: Image) -> PILImage.Image:
    decoded = PILImage.open(BytesIO(image.data))
    decoded.load()
    return decoded


def _encode(picture: PILImage.Image, fmt: str | None) -> bytes:
    buffer = BytesIO()
    fmt = fmt or "PNG"
    if fmt.upper() in ("JPEG", "JPG") and picture.mode not in ("RGB", "L"):
        picture = picture.convert("RGB")
    picture.save(buffer, format=fmt)
    return buffer.getvalue()


def _null(image: Image) -> Image:
    return image


def _grayscale(image: Image) -> Image:
    decoded = _decode(image)
    return image.with_data(_encode(ImageOps.grayscale(decoded), decoded.format))


def _tint(image: Image, color: tuple[int, int, int] = (255, 0, 0), alpha: float = 0.3) -> Image:
    decoded = _decode(image)
    rgb = decoded.convert("RGB")
    overlay = PILImage.new("RGB", rgb.size, color)
    return image.with_data(_encode(PILImage.blend(rgb, overlay, alpha), decoded.format))


def null_transform(name: str = TransformType.NULL.value) -> Transform:
    """Returns the image unchanged; stores the original next to the derived ones."""
    return Transform(name, _null)


def grayscale_transform(name: str = TransformType.GRAYSCALE.value) -> Transform:
    return Transform(name, _grayscale)


def tint_transform(name: str = TransformType.TINT.value) -> Transform:
    return Transform(name, _tint)


_FACTORIES = {
    TransformType.NULL: null_transform,
    TransformType.GRAYSCALE: grayscale_transform,
    TransformType.TINT: tint_transform,
}


def make_transform(name: str | TransformType) -> Transform:
    try:
        kind = TransformType(name)
    except ValueError as exc:
        known = ", ".join(t.value for t in TransformType)
        raise ConfigurationError(f"Unknown transform '{name}' (known: {known})") from exc
    return _FACTORIES[kind]()


def make_transforms(names: Iterable[str | TransformType]) -> List[Transform]:
    """Builds the pipeline in the configured order, dropping repeated names."""
    transforms: List[Transform] = []
    for name in names:
        transform = make_transform(name)
        if transform not in transforms:
            transforms.append(transform)
    if not transforms:
        raise ConfigurationError("At least one transform must be configured.")
    return transforms
