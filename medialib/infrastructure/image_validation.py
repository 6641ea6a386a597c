from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from medialib.domain.dimension_rule import DimensionRule


class ImageValidationError(ValueError):
    pass


def read_image_size(image_bytes: bytes, max_pixels: int) -> tuple[int, int, str]:
    if not image_bytes:
        raise ImageValidationError("Uploaded file is empty")

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.verify()
        with Image.open(io.BytesIO(image_bytes)) as image:
            width, height = image.size
            fmt = (image.format or "").upper() or "UNKNOWN"
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ImageValidationError("Invalid or corrupted image file") from exc

    if width <= 0 or height <= 0:
        raise ImageValidationError("Invalid image dimensions")
    if width * height > max_pixels:
        raise ImageValidationError(f"Image too large in pixels. Max allowed is {max_pixels}")

    return width, height, fmt


def validate_upload(
    image_bytes: bytes, rule: DimensionRule | str, max_pixels: int
) -> tuple[int, int, str]:
    if isinstance(rule, str):
        rule = DimensionRule.parse(rule)

    width, height, fmt = read_image_size(image_bytes, max_pixels=max_pixels)
    problems = rule.violations(width, height)
    if problems:
        raise ImageValidationError("Image is too small: " + "; ".join(problems))

    return width, height, fmt
