from __future__ import annotations

from PIL import Image

from medialib.domain.image_types import ImageTypeRegistry


def pillow_image_mime_types() -> frozenset[str]:
    """``image/*`` MIME types of the formats Pillow can open.

    Pillow also registers non-image MIME types for some writers
    (``application/pdf``), which are left out.
    """
    # Plugins register their MIME types lazily.
    Image.init()
    return frozenset(
        mime.lower()
        for fmt, mime in Image.MIME.items()
        if fmt in Image.OPEN and mime.lower().startswith("image/")
    )


class PillowMimeRegistry(ImageTypeRegistry):
    """With ``match_image_prefix`` any ``image/*`` type counts (SVG, HEIC
    without a plugin, ...); without it only types Pillow can decode do."""

    def __init__(self, match_image_prefix: bool = True) -> None:
        self._known = pillow_image_mime_types()
        self._match_image_prefix = match_image_prefix

    @property
    def known_mime_types(self) -> frozenset[str]:
        return self._known

    def is_image_mime_type(self, mime_type: str) -> bool:
        normalized = mime_type.split(";")[0].strip().lower()
        if normalized in self._known:
            return True
        return self._match_image_prefix and normalized.startswith("image/")
