from __future__ import annotations

from medialib.domain.media import MediaCollection
from medialib.infrastructure.mime_types import PillowMimeRegistry, pillow_image_mime_types


def test_pillow_mime_types_are_images_only() -> None:
    known = pillow_image_mime_types()

    assert {'image/png', 'image/jpeg'} <= known
    assert 'application/pdf' not in known
    assert all(mime.startswith('image/') for mime in known)


def test_is_image_mime_type() -> None:
    registry = PillowMimeRegistry()
    strict = PillowMimeRegistry(match_image_prefix=False)

    assert registry.is_image_mime_type('image/png')
    assert registry.is_image_mime_type('IMAGE/JPEG; q=1')
    assert registry.is_image_mime_type('image/svg+xml')
    assert not strict.is_image_mime_type('image/svg+xml')
    assert not registry.is_image_mime_type('application/pdf')
    assert not registry.is_image_mime_type('')


def test_is_image_collection() -> None:
    registry = PillowMimeRegistry()

    assert registry.is_image_collection(MediaCollection('any'))
    assert registry.is_image_collection(MediaCollection('logo', mime_types=frozenset({'image/png'})))
    assert not registry.is_image_collection(MediaCollection('docs', mime_types=frozenset({'application/pdf'})))
