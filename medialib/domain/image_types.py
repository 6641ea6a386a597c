from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from medialib.domain.media import MediaCollection

ImageCollectionPredicate = Callable[[MediaCollection], bool]


class ImageTypeRegistry(ABC):
    @abstractmethod
    def is_image_mime_type(self, mime_type: str) -> bool:
        """Return True when ``mime_type`` names a recognized image type."""

    def is_image_collection(self, collection: MediaCollection) -> bool:
        # A collection without a MIME whitelist accepts images too.
        if not collection.mime_types:
            return True
        return any(self.is_image_mime_type(mime_type) for mime_type in collection.mime_types)


class PrefixImageTypeRegistry(ImageTypeRegistry):
    def is_image_mime_type(self, mime_type: str) -> bool:
        return mime_type.split(";")[0].strip().lower().startswith("image/")


is_image_collection_by_prefix = PrefixImageTypeRegistry().is_image_collection
