from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Mapping

from medialib.domain.errors import InvalidMediaDeclarationError
from medialib.domain.media import GLOBAL_SCOPE, ConversionScope, MediaCollection, MediaConversion


@dataclass(frozen=True)
class MediaRegistry:
    """Everything one model declares: its collections and its global conversions."""

    collections: tuple[MediaCollection, ...] = ()
    global_conversions: tuple[MediaConversion, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "collections", tuple(self.collections))
        object.__setattr__(self, "global_conversions", tuple(self.global_conversions))
        _ensure_unique("collection", [c.name for c in self.collections])
        _ensure_unique("global conversion", [c.name for c in self.global_conversions])

    def add_media_collection(self, collection: MediaCollection) -> MediaRegistry:
        return replace(self, collections=self.collections + (collection,))

    def add_media_conversion(self, conversion: MediaConversion) -> MediaRegistry:
        return replace(self, global_conversions=self.global_conversions + (conversion,))

    @property
    def collections_by_name(self) -> Mapping[str, MediaCollection]:
        return {collection.name: collection for collection in self.collections}

    def get_media_collection(self, name: str) -> MediaCollection | None:
        return self.collections_by_name.get(name)

    def conversions_with_scope(self) -> Iterator[tuple[ConversionScope, MediaConversion]]:
        for conversion in self.global_conversions:
            yield GLOBAL_SCOPE, conversion
        for collection in self.collections:
            for conversion in collection.conversions:
                yield collection.scope, conversion


def _ensure_unique(kind: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise InvalidMediaDeclarationError(f"{kind} {name!r} is declared twice")
        seen.add(name)
