from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable

from medialib.domain.errors import InvalidMediaDeclarationError

CROP_CENTER = "crop-center"

FileAcceptor = Callable[[Any], bool]


def _check_name(kind: str, name: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise InvalidMediaDeclarationError(f"{kind} name must be a non-empty string")


def _check_size(conversion: str, axis: str, value: int | None) -> None:
    if value is None:
        return
    # bool is an int subclass; True is not a width.
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidMediaDeclarationError(
            f"conversion {conversion!r}: {axis} must be a positive integer, got {value!r}"
        )


@dataclass(frozen=True)
class ConversionScope:
    collection_name: str | None = None

    @classmethod
    def for_collection(cls, name: str) -> ConversionScope:
        _check_name("collection", name)
        return cls(collection_name=name)

    @property
    def is_global(self) -> bool:
        return self.collection_name is None

    def __str__(self) -> str:
        return "global" if self.is_global else f"collection:{self.collection_name}"


GLOBAL_SCOPE = ConversionScope()


@dataclass(frozen=True)
class MediaConversion:
    """Named image-transform preset; only its target size matters for validation."""

    name: str
    target_width: int | None = None
    target_height: int | None = None
    crop_method: str | None = None

    def __post_init__(self) -> None:
        _check_name("conversion", self.name)
        _check_size(self.name, "width", self.target_width)
        _check_size(self.name, "height", self.target_height)

    def crop(self, width: int, height: int, method: str = CROP_CENTER) -> MediaConversion:
        return replace(self, target_width=width, target_height=height, crop_method=method)

    def width(self, width: int) -> MediaConversion:
        return replace(self, target_width=width)

    def height(self, height: int) -> MediaConversion:
        return replace(self, target_height=height)

    @property
    def has_dimensions(self) -> bool:
        return self.target_width is not None or self.target_height is not None


@dataclass(frozen=True)
class MediaCollection:
    """A named bucket of uploads on a model.

    An empty ``mime_types`` set means the collection accepts any file.
    ``conversions`` holds the collection-scoped conversions only; globals live
    on the registry.
    """

    name: str
    mime_types: frozenset[str] = frozenset()
    file_acceptor: FileAcceptor | None = field(default=None, compare=False)
    conversions: tuple[MediaConversion, ...] = ()

    def __post_init__(self) -> None:
        _check_name("collection", self.name)
        if isinstance(self.mime_types, str):
            raise InvalidMediaDeclarationError(
                f"collection {self.name!r}: mime_types must be a collection of strings, not {self.mime_types!r}"
            )
        object.__setattr__(self, "mime_types", frozenset(m.strip().lower() for m in self.mime_types))
        object.__setattr__(self, "conversions", tuple(self.conversions))
        seen: set[str] = set()
        for conversion in self.conversions:
            if conversion.name in seen:
                raise InvalidMediaDeclarationError(
                    f"collection {self.name!r} declares conversion {conversion.name!r} twice"
                )
            seen.add(conversion.name)

    def accepts_mime_types(self, mime_types: Iterable[str]) -> MediaCollection:
        return replace(self, mime_types=mime_types)  # type: ignore[arg-type]

    def accepts_file(self, acceptor: FileAcceptor) -> MediaCollection:
        return replace(self, file_acceptor=acceptor)

    def register_media_conversions(self, *conversions: MediaConversion) -> MediaCollection:
        return replace(self, conversions=self.conversions + conversions)

    @property
    def scope(self) -> ConversionScope:
        return ConversionScope.for_collection(self.name)

    def accepts(self, mime_type: str | None, file: Any = None) -> bool:
        if self.mime_types:
            if not mime_type or mime_type.split(";")[0].strip().lower() not in self.mime_types:
                return False
        if self.file_acceptor is not None and not self.file_acceptor(file):
            return False
        return True
