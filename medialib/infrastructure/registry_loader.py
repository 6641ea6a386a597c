"""Load a :class:`MediaRegistry` from a JSON document.

Document shape::

    {
      "conversions": [{"name": "thumb", "crop": [60, 20]}],
      "collections": [
        {
          "name": "logo",
          "mime_types": ["image/jpeg", "image/png"],
          "conversions": [{"name": "mail", "width": 120, "height": 100}]
        }
      ]
    }

A conversion sets its size with ``crop`` (``[width, height]``, optional
``crop_method``) or with ``width`` / ``height``; it cannot do both.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, model_validator

from medialib.domain.errors import InvalidMediaDeclarationError
from medialib.domain.media import CROP_CENTER, MediaCollection, MediaConversion
from medialib.domain.registry import MediaRegistry

logger = logging.getLogger("medialib.registry")


class RegistryLoadError(ValueError):
    pass


class ConversionDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    width: PositiveInt | None = None
    height: PositiveInt | None = None
    crop: tuple[PositiveInt, PositiveInt] | None = None
    crop_method: str = CROP_CENTER

    @model_validator(mode="after")
    def _crop_or_size(self) -> ConversionDocument:
        if self.crop is not None and (self.width is not None or self.height is not None):
            raise ValueError("use either crop or width/height, not both")
        return self

    def to_conversion(self) -> MediaConversion:
        conversion = MediaConversion(self.name)
        if self.crop is not None:
            return conversion.crop(*self.crop, method=self.crop_method)
        if self.width is not None:
            conversion = conversion.width(self.width)
        if self.height is not None:
            conversion = conversion.height(self.height)
        return conversion


class CollectionDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    mime_types: list[str] = Field(default_factory=list)
    conversions: list[ConversionDocument] = Field(default_factory=list)

    def to_collection(self) -> MediaCollection:
        return MediaCollection(
            self.name,
            mime_types=frozenset(self.mime_types),
            conversions=tuple(c.to_conversion() for c in self.conversions),
        )


class RegistryDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    conversions: list[ConversionDocument] = Field(default_factory=list)
    collections: list[CollectionDocument] = Field(default_factory=list)

    def to_registry(self) -> MediaRegistry:
        return MediaRegistry(
            collections=tuple(c.to_collection() for c in self.collections),
            global_conversions=tuple(c.to_conversion() for c in self.conversions),
        )


def parse_registry(data: dict) -> MediaRegistry:
    try:
        return RegistryDocument.model_validate(data).to_registry()
    except (ValidationError, InvalidMediaDeclarationError) as exc:
        raise RegistryLoadError(f"Invalid media registry: {exc}") from exc


def load_registry(path: str | Path | None) -> MediaRegistry:
    if not path:
        return MediaRegistry()

    registry_path = Path(path)
    if not registry_path.exists():
        logger.warning("media registry %s not found, starting with an empty registry", registry_path)
        return MediaRegistry()

    try:
        data = json.loads(registry_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RegistryLoadError(f"Cannot read media registry {registry_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise RegistryLoadError(f"Media registry {registry_path} must contain a JSON object")

    registry = parse_registry(data)
    logger.info(
        "loaded media registry %s: %d collections, %d global conversions",
        registry_path,
        len(registry.collections),
        len(registry.global_conversions),
    )
    return registry
