from __future__ import annotations

import logging
from typing import Iterable, Mapping

from medialib.domain.dimension_rule import DimensionRule
from medialib.domain.image_types import ImageCollectionPredicate, is_image_collection_by_prefix
from medialib.domain.media import MediaCollection, MediaConversion
from medialib.domain.registry import MediaRegistry

logger = logging.getLogger("medialib.rules")


def effective_conversions(
    collection: MediaCollection, global_conversions: Iterable[MediaConversion]
) -> tuple[MediaConversion, ...]:
    # Scoped conversions replace the globals outright, sized or not.
    if collection.conversions:
        return collection.conversions
    return tuple(global_conversions)


def aggregate(conversions: Iterable[MediaConversion]) -> DimensionRule:
    conversions = tuple(conversions)
    # Largest target per axis; absent values only drop out of their own axis.
    widths = [c.target_width for c in conversions if c.target_width is not None]
    heights = [c.target_height for c in conversions if c.target_height is not None]
    return DimensionRule(
        min_width=max(widths) if widths else None,
        min_height=max(heights) if heights else None,
    )


def resolve_rule(
    collection_name: str,
    global_conversions: Iterable[MediaConversion],
    collections_by_name: Mapping[str, MediaCollection],
    *,
    is_image_collection: ImageCollectionPredicate = is_image_collection_by_prefix,
) -> DimensionRule:
    collection = collections_by_name.get(collection_name)
    if collection is None:
        return DimensionRule()

    conversions = effective_conversions(collection, global_conversions)
    if not is_image_collection(collection):
        return DimensionRule()

    return aggregate(conversions)


def resolve(
    collection_name: str,
    global_conversions: Iterable[MediaConversion],
    collections_by_name: Mapping[str, MediaCollection],
    *,
    is_image_collection: ImageCollectionPredicate = is_image_collection_by_prefix,
) -> str:
    """Return the ``dimensions`` rule for ``collection_name``, or ``""``.

    Never raises for unknown collections, missing conversions or non-image
    collections; all of those yield the empty string.
    """
    return resolve_rule(
        collection_name,
        global_conversions,
        collections_by_name,
        is_image_collection=is_image_collection,
    ).render()


class DimensionRulesUseCase:
    def __init__(self, is_image_collection: ImageCollectionPredicate = is_image_collection_by_prefix) -> None:
        self._is_image_collection = is_image_collection

    def rule_for(self, collection_name: str, registry: MediaRegistry) -> DimensionRule:
        rule = resolve_rule(
            collection_name,
            registry.global_conversions,
            registry.collections_by_name,
            is_image_collection=self._is_image_collection,
        )
        logger.debug("dimension rule for collection %r: %r", collection_name, rule.render())
        return rule

    def execute(self, collection_name: str, registry: MediaRegistry) -> str:
        return self.rule_for(collection_name, registry).render()
