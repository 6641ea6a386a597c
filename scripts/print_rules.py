from __future__ import annotations

import argparse

from medialib.application.dimension_rules import DimensionRulesUseCase
from medialib.config import settings
from medialib.infrastructure.mime_types import PillowMimeRegistry
from medialib.infrastructure.registry_loader import load_registry


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the dimension rule of every media collection")
    parser.add_argument("registry", nargs="?", default=settings.media_registry_path)
    args = parser.parse_args()

    registry = load_registry(args.registry)
    use_case = DimensionRulesUseCase(PillowMimeRegistry().is_image_collection)

    for scope, conversion in registry.conversions_with_scope():
        print(f"{scope}\t{conversion.name}\t{conversion.target_width or '-'}x{conversion.target_height or '-'}")
    for collection in registry.collections:
        print(f"{collection.name}: {use_case.execute(collection.name, registry) or '<no rule>'}")


if __name__ == "__main__":
    main()
