"""The ``dimensions`` validation rule derived from media conversions.

Rendered forms are exactly::

    dimensions:min_width=W,min_height=H
    dimensions:min_width=W
    dimensions:min_height=H

and the empty string when nothing constrains the upload.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from medialib.domain.errors import InvalidDimensionRuleError

RULE_NAME = "dimensions"
_KEYS = ("min_width", "min_height")
_POSITIVE_INT = re.compile(r"[1-9][0-9]*")


@dataclass(frozen=True)
class DimensionRule:
    min_width: int | None = None
    min_height: int | None = None

    def __post_init__(self) -> None:
        for key in _KEYS:
            value = getattr(self, key)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidDimensionRuleError(f"{key} must be a positive integer, got {value!r}")

    def __bool__(self) -> bool:
        return self.min_width is not None or self.min_height is not None

    def render(self) -> str:
        parts = []
        if self.min_width is not None:
            parts.append(f"min_width={self.min_width}")
        if self.min_height is not None:
            parts.append(f"min_height={self.min_height}")
        if not parts:
            return ""
        return f"{RULE_NAME}:{','.join(parts)}"

    def __str__(self) -> str:
        return self.render()

    @classmethod
    def parse(cls, text: str) -> DimensionRule:
        if not text:
            return cls()

        name, sep, params = text.partition(":")
        if name != RULE_NAME or not sep or not params:
            raise InvalidDimensionRuleError(f"Not a dimensions rule: {text!r}")

        values: dict[str, int] = {}
        for param in params.split(","):
            key, eq, raw = param.partition("=")
            if not eq or key not in _KEYS or key in values:
                raise InvalidDimensionRuleError(f"Unexpected parameter {param!r} in {text!r}")
            if not _POSITIVE_INT.fullmatch(raw):
                raise InvalidDimensionRuleError(f"{key} must be a positive integer in {text!r}")
            values[key] = int(raw)

        if list(values) != [k for k in _KEYS if k in values]:
            raise InvalidDimensionRuleError(f"min_width must come before min_height in {text!r}")

        return cls(min_width=values.get("min_width"), min_height=values.get("min_height"))

    def violations(self, width: int, height: int) -> list[str]:
        problems = []
        if self.min_width is not None and width < self.min_width:
            problems.append(f"width {width}px is below the minimum of {self.min_width}px")
        if self.min_height is not None and height < self.min_height:
            problems.append(f"height {height}px is below the minimum of {self.min_height}px")
        return problems

    def is_satisfied_by(self, width: int, height: int) -> bool:
        return not self.violations(width, height)
