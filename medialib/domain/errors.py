from __future__ import annotations


class InvalidMediaDeclarationError(ValueError):
    pass


class InvalidDimensionRuleError(ValueError):
    pass
