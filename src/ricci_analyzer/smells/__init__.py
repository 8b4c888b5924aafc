"""Heuristic code-smell detection."""

from .detector import detect, get_default_rules
from .rules import (
    DeepNestingRule,
    DuplicateCodeRule,
    LongFunctionRule,
    LongParameterListRule,
    MagicNumberRule,
    SmellContext,
)

__all__ = [
    "DeepNestingRule",
    "DuplicateCodeRule",
    "LongFunctionRule",
    "LongParameterListRule",
    "MagicNumberRule",
    "SmellContext",
    "detect",
    "get_default_rules",
]
