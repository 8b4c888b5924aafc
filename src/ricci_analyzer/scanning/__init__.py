"""Tree walking and language classification."""

from .languages import LANGUAGES, LanguageConfig, classify, count_lines, get_language_config
from .walker import TreeWalker, WalkEntry, is_binary_content, sniff_binary

__all__ = [
    "LANGUAGES",
    "LanguageConfig",
    "TreeWalker",
    "WalkEntry",
    "classify",
    "count_lines",
    "get_language_config",
    "is_binary_content",
    "sniff_binary",
]
