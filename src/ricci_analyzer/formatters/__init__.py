"""Output formatters for Ricci Analyzer."""

from .base import BaseFormatter
from .json_formatter import JsonFormatter
from .text_formatter import TextFormatter
from .yaml_formatter import YamlFormatter

FORMATTERS = {
    "text": TextFormatter,
    "json": JsonFormatter,
    "yaml": YamlFormatter,
}


def get_formatter(name: str) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "text", "json", "yaml"

    Returns:
        Formatter instance

    Raises:
        ValueError: If name is not recognized
    """
    cls = FORMATTERS.get(name)
    if cls is None:
        raise ValueError(f"Unknown formatter: {name!r}. Choose from: {', '.join(sorted(FORMATTERS))}")
    return cls()


__all__ = [
    "BaseFormatter",
    "FORMATTERS",
    "JsonFormatter",
    "TextFormatter",
    "YamlFormatter",
    "get_formatter",
]
