"""Lexical metrics: source profiling and complexity scoring."""

from .complexity import average, score
from .lexer import FunctionSpan, SourceProfile, count_branches, profile_source, strip_literals

__all__ = [
    "FunctionSpan",
    "SourceProfile",
    "average",
    "count_branches",
    "profile_source",
    "score",
    "strip_literals",
]
