"""Per-file lexical complexity scoring."""

from typing import Optional

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..models import UNKNOWN_LANGUAGE, ComplexityScore
from .lexer import SourceProfile, profile_source


def score(
    content: str,
    language: str,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    path: str = "",
    profile: Optional[SourceProfile] = None,
) -> ComplexityScore:
    """Score one file's source text.

    score = branch_count
            + 2 * max_nesting_depth
            + max(0, longest_function_lines - function_length_threshold)

    Files in an unknown language score zero.

    Args:
        content: Decoded file text
        language: Language display name from the classifier
        thresholds: Threshold configuration
        path: Relative path recorded on the result
        profile: Pre-computed profile of ``content``, to avoid lexing twice

    Returns:
        ComplexityScore for the file
    """
    if profile is None:
        profile = profile_source(content, language)

    if profile.language == UNKNOWN_LANGUAGE:
        return ComplexityScore(
            path=path,
            score=0,
            branch_count=0,
            max_nesting_depth=0,
            longest_function_lines=0,
            function_count=0,
            line_count=profile.line_count,
        )

    longest = profile.longest_function_lines
    length_penalty = max(0, longest - thresholds.function_length_threshold)
    total = profile.branch_count + 2 * profile.max_depth + length_penalty

    return ComplexityScore(
        path=path,
        score=total,
        branch_count=profile.branch_count,
        max_nesting_depth=profile.max_depth,
        longest_function_lines=longest,
        function_count=len(profile.functions),
        line_count=profile.line_count,
    )


def average(scores) -> float:
    """Arithmetic mean of scores rounded to two decimals (0.0 when empty)."""
    values = [s.score for s in scores]
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)
