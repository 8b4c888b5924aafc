"""Run every smell rule over one file."""

from __future__ import annotations

from typing import Optional

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..logging_config import get_logger
from ..metrics.lexer import SourceProfile, profile_source
from ..models import ComplexityScore, Smell
from ..scanning.languages import get_language_config
from .rules import (
    DeepNestingRule,
    DuplicateCodeRule,
    LongFunctionRule,
    LongParameterListRule,
    MagicNumberRule,
    SmellContext,
)

logger = get_logger(__name__)


def get_default_rules() -> list:
    """Return one instance of every smell rule."""
    return [
        LongFunctionRule(),
        DeepNestingRule(),
        DuplicateCodeRule(),
        MagicNumberRule(),
        LongParameterListRule(),
    ]


def detect(
    content: str,
    complexity: Optional[ComplexityScore],
    language: str,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    profile: Optional[SourceProfile] = None,
    path: Optional[str] = None,
    rules: Optional[list] = None,
) -> tuple[Smell, ...]:
    """Detect smells in one file.

    Args:
        content: Decoded file text
        complexity: The file's complexity score (its path labels the smells)
        language: Language display name; unknown languages yield no smells
        thresholds: Threshold configuration
        profile: Pre-computed lexical profile of ``content``
        path: Path for the smells when no complexity score is given
        rules: Rule instances to run (default: every rule)

    Returns:
        Smells sorted by severity desc, then line, then kind
    """
    cfg = get_language_config(language)
    if cfg is None:
        return ()

    if profile is None:
        profile = profile_source(content, language)
    if path is None:
        path = complexity.path if complexity is not None else ""

    context = SmellContext(
        path=path,
        language=cfg,
        profile=profile,
        complexity=complexity,
        thresholds=thresholds,
    )

    smells: list[Smell] = []
    for rule in rules if rules is not None else get_default_rules():
        found = rule.find(context)
        if found:
            logger.debug(f"{rule.kind.value}: {len(found)} in {path}")
        smells.extend(found)

    return tuple(sorted(smells, key=lambda s: s.sort_key))
