"""Smell rules.

Each rule is independent: it reads a ``SmellContext`` and returns the smells
it finds. Rules share nothing with each other, so the detector output is just
the union of every rule's findings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Pattern

from ..config import ThresholdConfig
from ..metrics.lexer import SourceProfile
from ..models import ComplexityScore, Severity, Smell, SmellKind
from ..scanning.languages import LanguageConfig


@dataclass(frozen=True)
class SmellContext:
    """Everything a rule may look at for one file."""

    path: str
    language: LanguageConfig
    profile: SourceProfile
    complexity: Optional[ComplexityScore]
    thresholds: ThresholdConfig


def _excess_severity(excess: int, medium_at: int, high_at: int) -> Severity:
    if excess >= high_at:
        return Severity.HIGH
    if excess >= medium_at:
        return Severity.MEDIUM
    return Severity.LOW


class LongFunctionRule:
    """Functions longer than ``long_function_lines``.

    Severity grows with the excess relative to the threshold: up to half the
    threshold again is low, up to double is medium, beyond that high.
    """

    kind = SmellKind.LONG_FUNCTION

    def find(self, context: SmellContext) -> list[Smell]:
        limit = context.thresholds.long_function_lines
        smells = []
        for fn in context.profile.functions:
            if fn.length <= limit:
                continue
            ratio = (fn.length - limit) / limit
            if ratio <= 0.5:
                severity = Severity.LOW
            elif ratio <= 1.0:
                severity = Severity.MEDIUM
            else:
                severity = Severity.HIGH
            smells.append(
                Smell(
                    kind=self.kind,
                    path=context.path,
                    start_line=fn.start_line,
                    end_line=fn.end_line,
                    severity=severity,
                    rationale=f"Function '{fn.name}' spans {fn.length} lines (limit {limit})",
                )
            )
        return smells


class DeepNestingRule:
    """Contiguous regions nested deeper than ``max_nesting_depth``."""

    kind = SmellKind.DEEP_NESTING

    def find(self, context: SmellContext) -> list[Smell]:
        limit = context.thresholds.max_nesting_depth
        profile = context.profile
        smells = []

        start: Optional[int] = None
        last = 0
        peak = 0
        for idx, (code, depth) in enumerate(zip(profile.code_lines, profile.line_depths)):
            if not code.strip():
                continue
            if depth > limit:
                if start is None:
                    start, peak = idx, depth
                peak = max(peak, depth)
                last = idx
            elif start is not None:
                smells.append(self._smell(context.path, start, last, peak, limit))
                start = None
        if start is not None:
            smells.append(self._smell(context.path, start, last, peak, limit))
        return smells

    def _smell(self, path: str, start: int, end: int, peak: int, limit: int) -> Smell:
        return Smell(
            kind=self.kind,
            path=path,
            start_line=start + 1,
            end_line=end + 1,
            severity=_excess_severity(peak - limit, medium_at=2, high_at=3),
            rationale=f"Nesting reaches depth {peak} (limit {limit})",
        )


_HAS_WORD = re.compile(r"\w")


class DuplicateCodeRule:
    """Repeated blocks of at least ``duplicate_min_lines`` significant lines.

    Lines are compared after whitespace is collapsed; comments are already
    gone from the profile and punctuation-only lines (``}``, ``});``) are
    ignored. A later block is reported only when it does not overlap the
    earlier copy, and each match is extended as far as the copies agree.
    """

    kind = SmellKind.DUPLICATE_CODE

    def find(self, context: SmellContext) -> list[Smell]:
        window = context.thresholds.duplicate_min_lines
        significant: list[tuple[int, str]] = []
        for idx, code in enumerate(context.profile.code_lines):
            normalized = " ".join(code.split())
            if normalized and _HAS_WORD.search(normalized):
                significant.append((idx, normalized))

        texts = [text for _, text in significant]
        first_seen: dict[tuple[str, ...], int] = {}
        smells = []

        i = 0
        while i + window <= len(texts):
            key = tuple(texts[i : i + window])
            j = first_seen.get(key)
            if j is not None and j + window <= i:
                length = window
                while (
                    i + length < len(texts)
                    and j + length < i
                    and texts[j + length] == texts[i + length]
                ):
                    length += 1
                smells.append(self._smell(context.path, significant, j, i, length, window))
                i += length
                continue
            if j is None:
                first_seen[key] = i
            i += 1
        return smells

    def _smell(self, path, significant, first, later, length, window) -> Smell:
        first_line = significant[first][0] + 1
        if length >= 3 * window:
            severity = Severity.HIGH
        elif length >= 2 * window:
            severity = Severity.MEDIUM
        else:
            severity = Severity.LOW
        return Smell(
            kind=self.kind,
            path=path,
            start_line=significant[later][0] + 1,
            end_line=significant[later + length - 1][0] + 1,
            severity=severity,
            rationale=f"{length} lines duplicate the block starting at line {first_line}",
        )


# Languages where "cond ? a : b" is a conditional expression.
_TERNARY_LANGUAGES = frozenset(
    {"JavaScript", "TypeScript", "Java", "C#", "C", "C++", "PHP", "Swift", "Ruby", "Perl"}
)

_NUMBER = re.compile(r"(?<![\w.])-?(?:0[xX][0-9a-fA-F]+|\d+(?:\.\d+)?)(?![\w.])")
_CONDITION_END = re.compile(r"\{|\bthen\b|\bdo\b|\belse\b")
_TERNARY = re.compile(r"([^=;(){}?:,]+)\?(?![?.:])")


@lru_cache(maxsize=None)
def _condition_regex(keywords: tuple[str, ...]) -> Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(keywords) + r")\b")


def _numeric_value(literal: str) -> Optional[float]:
    try:
        if literal.lstrip("-").lower().startswith("0x"):
            return float(int(literal, 16))
        return float(literal)
    except ValueError:
        return None


class MagicNumberRule:
    """Numeric literals inside conditional expressions.

    Covers if/elif/while style headers, case/when labels and ternary
    conditions. Literals in ``magic_number_allowlist`` are ignored; the
    comparison is numeric, so ``10.0`` matches an allowlisted ``10``.
    """

    kind = SmellKind.MAGIC_NUMBER

    def find(self, context: SmellContext) -> list[Smell]:
        allowed = {
            value
            for value in map(_numeric_value, context.thresholds.magic_number_allowlist)
            if value is not None
        }
        keywords = _condition_regex(context.language.condition_keywords)
        ternary = context.language.name in _TERNARY_LANGUAGES
        smells = []

        for idx, code in enumerate(context.profile.code_lines):
            seen: set[int] = set()
            for start, end in self._condition_spans(code, keywords, ternary):
                for match in _NUMBER.finditer(code, start, end):
                    if match.start() in seen:
                        continue
                    seen.add(match.start())
                    literal = match.group(0)
                    if _numeric_value(literal) in allowed:
                        continue
                    smells.append(
                        Smell(
                            kind=self.kind,
                            path=context.path,
                            start_line=idx + 1,
                            end_line=idx + 1,
                            severity=Severity.LOW,
                            rationale=f"Magic number {literal} in a condition",
                        )
                    )
        return smells

    @staticmethod
    def _condition_spans(code: str, keywords: Pattern[str], ternary: bool) -> list[tuple[int, int]]:
        spans = []
        for match in keywords.finditer(code):
            start = match.end()
            end = len(code)
            stop = _CONDITION_END.search(code, start)
            if stop:
                end = stop.start()
            if match.group(0) in ("case", "when"):
                colon = code.find(":", start, end)
                if colon >= 0:
                    end = colon
            elif code[start:end].rstrip().endswith(":"):
                end = start + len(code[start:end].rstrip()) - 1
            spans.append((start, end))
        if ternary:
            spans.extend((m.start(1), m.end(1)) for m in _TERNARY.finditer(code))
        return spans


class LongParameterListRule:
    """Functions declaring more than ``max_parameters`` parameters."""

    kind = SmellKind.LONG_PARAMETER_LIST

    def find(self, context: SmellContext) -> list[Smell]:
        limit = context.thresholds.max_parameters
        smells = []
        for fn in context.profile.functions:
            if fn.parameter_count <= limit:
                continue
            smells.append(
                Smell(
                    kind=self.kind,
                    path=context.path,
                    start_line=fn.start_line,
                    end_line=fn.end_line,
                    severity=_excess_severity(fn.parameter_count - limit, medium_at=3, high_at=5),
                    rationale=(
                        f"Function '{fn.name}' takes {fn.parameter_count} parameters (limit {limit})"
                    ),
                )
            )
        return smells
