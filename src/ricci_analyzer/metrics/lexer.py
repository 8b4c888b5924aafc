"""Lexical source profiling shared by the complexity scorer and smell rules.

No parsing happens here. A profile is built from three cheap passes over
the text:

  1. Literal stripping: comments are removed and string literals collapse to
     an empty literal. Newlines inside either are preserved, so line numbers
     in the stripped text match the original file.
  2. Nesting: per-line block depth using the language's nesting mode
     (brace counting, an indentation stack, or opener/closer keywords).
  3. Function spans: header regexes from the language table, with the body
     end found by brace matching, indentation, or keyword depth.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Pattern

from ..models import UNKNOWN_LANGUAGE
from ..scanning.languages import LanguageConfig, get_language_config

# Names a header regex may capture that are really control-flow keywords.
_RESERVED_NAMES = frozenset(
    {
        "if", "else", "elif", "elseif", "elsif", "for", "foreach", "while", "do",
        "switch", "case", "when", "catch", "try", "with", "return", "match",
        "loop", "unless", "until", "sizeof", "typeof", "new", "function",
        "select", "defer", "go", "guard", "repeat", "throw", "await", "yield",
    }
)

# Receiver parameters that do not count toward a parameter list.
_IMPLICIT_PARAMETERS = frozenset({"self", "cls", "&self", "&mut self", "mut self", "this", "*", "/"})

# How far past a header we look for the opening brace of its body.
_BODY_LOOKAHEAD = 10

_OPENING = "([{"
_CLOSING = ")]}"


@dataclass(frozen=True)
class FunctionSpan:
    """A function found by header regex. Lines are 1-based and inclusive."""

    name: str
    start_line: int
    end_line: int
    parameter_count: int

    @property
    def length(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class SourceProfile:
    """Lexical view of one file."""

    language: str
    lines: tuple[str, ...]
    code_lines: tuple[str, ...]
    line_depths: tuple[int, ...]
    functions: tuple[FunctionSpan, ...]
    branch_count: int

    @property
    def max_depth(self) -> int:
        return max(self.line_depths, default=0)

    @property
    def longest_function_lines(self) -> int:
        return max((fn.length for fn in self.functions), default=0)

    @property
    def line_count(self) -> int:
        return len(self.lines)


def profile_source(content: str, language: str) -> SourceProfile:
    """Build the lexical profile of ``content`` for ``language``.

    Unknown languages produce an empty profile (no functions, zero depth,
    zero branches) that still carries the original lines.
    """
    lines = tuple(_split_lines(content))
    cfg = get_language_config(language)
    if cfg is None:
        return SourceProfile(
            language=UNKNOWN_LANGUAGE,
            lines=lines,
            code_lines=lines,
            line_depths=tuple(0 for _ in lines),
            functions=(),
            branch_count=0,
        )

    code = strip_literals(content, cfg)
    code_lines = tuple(_split_lines(code))
    # Stripping preserves newlines, so both views have the same length.
    if len(code_lines) < len(lines):
        code_lines += ("",) * (len(lines) - len(code_lines))

    return SourceProfile(
        language=cfg.name,
        lines=lines,
        code_lines=code_lines,
        line_depths=tuple(_line_depths(code_lines, cfg)),
        functions=tuple(_find_functions(code_lines, cfg)),
        branch_count=count_branches(code, cfg),
    )


# ── Literal stripping ──────────────────────────────────────────────


def _scoped(pattern: str, flags: int) -> str:
    inline = ""
    if flags & re.DOTALL:
        inline += "s"
    if flags & re.MULTILINE:
        inline += "m"
    return f"(?{inline}:{pattern})" if inline else f"(?:{pattern})"


@lru_cache(maxsize=None)
def _literal_regex(cfg: LanguageConfig) -> Optional[Pattern[str]]:
    strings = "|".join(_scoped(p, f) for p, f in cfg.string_patterns)
    comments = "|".join(_scoped(p, f) for p, f in cfg.comment_patterns)
    parts = []
    if strings:
        parts.append(f"(?P<string>{strings})")
    if comments:
        parts.append(f"(?P<comment>{comments})")
    if not parts:
        return None
    return re.compile("|".join(parts))


def strip_literals(content: str, cfg: LanguageConfig) -> str:
    """Remove comments and blank out string literals, keeping line breaks."""
    regex = _literal_regex(cfg)
    if regex is None:
        return content

    def _replace(match: re.Match) -> str:
        newlines = "\n" * match.group(0).count("\n")
        if match.group("string") is not None:
            return '""' + newlines
        return newlines

    return regex.sub(_replace, content.replace("\r\n", "\n").replace("\r", "\n"))


def _split_lines(text: str) -> list[str]:
    if not text:
        return []
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


# ── Branches ───────────────────────────────────────────────────────


@lru_cache(maxsize=None)
def _branch_regex(cfg: LanguageConfig) -> Optional[Pattern[str]]:
    alternatives = [rf"\b{kw}\b" for kw in cfg.branch_keywords]
    alternatives.extend(cfg.branch_operators)
    if not alternatives:
        return None
    return re.compile("|".join(alternatives))


def count_branches(code: str, cfg: LanguageConfig) -> int:
    """Count branch/loop keywords and short-circuit operators in stripped code."""
    regex = _branch_regex(cfg)
    if regex is None:
        return 0
    return sum(1 for _ in regex.finditer(code))


# ── Nesting ────────────────────────────────────────────────────────


def _line_depths(code_lines: tuple[str, ...], cfg: LanguageConfig) -> list[int]:
    if cfg.nesting_mode == "indent":
        return _indent_depths(code_lines)
    if cfg.nesting_mode == "keyword":
        return _keyword_depths(code_lines, cfg)
    return _brace_depths(code_lines)


def _brace_depths(code_lines: tuple[str, ...]) -> list[int]:
    depths = []
    depth = 0
    for line in code_lines:
        peak = depth
        for ch in line:
            if ch == "{":
                depth += 1
                peak = max(peak, depth)
            elif ch == "}":
                depth = max(depth - 1, 0)
        depths.append(peak)
    return depths


def _indent_width(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip())


def _bracket_balance(line: str) -> int:
    return sum(line.count(c) for c in _OPENING) - sum(line.count(c) for c in _CLOSING)


def _indent_depths(code_lines: tuple[str, ...]) -> list[int]:
    depths = []
    stack = [0]
    current = 0
    open_brackets = 0
    continued = False
    for line in code_lines:
        stripped = line.strip()
        if stripped and open_brackets <= 0 and not continued:
            width = _indent_width(line)
            while len(stack) > 1 and width < stack[-1]:
                stack.pop()
            if width > stack[-1]:
                stack.append(width)
            current = len(stack) - 1
        depths.append(current)
        if stripped:
            open_brackets = max(open_brackets + _bracket_balance(stripped), 0)
            continued = stripped.endswith("\\")
    return depths


@lru_cache(maxsize=None)
def _keyword_regexes(cfg: LanguageConfig) -> tuple[Optional[Pattern[str]], Optional[Pattern[str]]]:
    openers = re.compile("|".join(cfg.block_openers)) if cfg.block_openers else None
    closers = re.compile("|".join(cfg.block_closers)) if cfg.block_closers else None
    return openers, closers


def _keyword_counts(line: str, cfg: LanguageConfig) -> tuple[int, int]:
    openers, closers = _keyword_regexes(cfg)
    opened = sum(1 for _ in openers.finditer(line)) if openers else 0
    closed = sum(1 for _ in closers.finditer(line)) if closers else 0
    return opened, closed


def _keyword_depths(code_lines: tuple[str, ...], cfg: LanguageConfig) -> list[int]:
    depths = []
    depth = 0
    for line in code_lines:
        opened, closed = _keyword_counts(line, cfg)
        start = depth
        depth = max(depth - closed, 0) + opened
        depths.append(max(start, depth))
    return depths


# ── Functions ──────────────────────────────────────────────────────


@lru_cache(maxsize=None)
def _function_regexes(cfg: LanguageConfig) -> tuple[Pattern[str], ...]:
    return tuple(re.compile(p) for p in cfg.function_patterns)


def _match_header(line: str, patterns: tuple[Pattern[str], ...]) -> Optional[re.Match]:
    for pattern in patterns:
        match = pattern.search(line)
        if match and match.group(1) not in _RESERVED_NAMES:
            return match
    return None


def _find_functions(code_lines: tuple[str, ...], cfg: LanguageConfig) -> list[FunctionSpan]:
    patterns = _function_regexes(cfg)
    spans: list[FunctionSpan] = []
    for i, line in enumerate(code_lines):
        match = _match_header(line, patterns)
        if match is None:
            continue

        paren = _parameter_start(line, match.end(1))
        if cfg.nesting_mode == "indent":
            end = _indent_function_end(code_lines, i)
        elif cfg.nesting_mode == "keyword":
            end = _keyword_function_end(code_lines, i, cfg)
        else:
            start_col = paren if paren is not None else match.end(1)
            end = _brace_function_end(code_lines, i, start_col, patterns)
        if end is None:
            continue

        params = 0
        if paren is not None:
            params = _count_parameters(code_lines, i, paren, cfg.generic_angles)
        spans.append(FunctionSpan(match.group(1), i + 1, end + 1, params))
    return spans


_DIRECT_PAREN = re.compile(r"\s*(?:<[^()]*?>|\[[^()]*?\])?\s*\(")


def _parameter_start(line: str, name_end: int) -> Optional[int]:
    """Column of the '(' opening the parameter list, if on the header line."""
    direct = _DIRECT_PAREN.match(line, name_end)
    if direct:
        return direct.end() - 1
    col = line.find("(", name_end)
    return col if col >= 0 else None


def _brace_function_end(
    code_lines: tuple[str, ...], start: int, col: int, patterns: tuple[Pattern[str], ...]
) -> Optional[int]:
    """Line index of the brace closing the body, or None for declarations."""
    depth = 0
    paren = 0
    opened = False
    for j in range(start, len(code_lines)):
        line = code_lines[j]
        if not opened and j > start:
            if j - start > _BODY_LOOKAHEAD or _match_header(line, patterns):
                return None
        k = col if j == start else 0
        while k < len(line):
            ch = line[k]
            if ch in "([":
                paren += 1
            elif ch in ")]":
                paren -= 1
            elif not opened:
                if paren <= 0 and ch == ";":
                    return None
                if paren <= 0 and ch == "=" and _is_assignment(line, k):
                    # Expression body, unless it is "= {"
                    if not line[k + 1 :].lstrip().startswith("{"):
                        return None
                if ch == "{":
                    opened = True
                    depth = 1
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return j
            k += 1
    return len(code_lines) - 1 if opened else None


def _is_assignment(line: str, k: int) -> bool:
    before = line[k - 1] if k > 0 else ""
    after = line[k + 1] if k + 1 < len(line) else ""
    return after not in "=>" and before not in "=!<>:+-*/%&|^"


def _indent_function_end(code_lines: tuple[str, ...], start: int) -> int:
    header_indent = _indent_width(code_lines[start])
    j = start
    balance = _bracket_balance(code_lines[start])
    while balance > 0 and j + 1 < len(code_lines):
        j += 1
        balance += _bracket_balance(code_lines[j])
    end = j
    for k in range(j + 1, len(code_lines)):
        line = code_lines[k]
        if not line.strip():
            continue
        if _indent_width(line) <= header_indent:
            break
        end = k
    return end


def _keyword_function_end(
    code_lines: tuple[str, ...], start: int, cfg: LanguageConfig
) -> Optional[int]:
    depth = 0
    opened = False
    for j in range(start, len(code_lines)):
        if not opened and j - start > 2:
            return None
        opened_count, closed_count = _keyword_counts(code_lines[j], cfg)
        depth += opened_count - closed_count
        if opened and depth <= 0:
            return j
        if depth > 0:
            opened = True
        elif j == start and opened_count:
            return start
    return len(code_lines) - 1 if opened else None


def _count_parameters(
    code_lines: tuple[str, ...], start: int, col: int, generic_angles: bool
) -> int:
    """Count top-level comma-separated entries of the list opening at ``col``."""
    items: list[str] = []
    current: list[str] = []
    depth = 0
    angles = 0
    for j in range(start, len(code_lines)):
        line = code_lines[j]
        for ch in line[col + 1 :] if j == start else line:
            if ch in _OPENING:
                depth += 1
            elif ch in _CLOSING:
                if depth == 0:
                    items.append("".join(current))
                    return _real_parameters(items)
                depth -= 1
            elif generic_angles and ch == "<":
                angles += 1
            elif generic_angles and ch == ">":
                angles = max(angles - 1, 0)
            elif ch == "," and depth == 0 and angles == 0:
                items.append("".join(current))
                current = []
                continue
            current.append(ch)
        current.append(" ")
    return 0


def _real_parameters(items: list[str]) -> int:
    count = 0
    for item in items:
        name = " ".join(item.split())
        if not name:
            continue
        # "self: Self", "&self" and friends
        head = name.split(":")[0].strip()
        if head in _IMPLICIT_PARAMETERS:
            continue
        count += 1
    return count
