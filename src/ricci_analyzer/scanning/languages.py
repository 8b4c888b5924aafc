"""Language configurations: the single source of truth for all language patterns.

Adding a new language:
  1. Add a LanguageConfig entry to LANGUAGES below.
  2. That's it. Classification, the lexical profiler and the smell rules
     pick it up automatically.
"""

from __future__ import annotations

import re as _re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional, Union

from ..models import UNKNOWN_LANGUAGE


@dataclass(frozen=True)
class LanguageConfig:
    """Everything the classifier and the lexical profiler need to know about a language."""

    name: str
    extensions: tuple[str, ...]

    # Interpreter names accepted on a shebang line (e.g. "python3").
    interpreters: tuple[str, ...] = ()

    # Comment syntax stripped before keyword counting.
    # Each tuple is (pattern, flags).
    comment_patterns: tuple[tuple[str, int], ...] = ()

    # String literal patterns; replaced by an empty literal before counting.
    string_patterns: tuple[tuple[str, int], ...] = ()

    # Function header regexes. Group 1 captures the function name.
    function_patterns: tuple[str, ...] = ()

    # Branch/loop keywords. Each occurrence adds 1 to the branch count.
    branch_keywords: tuple[str, ...] = ()

    # Short-circuit operators (regex, not word-bounded). Each occurrence adds 1.
    branch_operators: tuple[str, ...] = ()

    # Keywords that introduce a conditional expression (magic number scan).
    condition_keywords: tuple[str, ...] = ("if", "while")

    # Nesting mode: "brace" (count {}), "indent" (indentation stack),
    # or "keyword" (block_openers vs block_closers).
    nesting_mode: str = "brace"
    block_openers: tuple[str, ...] = ()
    block_closers: tuple[str, ...] = ()

    # Whether <...> groups parameter types (generics) in function headers.
    generic_angles: bool = True


# ── Re-usable building blocks ──────────────────────────────────────

_C_LINE_COMMENT = (r"//[^\n]*", 0)
_C_BLOCK_COMMENT = (r"/\*.*?\*/", _re.DOTALL)
_HASH_COMMENT = (r"#[^\n]*", 0)
_SHELL_COMMENT = (r"(?:(?<=\s)|^)#[^\n]*", _re.MULTILINE)
_LUA_BLOCK_COMMENT = (r"--\[\[.*?\]\]", _re.DOTALL)
_LUA_LINE_COMMENT = (r"--[^\n]*", 0)

_TRIPLE_DQ_STR = (r'""".*?"""', _re.DOTALL)
_TRIPLE_SQ_STR = (r"'''.*?'''", _re.DOTALL)
_DOUBLE_QUOTE_STR = (r'"(?:\\.|[^"\\\n])*"', 0)
_SINGLE_QUOTE_STR = (r"'(?:\\.|[^'\\\n])*'", 0)
_CHAR_LITERAL = (r"'(?:\\.|[^'\\\n])'", 0)
_BACKTICK_STR = (r"`(?:\\.|[^`\\])*`", _re.DOTALL)
_RAW_RUST_STR = (r'(?<!\w)r#*".*?"#*', _re.DOTALL)
_LUA_LONG_STR = (r"\[\[.*?\]\]", _re.DOTALL)

_C_FAMILY_OPERATORS = ("&&", r"\|\|")

# Modifier run used by Java-like method headers.
_JAVA_MODIFIERS = (
    r"(?:(?:public|private|protected|internal|static|final|abstract|synchronized"
    r"|native|override|virtual|async|sealed|extern|unsafe|partial|default)\s+)*"
)

# Annotations or attributes written on the header line.
_JAVA_ANNOTATIONS = r"(?:@[\w.]+(?:\([^)]*\))?\s+|\[[^\]]*\]\s*)*"

# Return type: dotted name, optional generic arguments, array or nullable suffixes.
_JAVA_TYPE = r"[\w.]+(?:\s*<[^()]*?>)?(?:\[\]|\?)*"

# C/C++ definitions start at column 0 and never end with ';' on the header line.
_C_FUNCTION = r"^[A-Za-z_][\w\s\*&]*?\b([A-Za-z_]\w*)\s*\([^;]*$"
_CPP_FUNCTION = r"^[A-Za-z_][\w\s\*&:<>,~]*?\b([A-Za-z_~]\w*)\s*\([^;]*$"

_C_BRANCHES = ("if", "for", "while", "case", "catch")


# ── Language definitions ───────────────────────────────────────────

LANGUAGES: dict[str, LanguageConfig] = {
    "rust": LanguageConfig(
        name="Rust",
        extensions=(".rs",),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_RAW_RUST_STR, _DOUBLE_QUOTE_STR, _CHAR_LITERAL),
        function_patterns=(r"\bfn\s+(\w+)",),
        branch_keywords=("if", "for", "while", "loop", "match"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "while"),
    ),
    "python": LanguageConfig(
        name="Python",
        extensions=(".py", ".pyw", ".pyi"),
        interpreters=("python", "python2", "python3"),
        comment_patterns=(_HASH_COMMENT,),
        string_patterns=(_TRIPLE_DQ_STR, _TRIPLE_SQ_STR, _DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        function_patterns=(r"^\s*(?:async\s+)?def\s+(\w+)\s*\(",),
        branch_keywords=("if", "elif", "for", "while", "except", "and", "or", "case"),
        condition_keywords=("if", "elif", "while"),
        nesting_mode="indent",
        generic_angles=False,
    ),
    "javascript": LanguageConfig(
        name="JavaScript",
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        interpreters=("node", "nodejs"),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_BACKTICK_STR, _DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        function_patterns=(
            r"\bfunction\s*\*?\s*(\w+)\s*\(",
            r"\b(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:function\b|\([^)]*\)?\s*=>|\($)",
            r"^\s*(?:(?:async|static|get|set)\s+)*(\w+)\s*\([^)]*\)?\s*\{",
        ),
        branch_keywords=_C_BRANCHES,
        branch_operators=_C_FAMILY_OPERATORS + (r"\?\?",),
        condition_keywords=("if", "while", "case"),
        generic_angles=False,
    ),
    "typescript": LanguageConfig(
        name="TypeScript",
        extensions=(".ts", ".tsx", ".mts", ".cts"),
        interpreters=("ts-node", "deno"),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_BACKTICK_STR, _DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        function_patterns=(
            r"\bfunction\s*\*?\s*(\w+)\s*(?:<[^>]*>)?\s*\(",
            r"\b(?:const|let|var)\s+(\w+)\s*(?::[^=]+)?=\s*(?:async\s+)?(?:function\b|\([^)]*\)?\s*(?::\s*[^=]+)?=>|\($)",
            r"^\s*(?:(?:public|private|protected|readonly|async|static|get|set)\s+)*(\w+)\s*(?:<[^>]*>)?\s*\([^)]*\)?\s*(?::\s*[^{]+)?\{",
        ),
        branch_keywords=_C_BRANCHES,
        branch_operators=_C_FAMILY_OPERATORS + (r"\?\?",),
        condition_keywords=("if", "while", "case"),
    ),
    "go": LanguageConfig(
        name="Go",
        extensions=(".go",),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_BACKTICK_STR, _DOUBLE_QUOTE_STR, _CHAR_LITERAL),
        function_patterns=(r"^func\s+(?:\([^)]*\)\s*)?(\w+)\s*(?:\[[^\]]*\])?\s*\(",),
        branch_keywords=("if", "for", "case", "select"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "for", "case"),
        generic_angles=False,
    ),
    "java": LanguageConfig(
        name="Java",
        extensions=(".java",),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _CHAR_LITERAL),
        function_patterns=(
            r"^\s*" + _JAVA_ANNOTATIONS + _JAVA_MODIFIERS + r"(?:<[^>]+>\s+)?" + _JAVA_TYPE + r"\s+(\w+)\s*\(",
        ),
        branch_keywords=_C_BRANCHES,
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "while", "case"),
    ),
    "csharp": LanguageConfig(
        name="C#",
        extensions=(".cs",),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _CHAR_LITERAL),
        function_patterns=(
            r"^\s*" + _JAVA_ANNOTATIONS + _JAVA_MODIFIERS + r"(?:<[^>]+>\s+)?" + _JAVA_TYPE + r"\s+(\w+)\s*(?:<[^>]*>)?\s*\(",
        ),
        branch_keywords=_C_BRANCHES + ("foreach",),
        branch_operators=_C_FAMILY_OPERATORS + (r"\?\?",),
        condition_keywords=("if", "while", "case"),
    ),
    "c": LanguageConfig(
        name="C",
        extensions=(".c", ".h"),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _CHAR_LITERAL),
        function_patterns=(_C_FUNCTION,),
        branch_keywords=("if", "for", "while", "case"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "while", "case"),
        generic_angles=False,
    ),
    "cpp": LanguageConfig(
        name="C++",
        extensions=(".cpp", ".cc", ".cxx", ".hpp", ".hh", ".hxx"),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _CHAR_LITERAL),
        function_patterns=(_CPP_FUNCTION,),
        branch_keywords=_C_BRANCHES,
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "while", "case"),
    ),
    "kotlin": LanguageConfig(
        name="Kotlin",
        extensions=(".kt", ".kts"),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_TRIPLE_DQ_STR, _DOUBLE_QUOTE_STR, _CHAR_LITERAL),
        function_patterns=(r"\bfun\s+(?:<[^>]+>\s*)?(?:[\w.]+\.)?(\w+)\s*\(",),
        branch_keywords=("if", "for", "while", "when", "catch"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "while"),
    ),
    "swift": LanguageConfig(
        name="Swift",
        extensions=(".swift",),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_TRIPLE_DQ_STR, _DOUBLE_QUOTE_STR),
        function_patterns=(r"\bfunc\s+(\w+)",),
        branch_keywords=("if", "guard", "for", "while", "repeat", "case", "catch"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "guard", "while", "case"),
    ),
    "scala": LanguageConfig(
        name="Scala",
        extensions=(".scala", ".sc"),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_TRIPLE_DQ_STR, _DOUBLE_QUOTE_STR, _CHAR_LITERAL),
        function_patterns=(r"\bdef\s+(\w+)",),
        branch_keywords=("if", "for", "while", "match", "case", "catch"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "while"),
        generic_angles=False,
    ),
    "php": LanguageConfig(
        name="PHP",
        extensions=(".php",),
        interpreters=("php",),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT, _HASH_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        function_patterns=(r"\bfunction\s+&?\s*(\w+)\s*\(",),
        branch_keywords=("if", "elseif", "for", "foreach", "while", "case", "catch", "and", "or"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "elseif", "while", "case"),
        generic_angles=False,
    ),
    "ruby": LanguageConfig(
        name="Ruby",
        extensions=(".rb", ".rake", ".gemspec"),
        interpreters=("ruby",),
        comment_patterns=(_HASH_COMMENT,),
        string_patterns=(_DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        function_patterns=(r"^\s*def\s+(?:self\.)?(\w+[?!=]?)",),
        branch_keywords=("if", "elsif", "unless", "while", "until", "for", "when", "rescue", "and", "or"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "elsif", "unless", "while", "until", "when"),
        nesting_mode="keyword",
        block_openers=(
            r"^\s*(?:def|class|module|begin|case|if|unless|while|until|for)\b",
            r"=\s*(?:if|case|begin)\b",
            r"\bdo\b",
        ),
        block_closers=(r"\bend\b",),
        generic_angles=False,
    ),
    "lua": LanguageConfig(
        name="Lua",
        extensions=(".lua",),
        interpreters=("lua", "luajit"),
        comment_patterns=(_LUA_BLOCK_COMMENT, _LUA_LINE_COMMENT),
        string_patterns=(_LUA_LONG_STR, _DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        function_patterns=(r"\bfunction\s+([\w.:]+)\s*\(",),
        branch_keywords=("if", "elseif", "for", "while", "repeat", "and", "or"),
        condition_keywords=("if", "elseif", "while", "until"),
        nesting_mode="keyword",
        block_openers=(r"\bfunction\b", r"\bdo\b", r"\bthen\b", r"\brepeat\b"),
        block_closers=(r"\bend\b", r"\buntil\b", r"\belseif\b"),
        generic_angles=False,
    ),
    "shell": LanguageConfig(
        name="Shell",
        extensions=(".sh", ".bash", ".zsh", ".ksh"),
        interpreters=("sh", "bash", "zsh", "ksh", "dash"),
        comment_patterns=(_SHELL_COMMENT,),
        string_patterns=(_DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        function_patterns=(
            r"^\s*function\s+([\w-]+)",
            r"^\s*([\w-]+)\s*\(\s*\)",
        ),
        branch_keywords=("if", "elif", "for", "while", "until", "case"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "elif", "while", "until"),
        nesting_mode="keyword",
        block_openers=(r"\bthen\b", r"\bdo\b", r"\bcase\b", r"\{"),
        block_closers=(r"\bfi\b", r"\bdone\b", r"\besac\b", r"\}", r"\belif\b"),
        generic_angles=False,
    ),
    "perl": LanguageConfig(
        name="Perl",
        extensions=(".pl", ".pm"),
        interpreters=("perl",),
        comment_patterns=(_HASH_COMMENT,),
        string_patterns=(_DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        function_patterns=(r"\bsub\s+(\w+)",),
        branch_keywords=("if", "elsif", "unless", "for", "foreach", "while", "until", "and", "or"),
        branch_operators=_C_FAMILY_OPERATORS,
        condition_keywords=("if", "elsif", "unless", "while", "until"),
        generic_angles=False,
    ),
}


# Extension and interpreter lookup tables (built from LANGUAGES)
_EXTENSION_TO_LANGUAGE: dict[str, LanguageConfig] = {}
_INTERPRETER_TO_LANGUAGE: dict[str, LanguageConfig] = {}
_NAME_TO_LANGUAGE: dict[str, LanguageConfig] = {}
for _cfg in LANGUAGES.values():
    _NAME_TO_LANGUAGE[_cfg.name] = _cfg
    for _ext in _cfg.extensions:
        _EXTENSION_TO_LANGUAGE[_ext] = _cfg
    for _interp in _cfg.interpreters:
        _INTERPRETER_TO_LANGUAGE[_interp] = _cfg

_SHEBANG = _re.compile(r"^#!\s*(\S+)(?:\s+(.*))?")
_VERSION_SUFFIX = _re.compile(r"[\d.]+$")


def get_language_config(name: str) -> Optional[LanguageConfig]:
    """Look up a language by display name ("Python") or key ("python")."""
    return _NAME_TO_LANGUAGE.get(name) or LANGUAGES.get(name)


def classify(path: Union[str, PurePath], first_line: Optional[str] = None) -> str:
    """Classify a file by extension, falling back to its shebang line.

    Args:
        path: File path (only the name is used)
        first_line: First line of the file, when available

    Returns:
        Language display name (e.g. "Python") or "Unknown"
    """
    suffix = PurePath(path).suffix.lower()
    cfg = _EXTENSION_TO_LANGUAGE.get(suffix)
    if cfg is not None:
        return cfg.name

    if first_line:
        interpreter = interpreter_from_shebang(first_line)
        if interpreter:
            cfg = _INTERPRETER_TO_LANGUAGE.get(interpreter)
            if cfg is None:
                cfg = _INTERPRETER_TO_LANGUAGE.get(_VERSION_SUFFIX.sub("", interpreter))
            if cfg is not None:
                return cfg.name

    return UNKNOWN_LANGUAGE


def interpreter_from_shebang(line: str) -> Optional[str]:
    """Return the interpreter name of a shebang line.

    ``#!/usr/bin/env python3`` and ``#!/usr/bin/python3`` both yield
    ``python3``; ``env -S`` style flags are skipped.
    """
    match = _SHEBANG.match(line.strip())
    if not match:
        return None
    program = PurePath(match.group(1)).name
    if program != "env":
        return program
    for arg in (match.group(2) or "").split():
        if not arg.startswith("-"):
            return PurePath(arg).name
    return None


def count_lines(text: str) -> int:
    """Count line-terminator-delimited records.

    A trailing unterminated line counts as one line; empty text is zero lines.
    ``\\n``, ``\\r\\n`` and ``\\r`` all terminate a line.
    """
    if not text:
        return 0
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    count = normalized.count("\n")
    if not normalized.endswith("\n"):
        count += 1
    return count
