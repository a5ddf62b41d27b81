"""Pattern-based content safety checks for submitted text.

The scanner is a table of rules evaluated in order; the first rule that fires
decides the violation category. Rules only ever look at the text they are
given, so scanning is stateless and deterministic.

Categories are reported for internal security logging. They must never be
echoed back to the caller.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

XSS = "XSS"
OBFUSCATED_SCRIPT = "OBFUSCATED_SCRIPT"
SUSPICIOUS_SCRIPT = "SUSPICIOUS_SCRIPT"
ENCODING_ATTACK = "ENCODING_ATTACK"
SQL_INJECTION = "SQL_INJECTION"
SQL_FUNCTION = "SQL_FUNCTION"
SQL_KEYWORD_CONTEXT = "SQL_KEYWORD_CONTEXT"
ENCODED_SQL = "ENCODED_SQL"
DANGEROUS_CHARS = "DANGEROUS_CHARS"

SPECIAL_CHARS = frozenset("&<>'\"%")
SPECIAL_CHAR_RATIO = 0.1
SPECIAL_CHAR_MIN_LENGTH = 10

SQL_KEYWORDS: Tuple[str, ...] = (
    "select", "insert", "update", "delete", "drop", "create", "alter", "truncate",
    "union", "join", "where", "having", "group by", "order by",
    "exec", "execute", "sp_", "xp_",
    "script", "declare", "cast", "convert", "char", "nchar",
    "varchar", "nvarchar", "table", "database", "schema",
    "information_schema", "sys.", "sysobjects", "syscolumns",
)
KEYWORD_CONTEXT_MARKERS: Tuple[str, ...] = (
    "'", '"', ";", "=", " or ", " and ", " union ", "--", "/*", "*/",
)
KEYWORD_CONTEXT_WINDOW = 5

SUSPICIOUS_SCRIPT_SUBSTRINGS: Tuple[str, ...] = (
    "alert(", "confirm(", "prompt(",
    "document.cookie", "window.location",
    "iframe", "embed", "object",
    ".innerhtml", ".outerhtml",
)
ENCODED_SQL_SUBSTRINGS: Tuple[str, ...] = (
    "%27", "%22", "%3b", "%20or%20", "%20and%20", "%20union%20",
    "%2d%2d", "%2f%2a", "%2a%2f", "%3d", "&#39;", "&#34;", "&#59;",
)


@dataclass(frozen=True)
class ScanRule:
    category: str
    name: str
    matches: Callable[[str], bool]


@dataclass(frozen=True)
class ScanResult:
    safe: bool
    violation: Optional[str] = None
    rule: Optional[str] = None


SAFE = ScanResult(safe=True)


def _pattern(category: str, name: str, regex: str, lowercase: bool = False) -> ScanRule:
    compiled = re.compile(regex, re.IGNORECASE | re.DOTALL)
    if lowercase:
        return ScanRule(category, name, lambda text: compiled.search(text.lower()) is not None)
    return ScanRule(category, name, lambda text: compiled.search(text) is not None)


def _substrings(category: str, name: str, needles: Iterable[str]) -> ScanRule:
    needles = tuple(needles)
    return ScanRule(category, name, lambda text: any(n in text.lower() for n in needles))


def has_excessive_special_chars(text: str) -> bool:
    if len(text) < SPECIAL_CHAR_MIN_LENGTH:
        return False
    count = sum(1 for ch in text if ch in SPECIAL_CHARS)
    return count > len(text) * SPECIAL_CHAR_RATIO


def _keyword_in_context(text: str, keyword: str) -> bool:
    start = text.find(keyword)
    while start != -1:
        end = start + len(keyword)
        before = text[max(0, start - KEYWORD_CONTEXT_WINDOW):start]
        after = text[end:end + KEYWORD_CONTEXT_WINDOW]
        if any(m in before or m in after for m in KEYWORD_CONTEXT_MARKERS):
            return True
        start = text.find(keyword, start + 1)
    return False


def has_sql_keyword_in_context(text: str) -> bool:
    """True when a SQL keyword sits next to a quote, terminator or operator.

    A keyword on its own ("select a partner", "table manners") is not enough.
    """
    lowered = text.lower().strip()
    return any(_keyword_in_context(lowered, kw) for kw in SQL_KEYWORDS)


RULES: List[ScanRule] = [
    # script injection
    _pattern(XSS, "script_tag", r"<\s*/?\s*script[^>]*>"),
    _pattern(XSS, "javascript_protocol", r"javascript\s*:"),
    _pattern(XSS, "vbscript_protocol", r"vbscript\s*:"),
    _pattern(XSS, "data_script", r"data\s*:.*script"),
    _pattern(XSS, "event_handler", r"on\w+\s*="),
    _pattern(XSS, "css_expression", r"expression\s*\("),
    _pattern(OBFUSCATED_SCRIPT, "html_entity", r"&#x?[0-9a-f]+;"),
    _pattern(OBFUSCATED_SCRIPT, "unicode_escape", r"\\u[0-9a-f]{4}"),
    _pattern(OBFUSCATED_SCRIPT, "eval_call", r"eval\s*\("),
    _pattern(OBFUSCATED_SCRIPT, "settimeout_call", r"settimeout\s*\("),
    _pattern(OBFUSCATED_SCRIPT, "setinterval_call", r"setinterval\s*\("),
    _substrings(SUSPICIOUS_SCRIPT, "script_denylist", SUSPICIOUS_SCRIPT_SUBSTRINGS),
    ScanRule(ENCODING_ATTACK, "special_char_ratio", has_excessive_special_chars),
    # sql injection
    _pattern(SQL_INJECTION, "quote_tautology", r"'\s*(or|and)\s*'", lowercase=True),
    _pattern(SQL_INJECTION, "comment_marker", r"--|#|/\*|\*/", lowercase=True),
    _pattern(SQL_INJECTION, "stacked_statement", r";\s*(drop|delete|insert|update)", lowercase=True),
    _pattern(SQL_INJECTION, "union_select", r"union\s+select", lowercase=True),
    _pattern(SQL_INJECTION, "numeric_tautology", r"1\s*=\s*1", lowercase=True),
    _pattern(SQL_INJECTION, "quote_terminator", r"'\s*;", lowercase=True),
    _pattern(SQL_INJECTION, "hex_literal", r"0x[0-9a-f]+", lowercase=True),
    _pattern(SQL_INJECTION, "waitfor_delay", r"waitfor\s+delay", lowercase=True),
    _pattern(SQL_INJECTION, "benchmark_call", r"benchmark\s*\(", lowercase=True),
    _pattern(SQL_INJECTION, "sleep_call", r"sleep\s*\(", lowercase=True),
    _pattern(SQL_INJECTION, "load_file_call", r"load_file\s*\(", lowercase=True),
    _pattern(SQL_INJECTION, "into_outfile", r"into\s+outfile", lowercase=True),
    _pattern(SQL_INJECTION, "concat_select", r"concat\s*\(.*select", lowercase=True),
    _pattern(SQL_INJECTION, "char_call", r"char\s*\(", lowercase=True),
    _pattern(SQL_INJECTION, "ascii_call", r"ascii\s*\(", lowercase=True),
    _pattern(SQL_INJECTION, "substring_select", r"substring\s*\(.*select", lowercase=True),
    _pattern(SQL_FUNCTION, "count_star", r"count\s*\(.*\*", lowercase=True),
    _pattern(SQL_FUNCTION, "len_call", r"len\s*\(", lowercase=True),
    _pattern(SQL_FUNCTION, "version_call", r"version\s*\(", lowercase=True),
    _pattern(SQL_FUNCTION, "user_call", r"user\s*\(", lowercase=True),
    _pattern(SQL_FUNCTION, "database_call", r"database\s*\(", lowercase=True),
    _substrings(SQL_FUNCTION, "server_variables", ("@@version", "@@servername", "current_user")),
    ScanRule(SQL_KEYWORD_CONTEXT, "keyword_context", has_sql_keyword_in_context),
    _substrings(ENCODED_SQL, "encoded_sql", ENCODED_SQL_SUBSTRINGS),
    # raw control characters, BOM and non-characters
    _pattern(DANGEROUS_CHARS, "control_chars", r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\ufeff\ufffe\uffff]"),
]


def scan(text: Optional[str], rules: Optional[List[ScanRule]] = None) -> ScanResult:
    if text is None:
        return SAFE
    for rule in rules if rules is not None else RULES:
        if rule.matches(text):
            return ScanResult(safe=False, violation=rule.category, rule=rule.name)
    return SAFE


def scan_fields(*texts: Optional[str]) -> ScanResult:
    """Scan several fields, returning the first failure."""
    for text in texts:
        result = scan(text)
        if not result.safe:
            return result
    return SAFE


class CharacterSet(enum.Enum):
    NAME = r"[a-zA-Z\s'-]+"
    WALK_NAME = r"[a-zA-Z0-9\s\-.!]+"
    DESCRIPTION = r"[a-zA-Z0-9\s\-.!,;:()]+"

    def matches(self, text: str) -> bool:
        return re.fullmatch(self.value, text) is not None


def is_valid_character_set(text: Optional[str], charset: CharacterSet) -> bool:
    # absence is a required-field concern, not a character-set one
    if text is None:
        return True
    return charset.matches(text)


_SANITIZE_STEPS = [
    (re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL), ""),
    (re.compile(r"javascript:", re.IGNORECASE), ""),
    (re.compile(r"on\w+\s*=", re.IGNORECASE), ""),
    (re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]"), ""),
]


def sanitize(text: Optional[str]) -> Optional[str]:
    """Best-effort stripping of script content and control characters.

    Only used to detect input that would need cleaning; the cleaned string is
    never stored in place of the original.
    """
    if text is None:
        return None
    for pattern, replacement in _SANITIZE_STEPS:
        text = pattern.sub(replacement, text)
    return text


def requires_sanitization(text: Optional[str]) -> bool:
    return sanitize(text) != text
