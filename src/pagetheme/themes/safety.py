"""
CSS-safety predicates for untrusted theme and page strings.

Values end up inside a ``<style>`` element, in a declaration value
position. A value is safe when it cannot close the declaration, the
rule, the style element, or open a comment or block that swallows what
follows.
"""

from __future__ import annotations

import math
import re
import unicodedata

DEFAULT_MAX_VALUE_LENGTH = 512
MAX_FONT_NAME_LENGTH = 64

# Characters that terminate a declaration/rule/element or start an escape
_FORBIDDEN_CHARS = frozenset('{};<>\\"\'')

_FORBIDDEN_SEQUENCES = ("/*", "*/", "expression(", "javascript:", "-moz-binding", "@import")

_FONT_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 _-]*$")

# CSS generic family keywords; emitted unquoted
CSS_GENERIC_FAMILIES = frozenset(
    {
        "serif",
        "sans-serif",
        "monospace",
        "cursive",
        "fantasy",
        "system-ui",
        "ui-serif",
        "ui-sans-serif",
        "ui-monospace",
        "ui-rounded",
        "emoji",
        "math",
        "fangsong",
    }
)

# Families the browser already has; never requested from Google Fonts
SYSTEM_FONT_FAMILIES = CSS_GENERIC_FAMILIES | frozenset(
    {
        "-apple-system",
        "segoe ui",
        "helvetica",
        "arial",
        "georgia",
        "times new roman",
        "courier new",
        "verdana",
    }
)


def is_css_safe(value: object, max_length: int = DEFAULT_MAX_VALUE_LENGTH) -> bool:
    """
    Check whether a value can be placed in a CSS declaration value.

    Numbers are safe when finite. Strings must be non-empty, at most
    ``max_length`` characters, free of control characters and of the
    characters ``{ } ; < > \\ " '``, contain no comment markers or
    scriptable constructs, and have balanced parentheses.

    Args:
        value: Candidate value
        max_length: Longest accepted string

    Returns:
        True if the value may be emitted verbatim
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if not isinstance(value, str):
        return False
    if not value or len(value) > max_length:
        return False
    if any(ch in _FORBIDDEN_CHARS or unicodedata.category(ch) == "Cc" for ch in value):
        return False

    lowered = value.lower()
    if any(seq in lowered for seq in _FORBIDDEN_SEQUENCES):
        return False

    depth = 0
    for ch in value:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def is_safe_font_name(value: object) -> bool:
    """
    Check whether a value is a plain font family name.

    Font names are emitted inside single quotes and in the fonts URL, so
    only letters, digits, spaces, hyphens and underscores are accepted.
    """
    if not isinstance(value, str):
        return False
    return len(value) <= MAX_FONT_NAME_LENGTH and bool(_FONT_NAME_RE.match(value))


def is_generic_family(name: str) -> bool:
    return name.strip().lower() in SYSTEM_FONT_FAMILIES
