"""Cell-name and number-text helpers shared by the parser and the store."""

from __future__ import annotations

import math
import re

# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

# Letters followed by digits: A1, bc12, ZZ999
NAME_PATTERN = r"[A-Za-z]+[0-9]+"
_NAME_RE = re.compile(NAME_PATTERN)

# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

# Unsigned literal: 12, 12., 1.5, .5, each with an optional exponent
NUMBER_PATTERN = r"(?:[0-9]+\.[0-9]*|\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?"
_NUMERIC_CONTENT_RE = re.compile(rf"^\s*[+-]?{NUMBER_PATTERN}\s*$")


def is_valid_name(name: str) -> bool:
    """Return True if *name* looks like a cell name (case-insensitive)."""
    return _NAME_RE.fullmatch(name) is not None


def normalize_name(name: str) -> str:
    """Upper-case a cell name. Does not validate."""
    return name.upper()


def parse_number(text: str) -> float | None:
    """Parse *text* as numeric cell content.

    Accepts an optional sign and surrounding whitespace. Returns None for
    anything else, including literals that overflow to infinity.
    """
    if _NUMERIC_CONTENT_RE.match(text) is None:
        return None
    value = float(text)
    if math.isinf(value):
        return None
    return value


def format_number(value: float) -> str:
    """Canonical text for a number: shortest round-trip form, no trailing ``.0``.

    >>> format_number(5.0)
    '5'
    >>> format_number(2.5)
    '2.5'
    """
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text
