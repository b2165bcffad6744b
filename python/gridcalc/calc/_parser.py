"""Formula parser: regex tokenizer plus eager grammar validation."""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING, NamedTuple

from gridcalc._utils import NAME_PATTERN, NUMBER_PATTERN, format_number

if TYPE_CHECKING:
    from gridcalc.calc._protocol import FormulaError, Lookup

# ---------------------------------------------------------------------------
# Token kinds
# ---------------------------------------------------------------------------

LPAREN = "lparen"
RPAREN = "rparen"
OPERATOR = "operator"
VARIABLE = "variable"
NUMBER = "number"
OTHER = "other"

OPERATORS = ("+", "-", "*", "/")

# Variables are tried before numbers so "e5" is a name, not a broken exponent.
_TOKEN_RE = re.compile(
    rf"""
    (?P<{LPAREN}>\()
    | (?P<{RPAREN}>\))
    | (?P<{OPERATOR}>[+\-*/])
    | (?P<{VARIABLE}>{NAME_PATTERN})
    | (?P<{NUMBER}>{NUMBER_PATTERN})
    | (?P<space>\s+)
    | (?P<{OTHER}>[^\s()+\-*/]+?)
    """,
    re.VERBOSE,
)

# Kinds that may open an operand position / close one.
_OPERAND_START = (NUMBER, VARIABLE, LPAREN)
_OPERAND_END = (NUMBER, VARIABLE, RPAREN)


class Token(NamedTuple):
    kind: str
    text: str


class FormulaFormatError(ValueError):
    """Raised when formula text violates the expression grammar."""


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


def tokenize(formula: str) -> list[Token]:
    """Split *formula* into tokens, dropping whitespace.

    Characters that fit no token class come back as ``OTHER`` tokens so the
    validator can report them.
    """
    tokens: list[Token] = []
    for m in _TOKEN_RE.finditer(formula):
        kind = m.lastgroup
        if kind == "space":
            continue
        tokens.append(Token(kind, m.group()))
    return tokens


def _describe(token: Token) -> str:
    return repr(token.text)


def _normalize(token: Token) -> Token:
    """Upper-case variables and re-render numbers canonically."""
    if token.kind == VARIABLE:
        return Token(VARIABLE, token.text.upper())
    if token.kind == NUMBER:
        value = float(token.text)
        if math.isinf(value):
            raise FormulaFormatError(f"Number {token.text!r} is out of range")
        return Token(NUMBER, format_number(value))
    return token


# ---------------------------------------------------------------------------
# Formula
# ---------------------------------------------------------------------------


class Formula:
    """An immutable, validated infix arithmetic expression.

    Construction validates the whole token sequence and normalizes it:
    variable names are upper-cased and numbers are rendered canonically.
    Two formulas are equal iff their canonical strings are equal::

        >>> Formula("x1 + 5.000") == Formula("X1+5")
        True
    """

    __slots__ = ("_tokens", "_canonical", "_variables")

    def __init__(self, formula: str) -> None:
        raw = tokenize(formula)
        if not raw:
            raise FormulaFormatError("The formula can not be empty")

        first = raw[0]
        if first.kind not in _OPERAND_START:
            raise FormulaFormatError(f"{_describe(first)} is not a valid first token")

        tokens: list[Token] = []
        opened = 0
        closed = 0
        previous: Token | None = None
        for token in raw:
            if token.kind == OTHER:
                raise FormulaFormatError(f"Invalid token {_describe(token)}")
            if previous is not None:
                if previous.kind in (LPAREN, OPERATOR):
                    if token.kind not in _OPERAND_START:
                        raise FormulaFormatError(
                            f"{_describe(token)} can not follow {_describe(previous)}; "
                            "expected a number, a variable or '('"
                        )
                elif token.kind not in (OPERATOR, RPAREN):
                    raise FormulaFormatError(
                        f"{_describe(token)} can not follow {_describe(previous)}; "
                        "expected an operator or ')'"
                    )
            if token.kind == LPAREN:
                opened += 1
            elif token.kind == RPAREN:
                closed += 1
                if closed > opened:
                    raise FormulaFormatError(
                        "Number of closing parentheses exceeds the number of opening parentheses"
                    )
            tokens.append(_normalize(token))
            previous = token

        if opened != closed:
            raise FormulaFormatError("Unbalanced parentheses")
        last = raw[-1]
        if last.kind not in _OPERAND_END:
            raise FormulaFormatError(f"{_describe(last)} is not a valid last token")

        self._tokens: tuple[Token, ...] = tuple(tokens)
        self._canonical = "".join(t.text for t in tokens)
        # dict keeps first-appearance order
        self._variables = tuple(dict.fromkeys(t.text for t in tokens if t.kind == VARIABLE))

    @property
    def tokens(self) -> tuple[Token, ...]:
        """The normalized token sequence."""
        return self._tokens

    @property
    def variables(self) -> tuple[str, ...]:
        """Distinct normalized variable names, in order of first appearance."""
        return self._variables

    @property
    def canonical(self) -> str:
        return self._canonical

    def evaluate(self, lookup: Lookup) -> float | FormulaError:
        """Evaluate against *lookup*; failures come back as a FormulaError."""
        from gridcalc.calc._evaluator import evaluate_tokens

        return evaluate_tokens(self._tokens, lookup)

    def __str__(self) -> str:
        return self._canonical

    def __repr__(self) -> str:
        return f"Formula({self._canonical!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Formula):
            return self._canonical == other._canonical
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._canonical)
