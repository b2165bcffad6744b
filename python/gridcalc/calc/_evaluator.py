"""Two-stack operator-precedence evaluator for validated formula tokens.

Tokens are consumed left to right. ``*`` and ``/`` are applied as soon as
their right operand is on the value stack; ``+`` and ``-`` wait until the
next additive operator, a closing parenthesis or the end of input. All four
operators are left-associative, so no further precedence bookkeeping is
needed.

Runtime failures (division by zero, undefined variables) are returned as
:class:`FormulaError` values instead of being raised.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from gridcalc.calc._parser import LPAREN, NUMBER, OPERATOR, RPAREN, VARIABLE
from gridcalc.calc._protocol import FormulaError

if TYPE_CHECKING:
    from gridcalc.calc._parser import Token
    from gridcalc.calc._protocol import Lookup

logger = logging.getLogger(__name__)

_DIV0 = "Division by zero"


class _EvaluationAborted(Exception):
    """Internal short-circuit; always converted back into a FormulaError."""

    def __init__(self, error: FormulaError) -> None:
        super().__init__(error.reason)
        self.error = error


def _binary_op(left: float, op: str, right: float) -> float:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if right == 0:
        raise _EvaluationAborted(FormulaError(_DIV0))
    return left / right


def _top_is(operators: list[str], *ops: str) -> bool:
    return bool(operators) and operators[-1] in ops


def _reduce(values: list[float], operators: list[str]) -> None:
    """Pop two values and one operator, push the result."""
    right = values.pop()
    left = values.pop()
    values.append(_binary_op(left, operators.pop(), right))


def _push_operand(value: float, values: list[float], operators: list[str]) -> None:
    if _top_is(operators, "*", "/"):
        values.append(_binary_op(values.pop(), operators.pop(), value))
    else:
        values.append(value)


def _resolve(name: str, lookup: Lookup) -> float:
    value = lookup(name)
    if value is None:
        raise _EvaluationAborted(FormulaError(f"{name} is undefined"))
    return value


def evaluate_tokens(tokens: Iterable[Token], lookup: Lookup) -> float | FormulaError:
    """Evaluate a validated, normalized token sequence.

    Variables are resolved through *lookup*, which returns None for names
    without a numeric value.
    """
    values: list[float] = []
    operators: list[str] = []
    try:
        for token in tokens:
            if token.kind == NUMBER:
                _push_operand(float(token.text), values, operators)
            elif token.kind == VARIABLE:
                _push_operand(_resolve(token.text, lookup), values, operators)
            elif token.kind == OPERATOR:
                if token.text in ("+", "-") and _top_is(operators, "+", "-"):
                    _reduce(values, operators)
                operators.append(token.text)
            elif token.kind == LPAREN:
                operators.append(token.text)
            elif token.kind == RPAREN:
                if _top_is(operators, "+", "-"):
                    _reduce(values, operators)
                operators.pop()  # the matching "("
                if _top_is(operators, "*", "/"):
                    _reduce(values, operators)

        while operators:
            _reduce(values, operators)
    except _EvaluationAborted as exc:
        logger.debug("Evaluation stopped: %s", exc.error.reason)
        return exc.error

    return values[0]
