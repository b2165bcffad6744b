"""gridcalc.calc - Formula parsing, evaluation and dependency tracking."""

from gridcalc.calc._evaluator import evaluate_tokens
from gridcalc.calc._graph import CircularReferenceError, DependencyGraph, GraphSnapshot
from gridcalc.calc._parser import Formula, FormulaFormatError, Token, tokenize
from gridcalc.calc._protocol import FormulaError, Lookup

__all__ = [
    "CircularReferenceError",
    "DependencyGraph",
    "Formula",
    "FormulaError",
    "FormulaFormatError",
    "GraphSnapshot",
    "Lookup",
    "Token",
    "evaluate_tokens",
    "tokenize",
]
