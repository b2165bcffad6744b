"""Lookup protocol and evaluation result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class FormulaError:
    """Evaluation failure carried as a value (division by zero, undefined variable)."""

    reason: str

    def __str__(self) -> str:
        return f"#ERROR: {self.reason}"


@runtime_checkable
class Lookup(Protocol):
    """Resolves a normalized variable name to its numeric value."""

    def __call__(self, name: str) -> float | None:
        """Return the value of *name*, or None when it is undefined.

        Must not raise for names it does not recognize.
        """
        ...
