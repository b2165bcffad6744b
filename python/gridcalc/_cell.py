"""Stored cell record: content plus cached value."""

from __future__ import annotations

from dataclasses import dataclass

from gridcalc._utils import format_number
from gridcalc.calc._parser import Formula
from gridcalc.calc._protocol import FormulaError

Content = str | float | Formula
Value = str | float | FormulaError


@dataclass
class Cell:
    """A non-empty cell. ``value`` is derived from ``content`` by the store."""

    content: Content
    value: Value

    @classmethod
    def from_content(cls, content: Content) -> Cell:
        """New cell whose value is provisional until the next recalculation."""
        if isinstance(content, Formula):
            return cls(content, FormulaError("Not yet calculated"))
        return cls(content, content)

    @property
    def string_form(self) -> str:
        """Text that reproduces this content when set again."""
        content = self.content
        if isinstance(content, Formula):
            return f"={content}"
        if isinstance(content, float):
            return format_number(content)
        return content
