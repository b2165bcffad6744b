"""Spreadsheet: cell store and recomputation driver.

Every content change rewires the dependency graph, walks everything that
depends on the changed cell in evaluation order and re-evaluates formula
cells. A change that would introduce a cycle is rolled back completely.

Usage::

    sheet = Spreadsheet()
    sheet.set_content("A1", "5")
    sheet.set_content("B1", "=A1*2")
    sheet.get_value("B1")         # 10.0
    text = sheet.save()           # {"Cells": {...}}
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from gridcalc._cell import Cell, Content, Value
from gridcalc._document import CellRecord, SpreadsheetDocument
from gridcalc._utils import is_valid_name, normalize_name, parse_number
from gridcalc.calc._graph import CircularReferenceError, DependencyGraph
from gridcalc.calc._parser import Formula, FormulaFormatError
from gridcalc.calc._protocol import FormulaError

logger = logging.getLogger(__name__)


class InvalidNameError(ValueError):
    """Raised for a cell name that is not letters followed by digits."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid cell name: {name!r}")
        self.name = name


class SpreadsheetReadWriteError(ValueError):
    """Raised when a saved document can not be loaded."""


class Spreadsheet:
    """A sparse grid of named cells holding strings, numbers or formulas."""

    __slots__ = ("_cells", "_graph", "_changed")

    def __init__(self) -> None:
        self._cells: dict[str, Cell] = {}
        self._graph = DependencyGraph()
        self._changed = False

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def changed(self) -> bool:
        """True if the sheet was modified since it was created, saved or loaded."""
        return self._changed

    def names_of_nonempty_cells(self) -> set[str]:
        return set(self._cells)

    def get_content(self, name: str) -> Content:
        """Content of *name*: a str, float or Formula (``""`` when empty)."""
        cell = self._cells.get(self._checked_name(name))
        if cell is None:
            return ""
        return cell.content

    def get_value(self, name: str) -> Value:
        """Value of *name*: a str, float or FormulaError (``""`` when empty)."""
        cell = self._cells.get(self._checked_name(name))
        if cell is None:
            return ""
        return cell.value

    def __getitem__(self, name: str) -> Value:
        return self.get_value(name)

    def __contains__(self, name: object) -> bool:
        return (
            isinstance(name, str)
            and is_valid_name(name)
            and normalize_name(name) in self._cells
        )

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def set_content(self, name: str, content: str) -> list[str]:
        """Set the content of *name* from raw text and recalculate.

        Text that parses as a number becomes numeric content, text starting
        with ``=`` is parsed as a formula, anything else is stored as a
        string. The empty string clears the cell.

        Returns the changed cell followed by every cell that depends on it,
        each before its own dependents.

        Raises InvalidNameError, FormulaFormatError or CircularReferenceError;
        the sheet is unchanged in every case.
        """
        name = self._checked_name(name)
        number = parse_number(content)
        if number is not None:
            new_content: Content = number
        elif content.startswith("="):
            new_content = Formula(content[1:])
        else:
            new_content = content

        order = self._apply(name, new_content)
        self._recalculate(order)
        self._changed = True
        return order

    def _apply(self, name: str, content: Content) -> list[str]:
        """Store *content* and rewire the graph; roll back on a cycle."""
        previous_cell = self._cells.get(name)
        variables = content.variables if isinstance(content, Formula) else ()
        # Only these nodes' edges change when name's dependees are replaced.
        previous_edges = self._graph.snapshot(
            [name, *self._graph.ordered_dependees(name), *variables]
        )

        self._graph.replace_dependees(name, variables)
        self._cells[name] = Cell.from_content(content)

        try:
            return self._graph.recalculation_order(name)
        except CircularReferenceError:
            logger.debug("Rolling back %s after circular reference", name)
            self._graph.restore(previous_edges)
            if previous_cell is None:
                del self._cells[name]
            else:
                self._cells[name] = previous_cell
            raise

    def _recalculate(self, order: list[str]) -> None:
        for name in order:
            cell = self._cells.get(name)
            if cell is None:
                continue
            if cell.content == "":
                # cleared cells are not stored
                del self._cells[name]
            elif isinstance(cell.content, Formula):
                cell.value = cell.content.evaluate(self._lookup)
                if isinstance(cell.value, FormulaError):
                    logger.debug("%s evaluated to error: %s", name, cell.value.reason)

    def _lookup(self, name: str) -> float | None:
        cell = self._cells.get(name)
        if cell is None or not isinstance(cell.value, float):
            return None
        return cell.value

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize every non-empty cell to the canonical document text."""
        document = SpreadsheetDocument(
            cells={
                name: CellRecord(string_form=cell.string_form)
                for name, cell in self._cells.items()
            }
        )
        return document.model_dump_json(by_alias=True, indent=indent)

    def save(self) -> str:
        """Return the document text and mark the sheet as unchanged."""
        text = self.to_json()
        self._changed = False
        return text

    def load(self, document: str | bytes) -> None:
        """Replace the whole sheet with the cells in *document*.

        Cells are replayed through :meth:`set_content` in document order.
        On any failure SpreadsheetReadWriteError is raised and this sheet is
        left as it was.
        """
        loaded = self.from_json(document)
        self._cells = loaded._cells
        self._graph = loaded._graph
        self._changed = False

    @classmethod
    def from_json(cls, document: str | bytes) -> Spreadsheet:
        """Build a new sheet from document text."""
        try:
            parsed = SpreadsheetDocument.model_validate_json(document)
        except ValidationError as exc:
            logger.debug("Rejected malformed spreadsheet document: %s", exc)
            raise SpreadsheetReadWriteError(f"Malformed spreadsheet document: {exc}") from exc

        sheet = cls()
        for name, record in parsed.cells.items():
            try:
                sheet.set_content(name, record.string_form)
            except (InvalidNameError, FormulaFormatError, CircularReferenceError) as exc:
                logger.debug("Failed replaying cell %s: %s", name, exc)
                raise SpreadsheetReadWriteError(
                    f"Failed loading cell {name!r}: {exc}"
                ) from exc
        sheet._changed = False
        return sheet

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _checked_name(name: str) -> str:
        if not is_valid_name(name):
            raise InvalidNameError(name)
        return normalize_name(name)

    def __repr__(self) -> str:
        return f"<Spreadsheet cells={len(self._cells)}>"
