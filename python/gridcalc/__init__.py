"""gridcalc - a small reactive spreadsheet engine.

Usage::

    from gridcalc import Spreadsheet, load_spreadsheet

    sheet = Spreadsheet()
    sheet.set_content("A1", "5")
    sheet.set_content("B1", "=a1 * (2 + 1)")
    print(sheet["B1"])                # 15.0
    print(sheet.get_content("B1"))    # A1*(2+1)

    # Persist the canonical document by whatever means, then restore it
    text = sheet.save()
    restored = load_spreadsheet(text)
"""

from gridcalc._spreadsheet import (
    InvalidNameError,
    Spreadsheet,
    SpreadsheetReadWriteError,
)
from gridcalc.calc import (
    CircularReferenceError,
    DependencyGraph,
    Formula,
    FormulaError,
    FormulaFormatError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CircularReferenceError",
    "DependencyGraph",
    "Formula",
    "FormulaError",
    "FormulaFormatError",
    "InvalidNameError",
    "Spreadsheet",
    "SpreadsheetReadWriteError",
    "load_spreadsheet",
]


def load_spreadsheet(document: str | bytes) -> Spreadsheet:
    """Build a Spreadsheet from saved document text.

    Raises
    ------
    SpreadsheetReadWriteError
        If the document is malformed or any cell fails to replay
        (bad formula, bad name, circular reference).
    """
    return Spreadsheet.from_json(document)
