"""Pydantic models for the persisted spreadsheet document.

Shape::

    {"Cells": {"A1": {"StringForm": "5"}, "B3": {"StringForm": "=A1+2"}}}
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CellRecord(BaseModel):
    """One non-empty cell: the text that reproduces its content."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    string_form: str = Field(alias="StringForm")


class SpreadsheetDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cells: dict[str, CellRecord] = Field(alias="Cells")
