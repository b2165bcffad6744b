"""Tests for gridcalc name and number helpers."""

from __future__ import annotations

import pytest

from gridcalc._utils import format_number, is_valid_name, normalize_name, parse_number


class TestNames:
    @pytest.mark.parametrize("name", ["A1", "a1", "AB123", "zz0"])
    def test_valid(self, name: str) -> None:
        assert is_valid_name(name)

    @pytest.mark.parametrize("name", ["", "A", "1", "1A", "A1A", "A-1", " A1", "A1\n", "A1\r\n"])
    def test_invalid(self, name: str) -> None:
        assert not is_valid_name(name)

    def test_normalize(self) -> None:
        assert normalize_name("ab12") == "AB12"


class TestParseNumber:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("5", 5.0), ("-5", -5.0), ("+2.5", 2.5), (" 3 ", 3.0), ("1e3", 1000.0), ("4.", 4.0)],
    )
    def test_numbers(self, text: str, expected: float) -> None:
        assert parse_number(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "1,000", "nan", "inf", "1e999", "1_000", "=1", "--1"])
    def test_not_numbers(self, text: str) -> None:
        assert parse_number(text) is None


class TestFormatNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(5.0, "5"), (2.5, "2.5"), (0.1, "0.1"), (100.0, "100"), (1e20, "1e+20"), (1e-7, "1e-07")],
    )
    def test_format(self, value: float, expected: str) -> None:
        assert format_number(value) == expected

    def test_round_trips(self) -> None:
        for value in (1 / 3, 123456.789, 2.0**60, 5e-324):
            assert float(format_number(value)) == value
