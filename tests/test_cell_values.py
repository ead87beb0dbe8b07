"""Tests for cell value resolution."""

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from excel_to_xml.cell_values import format_number, resolve_value
from excel_to_xml.model import Cell, CellType


def _cell(cell_type, value=None, **kwargs):
    return Cell(row=0, column=0, cell_type=cell_type, value=value, **kwargs)


class TestLiteralValues(unittest.TestCase):
    def test_string(self):
        self.assertEqual(resolve_value(_cell(CellType.STRING, "Widget")), "Widget")

    def test_numeric_integer_gets_decimal_point(self):
        self.assertEqual(resolve_value(_cell(CellType.NUMERIC, 5)), "5.0")

    def test_numeric_fraction(self):
        self.assertEqual(resolve_value(_cell(CellType.NUMERIC, 10.5)), "10.5")

    def test_numeric_round_trips(self):
        for value in (0.1, 1 / 3, 1e20, -2.5e-8, 123456789.123):
            self.assertEqual(float(format_number(value)), value)

    def test_boolean(self):
        self.assertEqual(resolve_value(_cell(CellType.BOOLEAN, True)), "true")
        self.assertEqual(resolve_value(_cell(CellType.BOOLEAN, False)), "false")

    def test_error_is_absent(self):
        self.assertIsNone(resolve_value(_cell(CellType.ERROR, "#DIV/0!")))


class TestBlankValues(unittest.TestCase):
    def test_blank_without_index_is_absent(self):
        self.assertIsNone(resolve_value(_cell(CellType.BLANK)))

    def test_blank_with_index_gets_placeholder(self):
        self.assertEqual(resolve_value(_cell(CellType.BLANK), 0), "BLANK0")
        self.assertEqual(resolve_value(_cell(CellType.BLANK), 7), "BLANK7")

    def test_index_ignored_for_non_blank(self):
        self.assertEqual(resolve_value(_cell(CellType.STRING, "x"), 3), "x")


class TestFormulaValues(unittest.TestCase):
    def test_cached_number(self):
        cell = _cell(CellType.FORMULA, formula="B2*C2",
                     cached_type=CellType.NUMERIC, cached_value=52.5)
        self.assertEqual(resolve_value(cell), "52.5")

    def test_cached_string(self):
        cell = _cell(CellType.FORMULA, formula='UPPER("a")',
                     cached_type=CellType.STRING, cached_value="A")
        self.assertEqual(resolve_value(cell), "A")

    def test_cached_boolean(self):
        cell = _cell(CellType.FORMULA, formula="1>2",
                     cached_type=CellType.BOOLEAN, cached_value=False)
        self.assertEqual(resolve_value(cell), "false")

    def test_cached_error_falls_back_to_formula(self):
        cell = _cell(CellType.FORMULA, formula="1/0",
                     cached_type=CellType.ERROR, cached_value="#DIV/0!")
        self.assertEqual(resolve_value(cell), "1/0")

    def test_missing_cache_falls_back_to_formula(self):
        cell = _cell(CellType.FORMULA, formula="SUM(A1:A3)")
        self.assertEqual(resolve_value(cell), "SUM(A1:A3)")

    def test_blank_cache_ignores_placeholder_index(self):
        cell = _cell(CellType.FORMULA, formula="A1",
                     cached_type=CellType.BLANK)
        self.assertEqual(resolve_value(cell, 4), "A1")


if __name__ == "__main__":
    unittest.main()
