"""
Unit tests for raw field parsing.
"""
import unittest

import numpy as np
import pandas as pd
import pytest

from fifa_value_analysis.data.parsing import (
    is_missing,
    parse_contract_year,
    parse_currency,
    parse_height,
    parse_numeric,
    parse_player_fields,
    parse_weight,
)
from fifa_value_analysis.exceptions import MalformedFieldError


class TestParseCurrency(unittest.TestCase):
    """Currency strings are returned in millions of euros."""

    def test_millions(self):
        self.assertAlmostEqual(parse_currency("€1.5M"), 1.5)
        self.assertAlmostEqual(parse_currency("€110.5M"), 110.5)

    def test_thousands(self):
        self.assertAlmostEqual(parse_currency("€500K"), 0.5)
        self.assertAlmostEqual(parse_currency("€10K"), 0.01)

    def test_zero_is_undisclosed(self):
        self.assertTrue(np.isnan(parse_currency("€0")))

    def test_missing(self):
        self.assertTrue(np.isnan(parse_currency(None)))
        self.assertTrue(np.isnan(parse_currency(np.nan)))
        self.assertTrue(np.isnan(parse_currency("  ")))

    def test_malformed(self):
        for raw in ["1.5M", "€1.5", "€abcM", "€1.5B", "€M", "€5", "€0.0"]:
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedFieldError) as ctx:
                    parse_currency(raw, "wage")
                self.assertEqual(ctx.exception.field, "wage")
                self.assertEqual(ctx.exception.raw, raw)


class TestPhysicalFields(unittest.TestCase):

    def test_height(self):
        self.assertAlmostEqual(parse_height("5'11"), 180.34)
        self.assertAlmostEqual(parse_height("6'0"), 182.88)

    def test_height_malformed(self):
        for raw in ["5'", "180cm", "5-11", "a'b"]:
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedFieldError):
                    parse_height(raw)

    def test_weight(self):
        self.assertAlmostEqual(parse_weight("170lbs"), 77.1107, places=4)

    def test_weight_requires_suffix(self):
        with self.assertRaises(MalformedFieldError):
            parse_weight("170")
        with self.assertRaises(MalformedFieldError):
            parse_weight("77kg")

    def test_contract_year(self):
        self.assertEqual(parse_contract_year("2021"), 2021.0)
        self.assertEqual(parse_contract_year("Jun 30, 2019"), 2019.0)
        with self.assertRaises(MalformedFieldError):
            parse_contract_year("soon")


def test_is_missing():
    assert is_missing(None)
    assert is_missing(float("nan"))
    assert is_missing("")
    assert not is_missing("0")
    assert not is_missing(0)


def test_parse_numeric():
    assert parse_numeric("31", "age") == 31.0
    assert np.isnan(parse_numeric(None, "age"))
    with pytest.raises(MalformedFieldError):
        parse_numeric("old", "age")


class TestParsePlayerFields(unittest.TestCase):

    def setUp(self):
        self.df = pd.DataFrame({
            "value": ["€1.5M", "€500K", None],
            "wage": ["€10K", "€2K", "€0"],
            "release_clause": ["€2.7M", "€900K", "€1M"],
            "height": ["5'11", "6'2", "5'7"],
            "weight": ["170lbs", "180lbs", "150lbs"],
            "contract_valid_until": ["2021", "Jun 30, 2019", "2018"],
        }, index=["a", "b", "c"])

    def test_units(self):
        out = parse_player_fields(self.df)

        self.assertAlmostEqual(out.loc["a", "value"], 1.5)
        self.assertAlmostEqual(out.loc["b", "value"], 0.5)
        self.assertTrue(np.isnan(out.loc["c", "value"]))
        # wage is reported in thousands
        self.assertAlmostEqual(out.loc["a", "wage"], 10.0)
        self.assertTrue(np.isnan(out.loc["c", "wage"]))
        self.assertAlmostEqual(out.loc["b", "release_clause"], 0.9)
        self.assertAlmostEqual(out.loc["a", "height_cm"], 180.34)
        self.assertListEqual(out["contract_years"].tolist(), [3.0, 1.0, 0.0])

    def test_raw_columns_replaced(self):
        out = parse_player_fields(self.df)

        for col in ("height", "weight", "contract_valid_until"):
            self.assertNotIn(col, out.columns)
        for col in ("height_cm", "weight_kg", "contract_years"):
            self.assertIn(col, out.columns)

    def test_input_untouched(self):
        before = self.df.copy()
        parse_player_fields(self.df)
        pd.testing.assert_frame_equal(self.df, before)

    def test_fault_names_row(self):
        self.df.loc["b", "height"] = "tall"
        with self.assertRaises(MalformedFieldError) as ctx:
            parse_player_fields(self.df)
        self.assertEqual(ctx.exception.row, "b")
        self.assertEqual(ctx.exception.field, "height")
        self.assertIn("'b'", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
