"""
Unit tests for categorical normalisation.
"""
import unittest

import numpy as np
import pandas as pd
import pytest

from fifa_value_analysis.config import config
from fifa_value_analysis.data.categories import (
    normalize_categories,
    position_table,
    split_work_rate,
    to_field_position,
    to_ordinal_tier,
    to_preferred_foot,
)
from fifa_value_analysis.exceptions import UnknownCategoryError


class TestFieldPosition(unittest.TestCase):

    def test_every_code_maps_to_one_bucket(self):
        table = position_table()

        self.assertEqual(len(table), 27)
        self.assertTrue(table["position"].is_unique)
        self.assertSetEqual(set(table["field_position"]), set(config.FIELD_POSITIONS))

    def test_known_codes(self):
        self.assertEqual(to_field_position("GK"), "Goalkeeper")
        self.assertEqual(to_field_position("LCB"), "Defender")
        self.assertEqual(to_field_position("CAM"), "Midfielder")
        self.assertEqual(to_field_position(" RW "), "Attack")

    def test_unknown_code(self):
        with self.assertRaises(UnknownCategoryError) as ctx:
            to_field_position("SW")
        self.assertEqual(ctx.exception.field, "position")

    def test_missing_code(self):
        self.assertTrue(pd.isna(to_field_position(np.nan)))


@pytest.mark.parametrize("raw, expected", [
    ("High/ Low", ("High", "Low")),
    ("Medium/Medium", ("Medium", "Medium")),
    ("Low / High", ("Low", "High")),
])
def test_split_work_rate(raw, expected):
    assert split_work_rate(raw) == expected


@pytest.mark.parametrize("raw", ["High", "High/ Extreme", "High/Low/Medium"])
def test_split_work_rate_rejects(raw):
    with pytest.raises(UnknownCategoryError):
        split_work_rate(raw)


def test_ordinal_tier_accepts_numeric_spellings():
    assert to_ordinal_tier(3, "weak_foot") == 3
    assert to_ordinal_tier(3.0, "weak_foot") == 3
    assert to_ordinal_tier("5", "weak_foot") == 5


@pytest.mark.parametrize("raw", [0, 6, 2.5, "three"])
def test_ordinal_tier_out_of_vocabulary(raw):
    with pytest.raises(UnknownCategoryError):
        to_ordinal_tier(raw, "skill_moves")


def test_preferred_foot():
    assert to_preferred_foot("Left") == "Left"
    with pytest.raises(UnknownCategoryError):
        to_preferred_foot("Both")


class TestNormalizeCategories(unittest.TestCase):

    def setUp(self):
        self.df = pd.DataFrame({
            "position": ["GK", "ST", "LM"],
            "work_rate": ["High/ Low", "Medium/ Medium", None],
            "international_reputation": [1, 5, 3],
            "weak_foot": [2.0, 4.0, 3.0],
            "skill_moves": ["1", "4", "2"],
            "preferred_foot": ["Right", "Left", "Right"],
        }, index=[10, 11, 12])

    def test_columns(self):
        out = normalize_categories(self.df)

        self.assertNotIn("work_rate", out.columns)
        self.assertIn("position", out.columns)
        self.assertListEqual(out["field_position"].tolist(), ["Goalkeeper", "Attack", "Midfielder"])
        self.assertEqual(out.loc[10, "work_rate_offense"], "High")
        self.assertEqual(out.loc[10, "work_rate_defense"], "Low")
        self.assertTrue(pd.isna(out.loc[12, "work_rate_offense"]))

    def test_tiers_are_ordered(self):
        out = normalize_categories(self.df)

        self.assertTrue(out["work_rate_offense"].cat.ordered)
        self.assertTrue(out["skill_moves"].cat.ordered)
        self.assertLess(out.loc[10, "international_reputation"], out.loc[11, "international_reputation"])
        self.assertFalse(out["field_position"].cat.ordered)

    def test_unknown_value_names_row(self):
        self.df.loc[11, "position"] = "XX"
        with self.assertRaises(UnknownCategoryError) as ctx:
            normalize_categories(self.df)
        self.assertEqual(ctx.exception.row, 11)


if __name__ == '__main__':
    unittest.main()
