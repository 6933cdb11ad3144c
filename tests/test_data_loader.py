"""
Unit tests for DataLoader module.
"""
import shutil
import tempfile
import unittest
from pathlib import Path

import pandas as pd

from fifa_value_analysis.data.loader import DataLoader, snake_case_columns


class TestDataLoader(unittest.TestCase):
    """Test cases for DataLoader class."""

    def setUp(self):
        """Set up test fixtures."""
        self.loader = DataLoader()
        self.temp_dir = tempfile.mkdtemp()

        # Raw scrape keeps the original column headers and an index column
        self.players_data = pd.DataFrame({
            'Unnamed: 0': [0, 1, 2],
            'Name': ['Player A', 'Player B', 'Player C'],
            'Club': ['Club X', 'Club Y', 'Club X'],
            'Value': ['€1.5M', '€500K', None],
            'Release Clause': ['€2.7M', '€900K', '€1M'],
            'Loaned From': [None, 'Club Z', None],
        })
        self.leagues_data = pd.DataFrame({
            'club': ['Club X', 'Club Y'],
            'league': ['League A', 'League B'],
        })

        self.players_file = Path(self.temp_dir) / 'players.csv'
        self.leagues_file = Path(self.temp_dir) / 'leagues.csv'
        self.players_data.to_csv(self.players_file, index=False)
        self.leagues_data.to_csv(self.leagues_file, index=False)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_load_players(self):
        """Columns come back snake_cased with the index column removed."""
        df = self.loader.load_players(self.players_file)

        self.assertEqual(len(df), 3)
        self.assertListEqual(
            list(df.columns),
            ['name', 'club', 'value', 'release_clause', 'loaned_from'],
        )
        self.assertEqual(df.iloc[0]['value'], '€1.5M')

    def test_load_league_lookup(self):
        df = self.loader.load_league_lookup(self.leagues_file)

        self.assertEqual(len(df), 2)
        self.assertIn('club', df.columns)
        self.assertIn('league', df.columns)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            self.loader.load_players(Path(self.temp_dir) / 'nope.csv')

    def test_get_data_summary(self):
        """Test data summary generation."""
        self.loader.load_players(self.players_file)
        self.loader.load_league_lookup(self.leagues_file)

        summary = self.loader.get_data_summary()

        self.assertEqual(summary['total_players'], 3)
        self.assertEqual(summary['unique_clubs'], 2)
        self.assertEqual(summary['loaned_players'], 1)
        self.assertEqual(summary['missing_value'], 1)
        self.assertEqual(summary['lookup_leagues'], 2)

    def test_summary_requires_data(self):
        with self.assertRaises(ValueError):
            self.loader.get_data_summary()


def test_snake_case_columns():
    df = pd.DataFrame(columns=['International Reputation', 'Weak Foot', 'Contract Valid Until'])
    assert list(snake_case_columns(df).columns) == [
        'international_reputation', 'weak_foot', 'contract_valid_until',
    ]


if __name__ == '__main__':
    unittest.main()
