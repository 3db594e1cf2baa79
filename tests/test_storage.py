# ========================
# tests/test_storage.py
# ========================

import json
import os
import sys
import tempfile
import unittest
from unittest import mock

import pandas as pd
import pyarrow as pa

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from superhost_eda.pipeline.errors import WriteError
from superhost_eda.pipeline.schema import RESPONSE_TIME_LEVELS
from superhost_eda.pipeline.storage import ListingsSaver


def _analysis_table():
    return pd.DataFrame({
        'host_id': pd.array([11, 12, 13], dtype='Int64'),
        'host_response_time': pd.Categorical(
            ['within an hour', 'within a day', 'within an hour'],
            categories=RESPONSE_TIME_LEVELS, ordered=True,
        ),
        'host_is_superhost': pd.array([True, False, True], dtype='boolean'),
        'price': pd.Series([45, 120, 999], dtype='int64'),
        'review_scores_rating': [4.8, 4.1, 4.95],
        'host_is_superhost_binary': [1.0, 0.0, 1.0],
    })


class TestListingsSaver(unittest.TestCase):
    """Test artifact persistence."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.saver = ListingsSaver(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_parquet_round_trip_keeps_types(self):
        table = _analysis_table()
        path = self.saver.save_table(table, 'analysis.parquet')
        loaded = pd.read_parquet(path)

        self.assertEqual(list(loaded.columns), list(table.columns))
        self.assertEqual(str(loaded['host_id'].dtype), 'Int64')
        self.assertEqual(str(loaded['host_is_superhost'].dtype), 'boolean')
        self.assertEqual(str(loaded['price'].dtype), 'int64')
        self.assertIsInstance(loaded['host_response_time'].dtype, pd.CategoricalDtype)
        self.assertTrue(loaded['host_response_time'].dtype.ordered)
        self.assertEqual(list(loaded['host_response_time'].cat.categories), RESPONSE_TIME_LEVELS)
        self.assertEqual(loaded['host_id'].tolist(), [11, 12, 13])
        self.assertEqual(loaded['host_response_time'].astype(str).tolist(),
                         ['within an hour', 'within a day', 'within an hour'])

    def test_no_temporary_files_left(self):
        self.saver.save_table(_analysis_table(), 'analysis.parquet')
        self.saver.save_summary({'rows': 3})
        self.assertEqual(sorted(os.listdir(self.temp_dir.name)), ['analysis.parquet', 'run_summary.json'])

    def test_rewrite_is_byte_identical(self):
        first = self.saver.save_table(_analysis_table(), 'first.parquet')
        second = self.saver.save_table(_analysis_table(), 'second.parquet')

        with open(first, 'rb') as f1, open(second, 'rb') as f2:
            self.assertEqual(f1.read(), f2.read())

    def test_overwrite_replaces_previous_file(self):
        self.saver.save_table(_analysis_table(), 'analysis.parquet')
        path = self.saver.save_table(_analysis_table().head(1), 'analysis.parquet')
        self.assertEqual(len(pd.read_parquet(path)), 1)

    def test_unwritable_destination(self):
        blocker = os.path.join(self.temp_dir.name, 'not_a_directory')
        with open(blocker, 'w') as f:
            f.write('occupied')

        saver = ListingsSaver(blocker)
        with self.assertRaises(WriteError) as ctx:
            saver.save_table(_analysis_table(), 'analysis.parquet')
        self.assertEqual(ctx.exception.stage, 'persist')

    def test_failed_write_removes_temporary_file(self):
        def _partial_write(self_df, path, **kwargs):
            with open(path, 'wb') as f:
                f.write(b'PAR1 partial')
            raise pa.ArrowInvalid("disk full")

        with mock.patch.object(pd.DataFrame, 'to_parquet', _partial_write):
            with self.assertRaises(WriteError):
                self.saver.save_table(_analysis_table(), 'analysis.parquet')

        self.assertEqual(os.listdir(self.temp_dir.name), [])

    def test_failed_rewrite_keeps_previous_file(self):
        path = self.saver.save_table(_analysis_table(), 'analysis.parquet')
        with mock.patch.object(pd.DataFrame, 'to_parquet', side_effect=pa.ArrowInvalid("disk full")):
            with self.assertRaises(WriteError):
                self.saver.save_table(_analysis_table().head(1), 'analysis.parquet')

        self.assertEqual(os.listdir(self.temp_dir.name), ['analysis.parquet'])
        self.assertEqual(len(pd.read_parquet(path)), 3)

    def test_raw_copy_is_byte_for_byte(self):
        payload = b'id,price\n1,"$1,234.00"\n'
        path = self.saver.save_raw_copy(payload, 'listings_raw.csv')
        with open(path, 'rb') as f:
            self.assertEqual(f.read(), payload)

    def test_summary_tables_and_json(self):
        tables = {'rating_by_superhost': pd.DataFrame({'host_is_superhost': [False, True], 'listings': [2, 1]})}
        saved = self.saver.save_summary_tables(tables)
        self.assertEqual(pd.read_csv(saved['rating_by_superhost'])['listings'].tolist(), [2, 1])

        summary_path = self.saver.save_summary({'price_ceiling': 1000, 'model': None})
        with open(summary_path, 'r', encoding='utf-8') as f:
            self.assertEqual(json.load(f), {'price_ceiling': 1000, 'model': None})

    def test_data_dictionary_names_artifacts(self):
        path = self.saver.create_data_dictionary('a-analysis.parquet', 'a-select.parquet')
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
        self.assertIn('a-analysis.parquet', content)
        self.assertIn('a-select.parquet', content)


if __name__ == '__main__':
    unittest.main()
