# ========================
# tests/test_pipeline.py
# ========================

import os
import sys
import unittest

import numpy as np
import pandas as pd

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from superhost_eda.pipeline.cleaning import ListingFilter, PriceNormalizer, as_boolean, parse_price
from superhost_eda.pipeline.errors import MissingColumn, PriceParseError
from superhost_eda.pipeline.projection import ColumnProjector
from superhost_eda.pipeline.schema import ANALYSIS_COLUMNS, RESPONSE_TIME_LEVELS
from superhost_eda.pipeline.transformation import ListingsSummarizer


def _listings(**overrides):
    """Small listings table shaped like the loader's output."""
    data = {
        'host_id': [1, 2, 3, 4],
        'host_response_time': ['within an hour', 'within a day', 'within a few hours', 'a few days or more'],
        'host_is_superhost': ['t', 'f', 't', 'f'],
        'host_total_listings_count': [1, 1, 1, 1],
        'neighbourhood_cleansed': ['Harlem', 'Harlem', 'Chelsea', 'Midtown'],
        'bathrooms': [1.0, 1.0, 1.5, np.nan],
        'bedrooms': [1, 2, 1, 3],
        'price': [45, 120, 300, 80],
        'number_of_reviews': [12, 3, 40, 7],
        'review_scores_rating': [4.8, 4.5, 4.9, 4.1],
        'review_scores_accuracy': [4.9, 4.4, 4.9, 4.0],
        'review_scores_value': [4.7, 4.6, 4.8, 4.2],
    }
    data.update(overrides)
    return pd.DataFrame(data)


class TestColumnProjector(unittest.TestCase):

    def test_projects_analysis_columns_in_order(self):
        raw = _listings()
        raw.insert(0, 'listing_url', ['u1', 'u2', 'u3', 'u4'])
        raw['room_type'] = 'Private room'
        raw = raw[list(reversed(raw.columns))]

        projected = ColumnProjector().apply(raw)

        self.assertEqual(list(projected.columns), ANALYSIS_COLUMNS)
        self.assertEqual(len(projected), 4)

    def test_missing_column(self):
        raw = _listings().drop(columns=['bedrooms'])
        with self.assertRaises(MissingColumn) as ctx:
            ColumnProjector().apply(raw)
        self.assertEqual(ctx.exception.columns, ['bedrooms'])
        self.assertEqual(ctx.exception.stage, 'project')

    def test_projection_does_not_modify_input(self):
        raw = _listings()
        projected = ColumnProjector().apply(raw)
        projected.loc[0, 'price'] = -1
        self.assertEqual(raw.loc[0, 'price'], 45)


class TestParsePrice(unittest.TestCase):

    def test_valid_prices(self):
        self.assertEqual(parse_price("$45"), 45)
        self.assertEqual(parse_price("$1,234"), 1234)
        self.assertEqual(parse_price("$1,234.00"), 1234)
        self.assertEqual(parse_price("150"), 150)
        self.assertEqual(parse_price(" $0 "), 0)

    def test_invalid_prices(self):
        for value in ["", "TBD", "$", "$12.50", "-5", "call for price", None, np.nan]:
            with self.subTest(value=value):
                with self.assertRaises(PriceParseError):
                    parse_price(value)


class TestPriceNormalizer(unittest.TestCase):

    def test_trims_at_ceiling_and_drops_unparseable(self):
        df = _listings(price=['$45', '$1,234', 'TBD', '$999'])
        normalizer = PriceNormalizer(price_ceiling=1000)

        result = normalizer.apply(df)

        self.assertEqual(result['price'].tolist(), [45, 999])
        self.assertEqual(str(result['price'].dtype), 'int64')
        self.assertEqual(normalizer.outliers['price'].tolist(), [1234])
        self.assertEqual(normalizer.stats['unparseable_prices'], 1)
        self.assertEqual(normalizer.stats['outliers_trimmed'], 1)
        self.assertEqual(normalizer.stats['min_price_before_trim'], 45)
        self.assertEqual(normalizer.stats['max_price_before_trim'], 1234)

    def test_ceiling_is_exclusive(self):
        df = _listings(price=['$1,000', '$999.00', '$1000', '$10'])
        result = PriceNormalizer(price_ceiling=1000).apply(df)
        self.assertEqual(result['price'].tolist(), [999, 10])

    def test_input_is_not_modified(self):
        df = _listings(price=['$45', '$1,234', '$60', '$999'])
        PriceNormalizer().apply(df)
        self.assertEqual(df['price'].tolist(), ['$45', '$1,234', '$60', '$999'])


class TestListingFilter(unittest.TestCase):

    def setUp(self):
        self.listing_filter = ListingFilter()

    def test_drop_missing_superhost_adds_binary(self):
        df = _listings(host_is_superhost=['t', None, 'f', 'true'])
        result = self.listing_filter.drop_missing_superhost(df)

        self.assertEqual(result['host_id'].tolist(), [1, 3, 4])
        self.assertEqual(str(result['host_is_superhost'].dtype), 'boolean')
        self.assertEqual(result['host_is_superhost_binary'].tolist(), [1.0, 0.0, 1.0])

    def test_unrecognized_superhost_flags_are_reported(self):
        df = _listings(host_is_superhost=['t', 'yes', None, 'f'])
        with self.assertLogs('superhost_eda.pipeline.cleaning', level='WARNING') as logs:
            result = self.listing_filter.drop_missing_superhost(df)

        self.assertEqual(result['host_id'].tolist(), [1, 4])
        self.assertEqual(self.listing_filter.superhost_unrecognized, 1)
        self.assertIn("'yes'", logs.output[0])

    def test_reset_clears_previous_counts(self):
        self.listing_filter.apply(_listings(host_response_time=['N/A', 'within a day',
                                                                'within an hour', 'within a day']))
        self.listing_filter.reset()
        self.listing_filter.apply(_listings().head(2))
        stats = self.listing_filter.get_statistics()

        self.assertEqual(stats['rows_in'], 2)
        self.assertEqual(len(stats['stages']), 4)
        self.assertEqual(stats['response_time_relabeled'], 0)

    def test_binary_matches_flag(self):
        result = self.listing_filter.drop_missing_superhost(_listings())
        expected = result['host_is_superhost'].map({True: 1.0, False: 0.0}).astype('float64')
        pd.testing.assert_series_equal(result['host_is_superhost_binary'], expected, check_names=False)

    def test_drop_missing_rating(self):
        df = _listings(review_scores_rating=[4.8, np.nan, 4.9, np.nan])
        result = self.listing_filter.drop_missing_rating(df)
        self.assertEqual(result['host_id'].tolist(), [1, 3])

    def test_not_applicable_response_time_is_dropped(self):
        """A listing answering "N/A" is excluded even with a good rating."""
        df = _listings(host_response_time=['within an hour', 'N/A', 'within a day', None],
                       review_scores_rating=[4.8, 4.8, 4.9, 4.1])
        result = self.listing_filter.canonicalize_response_time(df)

        self.assertEqual(result['host_id'].tolist(), [1, 3])
        self.assertEqual(self.listing_filter.response_time_relabeled, 1)
        dtype = result['host_response_time'].dtype
        self.assertIsInstance(dtype, pd.CategoricalDtype)
        self.assertTrue(dtype.ordered)
        self.assertEqual(list(dtype.categories), RESPONSE_TIME_LEVELS)

    def test_unexpected_response_label_is_kept(self):
        df = _listings(host_response_time=['within an hour', 'within a week', 'within a day', 'N/A'])
        result = self.listing_filter.canonicalize_response_time(df)

        self.assertEqual(result['host_id'].tolist(), [1, 2, 3])
        self.assertEqual(list(result['host_response_time'].cat.categories), RESPONSE_TIME_LEVELS + ['within a week'])

    def test_hosts_with_several_listings_are_excluded(self):
        df = _listings(host_id=[7, 7, 8, 9])
        result = self.listing_filter.restrict_to_single_listing_hosts(df)

        self.assertEqual(result['host_id'].tolist(), [8, 9])
        self.assertFalse(result['host_id'].duplicated().any())

    def test_rows_without_host_are_excluded(self):
        df = _listings(host_id=pd.array([7, None, 8, 9], dtype='Int64'))
        result = self.listing_filter.restrict_to_single_listing_hosts(df)
        self.assertEqual(result['host_id'].tolist(), [7, 8, 9])

    def test_apply_records_stage_counts(self):
        df = _listings(
            host_id=[1, 2, 2, 3],
            host_is_superhost=['t', 'f', 'f', None],
        )
        result = self.listing_filter.apply(df)
        stats = self.listing_filter.get_statistics()

        self.assertEqual(result['host_id'].tolist(), [1])
        self.assertEqual([stage['stage'] for stage in stats['stages']], [
            'drop_missing_superhost',
            'drop_missing_rating',
            'canonicalize_response_time',
            'restrict_to_single_listing_hosts',
        ])
        self.assertEqual(stats['rows_in'], 4)
        self.assertEqual(stats['rows_out'], 1)
        self.assertEqual(stats['stages'][0]['rows_dropped'], 1)
        self.assertEqual(stats['stages'][-1]['rows_dropped'], 2)

    def test_missing_column_names_stage(self):
        df = _listings().drop(columns=['review_scores_rating'])
        with self.assertRaises(MissingColumn) as ctx:
            self.listing_filter.drop_missing_rating(df)
        self.assertEqual(ctx.exception.stage, 'drop_missing_rating')

    def test_as_boolean(self):
        result = as_boolean(pd.Series(['t', 'F', 'true', None]))
        self.assertEqual(result.iloc[0], True)
        self.assertEqual(result.iloc[1], False)
        self.assertEqual(result.iloc[2], True)
        self.assertTrue(pd.isna(result.iloc[3]))


class TestListingsSummarizer(unittest.TestCase):

    def setUp(self):
        listing_filter = ListingFilter()
        self.analysis = listing_filter.apply(_listings())
        self.summarizer = ListingsSummarizer(top_neighbourhoods_limit=2)

    def test_superhost_by_response_time_lists_every_level(self):
        table = self.summarizer.superhost_by_response_time(self.analysis)

        self.assertEqual(table['host_response_time'].astype(str).tolist(), RESPONSE_TIME_LEVELS)
        self.assertEqual(table['listings'].tolist(), [1, 1, 1, 1])
        self.assertEqual(table['superhost_share'].tolist(), [1.0, 1.0, 0.0, 0.0])

    def test_missing_values(self):
        projected = _listings(review_scores_rating=[4.8, np.nan, np.nan, 4.1])
        table = self.summarizer.missing_values(projected)

        self.assertEqual(table.loc[0, 'column'], 'review_scores_rating')
        self.assertEqual(table.loc[0, 'missing_count'], 2)
        self.assertAlmostEqual(table.loc[0, 'missing_share'], 0.5)

    def test_listings_by_neighbourhood(self):
        table = self.summarizer.listings_by_neighbourhood(self.analysis)

        self.assertEqual(len(table), 2)
        self.assertEqual(table.loc[0, 'neighbourhood_cleansed'], 'Harlem')
        self.assertEqual(table.loc[0, 'listings'], 2)

    def test_price_summary(self):
        summary = self.summarizer.price_summary(self.analysis['price'])
        self.assertEqual(summary['count'], 4.0)
        self.assertEqual(summary['max'], 300.0)
        self.assertEqual(self.summarizer.price_summary(pd.Series([], dtype='int64')), {'count': 0})


if __name__ == '__main__':
    unittest.main()
