# ========================
# src/superhost_eda/pipeline/schema.py
# ========================

"""
Listing Schema

Column names, category labels and the column-presence check applied at every
stage boundary.
"""

from typing import Iterable, List, Optional

import pandas as pd

from .errors import MissingColumn

HOST_ID = 'host_id'
RESPONSE_TIME = 'host_response_time'
SUPERHOST = 'host_is_superhost'
SUPERHOST_BINARY = 'host_is_superhost_binary'
TOTAL_LISTINGS = 'host_total_listings_count'
NEIGHBOURHOOD = 'neighbourhood_cleansed'
PRICE = 'price'
RATING = 'review_scores_rating'

ANALYSIS_COLUMNS = [
    HOST_ID,
    RESPONSE_TIME,
    SUPERHOST,
    TOTAL_LISTINGS,
    NEIGHBOURHOOD,
    'bathrooms',
    'bedrooms',
    PRICE,
    'number_of_reviews',
    RATING,
    'review_scores_accuracy',
    'review_scores_value',
]

# Ordered fastest to slowest.
RESPONSE_TIME_LEVELS = [
    'within an hour',
    'within a few hours',
    'within a day',
    'a few days or more',
]

NOT_APPLICABLE = 'N/A'

BOOLEAN_TOKENS = {
    't': True,
    'f': False,
    'true': True,
    'false': False,
}


def require_columns(df: pd.DataFrame, columns: Iterable[str],
                    stage: Optional[str] = None) -> None:
    """
    Raise MissingColumn if any of `columns` is absent from `df`.

    Args:
        df (pd.DataFrame): Table to check
        columns (iterable): Column names the caller depends on
        stage (str): Stage name reported in the error
    """
    missing: List[str] = [col for col in columns if col not in df.columns]
    if missing:
        raise MissingColumn(missing, stage=stage, row_count=len(df))
