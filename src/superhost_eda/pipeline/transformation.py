# ========================
# src/superhost_eda/pipeline/transformation.py
# ========================

"""
Data Transformation Module

Descriptive summaries of the projected and the cleaned listings tables. These
feed the saved CSV tables and the plots; they never modify the tables.
"""

import logging
from typing import Dict, Any

import pandas as pd

from .schema import (
    NEIGHBOURHOOD,
    PRICE,
    RATING,
    RESPONSE_TIME,
    SUPERHOST,
    SUPERHOST_BINARY,
    require_columns,
)

logger = logging.getLogger(__name__)


class ListingsSummarizer:
    """
    Builds the descriptive tables reported alongside the analysis dataset.
    """

    def __init__(self, top_neighbourhoods_limit: int = 20):
        """
        Initialize the summarizer.

        Args:
            top_neighbourhoods_limit (int): Number of neighbourhoods to keep in
                the listing count table
        """
        self.top_neighbourhoods_limit = top_neighbourhoods_limit
        logger.info(f"ListingsSummarizer initialized with top_neighbourhoods_limit={top_neighbourhoods_limit}")

    def summarize(self, projected: pd.DataFrame, analysis: pd.DataFrame) -> Dict[str, pd.DataFrame]:
        """
        Build every summary table.

        Args:
            projected (pd.DataFrame): Projector output, before any row filtering
            analysis (pd.DataFrame): Final cleaned table

        Returns:
            dict: Table name -> DataFrame
        """
        tables = {
            'missing_values': self.missing_values(projected),
            'superhost_by_response_time': self.superhost_by_response_time(analysis),
            'rating_by_superhost': self.rating_by_superhost(analysis),
            'listings_by_neighbourhood': self.listings_by_neighbourhood(analysis),
        }
        logger.info(f"Built {len(tables)} summary tables")
        return tables

    def missing_values(self, df: pd.DataFrame) -> pd.DataFrame:
        """Null count and share per column, most incomplete first."""
        counts = df.isna().sum()
        shares = counts / len(df) if len(df) else counts.astype('float64')
        table = pd.DataFrame({
            'column': counts.index,
            'missing_count': counts.to_numpy(),
            'missing_share': shares.to_numpy(),
        })
        return table.sort_values(['missing_count', 'column'], ascending=[False, True]).reset_index(drop=True)

    def superhost_by_response_time(self, df: pd.DataFrame) -> pd.DataFrame:
        require_columns(df, [RESPONSE_TIME, SUPERHOST_BINARY], stage='summarize')
        grouped = df.groupby(RESPONSE_TIME, observed=False)[SUPERHOST_BINARY]
        table = grouped.agg(['count', 'mean']).reset_index()
        return table.rename(columns={'count': 'listings', 'mean': 'superhost_share'})

    def rating_by_superhost(self, df: pd.DataFrame) -> pd.DataFrame:
        require_columns(df, [SUPERHOST, RATING], stage='summarize')
        grouped = df.groupby(SUPERHOST)[RATING]
        table = grouped.agg(['count', 'mean', 'median', 'std', 'min', 'max']).reset_index()
        return table.rename(columns={'count': 'listings'})

    def listings_by_neighbourhood(self, df: pd.DataFrame) -> pd.DataFrame:
        require_columns(df, [NEIGHBOURHOOD, PRICE], stage='summarize')
        table = (
            df.groupby(NEIGHBOURHOOD)
            .agg(listings=(PRICE, 'size'), median_price=(PRICE, 'median'))
            .reset_index()
            .sort_values(['listings', NEIGHBOURHOOD], ascending=[False, True])
        )
        return table.head(self.top_neighbourhoods_limit).reset_index(drop=True)

    def price_summary(self, prices: pd.Series) -> Dict[str, Any]:
        """Plain-dict description of a price column for the run summary."""
        if prices.empty:
            return {'count': 0}
        described = prices.astype('float64').describe()
        return {key: float(value) for key, value in described.items()}
