# ========================
# src/superhost_eda/pipeline/cleaning.py
# ========================

"""
Data Cleaning Module

Price normalization with outlier trimming, followed by the missing-data
policy and the single-listing-host cohort restriction.

Every stage takes a DataFrame and returns a new, narrower DataFrame; the
input is never modified.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from .errors import PriceParseError
from .schema import (
    BOOLEAN_TOKENS,
    HOST_ID,
    NOT_APPLICABLE,
    PRICE,
    RATING,
    RESPONSE_TIME,
    RESPONSE_TIME_LEVELS,
    SUPERHOST,
    SUPERHOST_BINARY,
    require_columns,
)

logger = logging.getLogger(__name__)

PRICE_CEILING = 1000

# Currency symbol and thousands separator
_PRICE_STRIP = re.compile(r'[$,]')
# Whole currency units; published snapshots append ".00"
_PRICE_AMOUNT = re.compile(r'(\d+)(?:\.0+)?')


def parse_price(value: Any) -> int:
    """
    Parse a free-text price such as ``"$1,234"`` into whole currency units.

    Raises:
        PriceParseError: The value is missing, negative or not a whole amount
    """
    if value is None or pd.isna(value):
        raise PriceParseError(value)

    residual = _PRICE_STRIP.sub('', str(value)).strip()
    match = _PRICE_AMOUNT.fullmatch(residual)
    if match is None:
        raise PriceParseError(value)
    return int(match.group(1))


def as_boolean(values: pd.Series) -> pd.Series:
    """Convert a t/f or true/false column to the nullable boolean dtype."""
    if pd.api.types.is_bool_dtype(values):
        return values.astype('boolean')

    def _token(value):
        if pd.isna(value):
            return None
        return BOOLEAN_TOKENS.get(str(value).strip().lower())

    return values.map(_token).astype('boolean')


class PriceNormalizer:
    """
    Turns the text price into integer currency units and removes outliers.

    Rows whose price cannot be parsed are dropped and counted. Rows at or above
    the ceiling are excluded from the result and kept in `outliers`.
    """

    def __init__(self, price_ceiling: int = PRICE_CEILING):
        """
        Initialize the normalizer.

        Args:
            price_ceiling (int): Exclusive upper bound for retained prices
        """
        self.price_ceiling = price_ceiling
        self.outliers: Optional[pd.DataFrame] = None
        self.stats: Dict[str, Any] = {}
        logger.info(f"PriceNormalizer initialized with price_ceiling={price_ceiling}")

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Normalize price and trim outliers.

        Args:
            df (pd.DataFrame): Table with a text `price` column

        Returns:
            pd.DataFrame: Rows with 0 <= price < price_ceiling, price as int64
        """
        require_columns(df, [PRICE], stage='normalize_price')

        parsed = [self._parse_or_none(index, value) for index, value in df[PRICE].items()]
        prices = pd.Series(parsed, index=df.index, dtype='object')
        parsed_mask = prices.notna()
        amounts = prices[parsed_mask].astype('int64')

        within = amounts < self.price_ceiling
        retained = df.loc[amounts.index[within]].copy()
        retained[PRICE] = amounts[within]

        self.outliers = df.loc[amounts.index[~within]].copy()
        self.outliers[PRICE] = amounts[~within]

        self.stats = {
            'rows_in': len(df),
            'unparseable_prices': int((~parsed_mask).sum()),
            'outliers_trimmed': int((~within).sum()),
            'rows_out': len(retained),
            'price_ceiling': self.price_ceiling,
            'min_price_before_trim': int(amounts.min()) if len(amounts) else None,
            'max_price_before_trim': int(amounts.max()) if len(amounts) else None,
        }

        if self.stats['unparseable_prices']:
            logger.warning(f"Dropped {self.stats['unparseable_prices']:,} rows with unparseable prices")
        logger.info(
            f"Observed price range before trimming: "
            f"{self.stats['min_price_before_trim']} - {self.stats['max_price_before_trim']}"
        )
        logger.info(
            f"Trimmed {self.stats['outliers_trimmed']:,} rows with price >= {self.price_ceiling}; "
            f"{self.stats['rows_out']:,} rows retained"
        )
        return retained

    def _parse_or_none(self, index, value) -> Optional[int]:
        try:
            return parse_price(value)
        except PriceParseError as e:
            logger.debug(f"Row {index}: {e}")
            return None


class ListingFilter:
    """
    Applies the missing-data policy and the cohort restriction.

    Sub-stages run in a fixed order and each reports its counts relative to the
    table produced by the previous one:

    a. drop rows without a superhost flag and derive the 0/1 column
    b. drop rows without an overall review score
    c. relabel "N/A" response times as null, make the column categorical,
       drop nulls
    d. keep only hosts that own exactly one listing in the table
    """

    def __init__(self):
        """Initialize the listing filter."""
        self.stage_counts: List[Dict[str, Any]] = []
        self.response_time_relabeled = 0
        self.superhost_unrecognized = 0
        logger.info("ListingFilter initialized")

    def reset(self) -> None:
        """Clear the counts of a previous run."""
        self.stage_counts = []
        self.response_time_relabeled = 0
        self.superhost_unrecognized = 0

    def stages(self) -> List[Tuple[str, Callable[[pd.DataFrame], pd.DataFrame]]]:
        """Ordered (name, function) pairs for the orchestrator."""
        return [
            ('drop_missing_superhost', self.drop_missing_superhost),
            ('drop_missing_rating', self.drop_missing_rating),
            ('canonicalize_response_time', self.canonicalize_response_time),
            ('restrict_to_single_listing_hosts', self.restrict_to_single_listing_hosts),
        ]

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Run every sub-stage in order."""
        for _, stage in self.stages():
            df = stage(df)
        return df

    def drop_missing_superhost(self, df: pd.DataFrame) -> pd.DataFrame:
        require_columns(df, [SUPERHOST], stage='drop_missing_superhost')

        superhost = as_boolean(df[SUPERHOST])
        known = superhost.notna()

        unrecognized = df[SUPERHOST].notna() & ~known
        self.superhost_unrecognized = int(unrecognized.sum())
        if self.superhost_unrecognized:
            tokens = sorted(set(df.loc[unrecognized, SUPERHOST].astype(str)))
            logger.warning(
                f"Dropping {self.superhost_unrecognized:,} rows with unrecognized superhost flags: {tokens}"
            )
        result = df.loc[known].copy()
        result[SUPERHOST] = superhost[known]
        result[SUPERHOST_BINARY] = result[SUPERHOST].astype('float64')

        self._record('drop_missing_superhost', df, result)
        return result

    def drop_missing_rating(self, df: pd.DataFrame) -> pd.DataFrame:
        require_columns(df, [RATING], stage='drop_missing_rating')

        result = df.loc[df[RATING].notna()].copy()

        self._record('drop_missing_rating', df, result)
        return result

    def canonicalize_response_time(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Map the "N/A" sentinel to null, type the column as an ordered
        categorical over the known labels, then drop the nulls.
        """
        require_columns(df, [RESPONSE_TIME], stage='canonicalize_response_time')

        labels = df[RESPONSE_TIME].astype('object')
        sentinel = labels == NOT_APPLICABLE
        self.response_time_relabeled = int(sentinel.sum())
        labels = labels.mask(sentinel)

        unexpected = sorted(set(labels.dropna()) - set(RESPONSE_TIME_LEVELS))
        if unexpected:
            logger.warning(f"Unexpected response time labels kept as extra categories: {unexpected}")

        canonical = pd.Series(
            pd.Categorical(labels, categories=RESPONSE_TIME_LEVELS + unexpected, ordered=True),
            index=df.index,
            name=RESPONSE_TIME,
        )
        known = canonical.notna()
        result = df.loc[known].copy()
        result[RESPONSE_TIME] = canonical[known]

        logger.info(f"Relabeled {self.response_time_relabeled:,} '{NOT_APPLICABLE}' response times as missing")
        self._record('canonicalize_response_time', df, result)
        return result

    def restrict_to_single_listing_hosts(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Keep rows whose host_id occurs exactly once. Hosts with several
        listings lose all of them; rows without a host_id are dropped.
        """
        require_columns(df, [HOST_ID], stage='restrict_to_single_listing_hosts')

        listings_per_host = df[HOST_ID].map(df[HOST_ID].value_counts())
        single = listings_per_host.eq(1).fillna(False).astype(bool)
        result = df.loc[single].copy()

        self._record('restrict_to_single_listing_hosts', df, result)
        return result

    def _record(self, stage: str, before: pd.DataFrame, after: pd.DataFrame) -> None:
        entry = {
            'stage': stage,
            'rows_in': len(before),
            'rows_out': len(after),
            'rows_dropped': len(before) - len(after),
        }
        self.stage_counts.append(entry)
        logger.info(f"{stage}: dropped {entry['rows_dropped']:,} of {entry['rows_in']:,} rows")

    def get_statistics(self) -> Dict[str, Any]:
        """Get filtering statistics."""
        rows_in = self.stage_counts[0]['rows_in'] if self.stage_counts else 0
        rows_out = self.stage_counts[-1]['rows_out'] if self.stage_counts else 0
        return {
            'rows_in': rows_in,
            'rows_out': rows_out,
            'rows_dropped': rows_in - rows_out,
            'response_time_relabeled': self.response_time_relabeled,
            'superhost_unrecognized': self.superhost_unrecognized,
            'retention_rate': rows_out / rows_in * 100 if rows_in > 0 else 0,
            'stages': list(self.stage_counts),
        }
