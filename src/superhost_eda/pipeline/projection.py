# ========================
# src/superhost_eda/pipeline/projection.py
# ========================

"""
Column Projection Module

Narrows a raw snapshot to the fixed list of analysis columns.
"""

import logging
from typing import Iterable, Optional

import pandas as pd

from .schema import ANALYSIS_COLUMNS, require_columns

logger = logging.getLogger(__name__)


class ColumnProjector:
    """Selects a fixed, ordered list of columns. Rows are never dropped here."""

    def __init__(self, columns: Optional[Iterable[str]] = None):
        self.columns = list(columns) if columns is not None else list(ANALYSIS_COLUMNS)
        logger.info(f"ColumnProjector initialized with {len(self.columns)} columns")

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Return a copy of `df` holding exactly the projection columns, in order.

        Raises:
            MissingColumn: A projection column is absent from `df`
        """
        require_columns(df, self.columns, stage='project')
        projected = df.loc[:, self.columns].copy()
        logger.info(f"Projected {len(df.columns)} columns down to {len(projected.columns)}")
        return projected
