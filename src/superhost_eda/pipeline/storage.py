# ========================
# src/superhost_eda/pipeline/storage.py
# ========================

"""
Data Storage Module

Persists pipeline artifacts. Every file is written to a temporary name in the
destination directory and renamed into place, so a failed write never leaves
a partial artifact behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict

import pandas as pd
import pyarrow as pa

from .errors import WriteError

logger = logging.getLogger(__name__)


class ListingsSaver:
    """
    Saves listings tables as Parquet and the run's reports as CSV, JSON,
    text and Markdown.
    """

    def __init__(self, output_dir: str = "data/processed"):
        """
        Initialize the saver.

        Args:
            output_dir (str): Directory to save output files
        """
        self.output_dir = Path(output_dir)
        logger.info(f"ListingsSaver initialized with output directory: {self.output_dir}")

    def save_table(self, df: pd.DataFrame, filename: str) -> str:
        """
        Write a table as Parquet, keeping column names and dtypes as they are.

        Args:
            df (pd.DataFrame): Table to persist
            filename (str): File name inside the output directory

        Returns:
            str: Path of the written file

        Raises:
            WriteError: The file could not be written
        """
        file_path = self.output_dir / filename
        self._atomic_write(file_path, lambda tmp: df.to_parquet(tmp, engine='pyarrow', index=False))
        logger.info(f"Saved {len(df):,} rows x {len(df.columns)} columns to {file_path}")
        return str(file_path)

    def save_raw_copy(self, payload: bytes, filename: str) -> str:
        """Write the uncompressed raw snapshot byte-for-byte."""
        file_path = self.output_dir / filename

        def _write(tmp: str) -> None:
            with open(tmp, 'wb') as f:
                f.write(payload)

        self._atomic_write(file_path, _write)
        logger.info(f"Raw snapshot copy ({len(payload):,} bytes) saved to {file_path}")
        return str(file_path)

    def save_summary_tables(self, tables: Dict[str, pd.DataFrame]) -> Dict[str, str]:
        """Save each descriptive table as `<name>.csv`."""
        saved_files = {}
        for name, table in tables.items():
            file_path = self.output_dir / f"{name}.csv"
            self._atomic_write(file_path, lambda tmp, table=table: table.to_csv(tmp, index=False))
            logger.info(f"Saved {len(table)} records to {file_path}")
            saved_files[name] = str(file_path)
        return saved_files

    def save_summary(self, summary_data: Dict[str, Any], filename: str = "run_summary.json") -> str:
        """Save the run summary as JSON."""
        file_path = self.output_dir / filename

        def _write(tmp: str) -> None:
            with open(tmp, 'w', encoding='utf-8') as f:
                json.dump(summary_data, f, indent=2, ensure_ascii=False, default=str)

        self._atomic_write(file_path, _write)
        logger.info(f"Summary saved to {file_path}")
        return str(file_path)

    def save_text(self, content: str, filename: str) -> str:
        """Save a plain-text report such as the model summary."""
        file_path = self.output_dir / filename

        def _write(tmp: str) -> None:
            with open(tmp, 'w', encoding='utf-8') as f:
                f.write(content)

        self._atomic_write(file_path, _write)
        logger.info(f"Text report saved to {file_path}")
        return str(file_path)

    def _atomic_write(self, file_path: Path, writer: Callable[[str], None]) -> None:
        """Run `writer` against a temporary path, then rename it onto `file_path`."""
        tmp_path = None
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{file_path.name}.", suffix=".tmp", dir=file_path.parent)
            os.close(fd)
            writer(tmp_path)
            os.replace(tmp_path, file_path)
        except (OSError, pa.ArrowException) as e:
            logger.error(f"Error writing {file_path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise WriteError(f"Cannot write {file_path}: {e}", stage='persist') from e

    def create_data_dictionary(self, analysis_filename: str, projected_filename: str) -> str:
        """Create a data dictionary explaining the generated files."""
        file_path = self.output_dir / "DATA_DICTIONARY.md"

        content = f"""# Data Dictionary

This document describes the structure and content of the generated files.

## Files Overview

### 1. {projected_filename}
The analysis columns of the raw snapshot before any row is removed. Price is
still the published text, e.g. "$1,234.00".

### 2. {analysis_filename}
The cleaned analysis dataset: one row per single-listing host.

| Column | Type | Description |
|--------|------|-------------|
| host_id | Int64 | Host identifier, unique in this file |
| host_response_time | ordered category | within an hour < within a few hours < within a day < a few days or more |
| host_is_superhost | boolean | Superhost flag, never missing |
| host_total_listings_count | Int64 | Listings the host reports across the platform |
| neighbourhood_cleansed | string | Neighbourhood name |
| bathrooms | float | Number of bathrooms |
| bedrooms | float/Int64 | Number of bedrooms |
| price | int64 | Nightly price in whole currency units, below the price ceiling |
| number_of_reviews | Int64 | Review count |
| review_scores_rating | float | Overall review score, never missing |
| review_scores_accuracy | float | Accuracy review score |
| review_scores_value | float | Value review score |
| host_is_superhost_binary | float | 1.0 for superhosts, 0.0 otherwise |

### 3. missing_values.csv
Null count and share per column of the projected table.

### 4. superhost_by_response_time.csv
Listings and superhost share per response time category.

### 5. rating_by_superhost.csv
Overall review score statistics for superhosts and other hosts.

### 6. listings_by_neighbourhood.csv
Listing count and median price for the largest neighbourhoods.

### 7. superhost_model.txt / superhost_model_coefficients.csv
Logistic regression of superhost status on response time and review score.

### 8. run_summary.json
Row counts per stage, price trimming statistics and the saved file paths.

## Data Quality Notes

- Prices that are not whole currency amounts are dropped and counted
- Prices at or above the price ceiling are excluded, not capped
- "N/A" response times are treated as missing and excluded
- Hosts with more than one listing are excluded entirely
"""

        self._atomic_write(file_path, lambda tmp: Path(tmp).write_text(content, encoding='utf-8'))
        logger.info(f"Data dictionary created at {file_path}")
        return str(file_path)
