# ========================
# src/superhost_eda/pipeline/ingestion.py
# ========================

"""
Data Ingestion Module

Fetches a raw listings snapshot (remote URL or local path, plain or gzip
compressed), reads it in chunks and infers column types from a look-ahead
window of rows.
"""

import gzip
import io
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd
import requests

from .errors import MissingColumn, ParseError, SourceUnavailable
from .schema import ANALYSIS_COLUMNS, BOOLEAN_TOKENS
from ..utils.config import MIN_TYPE_GUESS_ROWS

logger = logging.getLogger(__name__)

GZIP_MAGIC = b'\x1f\x8b'
INTEGER_PATTERN = r'-?\d+'


def infer_column_type(values: pd.Series, guess_rows: int) -> str:
    """
    Guess a column's type from its first `guess_rows` values.

    Args:
        values (pd.Series): Column read as text, nulls for empty cells
        guess_rows (int): Size of the look-ahead window

    Returns:
        str: One of ``boolean``, ``integer``, ``float`` or ``string``
    """
    window = values.iloc[:guess_rows].dropna()
    if window.empty:
        return 'string'

    if window.str.strip().str.lower().isin(list(BOOLEAN_TOKENS)).all():
        return 'boolean'
    if window.str.fullmatch(INTEGER_PATTERN).all():
        return 'integer'
    if pd.to_numeric(window, errors='coerce').notna().all():
        return 'float'
    return 'string'


def coerce_column(values: pd.Series, kind: str) -> Optional[pd.Series]:
    """
    Convert a text column to the inferred type.

    Returns None when some non-null value does not convert, so the caller can
    keep the column as text instead of silently nulling values.
    """
    present = values.notna()

    if kind == 'boolean':
        converted = values.str.strip().str.lower().map(BOOLEAN_TOKENS)
        if converted[present].isna().any():
            return None
        return converted.astype('boolean')

    if kind == 'integer':
        if not values[present].str.fullmatch(INTEGER_PATTERN).all():
            return None
        data = [int(value) if isinstance(value, str) else None for value in values]
        return pd.Series(pd.array(data, dtype='Int64'), index=values.index, name=values.name)

    if kind == 'float':
        converted = pd.to_numeric(values, errors='coerce')
        if converted[present].isna().any():
            return None
        return converted.astype('float64')

    return values


class ListingsLoader:
    """
    Loads a raw listings snapshot into a typed DataFrame.

    Every cell is first read as text; only empty cells become null so that
    sentinel labels like "N/A" reach the cleaning stages untouched.
    """

    def __init__(self,
                 chunk_size: int = 5000,
                 type_guess_rows: int = 10000,
                 required_columns: Optional[Iterable[str]] = None):
        """
        Initialize the loader.

        Args:
            chunk_size (int): Rows per read chunk
            type_guess_rows (int): Look-ahead window for type inference,
                raised to MIN_TYPE_GUESS_ROWS if smaller
            required_columns (iterable): Columns the snapshot must contain
        """
        if type_guess_rows < MIN_TYPE_GUESS_ROWS:
            logger.warning(
                f"type_guess_rows={type_guess_rows} is below the minimum look-ahead; "
                f"using {MIN_TYPE_GUESS_ROWS}"
            )
            type_guess_rows = MIN_TYPE_GUESS_ROWS

        self.chunk_size = chunk_size
        self.type_guess_rows = type_guess_rows
        self.required_columns = list(required_columns) if required_columns is not None else list(ANALYSIS_COLUMNS)
        self.raw_bytes: Optional[bytes] = None
        self.header: List[str] = []
        self.column_types: Dict[str, str] = {}
        logger.info(f"ListingsLoader initialized (chunk_size={chunk_size}, type_guess_rows={type_guess_rows})")

    def load(self, source: str) -> pd.DataFrame:
        """
        Fetch, read and type a raw snapshot.

        Args:
            source (str): http(s) URL or local file path

        Returns:
            pd.DataFrame: Raw listings with inferred column types

        Raises:
            SourceUnavailable: The source cannot be fetched or opened
            ParseError: The content is not a delimited table
            MissingColumn: A required column is absent from the header
        """
        self.raw_bytes = self.fetch(source)
        table = self.read_table(self.raw_bytes)
        logger.info(f"Loaded {len(table):,} rows x {len(table.columns)} columns from {source}")
        return table

    def fetch(self, source: str) -> bytes:
        """Return the decompressed bytes of the snapshot."""
        if re.match(r'^https?://', source):
            payload = self._fetch_url(source)
        else:
            payload = self._fetch_path(source)

        if payload.startswith(GZIP_MAGIC):
            try:
                payload = gzip.decompress(payload)
            except (OSError, EOFError) as e:
                raise ParseError(f"Corrupt gzip payload from {source}: {e}", stage='load') from e
            logger.info(f"Decompressed snapshot to {len(payload):,} bytes")
        return payload

    def _fetch_url(self, url: str) -> bytes:
        logger.info(f"Downloading snapshot from {url}")
        try:
            response = requests.get(url)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to download {url}: {e}")
            raise SourceUnavailable(f"Cannot fetch {url}: {e}", stage='load') from e
        logger.info(f"Downloaded {len(response.content):,} bytes")
        return response.content

    def _fetch_path(self, path: str) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            logger.error(f"File '{path}' could not be read: {e}")
            raise SourceUnavailable(f"Cannot open {path}: {e}", stage='load') from e

    def read_table(self, payload: bytes) -> pd.DataFrame:
        """
        Read delimited text into a DataFrame and apply type inference.

        Args:
            payload (bytes): Uncompressed delimited text with a header row

        Returns:
            pd.DataFrame: Typed table
        """
        chunks = list(self._read_in_chunks(payload))
        if chunks:
            table = pd.concat(chunks, ignore_index=True)
        else:
            table = self._read_header_only(payload)

        self.header = list(table.columns)
        logger.info(f"CSV header has {len(self.header)} columns")

        missing = [col for col in self.required_columns if col not in table.columns]
        if missing:
            logger.error(f"Snapshot is missing required columns: {missing}")
            raise MissingColumn(missing, stage='load', row_count=len(table))

        return self._apply_types(table)

    def _read_in_chunks(self, payload: bytes):
        """Yield text-typed chunks of `chunk_size` rows."""
        try:
            reader = pd.read_csv(
                io.BytesIO(payload),
                dtype=str,
                keep_default_na=False,
                na_values=[''],
                chunksize=self.chunk_size,
            )
            with reader:
                for chunk_num, chunk in enumerate(reader, start=1):
                    logger.debug(f"Read chunk {chunk_num} with {len(chunk)} rows")
                    yield chunk
        except pd.errors.EmptyDataError as e:
            raise ParseError("Snapshot is empty", stage='load') from e
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            logger.error(f"Error parsing snapshot: {e}")
            raise ParseError(f"Malformed delimited text: {e}", stage='load') from e

    def _read_header_only(self, payload: bytes) -> pd.DataFrame:
        try:
            return pd.read_csv(io.BytesIO(payload), dtype=str, nrows=0)
        except pd.errors.EmptyDataError as e:
            raise ParseError("Snapshot is empty", stage='load') from e

    def _apply_types(self, table: pd.DataFrame) -> pd.DataFrame:
        self.column_types = {}
        typed = {}
        for col in table.columns:
            kind = infer_column_type(table[col], self.type_guess_rows)
            converted = coerce_column(table[col], kind)
            if converted is None:
                logger.warning(
                    f"Column '{col}' looked {kind} in the first {self.type_guess_rows} rows "
                    f"but has values beyond the window that do not convert; keeping it as text"
                )
                kind = 'string'
                converted = table[col]
            self.column_types[col] = kind
            typed[col] = converted

        logger.debug(f"Inferred column types: {self.column_types}")
        return pd.DataFrame(typed, index=table.index)
