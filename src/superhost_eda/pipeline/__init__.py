# ========================
# src/superhost_eda/pipeline/__init__.py
# ========================

"""
Data Pipeline Package

Core components of the listings pipeline:
- ingestion: Snapshot fetching, chunked reading and type inference
- projection: Analysis column selection
- cleaning: Price normalization, missing-data policy and cohort filter
- transformation: Descriptive summary tables
- storage: Atomic artifact writing
- orchestrator: Pipeline coordination
"""

from .errors import (
    PipelineError,
    SourceUnavailable,
    ParseError,
    MissingColumn,
    PriceParseError,
    WriteError,
    ModelFitError,
)
from .ingestion import ListingsLoader
from .projection import ColumnProjector
from .cleaning import PriceNormalizer, ListingFilter, parse_price
from .transformation import ListingsSummarizer
from .storage import ListingsSaver
from .orchestrator import ListingsPipeline

__all__ = [
    'PipelineError',
    'SourceUnavailable',
    'ParseError',
    'MissingColumn',
    'PriceParseError',
    'WriteError',
    'ModelFitError',
    'ListingsLoader',
    'ColumnProjector',
    'PriceNormalizer',
    'ListingFilter',
    'parse_price',
    'ListingsSummarizer',
    'ListingsSaver',
    'ListingsPipeline',
]
