# ========================
# src/superhost_eda/pipeline/errors.py
# ========================

"""
Pipeline Errors

Exception hierarchy shared by every pipeline stage. Fatal errors carry the
stage name and the row count at the moment of failure so a failed run can be
diagnosed from the log alone.
"""

from typing import Iterable, Optional


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    def __init__(self, message: str,
                 stage: Optional[str] = None,
                 row_count: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.row_count = row_count

    def __str__(self) -> str:
        context = []
        if self.stage is not None:
            context.append(f"stage={self.stage}")
        if self.row_count is not None:
            context.append(f"rows={self.row_count}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class SourceUnavailable(PipelineError):
    """The raw snapshot could not be fetched or opened."""


class ParseError(PipelineError):
    """The raw snapshot does not have the expected delimited structure."""


class MissingColumn(ParseError):
    """One or more required columns are absent from a table."""

    def __init__(self, columns: Iterable[str],
                 stage: Optional[str] = None,
                 row_count: Optional[int] = None):
        self.columns = list(columns)
        super().__init__(
            f"Missing required column(s): {', '.join(self.columns)}",
            stage=stage,
            row_count=row_count,
        )


class PriceParseError(PipelineError):
    """A single price value is not a valid integer amount. Recovered per row."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Cannot parse price value {value!r}", stage="normalize_price")


class WriteError(PipelineError):
    """An artifact could not be written to its destination."""


class ModelFitError(PipelineError):
    """The superhost logistic regression could not be fitted."""
