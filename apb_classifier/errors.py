from __future__ import annotations

"""
Errors raised while loading and preparing quotation datasets.
"""


class QuotationDataError(ValueError):
    """Base class for input problems that abort a run."""

    def __init__(self, message: str, column: str | None = None, row: int | None = None):
        super().__init__(message)
        self.column = column
        self.row = row


class SchemaError(QuotationDataError):
    """A declared column is missing or holds a value of the wrong type."""


class DegenerateFeatureError(QuotationDataError):
    """A numeric feature is constant over the training set, so it cannot be scaled."""


class UnknownCategoryError(QuotationDataError):
    """The response column holds a label other than quotation or noise."""
