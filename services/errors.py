"""Exceptions raised by the ingestion services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from services.processor import IngestionResult


class MalformedBatchError(ValueError):
    """Raised when an input batch is not a sequence of records at all."""


class UploadFormatError(ValueError):
    """Raised when an uploaded file cannot be decoded into raw records."""


class StoreError(RuntimeError):
    """Raised by the readings table when a write cannot be completed."""


class PersistenceError(RuntimeError):
    """Raised when validated readings could not be stored.

    The statistics computed before the failed insert are kept on
    ``partial_result`` so callers can still show them next to the error.
    """

    def __init__(self, message: str, partial_result: Optional["IngestionResult"] = None) -> None:
        super().__init__(message)
        self.partial_result = partial_result
