"""Exception taxonomy for table construction.

All errors surface immediately to the caller; no partial table is returned.
"""
from __future__ import annotations

__all__ = ["AdapterError", "FormatError", "RegtableError", "ValidationError"]


class RegtableError(Exception):
    """Base class for errors raised by regtable."""


class ValidationError(RegtableError, ValueError):
    """An argument has the wrong shape or value (raised before extraction)."""


class FormatError(RegtableError, ValueError):
    """A numeric format specifier is malformed or a value cannot be formatted."""


class AdapterError(RegtableError, TypeError):
    """A model could not be tidied or glanced.

    ``model_index`` is the zero-based position of the offending model, or
    ``None`` when the adapter is called outside of a multi-model table.
    """

    def __init__(self, message: str, *, model_index: int | None = None) -> None:
        if model_index is not None:
            message = f"model {model_index}: {message}"
        super().__init__(message)
        self.model_index = model_index
