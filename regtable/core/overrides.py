"""User-supplied replacements for coefficient standard errors.

Three override kinds are accepted and normalised into one of
``FunctionOverride``, ``MatrixOverride`` or ``VectorOverride``:

- a callable returning a covariance matrix when applied to the model
  (e.g. a robust/cluster sandwich estimator);
- a covariance matrix (``DataFrame`` labelled by term, or a square array
  aligned with the tidy term order);
- a named numeric vector (``Series`` or mapping term -> standard error).

Every kind resolves to a ``pandas.Series`` of standard errors indexed by
term name via :meth:`std_errors`.
"""
from __future__ import annotations

import numbers
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

import numpy as np
import pandas as pd

from regtable.exceptions import ValidationError

__all__ = [
    "FunctionOverride",
    "MatrixOverride",
    "Override",
    "VectorOverride",
    "resolve_override",
    "resolve_overrides",
]


def _diag_se(matrix: Any, terms: Sequence[str]) -> pd.Series:
    if isinstance(matrix, pd.DataFrame):
        if matrix.shape[0] != matrix.shape[1]:
            raise ValidationError(f"covariance matrix must be square; got {matrix.shape}")
        diag = np.diag(matrix.to_numpy(dtype=float))
        labels = [str(ix) for ix in matrix.index]
        # an unlabelled frame (RangeIndex) is treated like a bare array
        if not isinstance(matrix.index, pd.RangeIndex):
            return pd.Series(np.sqrt(diag), index=labels, name="std.error")
    else:
        arr = np.asarray(matrix, dtype=float)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise ValidationError(f"covariance matrix must be square 2-D; got shape {arr.shape}")
        diag = np.diag(arr)
    if diag.size != len(terms):
        raise ValidationError(
            f"unlabelled covariance matrix has {diag.size} rows but the model has {len(terms)} terms",
        )
    return pd.Series(np.sqrt(diag), index=list(terms), name="std.error")


@dataclass(frozen=True)
class FunctionOverride:
    """Callable applied to the model; returns a covariance matrix."""

    func: Callable[[Any], Any]

    def std_errors(self, model: Any, terms: Sequence[str]) -> pd.Series:
        return _diag_se(self.func(model), terms)


@dataclass(frozen=True)
class MatrixOverride:
    """Pre-computed covariance matrix."""

    matrix: Any

    def std_errors(self, model: Any, terms: Sequence[str]) -> pd.Series:  # noqa: ARG002
        return _diag_se(self.matrix, terms)


@dataclass(frozen=True)
class VectorOverride:
    """Standard errors keyed by term name."""

    values: pd.Series

    def std_errors(self, model: Any, terms: Sequence[str]) -> pd.Series:  # noqa: ARG002
        return self.values


Override = Union[FunctionOverride, MatrixOverride, VectorOverride]


def _is_matrix(obj: Any) -> bool:
    if isinstance(obj, pd.DataFrame):
        return True
    if isinstance(obj, np.ndarray):
        return obj.ndim == 2
    return False


def resolve_override(obj: Any) -> Override | None:
    """Classify a single override object; ``None`` means "no override"."""
    if obj is None:
        return None
    if isinstance(obj, (FunctionOverride, MatrixOverride, VectorOverride)):
        return obj
    if callable(obj):
        return FunctionOverride(obj)
    if _is_matrix(obj):
        return MatrixOverride(obj)
    if isinstance(obj, (pd.Series, Mapping)):
        ser = pd.Series(dict(obj) if isinstance(obj, Mapping) else obj)
        if not all(isinstance(v, (numbers.Real, np.number)) for v in ser.to_numpy()):
            raise ValidationError("statistic_override vectors must contain numbers only")
        ser.index = [str(ix) for ix in ser.index]
        return VectorOverride(ser.astype(float).rename("std.error"))
    raise ValidationError(
        "statistic_override entries must be callables, covariance matrices, or "
        f"named numeric vectors; got {type(obj).__name__}",
    )


def resolve_overrides(statistic_override: Any, n_models: int) -> list[Override | None]:
    """Broadcast/validate ``statistic_override`` to one entry per model."""
    if statistic_override is None:
        return [None] * n_models
    # A single override object applies to every model.
    if (
        callable(statistic_override)
        or _is_matrix(statistic_override)
        or isinstance(statistic_override, (pd.Series, Mapping))
    ):
        single = resolve_override(statistic_override)
        return [single] * n_models
    if not isinstance(statistic_override, (list, tuple)):
        raise ValidationError(
            "statistic_override must be a callable, a matrix, a named vector, or a list of them",
        )
    if len(statistic_override) != n_models:
        raise ValidationError(
            f"statistic_override has {len(statistic_override)} entries but there are "
            f"{n_models} models",
        )
    return [resolve_override(obj) for obj in statistic_override]
