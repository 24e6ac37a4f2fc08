"""Argument checks run before any model is touched.

Every check raises :class:`~regtable.exceptions.ValidationError` (or
:class:`~regtable.exceptions.FormatError` for ``fmt``) with a message that
names the offending argument.
"""
from __future__ import annotations

import numbers
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from regtable.core.options import GOF_MAP_COLUMNS, OUTPUT_FORMATS
from regtable.core.overrides import resolve_overrides
from regtable.core.tidy import TIDY_COLUMNS
from regtable.exceptions import ValidationError
from regtable.utils.helpers import normalize_fmt

__all__ = ["sanity_checks"]

STATISTIC_CHOICES: tuple[str, ...] = ("conf.int", *(c for c in TIDY_COLUMNS if c != "term"))


def _check_regex(name: str, pattern: Any) -> None:
    if pattern is None:
        return
    if not isinstance(pattern, str):
        raise ValidationError(f"{name} must be a regular expression string")
    try:
        re.compile(pattern)
    except re.error as exc:
        raise ValidationError(f"{name} is not a valid regular expression: {exc}") from exc


def _check_optional_str(name: str, value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")


def _check_coef_map(coef_map: Any) -> None:
    if coef_map is None:
        return
    if isinstance(coef_map, (Mapping, pd.Series)):
        items = list(coef_map.items())
        if not items:
            raise ValidationError("coef_map must not be empty")
        for raw, clean in items:
            if not isinstance(raw, str) or not isinstance(clean, str):
                raise ValidationError("coef_map must map term names (str) to display names (str)")
        return
    if isinstance(coef_map, (list, tuple)) and coef_map and all(isinstance(k, str) for k in coef_map):
        if len(set(coef_map)) != len(coef_map):
            raise ValidationError("coef_map lists a term more than once")
        return
    raise ValidationError("coef_map must be a mapping of raw -> display names or a list of raw names")


def _check_gof_map(gof_map: Any) -> None:
    if gof_map is None:
        return
    if isinstance(gof_map, pd.DataFrame):
        frame = gof_map
    elif isinstance(gof_map, Sequence) and not isinstance(gof_map, str):
        if not all(isinstance(rec, Mapping) for rec in gof_map):
            raise ValidationError("gof_map records must be mappings")
        frame = pd.DataFrame(list(gof_map))
    else:
        raise ValidationError("gof_map must be a DataFrame or a list of records")
    if set(frame.columns) != set(GOF_MAP_COLUMNS) or len(frame.columns) != len(GOF_MAP_COLUMNS):
        raise ValidationError(
            f"gof_map must have exactly the columns {list(GOF_MAP_COLUMNS)}; got {list(frame.columns)}",
        )
    if frame["raw"].duplicated().any():
        raise ValidationError("gof_map has duplicated raw names")
    for omit in frame["omit"]:
        if not isinstance(omit, (bool, np.bool_)):
            raise ValidationError(f"gof_map omit entries must be True or False; got {omit!r}")
    for fmt in frame["fmt"]:
        normalize_fmt(fmt, allow_string=True)


def _check_stars(stars: Any) -> None:
    if isinstance(stars, (bool, np.bool_)) or stars is None:
        return
    if not isinstance(stars, Mapping) or not stars:
        raise ValidationError("stars must be True/False or a non-empty mapping of symbol -> threshold")
    for sym, thr in stars.items():
        if not isinstance(sym, str) or not sym:
            raise ValidationError("stars symbols must be non-empty strings")
        if isinstance(thr, bool) or not isinstance(thr, (numbers.Real, np.number)):
            raise ValidationError(f"stars threshold for {sym!r} must be a number")
        if not (0.0 < float(thr) <= 1.0):
            raise ValidationError(f"stars threshold for {sym!r} must lie in (0, 1]")


def _check_add_rows(add_rows: Any, n_models: int) -> None:
    if add_rows is None:
        return
    if isinstance(add_rows, (str, bytes)) or not isinstance(add_rows, Sequence):
        raise ValidationError("add_rows must be a list of row vectors")
    for j, row in enumerate(add_rows):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise ValidationError(f"add_rows[{j}] must be a sequence (label + one value per model)")
        if len(row) != n_models + 1:
            raise ValidationError(
                f"add_rows[{j}] has length {len(row)}; expected {n_models + 1} "
                "(label + one value per model)",
            )


def _check_notes(notes: Any) -> None:
    if notes is None:
        return
    if isinstance(notes, str) or not isinstance(notes, Sequence):
        raise ValidationError("notes must be a list of strings")
    for note in notes:
        if not isinstance(note, str):
            raise ValidationError("notes must be a list of strings")


def _check_filename(filename: Any) -> None:
    if filename is None:
        return
    if not isinstance(filename, (str, Path)):
        raise ValidationError("filename must be a string or a path")
    ext = Path(filename).suffix.lower().lstrip(".")
    if ext not in OUTPUT_FORMATS:
        raise ValidationError(
            f"filename extension {ext!r} is not supported; use one of "
            f"{sorted(OUTPUT_FORMATS)}",
        )


def sanity_checks(  # noqa: PLR0913
    models: Sequence[Any],
    *,
    statistic: str = "std.error",
    statistic_override: Any = None,
    conf_level: float = 0.95,
    coef_map: Any = None,
    coef_omit: str | None = None,
    gof_map: Any = None,
    gof_omit: str | None = None,
    fmt: Any = "%.3f",
    stars: Any = False,
    stars_note: bool = True,
    title: str | None = None,
    subtitle: str | None = None,
    notes: Sequence[str] | None = None,
    add_rows: Sequence[Sequence[Any]] | None = None,
    filename: str | Path | None = None,
) -> None:
    """Check user input; raise on the first problem found."""
    if len(models) == 0:
        raise ValidationError("models must contain at least one model")
    if statistic not in STATISTIC_CHOICES:
        raise ValidationError(
            f"statistic must be one of {list(STATISTIC_CHOICES)}; got {statistic!r}",
        )
    resolve_overrides(statistic_override, len(models))
    if isinstance(conf_level, bool) or not isinstance(conf_level, (numbers.Real, np.number)):
        raise ValidationError("conf_level must be a number in (0, 1)")
    if not (0.0 < float(conf_level) < 1.0):
        raise ValidationError(f"conf_level must lie strictly between 0 and 1; got {conf_level}")
    _check_coef_map(coef_map)
    _check_regex("coef_omit", coef_omit)
    _check_gof_map(gof_map)
    _check_regex("gof_omit", gof_omit)
    normalize_fmt(fmt)
    _check_stars(stars)
    if not isinstance(stars_note, (bool, np.bool_)):
        raise ValidationError("stars_note must be True or False")
    _check_optional_str("title", title)
    _check_optional_str("subtitle", subtitle)
    _check_notes(notes)
    _check_add_rows(add_rows, len(models))
    _check_filename(filename)
