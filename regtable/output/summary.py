"""Summary tables for one or more fitted models.

Generates publication-ready HTML, LaTeX or RTF tables: coefficient
estimates with an uncertainty statistic underneath, optional significance
stars, and goodness-of-fit rows.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from regtable.core.assemble import META_COLUMNS, assemble
from regtable.core.extract import extract
from regtable.core.options import (
    DEFAULT_CONF_LEVEL,
    DEFAULT_FMT,
    TableOptions,
    stars_legend,
)
from regtable.core.validate import sanity_checks
from regtable.exceptions import ValidationError
from regtable.output.render import SummaryTable

__all__ = ["as_model_list", "modelsummary"]


def as_model_list(models: Any) -> tuple[list[Any], list[str]]:
    """Normalise ``models`` to a list of models and their column names.

    This is the only place where the shape of ``models`` is interpreted:
    a mapping gives named columns, a list or tuple gives ``(1)``, ``(2)``,
    ..., and anything else is treated as a single model.
    """
    if isinstance(models, Mapping):
        names = [str(k) for k in models]
        items = list(models.values())
    elif isinstance(models, (list, tuple)):
        items = list(models)
        names = [f"({i + 1})" for i in range(len(items))]
    else:
        items = [models]
        names = ["(1)"]
    if len(set(names)) != len(names):
        raise ValidationError(f"model names must be unique; got {names}")
    reserved = set(names) & set(META_COLUMNS)
    if reserved:
        raise ValidationError(f"model names may not be any of {list(META_COLUMNS)}")
    return items, names


def modelsummary(  # noqa: PLR0913
    models: Any,
    *,
    statistic: str = "std.error",
    statistic_override: Any = None,
    conf_level: float = DEFAULT_CONF_LEVEL,
    coef_map: Mapping[str, str] | pd.Series | Sequence[str] | None = None,
    coef_omit: str | None = None,
    gof_map: pd.DataFrame | Sequence[Mapping[str, Any]] | None = None,
    gof_omit: str | None = None,
    fmt: str | int = DEFAULT_FMT,
    stars: bool | Mapping[str, float] = False,
    stars_note: bool = True,
    title: str | None = None,
    subtitle: str | None = None,
    notes: Sequence[str] | None = None,
    add_rows: Sequence[Sequence[Any]] | None = None,
    filename: str | Path | None = None,
) -> SummaryTable | None:
    """Build a publication-ready summary of one or more models.

    Parameters
    ----------
    models
        A single model, a list of models, or a mapping of column name to
        model. Supported models: :class:`~regtable.core.results.EstimationResult`,
        statsmodels-style results, tidy ``DataFrame`` objects, and any
        object with ``tidy()``/``glance()`` methods.
    statistic
        Uncertainty shown in parentheses under each estimate:
        ``"std.error"``, ``"statistic"``, ``"p.value"``, ... or
        ``"conf.int"`` for ``[low, high]`` bounds at ``conf_level``.
    statistic_override
        Replacement standard errors: a callable returning a covariance
        matrix, a covariance matrix, a named vector, or a list with one of
        those per model.
    coef_map
        Mapping raw term -> display name. Unlisted terms are dropped and
        rows follow the mapping's order. A list of raw names selects and
        orders without renaming.
    coef_omit
        Regular expression; matching terms are dropped (ignored when
        ``coef_map`` is given).
    gof_map
        DataFrame with columns ``raw``, ``clean``, ``fmt``, ``omit``;
        ``None`` uses :func:`~regtable.core.options.default_gof_map`.
    gof_omit
        Regular expression; matching gof statistics are dropped.
    fmt
        printf-style numeric format, e.g. ``"%.3f"``; an integer ``n`` is
        shorthand for ``"%.nf"``.
    stars
        ``False`` (none), ``True`` (``* 0.1, ** 0.05, *** 0.01``), or a
        mapping symbol -> threshold.
    stars_note
        Add a note explaining the stars.
    title, subtitle, notes
        Header text and footnotes, in order.
    add_rows
        Extra rows, each ``[label, value_1, ..., value_k]``.
    filename
        Write to ``.html``, ``.tex``, ``.ltx`` or ``.rtf`` and return ``None``.

    Returns
    -------
    SummaryTable or None
        The table, unless ``filename`` was given.

    """
    items, names = as_model_list(models)
    sanity_checks(
        items,
        statistic=statistic,
        statistic_override=statistic_override,
        conf_level=conf_level,
        coef_map=coef_map,
        coef_omit=coef_omit,
        gof_map=gof_map,
        gof_omit=gof_omit,
        fmt=fmt,
        stars=stars,
        stars_note=stars_note,
        title=title,
        subtitle=subtitle,
        notes=notes,
        add_rows=add_rows,
        filename=filename,
    )
    opts = TableOptions.build(
        n_models=len(items),
        statistic=statistic,
        statistic_override=statistic_override,
        conf_level=conf_level,
        coef_map=coef_map,
        coef_omit=coef_omit,
        gof_map=gof_map,
        gof_omit=gof_omit,
        fmt=fmt,
        stars=stars,
        add_rows=add_rows,
    )

    frames = extract(items, opts)
    coef_order = None if opts.coef_map is None else [clean for _, clean in opts.coef_map]
    table = assemble(
        frames,
        names,
        coef_order=coef_order,
        gof_order=list(opts.gof_map["clean"]),
        added_rows=opts.add_rows,
    )

    all_notes: list[str] = []
    if opts.stars and stars_note:
        all_notes.append(stars_legend(opts.stars))
    all_notes.extend(notes or ())
    out = SummaryTable(table=table, title=title, subtitle=subtitle, notes=tuple(all_notes))

    if filename is not None:
        out.save(filename)
        return None
    return out
