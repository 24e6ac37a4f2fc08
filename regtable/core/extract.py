"""Per-model extraction of formatted estimate and goodness-of-fit rows.

Each model becomes a long table with one row per displayed cell:

==========  =============================================================
part        ``"estimates"`` or ``"gof"``
term        coefficient display name, or gof label
statistic   ``"estimate"``, ``"uncertainty"`` or ``"gof"``
value       formatted string (stars appended to estimates)
==========  =============================================================
"""
from __future__ import annotations

import logging
import warnings
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import pandas as pd

from regtable.core.options import TableOptions
from regtable.core.overrides import Override
from regtable.core.tidy import complete_inference, glance, residual_df, tidy
from regtable.exceptions import AdapterError, ValidationError
from regtable.utils.helpers import format_number

__all__ = [
    "LONG_COLUMNS",
    "assign_stars",
    "extract",
    "extract_model",
    "gof_rows",
]

LOGGER = logging.getLogger(__name__)

LONG_COLUMNS: tuple[str, ...] = ("part", "term", "statistic", "value")

# Failures raised by third-party model objects while tidying.
_ADAPTER_FAILURES: tuple[type[Exception], ...] = (
    AttributeError,
    IndexError,
    KeyError,
    TypeError,
    ValueError,
    np.linalg.LinAlgError,
)


def assign_stars(p_value: float, stars: Sequence[tuple[str, float]]) -> str:
    """Return the significance symbol for ``p_value``.

    ``stars`` must be sorted by descending threshold; the last (smallest)
    threshold that is still >= ``p_value`` determines the symbol.
    """
    if p_value is None or not np.isfinite(p_value):
        return ""
    symbol = ""
    for sym, threshold in stars:
        if p_value <= threshold:
            symbol = sym
    return symbol


def _apply_override(
    frame: pd.DataFrame, model: Any, override: Override, conf_level: float,
) -> pd.DataFrame:
    se = override.std_errors(model, list(frame["term"]))
    unknown = [name for name in se.index if name not in set(frame["term"])]
    if unknown:
        LOGGER.debug("statistic_override: dropping terms absent from the model: %s", unknown)
    out = frame.copy()
    out["std.error"] = se.reindex(out["term"]).to_numpy(dtype=float)
    return complete_inference(out, conf_level, df_resid=residual_df(model), overwrite=True)


def _select_terms(frame: pd.DataFrame, opts: TableOptions, idx: int) -> pd.DataFrame:
    labels = opts.coef_labels
    if labels is not None:
        rank = {raw: pos for pos, (raw, _) in enumerate(opts.coef_map or ())}
        kept = frame.loc[frame["term"].isin(labels)].copy()
        dropped = [t for t in frame["term"] if t not in labels]
        if dropped:
            LOGGER.debug("model %d: coef_map drops %s", idx, dropped)
        kept["_order"] = kept["term"].map(rank)
        kept = kept.sort_values("_order", kind="stable").drop(columns="_order")
        kept["term"] = kept["term"].map(labels)
        dupes = sorted(set(kept.loc[kept["term"].duplicated(), "term"]))
        if dupes:
            raise ValidationError(
                f"model {idx}: coef_map renames several terms of the same model to {dupes}",
            )
        return kept.reset_index(drop=True)
    if opts.coef_omit is not None:
        mask = frame["term"].map(lambda t: opts.coef_omit.search(t) is not None)
        if mask.any():
            LOGGER.debug("model %d: coef_omit drops %s", idx, list(frame.loc[mask, "term"]))
        return frame.loc[~mask].reset_index(drop=True)
    return frame


def _uncertainty_text(row: pd.Series, opts: TableOptions) -> str:
    if opts.statistic == "conf.int":
        lo = format_number(row["conf.low"], opts.fmt)
        hi = format_number(row["conf.high"], opts.fmt)
        return f"[{lo}, {hi}]" if (lo or hi) else ""
    text = format_number(row[opts.statistic], opts.fmt)
    return f"({text})" if text else ""


def _format_gof_value(value: Any, fmt: str) -> str:
    # counts reported as integers stay integers under the default formatter
    if isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_)):
        return str(int(value))
    return format_number(value, fmt)


def gof_rows(stats: Mapping[str, Any], opts: TableOptions) -> list[tuple[str, str]]:
    """Rename, format and filter scalar gof statistics.

    Statistics listed in ``opts.gof_map`` come first, in map order; the
    remaining ones follow in the order the adapter reported them.
    """
    out: list[tuple[str, str]] = []
    known: set[str] = set()

    def _omitted(*names: str) -> bool:
        pat = opts.gof_omit
        return pat is not None and any(pat.search(n) is not None for n in names)

    for raw, clean, fmt, omit in opts.gof_map.itertuples(index=False):
        known.add(raw)
        if raw not in stats:
            continue
        if omit or _omitted(raw, clean):
            LOGGER.debug("gof: omitting %s", raw)
            continue
        out.append((clean, format_number(stats[raw], fmt)))
    for raw, value in stats.items():
        if raw in known:
            continue
        if _omitted(raw):
            LOGGER.debug("gof: omitting %s", raw)
            continue
        out.append((raw, _format_gof_value(value, opts.fmt)))
    return out


def extract_model(model: Any, idx: int, opts: TableOptions) -> pd.DataFrame:
    """Extract the long table of a single model (see module docstring)."""
    try:
        frame = tidy(model, opts.conf_level)
        stats = glance(model)
    except AdapterError as exc:
        raise AdapterError(str(exc), model_index=idx) from exc
    except _ADAPTER_FAILURES as exc:
        raise AdapterError(
            f"cannot extract estimates from {type(model).__name__}: {exc}", model_index=idx,
        ) from exc

    override = opts.override_for(idx)
    if override is not None:
        try:
            frame = _apply_override(frame, model, override, opts.conf_level)
        except ValidationError as exc:
            raise ValidationError(f"model {idx}: {exc}") from exc
        except _ADAPTER_FAILURES as exc:
            raise AdapterError(f"statistic_override failed: {exc}", model_index=idx) from exc

    frame = _select_terms(frame, opts, idx)

    records: list[tuple[str, str, str, str]] = []
    for _, row in frame.iterrows():
        est = format_number(row["estimate"], opts.fmt)
        if est and opts.stars:
            est += assign_stars(float(row["p.value"]), opts.stars)
        records.append(("estimates", row["term"], "estimate", est))
        records.append(("estimates", row["term"], "uncertainty", _uncertainty_text(row, opts)))
    records.extend(("gof", label, "gof", value) for label, value in gof_rows(stats, opts))
    return pd.DataFrame.from_records(records, columns=list(LONG_COLUMNS))


def extract(models: Sequence[Any], opts: TableOptions) -> list[pd.DataFrame]:
    """Extract every model; the first failure aborts the whole call."""
    frames = [extract_model(model, idx, opts) for idx, model in enumerate(models)]
    if opts.coef_map is not None and not any(
        (f["part"] == "estimates").any() for f in frames
    ):
        warnings.warn(
            "coef_map did not match any coefficient in any model; the table has no estimates",
            UserWarning,
            stacklevel=3,
        )
    return frames
