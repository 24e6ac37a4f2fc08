"""Adapters that turn fitted models into tidy tables.

``tidy`` returns one row per coefficient with the columns listed in
``TIDY_COLUMNS``; ``glance`` returns a flat mapping of scalar
goodness-of-fit statistics. Supported model kinds, in dispatch order:

1. objects exposing their own ``tidy(conf_level=...)`` / ``glance()``;
2. :class:`~regtable.core.results.EstimationResult`;
3. statsmodels-style results (``params``, ``bse``, ``pvalues``, ...);
4. a ``DataFrame`` already in tidy form (gof values may be stored in
   ``DataFrame.attrs["glance"]``).
"""
from __future__ import annotations

import logging
import numbers
from collections.abc import Mapping
from typing import Any

import numpy as np
import pandas as pd
from scipy import stats

from regtable.core.results import EstimationResult, ci_level_to_alpha, normalize_ci_level
from regtable.exceptions import AdapterError

__all__ = [
    "TIDY_COLUMNS",
    "complete_inference",
    "glance",
    "residual_df",
    "tidy",
    "vcov",
]

LOGGER = logging.getLogger(__name__)

TIDY_COLUMNS: tuple[str, ...] = (
    "term",
    "estimate",
    "std.error",
    "statistic",
    "p.value",
    "conf.low",
    "conf.high",
)

# statsmodels attribute -> broom-style gof name
_STATSMODELS_GOF: tuple[tuple[str, str], ...] = (
    ("nobs", "nobs"),
    ("rsquared", "r.squared"),
    ("rsquared_adj", "adj.r.squared"),
    ("aic", "AIC"),
    ("bic", "BIC"),
    ("llf", "logLik"),
    ("fvalue", "F"),
    ("df_resid", "df.residual"),
    ("scale", "sigma2"),
)


def _has_own_adapter(model: Any) -> bool:
    return callable(getattr(model, "tidy", None)) and not isinstance(model, pd.DataFrame)


def _is_statsmodels_like(model: Any) -> bool:
    return all(hasattr(model, attr) for attr in ("params", "bse"))


def residual_df(model: Any) -> float | None:
    """Residual degrees of freedom reported by the model, if any."""
    val = getattr(model, "df_resid", None)
    if val is None:
        return None
    try:
        out = float(val)
    except (TypeError, ValueError):
        return None
    return out if np.isfinite(out) and out > 0 else None


def vcov(model: Any) -> pd.DataFrame | None:
    """Return the covariance matrix of the estimates, labelled by term.

    Looks at ``EstimationResult.vcov``, then an own ``vcov()`` method, then
    statsmodels' ``cov_params()``. Returns ``None`` when the model exposes
    no covariance matrix. Unlabelled matrices take the names of
    ``model.params`` when the sizes agree.
    """
    if isinstance(model, EstimationResult):
        mat = model.vcov
    elif callable(getattr(model, "vcov", None)) and not isinstance(model, pd.DataFrame):
        mat = model.vcov()
    elif callable(getattr(model, "cov_params", None)):
        mat = model.cov_params()
    else:
        return None
    if mat is None:
        return None
    if isinstance(mat, pd.DataFrame):
        out = mat.astype(float)
    else:
        arr = np.asarray(mat, dtype=float)
        out = pd.DataFrame(arr) if arr.ndim == 2 else None
    if out is None or out.shape[0] != out.shape[1]:
        raise AdapterError(f"covariance matrix of {type(model).__name__} is not square")
    params = getattr(model, "params", None)
    if isinstance(out.index, pd.RangeIndex) and isinstance(params, pd.Series) and len(params) == len(out):
        out.index = params.index
        out.columns = params.index
    out.index = [str(ix) for ix in out.index]
    out.columns = [str(ix) for ix in out.columns]
    return out


def complete_inference(
    frame: pd.DataFrame,
    conf_level: float,
    *,
    df_resid: float | None = None,
    overwrite: bool = False,
) -> pd.DataFrame:
    """Fill ``statistic``, ``p.value`` and confidence bounds from ``std.error``.

    Two-sided p-values and intervals use Student-t with ``df_resid`` degrees
    of freedom when known, otherwise the standard normal. Existing columns
    are kept unless ``overwrite`` is True.
    """
    out = frame.copy()
    est = out["estimate"].to_numpy(dtype=float)
    if "std.error" not in out.columns:
        out["std.error"] = np.nan
    se = out["std.error"].to_numpy(dtype=float)
    dist = stats.t(df_resid) if df_resid is not None else stats.norm()
    with np.errstate(divide="ignore", invalid="ignore"):
        tstat = np.where(se > 0, est / se, np.nan)
    crit = float(dist.ppf(0.5 + conf_level / 2.0))
    computed = {
        "statistic": tstat,
        "p.value": 2.0 * dist.sf(np.abs(tstat)),
        "conf.low": est - crit * se,
        "conf.high": est + crit * se,
    }
    for col, values in computed.items():
        if overwrite or col not in out.columns:
            out[col] = values
        else:
            # only fill holes left by the adapter
            filled = out[col].to_numpy(dtype=float)
            out[col] = np.where(np.isnan(filled), values, filled)
    return out


def _finalize(frame: pd.DataFrame, conf_level: float, df_resid: float | None) -> pd.DataFrame:
    missing = {"term", "estimate"} - set(frame.columns)
    if missing:
        raise AdapterError(f"tidy table lacks required column(s): {sorted(missing)}")
    frame = frame.copy()
    frame["term"] = frame["term"].astype(str)
    if frame["term"].duplicated().any():
        dupes = sorted(set(frame.loc[frame["term"].duplicated(), "term"]))
        raise AdapterError(f"duplicated term name(s) in tidy table: {dupes}")
    frame["estimate"] = pd.to_numeric(frame["estimate"], errors="raise").astype(float)
    frame = complete_inference(frame, conf_level, df_resid=df_resid)
    return frame.loc[:, list(TIDY_COLUMNS)].reset_index(drop=True)


def _tidy_result(res: EstimationResult) -> pd.DataFrame:
    params = res.params
    frame = pd.DataFrame(
        {"term": [str(t) for t in params.index], "estimate": params.to_numpy(dtype=float)},
    )
    if res.se is not None:
        frame["std.error"] = res.se.reindex(params.index).to_numpy(dtype=float)
    else:
        cov = vcov(res)
        if cov is not None:
            se = pd.Series(np.sqrt(np.diag(cov.to_numpy())), index=cov.index)
            frame["std.error"] = se.reindex(frame["term"]).to_numpy(dtype=float)
    if res.pvalues is not None:
        frame["p.value"] = res.pvalues.reindex(params.index).to_numpy(dtype=float)
    return frame


def _tidy_statsmodels(model: Any, conf_level: float) -> pd.DataFrame:
    params = np.asarray(model.params, dtype=float).reshape(-1)
    if isinstance(model.params, pd.Series):
        terms = list(model.params.index)
    else:
        terms = getattr(getattr(model, "model", None), "exog_names", None)
        if terms is None or len(terms) != params.size:
            terms = [f"x{j}" for j in range(params.size)]
    frame = pd.DataFrame(
        {
            "term": [str(t) for t in terms],
            "estimate": params,
            "std.error": np.asarray(model.bse, dtype=float),
        },
    )
    tvalues = getattr(model, "tvalues", None)
    if tvalues is not None:
        frame["statistic"] = np.asarray(tvalues, dtype=float)
    pvalues = getattr(model, "pvalues", None)
    if pvalues is not None:
        frame["p.value"] = np.asarray(pvalues, dtype=float)
    conf_int = getattr(model, "conf_int", None)
    if callable(conf_int):
        bounds = np.asarray(conf_int(alpha=ci_level_to_alpha(conf_level)), dtype=float)
        if bounds.shape == (len(frame), 2):
            frame["conf.low"] = bounds[:, 0]
            frame["conf.high"] = bounds[:, 1]
    return frame


def tidy(model: Any, conf_level: float = 0.95) -> pd.DataFrame:
    """Return the tidy coefficient table of ``model``.

    Raises
    ------
    AdapterError
        If the model kind is not supported or its output is malformed.

    """
    conf_level = normalize_ci_level(conf_level)
    if _has_own_adapter(model):
        frame = pd.DataFrame(model.tidy(conf_level=conf_level))
        return _finalize(frame, conf_level, residual_df(model))
    if isinstance(model, EstimationResult):
        return _finalize(_tidy_result(model), conf_level, residual_df(model))
    if isinstance(model, pd.DataFrame):
        return _finalize(model, conf_level, None)
    if _is_statsmodels_like(model):
        return _finalize(_tidy_statsmodels(model, conf_level), conf_level, residual_df(model))
    raise AdapterError(f"no tidy adapter for objects of type {type(model).__name__}")


def _is_scalar(val: Any) -> bool:
    if isinstance(val, (bool, np.bool_)):
        return False
    if isinstance(val, (numbers.Number, np.number)):
        return True
    return isinstance(val, str)


def glance(model: Any) -> dict[str, Any]:
    """Return the scalar goodness-of-fit statistics of ``model``.

    Non-scalar entries (arrays, nested dicts, flags) are skipped.
    """
    if _has_own_adapter(model) and callable(getattr(model, "glance", None)):
        raw = model.glance()
        if isinstance(raw, pd.DataFrame):
            raw = raw.iloc[0].to_dict() if len(raw) else {}
        if not isinstance(raw, Mapping):
            raise AdapterError("glance() must return a mapping or a one-row DataFrame")
        items = dict(raw)
    elif isinstance(model, EstimationResult):
        items = {}
        if model.n_obs is not None:
            items["nobs"] = int(model.n_obs)
        items.update(model.model_info)
    elif isinstance(model, pd.DataFrame):
        items = dict(model.attrs.get("glance", {}) or {})
    elif _is_statsmodels_like(model):
        items = {}
        for attr, name in _STATSMODELS_GOF:
            try:
                val = getattr(model, attr, None)
            except (AttributeError, ValueError, NotImplementedError):
                # statsmodels computes some of these lazily and may refuse
                val = None
            if val is not None:
                items[name] = val
    else:
        raise AdapterError(f"no glance adapter for objects of type {type(model).__name__}")
    out: dict[str, Any] = {}
    for key, val in items.items():
        if isinstance(val, np.generic):
            val = val.item()
        if _is_scalar(val):
            out[str(key)] = val
        else:
            LOGGER.debug("glance: skipping non-scalar statistic %r", key)
    return out

