"""Defaults and the normalised option set shared by the pipeline stages."""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from regtable.core.overrides import Override, resolve_overrides
from regtable.utils.helpers import normalize_fmt

__all__ = [
    "DEFAULT_CONF_LEVEL",
    "DEFAULT_FMT",
    "DEFAULT_STARS",
    "GOF_MAP_COLUMNS",
    "OUTPUT_FORMATS",
    "TableOptions",
    "default_gof_map",
    "normalize_stars",
    "stars_legend",
]

DEFAULT_FMT = "%.3f"
DEFAULT_CONF_LEVEL = 0.95
DEFAULT_STARS: tuple[tuple[str, float], ...] = (("*", 0.1), ("**", 0.05), ("***", 0.01))

GOF_MAP_COLUMNS: tuple[str, ...] = ("raw", "clean", "fmt", "omit")

# file extension -> renderer
OUTPUT_FORMATS: dict[str, str] = {
    "html": "html",
    "tex": "latex",
    "ltx": "latex",
    "rtf": "rtf",
}

# raw name, clean label, format, omit
_GOF_DEFAULTS: tuple[tuple[str, str, str, bool], ...] = (
    ("nobs", "Num.Obs.", "%.0f", False),
    ("r.squared", "R2", "%.3f", False),
    ("adj.r.squared", "R2 Adj.", "%.3f", False),
    ("AIC", "AIC", "%.1f", False),
    ("BIC", "BIC", "%.1f", False),
    ("logLik", "Log.Lik.", "%.3f", False),
    ("F", "F", "%.3f", True),
    ("deviance", "Deviance", "%.2f", True),
    ("df.residual", "DF Resid", "%.0f", True),
    ("df.null", "DF Null", "%.0f", True),
    ("null.deviance", "Deviance Null", "%.2f", True),
    ("sigma", "Sigma", "%.3f", True),
    ("sigma2", "Sigma2", "%.3f", True),
    ("statistic", "Statistic", "%.3f", True),
    ("p.value", "p", "%.3f", True),
    ("df", "DF", "%.0f", True),
    ("finTol", "Tolerance", "%.3f", True),
    ("isConv", "Converged", "%s", True),
)


def default_gof_map() -> pd.DataFrame:
    """Return a fresh copy of the default goodness-of-fit map.

    Columns: ``raw`` (name reported by the adapter), ``clean`` (row label),
    ``fmt`` (printf format), ``omit`` (drop the statistic).
    """
    return pd.DataFrame(list(_GOF_DEFAULTS), columns=list(GOF_MAP_COLUMNS))


def normalize_stars(stars: bool | Mapping[str, float] | None) -> tuple[tuple[str, float], ...]:
    """Resolve ``stars`` to (symbol, threshold) pairs sorted by descending threshold."""
    if stars is None or stars is False:
        return ()
    if stars is True:
        return DEFAULT_STARS
    pairs = [(str(sym), float(thr)) for sym, thr in stars.items()]
    return tuple(sorted(pairs, key=lambda kv: kv[1], reverse=True))


def stars_legend(stars: Sequence[tuple[str, float]]) -> str:
    """Build the note describing the stars, e.g. ``'* p < 0.1, ** p < 0.05'``."""
    return ", ".join(f"{sym} p < {thr:g}" for sym, thr in stars)


@dataclass(frozen=True, eq=False)
class TableOptions:
    """Normalised options for one table build.

    Constructed once per call by :func:`regtable.output.summary.modelsummary`
    after validation; nothing here is shared between calls.
    """

    statistic: str = "std.error"
    conf_level: float = DEFAULT_CONF_LEVEL
    fmt: str = DEFAULT_FMT
    overrides: tuple[Override | None, ...] = ()
    coef_map: tuple[tuple[str, str], ...] | None = None
    coef_omit: re.Pattern[str] | None = None
    gof_map: pd.DataFrame = field(default_factory=default_gof_map)
    gof_omit: re.Pattern[str] | None = None
    stars: tuple[tuple[str, float], ...] = ()
    add_rows: tuple[tuple[str, ...], ...] = ()

    @property
    def coef_labels(self) -> dict[str, str] | None:
        return None if self.coef_map is None else dict(self.coef_map)

    def override_for(self, idx: int) -> Override | None:
        return self.overrides[idx] if idx < len(self.overrides) else None

    @classmethod
    def build(  # noqa: PLR0913
        cls,
        *,
        n_models: int,
        statistic: str,
        statistic_override: Any,
        conf_level: float,
        coef_map: Mapping[str, str] | pd.Series | Sequence[str] | None,
        coef_omit: str | None,
        gof_map: pd.DataFrame | Sequence[Mapping[str, Any]] | None,
        gof_omit: str | None,
        fmt: str | int,
        stars: bool | Mapping[str, float] | None,
        add_rows: Sequence[Sequence[Any]] | None,
    ) -> TableOptions:
        """Normalise raw keyword arguments (assumed already validated)."""
        cmap = None
        if coef_map is not None:
            if hasattr(coef_map, "items"):
                cmap = tuple((str(k), str(v)) for k, v in coef_map.items())
            else:
                # bare list of raw names: select and order without renaming
                cmap = tuple((str(k), str(k)) for k in coef_map)
        gmap = default_gof_map() if gof_map is None else pd.DataFrame(gof_map).copy()
        gmap = gmap.loc[:, list(GOF_MAP_COLUMNS)].reset_index(drop=True)
        gmap["raw"] = gmap["raw"].astype(str)
        gmap["clean"] = gmap["clean"].astype(str)
        gmap["fmt"] = [normalize_fmt(f, allow_string=True) for f in gmap["fmt"]]
        gmap["omit"] = gmap["omit"].astype(bool)
        return cls(
            statistic=statistic,
            conf_level=float(conf_level),
            fmt=normalize_fmt(fmt),
            overrides=tuple(resolve_overrides(statistic_override, n_models)),
            coef_map=cmap,
            coef_omit=None if coef_omit is None else re.compile(coef_omit),
            gof_map=gmap,
            gof_omit=None if gof_omit is None else re.compile(gof_omit),
            stars=normalize_stars(stars),
            add_rows=tuple(tuple("" if v is None else str(v) for v in row) for row in add_rows or ()),
        )
