"""Results container consumed by the tidy adapters.

``EstimationResult`` is the package's own, estimator-agnostic model object:
anything that can fill its fields (a hand-rolled estimator, a bootstrap
routine, numbers copied from a paper) can be summarised.
"""

# regtable/core/results.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

__all__ = [
    "EstimationResult",
    "ci_level_to_alpha",
    "normalize_ci_level",
]


def normalize_ci_level(level: float | None, *, default: float = 0.95) -> float:
    """Normalize confidence level to a probability (0, 1)."""
    if not (0.0 < float(default) < 1.0):
        raise ValueError("default confidence level must lie in (0, 1)")
    coerced = float(default) if level is None else float(level)
    if not (0.0 < coerced < 1.0):
        raise ValueError("conf_level must be in (0, 1); supply e.g. 0.95")
    return coerced


def ci_level_to_alpha(level: float | None, *, default: float = 0.95) -> float:
    """Return the corresponding tail probability ``alpha`` for a confidence level."""
    return 1.0 - normalize_ci_level(level, default=default)


# ---------------------------------------------------------------------
# Results container (R/Stata-like), extensible and estimator-agnostic
# ---------------------------------------------------------------------
@dataclass
class EstimationResult:
    """Container for estimation results.

    Stores parameter estimates and, optionally, standard errors, a
    covariance matrix and p-values. ``model_info`` holds scalar
    goodness-of-fit statistics keyed by their raw names (``r.squared``,
    ``AIC``, ``logLik``, ...); they are reported by :func:`glance`.
    """

    params: pd.Series
    se: pd.Series | None = None
    vcov: pd.DataFrame | None = None
    pvalues: pd.Series | None = None
    df_resid: float | None = None
    n_obs: int | None = None
    model_info: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.params, pd.Series):
            self.params = pd.Series(self.params, dtype=float)
        if self.vcov is not None and not isinstance(self.vcov, pd.DataFrame):
            arr = np.asarray(self.vcov, dtype=float)
            self.vcov = pd.DataFrame(arr, index=self.params.index, columns=self.params.index)
        if self.se is None and self.vcov is not None:
            diag = np.sqrt(np.diag(self.vcov.to_numpy(dtype=float)))
            self.se = pd.Series(diag, index=self.vcov.index, name="se")
        elif self.se is not None and not isinstance(self.se, pd.Series):
            self.se = pd.Series(self.se, index=self.params.index, name="se")
        if self.pvalues is not None and not isinstance(self.pvalues, pd.Series):
            self.pvalues = pd.Series(self.pvalues, index=self.params.index, name="p")

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        head = ", ".join(f"{k}={v}" for k, v in self.model_info.items())
        return f"EstimationResult(k={len(self.params)}, n={self.n_obs}, {head})"
