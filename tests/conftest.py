from __future__ import annotations

from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from regtable.core.results import EstimationResult


def fit_ols(y: np.ndarray, X: pd.DataFrame) -> EstimationResult:
    """Classical OLS fit packed into an EstimationResult (test helper)."""
    Xm = X.to_numpy(dtype=float)
    n, k = Xm.shape
    beta = np.linalg.lstsq(Xm, y, rcond=None)[0]
    resid = y - Xm @ beta
    ssr = float(resid @ resid)
    df_resid = n - k
    cov = ssr / df_resid * np.linalg.inv(Xm.T @ Xm)
    tss = float(((y - y.mean()) ** 2).sum())
    r2 = 1.0 - ssr / tss
    llf = -0.5 * n * (np.log(2.0 * np.pi) + np.log(ssr / n) + 1.0)
    return EstimationResult(
        params=pd.Series(beta, index=X.columns),
        vcov=pd.DataFrame(cov, index=X.columns, columns=X.columns),
        df_resid=df_resid,
        n_obs=n,
        model_info={
            "r.squared": r2,
            "adj.r.squared": 1.0 - (1.0 - r2) * (n - 1) / df_resid,
            "AIC": -2.0 * llf + 2.0 * (k + 1),
            "BIC": -2.0 * llf + np.log(n) * (k + 1),
            "logLik": llf,
            "Estimator": "OLS",
        },
    )


@pytest.fixture
def trees():
    rng = np.random.default_rng(42)
    n = 31
    height = rng.normal(76.0, 6.0, n)
    volume = rng.normal(30.0, 16.0, n)
    girth = 2.0 + 0.05 * height + 0.15 * volume + rng.standard_normal(n)
    X = pd.DataFrame({"Intercept": np.ones(n), "Height": height, "Volume": volume})
    return girth, X


@pytest.fixture
def models(trees):
    y, X = trees
    return {
        "Bivariate": fit_ols(y, X[["Intercept", "Height"]]),
        "Multivariate": fit_ols(y, X[["Intercept", "Height", "Volume"]]),
    }


@pytest.fixture
def statsmodels_like():
    """Duck-typed stand-in for a statsmodels results object."""
    params = pd.Series([1.0, 0.5], index=["const", "x"])
    bse = pd.Series([0.2, 0.25], index=["const", "x"])

    def conf_int(alpha=0.05):
        return pd.DataFrame({0: params - 2.0 * bse, 1: params + 2.0 * bse})

    return SimpleNamespace(
        params=params,
        bse=bse,
        tvalues=params / bse,
        pvalues=pd.Series([0.001, 0.07], index=["const", "x"]),
        conf_int=conf_int,
        nobs=50.0,
        rsquared=0.4,
        rsquared_adj=0.38,
        aic=120.5,
        bic=125.0,
        llf=-58.25,
        df_resid=48.0,
    )


@pytest.fixture
def simple_result():
    return EstimationResult(
        params=pd.Series([1.0, 2.0, -0.5], index=["(Intercept)", "x1", "x2"]),
        se=pd.Series([0.5, 0.5, 0.5], index=["(Intercept)", "x1", "x2"]),
        pvalues=pd.Series([0.2, 0.04, 0.005], index=["(Intercept)", "x1", "x2"]),
        n_obs=100,
        model_info={"r.squared": 0.25},
    )
