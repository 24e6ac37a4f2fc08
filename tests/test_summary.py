import numpy as np
import pandas as pd
import pytest
from scipy import stats

from regtable import SummaryTable, modelsummary
from regtable.exceptions import AdapterError, FormatError, ValidationError
from regtable.output.summary import as_model_list

# ---------------------------------------------------------------------
# Model list handling
# ---------------------------------------------------------------------


def test_as_model_list_shapes(simple_result):
    assert as_model_list(simple_result)[1] == ["(1)"]
    assert as_model_list([simple_result, simple_result])[1] == ["(1)", "(2)"]
    items, names = as_model_list({"A": simple_result, "B": simple_result})
    assert names == ["A", "B"]
    assert len(items) == 2


def test_as_model_list_reserved_name(simple_result):
    with pytest.raises(ValidationError):
        as_model_list({"term": simple_result})


# ---------------------------------------------------------------------
# Table contents
# ---------------------------------------------------------------------


def test_stars_on_estimate(simple_result):
    out = modelsummary(simple_result, stars=True)
    assert isinstance(out, SummaryTable)
    assert "2.000**" in out.data["(1)"].tolist()


def test_coef_map_two_of_three_in_map_order(models):
    out = modelsummary(models, coef_map={"Volume": "Volume (ft3)", "Height": "Height (ft)"})
    labels = [lab for lab in out.data["label"].iloc[: out.table.n_estimate_rows] if lab]
    assert labels == ["Volume (ft3)", "Height (ft)"]


def test_coef_omit_intercept(models):
    out = modelsummary(models, coef_omit="Intercept")
    assert "Intercept" not in out.data["label"].tolist()
    assert "Height" in out.data["label"].tolist()


def test_disjoint_coefficients_leave_empty_cells(models):
    out = modelsummary(models)
    rows = out.table.rows
    volume = rows.loc[rows["term"] == "Volume", "Bivariate"]
    assert volume.tolist() == ["", ""]


def test_conf_int_matches_t_bounds(models):
    res = models["Bivariate"]
    out = modelsummary(res, statistic="conf.int", conf_level=0.99)
    crit = stats.t(res.df_resid).ppf(0.995)
    est, se = res.params["Height"], res.se["Height"]
    expected = f"[{est - crit * se:.3f}, {est + crit * se:.3f}]"
    rows = out.table.rows
    cell = rows.loc[(rows["term"] == "Height") & (rows["statistic"] == "uncertainty"), "(1)"]
    assert cell.iloc[0] == expected


def test_gof_rows_and_added_rows(models):
    out = modelsummary(models, add_rows=[["Controls", "No", "Yes"]], fmt=2)
    labels = out.data["label"].tolist()
    assert labels[-1] == "Controls"
    assert out.data.iloc[-1].tolist() == ["Controls", "No", "Yes"]
    assert "Num.Obs." in labels
    assert out.data.loc[out.data["label"] == "Num.Obs.", "Bivariate"].iloc[0] == "31"
    assert labels.index("Num.Obs.") < labels.index("R2") < labels.index("AIC")


def test_gof_omit_and_records_gof_map(models):
    gmap = [
        {"raw": "nobs", "clean": "Observations", "fmt": "%.0f", "omit": False},
        {"raw": "r.squared", "clean": "R-squared", "fmt": "%.2f", "omit": False},
    ]
    out = modelsummary(models, gof_map=gmap, gof_omit="AIC|BIC|logLik|adj|Estimator")
    gof = out.data.iloc[out.table.n_estimate_rows :]
    assert gof["label"].tolist() == ["Observations", "R-squared"]


def test_statsmodels_like_with_override(statsmodels_like):
    out = modelsummary(
        [statsmodels_like],
        statistic_override=lambda m: np.diag([0.01, 0.04]),
        statistic="std.error",
    )
    rows = out.table.rows
    cell = rows.loc[(rows["term"] == "x") & (rows["statistic"] == "uncertainty"), "(1)"]
    assert cell.iloc[0] == "(0.200)"


# ---------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------


def test_bad_add_rows_raises_before_extraction():
    with pytest.raises(ValidationError):
        modelsummary(object(), add_rows=[["Controls"]])


def test_unsupported_model_is_adapter_error():
    with pytest.raises(AdapterError):
        modelsummary(object())


def test_bad_fmt(simple_result):
    with pytest.raises(FormatError):
        modelsummary(simple_result, fmt="%q")


def test_bad_extension(simple_result, tmp_path):
    with pytest.raises(ValidationError):
        modelsummary(simple_result, filename=tmp_path / "table.xyz")
    assert not (tmp_path / "table.xyz").exists()


def test_empty_models():
    with pytest.raises(ValidationError):
        modelsummary([])


def test_integer_fmt_in_gof_map(simple_result):
    gmap = pd.DataFrame([{"raw": "nobs", "clean": "N", "fmt": 0, "omit": False}])
    out = modelsummary(simple_result, gof_map=gmap)
    cell = out.data.loc[out.data["label"] == "N", "(1)"].iloc[0]
    assert cell == "100"


def test_unsorted_stars_mapping(simple_result):
    out = modelsummary(simple_result, stars={"***": 0.01, "*": 0.1, "**": 0.05})
    assert "2.000**" in out.data["(1)"].tolist()
    assert out.notes[0] == "* p < 0.1, ** p < 0.05, *** p < 0.01"
