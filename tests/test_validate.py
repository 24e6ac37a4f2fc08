import pandas as pd
import pytest

from regtable.core.options import default_gof_map
from regtable.core.validate import sanity_checks
from regtable.exceptions import FormatError, ValidationError

MODELS = [object(), object()]


def test_defaults_pass():
    sanity_checks(MODELS)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"statistic": "t.value"},
        {"conf_level": 1.0},
        {"conf_level": 0.0},
        {"conf_level": True},
        {"coef_map": {"a": 1}},
        {"coef_map": ["a", "a"]},
        {"coef_map": []},
        {"coef_omit": "("},
        {"gof_omit": 3},
        {"gof_map": pd.DataFrame({"raw": ["nobs"], "clean": ["N"]})},
        {"stars": {"*": 1.5}},
        {"stars": "yes"},
        {"stars_note": "no"},
        {"title": 1},
        {"subtitle": ["x"]},
        {"notes": "single note"},
        {"notes": ["ok", 3]},
        {"add_rows": [["label", "1"]]},
        {"add_rows": "row"},
        {"filename": "table.xyz"},
        {"statistic_override": [None]},
    ],
)
def test_invalid_arguments(kwargs):
    with pytest.raises(ValidationError):
        sanity_checks(MODELS, **kwargs)


def test_bad_fmt_is_format_error():
    with pytest.raises(FormatError):
        sanity_checks(MODELS, fmt="%d %d")


def test_empty_models():
    with pytest.raises(ValidationError, match="at least one"):
        sanity_checks([])


def test_valid_gof_map_and_rows():
    gmap = default_gof_map()
    gmap.loc[gmap["raw"] == "F", "omit"] = False
    sanity_checks(
        MODELS,
        gof_map=gmap,
        add_rows=[["FE", "Yes", "No"]],
        stars={"+": 0.1, "*": 0.05},
        filename="out.tex",
        statistic="conf.int",
        coef_map={"x": "X"},
    )


def test_duplicated_gof_raw():
    gmap = pd.concat([default_gof_map().head(1)] * 2)
    with pytest.raises(ValidationError, match="duplicated"):
        sanity_checks(MODELS, gof_map=gmap)


def test_gof_map_omit_must_be_boolean():
    gmap = default_gof_map()
    gmap["omit"] = gmap["omit"].map(str)
    with pytest.raises(ValidationError, match="omit"):
        sanity_checks(MODELS, gof_map=gmap)


def test_gof_map_integer_fmt_accepted():
    gmap = pd.DataFrame([{"raw": "nobs", "clean": "N", "fmt": 0, "omit": False}])
    sanity_checks(MODELS, gof_map=gmap)
