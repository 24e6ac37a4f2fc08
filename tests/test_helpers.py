import numpy as np
import pytest

from regtable.exceptions import FormatError
from regtable.utils.helpers import (
    collect_terms,
    escape_latex,
    escape_rtf,
    format_number,
    hline_placeholder,
    normalize_fmt,
)

# ---------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------


def test_normalize_fmt_accepts_printf_and_digits():
    assert normalize_fmt("%.3f") == "%.3f"
    assert normalize_fmt("%.2e") == "%.2e"
    assert normalize_fmt(2) == "%.2f"
    assert normalize_fmt("%.1f%%") == "%.1f%%"


@pytest.mark.parametrize("bad", ["%.3f %.2f", "abc", "%s", None, True, -1])
def test_normalize_fmt_rejects_malformed(bad):
    with pytest.raises(FormatError):
        normalize_fmt(bad)


def test_normalize_fmt_string_conversion_only_when_allowed():
    assert normalize_fmt("%s", allow_string=True) == "%s"


def test_format_number_missing_and_nonfinite_are_blank():
    assert format_number(None, "%.3f") == ""
    assert format_number(np.nan, "%.3f") == ""
    assert format_number(np.inf, "%.3f") == ""
    assert format_number(1.23456, "%.3f") == "1.235"
    assert format_number("Yes", "%.3f") == "Yes"


def test_format_number_non_numeric_raises():
    with pytest.raises(FormatError):
        format_number([1, 2], "%.3f")
    with pytest.raises(FormatError):
        format_number(100, 0)


# ---------------------------------------------------------------------
# Terms and escaping
# ---------------------------------------------------------------------


def test_collect_terms_first_appearance_order():
    assert collect_terms([["a", "b"], ["c", "a"], ["d"]]) == ["a", "b", "c", "d"]


def test_escape_latex_does_not_double_escape():
    assert escape_latex(r"a_b & 5% \x") == r"a\_b \& 5\% \textbackslash{}x"
    assert escape_latex("p < 0.1") == "p $<$ 0.1"


def test_escape_rtf_braces_and_unicode():
    assert escape_rtf("{x}\\") == r"\{x\}\\"
    assert escape_rtf("é") == r"\u233?"
    assert escape_rtf("a\nb") == r"a\line b"


def test_hline_placeholder_width():
    assert hline_placeholder(["(1)", "(2)"]) == ["MSMIDRULE"] * 3
