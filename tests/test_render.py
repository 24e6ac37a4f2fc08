import logging

import pytest

from regtable import modelsummary
from regtable.exceptions import ValidationError


@pytest.fixture
def table(models):
    return modelsummary(models, stars=True, notes=["Source: simulated trees."])


# ---------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------


def test_html_is_deterministic(models):
    first = modelsummary(models, stars=True).to_html()
    second = modelsummary(models, stars=True).to_html()
    assert first == second


def test_html_structure(table):
    text = table.to_html()
    assert text.startswith("<table")
    assert "MSMIDRULE" not in text
    assert 'colspan="3" style="border-bottom: 1px solid;"' in text
    assert "Bivariate" in text
    assert "Multivariate" in text


def test_html_notes_order_and_escaping(table):
    text = table.to_html()
    legend = "* p &lt; 0.1, ** p &lt; 0.05, *** p &lt; 0.01"
    assert legend in text
    assert text.index(legend) < text.index("Source: simulated trees.")
    assert text.index("<tfoot>") < text.rindex("</table>")


def test_stars_note_can_be_disabled(models):
    text = modelsummary(models, stars=True, stars_note=False).to_html()
    assert "p &lt; 0.1" not in text


def test_html_caption(models):
    text = modelsummary(models, title="Girth models", subtitle="OLS").to_html()
    assert "<caption>Girth models<br><small>OLS</small></caption>" in text


# ---------------------------------------------------------------------
# LaTeX and RTF
# ---------------------------------------------------------------------


def test_latex_rules_and_notes(table):
    text = table.to_latex()
    assert r"\begin{tabular}" in text
    assert "MSMIDRULE" not in text
    assert text.count(r"\midrule") == 2
    assert r"\multicolumn{3}{l}{\footnotesize * p $<$ 0.1" in text
    assert text.index(r"\footnotesize Source") < text.index(r"\end{tabular}")


def test_latex_title_wraps_table(table):
    text = table.with_header("Results_1").to_latex()
    assert text.startswith(r"\begin{table}")
    assert r"\caption{Results\_1}" in text
    assert text.rstrip().endswith(r"\end{table}")


def test_rtf_output(table):
    text = table.with_header("Results", "Trees").to_rtf()
    assert text.startswith(r"{\rtf1")
    assert text.rstrip().endswith("}")
    assert r"\b Results\b0" in text
    assert text.count(r"\row") == len(table.table.rows) + 1
    assert "Source: simulated trees." in text


def test_with_note_appends(table):
    extended = table.with_note("Extra.")
    assert extended.notes[-1] == "Extra."
    assert len(table.notes) == 2


def test_render_unknown_kind(table):
    with pytest.raises(ValidationError):
        table.render("pdf")


# ---------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------


@pytest.mark.parametrize(
    ("ext", "marker"),
    [("html", "<table"), ("tex", r"\begin{tabular}"), ("ltx", r"\begin{tabular}"), ("rtf", r"{\rtf1")],
)
def test_save_by_extension(models, tmp_path, ext, marker):
    path = tmp_path / f"table.{ext}"
    assert modelsummary(models, filename=path) is None
    assert marker in path.read_text(encoding="utf-8")


def test_save_logs_path(table, tmp_path, caplog):
    with caplog.at_level(logging.INFO, logger="regtable.output.render"):
        path = table.save(tmp_path / "out.tex")
    assert path.exists()
    assert str(path) in caplog.text


def test_save_rejects_unknown_extension(table, tmp_path):
    with pytest.raises(ValidationError):
        table.save(tmp_path / "out.docx")
