"""Render assembled tables to HTML, LaTeX and RTF.

HTML and LaTeX bodies are produced by ``tabulate``; a placeholder row marks
the boundary between the estimates group and the goodness-of-fit group and
is replaced after rendering. RTF is written directly.
"""
from __future__ import annotations

import html
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import cast

import pandas as pd
from tabulate import tabulate

from regtable.core.assemble import AssembledTable
from regtable.core.options import OUTPUT_FORMATS
from regtable.exceptions import ValidationError
from regtable.utils.helpers import escape_latex, escape_rtf, hline_placeholder

__all__ = ["SummaryTable"]

LOGGER = logging.getLogger(__name__)

# RTF column widths in twips (1/1440 inch)
_RTF_STUB_WIDTH = 2880
_RTF_COL_WIDTH = 1440


@dataclass(frozen=True, eq=False)
class SummaryTable:
    """A rendered-on-demand model summary table.

    Instances are immutable; :meth:`with_header` and :meth:`with_note`
    return updated copies so tables can be composed further before saving.
    """

    table: AssembledTable
    title: str | None = None
    subtitle: str | None = None
    notes: tuple[str, ...] = ()

    # ------------------------------------------------------------------
    # composition
    # ------------------------------------------------------------------
    @property
    def model_names(self) -> tuple[str, ...]:
        return self.table.model_names

    @property
    def data(self) -> pd.DataFrame:
        """Displayed cells: a ``label`` column plus one column per model."""
        return self.table.rows.loc[:, ["label", *self.model_names]].copy()

    def with_header(self, title: str, subtitle: str | None = None) -> SummaryTable:
        return replace(self, title=title, subtitle=subtitle)

    def with_note(self, note: str) -> SummaryTable:
        return replace(self, notes=(*self.notes, str(note)))

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------
    def _body(self) -> list[list[str]]:
        """Rows with a placeholder between the estimates and gof groups."""
        rows = self.table.cells()
        n_est = self.table.n_estimate_rows
        if 0 < n_est < len(rows):
            return [*rows[:n_est], hline_placeholder(self.model_names), *rows[n_est:]]
        return rows

    def _tabulate(self, tablefmt: str) -> list[str]:
        headers = ["", *self.model_names]
        colalign = ("left", *("center" for _ in self.model_names))
        text = cast(
            "str",
            tabulate(
                self._body(),
                headers=headers,
                tablefmt=tablefmt,
                colalign=colalign,
                disable_numparse=True,
            ),
        )
        return str(text).splitlines()

    def _is_placeholder(self, line: str) -> bool:
        # one token per column
        return line.count("MSMIDRULE") == len(self.model_names) + 1

    def to_html(self) -> str:
        n_cols = len(self.model_names) + 1
        out: list[str] = []
        for ln in self._tabulate("html"):
            if self._is_placeholder(ln):
                out.append(
                    f'<tr><td colspan="{n_cols}" style="border-bottom: 1px solid;"></td></tr>',
                )
                continue
            out.append(ln)
            if ln.startswith("<table") and (self.title or self.subtitle):
                caption = html.escape(self.title or "")
                if self.subtitle:
                    caption += f"<br><small>{html.escape(self.subtitle)}</small>"
                out.append(f"<caption>{caption}</caption>")
        if self.notes:
            foot = ["<tfoot>"]
            foot.extend(
                f'<tr><td colspan="{n_cols}">{html.escape(note)}</td></tr>' for note in self.notes
            )
            foot.append("</tfoot>")
            pos = max(i for i, ln in enumerate(out) if ln.strip() == "</table>")
            out[pos:pos] = foot
        return "\n".join(out) + "\n"

    def to_latex(self) -> str:
        n_cols = len(self.model_names) + 1
        lines: list[str] = []
        for ln in self._tabulate("latex_booktabs"):
            if self._is_placeholder(ln):
                lines.append(r"\midrule")
                continue
            if ln.strip() == r"\end{tabular}":
                lines.extend(
                    rf"\multicolumn{{{n_cols}}}{{l}}{{\footnotesize {escape_latex(note)}}}\\"
                    for note in self.notes
                )
            lines.append(ln)
        if self.title or self.subtitle:
            head = [r"\begin{table}[!h]", r"\centering"]
            if self.title:
                head.append(rf"\caption{{{escape_latex(self.title)}}}")
            if self.subtitle:
                head.append(rf"{{\small {escape_latex(self.subtitle)}}}\par\medskip")
            lines = [*head, *lines, r"\end{table}"]
        return "\n".join(lines) + "\n"

    def _rtf_row(self, cells: list[str], *, top: bool = False, bottom: bool = False, bold: bool = False) -> str:
        parts = [r"\trowd\trgaph108"]
        edge = 0
        for j in range(len(cells)):
            edge += _RTF_STUB_WIDTH if j == 0 else _RTF_COL_WIDTH
            if top:
                parts.append(r"\clbrdrt\brdrs\brdrw10")
            if bottom:
                parts.append(r"\clbrdrb\brdrs\brdrw10")
            parts.append(rf"\cellx{edge}")
        for j, cell in enumerate(cells):
            align = r"\ql" if j == 0 else r"\qc"
            text = escape_rtf(cell)
            if bold:
                text = rf"\b {text}\b0"
            parts.append(rf"\pard\intbl{align} {text}\cell")
        parts.append(r"\row")
        return "".join(parts)

    def to_rtf(self) -> str:
        lines = [r"{\rtf1\ansi\deff0", r"{\fonttbl{\f0\froman Times New Roman;}}", r"\f0\fs20"]
        if self.title:
            lines.append(rf"\pard\qc\b {escape_rtf(self.title)}\b0\par")
        if self.subtitle:
            lines.append(rf"\pard\qc\i {escape_rtf(self.subtitle)}\i0\par")
        rows = self.table.cells()
        n_est = self.table.n_estimate_rows
        lines.append(self._rtf_row(["", *self.model_names], top=True, bottom=True, bold=True))
        for pos, row in enumerate(rows):
            last = pos == len(rows) - 1
            boundary = pos == n_est - 1
            lines.append(self._rtf_row([str(c) for c in row], bottom=last or boundary))
        lines.extend(rf"\pard\ql\fs16 {escape_rtf(note)}\par" for note in self.notes)
        lines.append("}")
        return "\n".join(lines) + "\n"

    def render(self, kind: str) -> str:
        """Render as ``"html"``, ``"latex"`` or ``"rtf"``."""
        renderers = {"html": self.to_html, "latex": self.to_latex, "rtf": self.to_rtf}
        if kind not in renderers:
            raise ValidationError(f"unknown output kind {kind!r}; use one of {sorted(renderers)}")
        return renderers[kind]()

    def save(self, filename: str | Path) -> Path:
        """Write the table to ``filename``; the format follows the extension.

        The write is a single non-atomic write; I/O errors propagate.
        """
        path = Path(filename)
        ext = path.suffix.lower().lstrip(".")
        kind = OUTPUT_FORMATS.get(ext)
        if kind is None:
            raise ValidationError(
                f"filename extension {ext!r} is not supported; use one of {sorted(OUTPUT_FORMATS)}",
            )
        path.write_text(self.render(kind), encoding="utf-8")
        LOGGER.info("wrote %s table to %s", kind, path)
        return path

    def _repr_html_(self) -> str:  # pragma: no cover - notebook display
        return self.to_html()

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return (
            f"SummaryTable(models={list(self.model_names)}, rows={len(self.table.rows)}, "
            f"notes={len(self.notes)})"
        )
