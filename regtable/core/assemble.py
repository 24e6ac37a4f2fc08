"""Merge per-model long tables into one wide table.

Rows are keyed by (label, statistic kind). Estimate rows come first, each
followed by its uncertainty row, then goodness-of-fit rows, then any
user-supplied rows. A label that a model does not report yields an empty
cell for that model.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from regtable.utils.helpers import collect_terms

__all__ = ["AssembledTable", "assemble"]

META_COLUMNS: tuple[str, ...] = ("part", "term", "statistic", "label")


@dataclass(frozen=True, eq=False)
class AssembledTable:
    """Wide table of formatted cells.

    ``rows`` has the columns ``part``, ``term`` (merge key), ``statistic``,
    ``label`` (displayed row label, blank on uncertainty rows) and one
    column per model.
    """

    rows: pd.DataFrame
    model_names: tuple[str, ...]

    @property
    def n_estimate_rows(self) -> int:
        return int((self.rows["part"] == "estimates").sum())

    def cells(self) -> list[list[str]]:
        """Rows as ``[label, value_1, ..., value_k]`` lists."""
        cols = ["label", *self.model_names]
        return [list(r) for r in self.rows.loc[:, cols].itertuples(index=False, name=None)]


def _ordered(preferred: Sequence[str] | None, seen: list[str]) -> list[str]:
    if preferred is None:
        return seen
    present = set(seen)
    head = [lab for lab in dict.fromkeys(preferred) if lab in present]
    tail = [lab for lab in seen if lab not in set(head)]
    return head + tail


def assemble(
    frames: Sequence[pd.DataFrame],
    model_names: Sequence[str],
    *,
    coef_order: Sequence[str] | None = None,
    gof_order: Sequence[str] | None = None,
    added_rows: Sequence[Sequence[str]] = (),
) -> AssembledTable:
    """Build the wide table.

    Parameters
    ----------
    frames
        One long table per model, as produced by
        :func:`regtable.core.extract.extract_model`.
    model_names
        Column header of each model, same order as ``frames``.
    coef_order / gof_order
        Preferred label order; labels not listed follow in first-seen order.
    added_rows
        Verbatim rows ``[label, value_1, ..., value_k]`` appended at the end.

    """
    names = [str(n) for n in model_names]
    if len(names) != len(frames):
        raise ValueError("model_names and frames must have the same length")
    if len(set(names)) != len(names):
        raise ValueError(f"model names must be unique; got {names}")
    reserved = set(names) & set(META_COLUMNS)
    if reserved:
        raise ValueError(f"model names may not be any of {list(META_COLUMNS)}; got {sorted(reserved)}")

    lookups: list[dict[tuple[str, str], str]] = []
    for frame in frames:
        lookups.append(
            {(t, s): v for t, s, v in frame.loc[:, ["term", "statistic", "value"]].itertuples(index=False)},
        )

    def _labels(part: str, statistic: str) -> list[str]:
        return collect_terms(
            list(f.loc[(f["part"] == part) & (f["statistic"] == statistic), "term"]) for f in frames
        )

    est_labels = _ordered(coef_order, _labels("estimates", "estimate"))
    gof_labels = _ordered(gof_order, _labels("gof", "gof"))

    records: list[dict[str, str]] = []

    def _row(part: str, term: str, statistic: str, label: str) -> dict[str, str]:
        rec = {"part": part, "term": term, "statistic": statistic, "label": label}
        for name, lookup in zip(names, lookups):
            rec[name] = lookup.get((term, statistic), "")
        return rec

    for term in est_labels:
        records.append(_row("estimates", term, "estimate", term))
        # the label is shown once per coefficient pair
        records.append(_row("estimates", term, "uncertainty", ""))
    records.extend(_row("gof", term, "gof", term) for term in gof_labels)
    for extra in added_rows:
        rec = {"part": "gof", "term": str(extra[0]), "statistic": "added", "label": str(extra[0])}
        rec.update(zip(names, (str(v) for v in extra[1:])))
        records.append(rec)

    rows = pd.DataFrame.from_records(records, columns=[*META_COLUMNS, *names])
    return AssembledTable(rows=rows.fillna(""), model_names=tuple(names))
