"""Shared helper utilities.

Numeric formatting, markup escaping, and term bookkeeping used by the
extraction and rendering modules.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np

from regtable.exceptions import FormatError

__all__ = [
    "collect_terms",
    "escape_latex",
    "escape_rtf",
    "format_number",
    "hline_placeholder",
    "normalize_fmt",
]

# One printf conversion: flags, width, precision, type.
_NUMERIC_CONVERSION = re.compile(r"%[-+ 0#]*\d*(?:\.\d+)?[diouxXeEfFgG]")
_STRING_CONVERSION = re.compile(r"%[-]?\d*s")


def normalize_fmt(fmt: Any, *, allow_string: bool = False) -> str:
    """Validate a printf-style format and return it as a string.

    Integers are accepted as shorthand for a fixed number of decimals
    (``3`` -> ``'%.3f'``). The format must contain exactly one conversion;
    literal percent signs are written ``%%``.
    """
    if isinstance(fmt, (bool, np.bool_)):
        raise FormatError(f"fmt must be a printf-style string; got {fmt!r}")
    if isinstance(fmt, (int, np.integer)):
        if int(fmt) < 0:
            raise FormatError("fmt digits must be non-negative")
        return f"%.{int(fmt)}f"
    if not isinstance(fmt, str):
        raise FormatError(f"fmt must be a printf-style string; got {type(fmt).__name__}")
    stripped = fmt.replace("%%", "")
    conversions = _NUMERIC_CONVERSION.findall(stripped)
    if allow_string:
        conversions += _STRING_CONVERSION.findall(stripped)
    if len(conversions) != 1 or stripped.count("%") != 1:
        raise FormatError(f"fmt must contain exactly one numeric conversion such as '%.3f'; got {fmt!r}")
    try:
        fmt % 1.0  # noqa: B018
    except (TypeError, ValueError) as exc:
        raise FormatError(f"invalid fmt {fmt!r}: {exc}") from exc
    return fmt


def format_number(value: Any, fmt: str) -> str:
    """Format ``value`` with ``fmt``; missing or non-finite values become ``''``.

    Strings are passed through unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if not isinstance(fmt, str):
        raise FormatError(f"fmt must be a printf-style string; got {fmt!r}")
    try:
        num = float(value)
    except (TypeError, ValueError) as exc:
        raise FormatError(f"cannot format non-numeric value {value!r}") from exc
    if not np.isfinite(num):
        return ""
    try:
        return fmt % num
    except (TypeError, ValueError) as exc:
        raise FormatError(f"cannot format {value!r} with {fmt!r}: {exc}") from exc


def collect_terms(term_lists: Iterable[Sequence[str]]) -> list[str]:
    """Return the ordered union of terms, by first appearance across models."""
    seen: dict[str, None] = {}
    for terms in term_lists:
        for name in terms:
            if name not in seen:
                seen[name] = None
    return list(seen)


def escape_latex(obj: Any) -> str:
    """Minimal LaTeX escaping for text placed outside tabulate's cells."""
    text = str(obj)
    replacements = {
        "\\": r"\textbackslash{}",
        "&": r"\&",
        "%": r"\%",
        "$": r"\$",
        "#": r"\#",
        "_": r"\_",
        "{": r"\{",
        "}": r"\}",
        "~": r"\textasciitilde{}",
        "^": r"\textasciicircum{}",
        "<": r"$<$",
        ">": r"$>$",
    }
    return "".join(replacements.get(ch, ch) for ch in text)


def escape_rtf(obj: Any) -> str:
    """Escape text for RTF; non-ASCII characters become ``\\uN?`` escapes."""
    out: list[str] = []
    for ch in str(obj):
        if ch in "\\{}":
            out.append("\\" + ch)
        elif ch == "\n":
            out.append(r"\line ")
        elif ord(ch) > 127:
            code = ord(ch)
            if code > 0xFFFF:
                code -= 0x10000
                units = [0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF)]
            else:
                units = [code]
            # RTF \u takes a signed 16-bit value
            out.extend(f"\\u{u - 65536 if u > 32767 else u}?" for u in units)
        else:
            out.append(ch)
    return "".join(out)


def hline_placeholder(model_names: Sequence[str]) -> list[str]:
    """Build a placeholder row used by post-processing to insert a group boundary.

    The placeholder is detected and replaced downstream in
    ``regtable.output.render``.
    """
    n_cols = len(list(model_names)) + 1  # include stub column
    return ["MSMIDRULE"] * n_cols
