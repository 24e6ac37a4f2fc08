# regtable/utils/__init__.py
"""Utility functions module."""
from .helpers import (
    collect_terms,
    escape_latex,
    escape_rtf,
    format_number,
    hline_placeholder,
    normalize_fmt,
)

__all__ = [
    "collect_terms",
    "escape_latex",
    "escape_rtf",
    "format_number",
    "hline_placeholder",
    "normalize_fmt",
]
