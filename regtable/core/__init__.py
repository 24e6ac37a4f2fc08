# regtable/core/__init__.py
"""Core table-building modules for regtable."""
from . import assemble, extract, options, overrides, results, tidy, validate

__all__ = ["assemble", "extract", "options", "overrides", "results", "tidy", "validate"]
