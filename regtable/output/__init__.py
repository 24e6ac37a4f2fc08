# regtable/output/__init__.py
"""Table rendering and the top-level summary entry point."""
from .render import SummaryTable
from .summary import modelsummary

__all__ = [
    "SummaryTable",
    "modelsummary",
]
