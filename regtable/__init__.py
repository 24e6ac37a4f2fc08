"""regtable: publication-ready summary tables for fitted models.

Coefficient estimates, uncertainty statistics and goodness-of-fit rows from
one or more models are merged into a single table and rendered to HTML,
LaTeX or RTF.
"""
from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

__all__ = [
    "AdapterError",
    "EstimationResult",
    "FormatError",
    "RegtableError",
    "SummaryTable",
    "ValidationError",
    "default_gof_map",
    "glance",
    "modelsummary",
    "tidy",
    "vcov",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "AdapterError": ("regtable.exceptions", "AdapterError"),
    "FormatError": ("regtable.exceptions", "FormatError"),
    "RegtableError": ("regtable.exceptions", "RegtableError"),
    "ValidationError": ("regtable.exceptions", "ValidationError"),
    "EstimationResult": ("regtable.core.results", "EstimationResult"),
    "default_gof_map": ("regtable.core.options", "default_gof_map"),
    "glance": ("regtable.core.tidy", "glance"),
    "tidy": ("regtable.core.tidy", "tidy"),
    "vcov": ("regtable.core.tidy", "vcov"),
    "SummaryTable": ("regtable.output.render", "SummaryTable"),
    "modelsummary": ("regtable.output.summary", "modelsummary"),
}


def __getattr__(name: str) -> Any:
    """Lazily import public functions and classes on first access."""
    if name in _LAZY_IMPORTS:
        module_name, attr_name = _LAZY_IMPORTS[name]
        module = import_module(module_name)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module 'regtable' has no attribute '{name}'")


def __dir__() -> list[str]:
    """Ensure dir() exposes lazily imported names."""
    return sorted(set(globals()) | set(__all__))
