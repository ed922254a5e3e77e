"""Run-scoped diagnostics for conceptmap.

Render failures and label match misses are collected per run and can be
flushed to disk for debugging; they are never shown as user-facing errors.
"""

from .error_collector import (
    DiagnosticContext,
    DiagnosticRecord,
    DiagnosticSeverity,
    ErrorCollector,
    create_error_collector,
)

__all__ = [
    "DiagnosticContext",
    "DiagnosticRecord",
    "DiagnosticSeverity",
    "ErrorCollector",
    "create_error_collector",
]
