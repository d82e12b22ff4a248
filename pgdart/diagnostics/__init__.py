"""Diagnostics collection and reporting."""

from .collector import Diagnostic, DiagnosticCollector
from .reporters import ConsoleReporter, JsonReporter, create_reporter

__all__ = [
    "Diagnostic",
    "DiagnosticCollector",
    "ConsoleReporter",
    "JsonReporter",
    "create_reporter",
]
