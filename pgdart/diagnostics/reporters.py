"""Reporters for exporting diagnostics in various formats."""

import json
from abc import ABC, abstractmethod

from .collector import DiagnosticCollector


class DiagnosticsReporter(ABC):
    """Base class for diagnostics reporters."""

    def __init__(self, collector: DiagnosticCollector):
        """Initialize reporter with a diagnostics collector."""
        self.collector = collector

    @abstractmethod
    def report(self) -> str:
        """Generate a diagnostics report."""
        pass


class ConsoleReporter(DiagnosticsReporter):
    """Reporter that formats diagnostics for console output."""

    def report(self, include_details: bool = True) -> str:
        """Generate a human-readable diagnostics report."""
        counts = self.collector.counts()

        lines = [
            "=== pgdart Diagnostics ===",
            f"Total: {len(self.collector)}",
        ]

        if not counts:
            lines.append("  No diagnostics")
            return "\n".join(lines)

        lines.extend(["", "By code:"])
        for code, count in counts.items():
            lines.append(f"  {code}: {count}")

        if include_details:
            lines.extend(["", "Details:"])
            for diagnostic in self.collector:
                subject = f" ({diagnostic.subject})" if diagnostic.subject else ""
                lines.append(f"  [{diagnostic.level}] {diagnostic.code}{subject}: {diagnostic.message}")

        return "\n".join(lines)


class JsonReporter(DiagnosticsReporter):
    """Reporter that exports diagnostics as JSON."""

    def report(self, indent: int = 2) -> str:
        """Generate a JSON diagnostics report."""
        payload = {
            "total": len(self.collector),
            "counts": self.collector.counts(),
            "diagnostics": [d.to_dict() for d in self.collector],
        }
        return json.dumps(payload, indent=indent, default=str)


def create_reporter(collector: DiagnosticCollector, format: str = 'console') -> DiagnosticsReporter:
    """Create a reporter for the given output format."""
    if format == 'console':
        return ConsoleReporter(collector)
    elif format == 'json':
        return JsonReporter(collector)
    else:
        raise ValueError(f"Unknown report format: {format}")
