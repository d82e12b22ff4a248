"""Diagnostics recorded during a resolution pass."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
import logging

logger = logging.getLogger(__name__)

INFO = 'info'
WARNING = 'warning'

_LOG_LEVELS = {
    INFO: logging.INFO,
    WARNING: logging.WARNING,
}


@dataclass
class Diagnostic:
    """A recoverable problem found while resolving types."""

    code: str
    message: str
    subject: Optional[str] = None
    level: str = WARNING
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "level": self.level,
            "subject": self.subject,
            "message": self.message,
            "context": self.context,
        }


# Diagnostic codes
TYPE_NOT_FOUND = 'type_not_found'
NO_MATCHING_TYPE = 'no_matching_type'
UNRESOLVED_ATTRIBUTE = 'unresolved_attribute'
ENUM_COMMENT_INVALID = 'enum_comment_invalid'
ENUM_TRANSLATIONS_INVALID = 'enum_translations_invalid'
JSON_SCHEMA_UNNAMED = 'json_schema_unnamed'
JSON_SCHEMA_INVALID = 'json_schema_invalid'
CHECK_UNREADABLE = 'check_unreadable'
JSON_SCHEMA_CONFLICT = 'json_schema_conflict'


class DiagnosticCollector:
    """Collects diagnostics for a single generation run."""

    def __init__(self):
        self._diagnostics: List[Diagnostic] = []

    def record(self,
               code: str,
               message: str,
               subject: Optional[str] = None,
               level: str = WARNING,
               **context: Any) -> Diagnostic:
        """Record a diagnostic and mirror it to the module logger."""
        diagnostic = Diagnostic(
            code=code,
            message=message,
            subject=subject,
            level=level,
            context=context
        )
        self._diagnostics.append(diagnostic)
        logger.debug(f"[{code}] {message}")
        return diagnostic

    def warning(self, code: str, message: str, subject: Optional[str] = None, **context: Any) -> Diagnostic:
        return self.record(code, message, subject=subject, level=WARNING, **context)

    def info(self, code: str, message: str, subject: Optional[str] = None, **context: Any) -> Diagnostic:
        return self.record(code, message, subject=subject, level=INFO, **context)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self._diagnostics if d.code == code]

    def counts(self) -> Dict[str, int]:
        """Number of diagnostics per code, in first-seen order."""
        counts: Dict[str, int] = {}
        for diagnostic in self._diagnostics:
            counts[diagnostic.code] = counts.get(diagnostic.code, 0) + 1
        return counts

    def log_all(self, target: Optional[logging.Logger] = None) -> None:
        """Emit every recorded diagnostic through ``target`` at its level."""
        target = target or logger
        for diagnostic in self._diagnostics:
            target.log(_LOG_LEVELS.get(diagnostic.level, logging.WARNING),
                       f"[{diagnostic.code}] {diagnostic.message}")

    def __len__(self) -> int:
        return len(self._diagnostics)

    def __iter__(self):
        return iter(list(self._diagnostics))
