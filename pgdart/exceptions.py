"""Exceptions raised by pgdart.

Every error carries a code, the schema objects it concerns and suggestions
for fixing the metadata. Problems that still allow a best-effort result are
never raised; they are recorded as diagnostics instead.
"""

from typing import Optional, Dict, Any, List
import uuid

# Context keys naming the schema object an error is about, in display order
SUBJECT_KEYS = ('type', 'column', 'path', 'record')


class PgDartError(Exception):
    """Base exception for all pgdart errors."""

    default_code = "PGDART_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.context = context or {}
        self.suggestions = suggestions or []
        self.correlation_id = correlation_id or str(uuid.uuid4())

    @property
    def subject(self) -> Dict[str, Any]:
        """The schema objects named in the context, e.g. ``{'type': 'address'}``."""
        return {key: self.context[key] for key in SUBJECT_KEYS if key in self.context}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output, with the subject lifted to the top level."""
        payload: Dict[str, Any] = {"error": self.error_code, "message": self.message}
        payload.update(self.subject)
        extra = {k: v for k, v in self.context.items() if k not in SUBJECT_KEYS}
        if extra:
            payload["context"] = extra
        payload["suggestions"] = self.suggestions
        payload["correlation_id"] = self.correlation_id
        return payload

    def __str__(self) -> str:
        subject = ', '.join(f"{key} {value}" for key, value in self.subject.items())
        lines = [f"[{self.error_code}] {self.message}" + (f" ({subject})" if subject else "")]
        lines.extend(f"  - {suggestion}" for suggestion in self.suggestions)
        return "\n".join(lines)


class SchemaError(PgDartError):
    """Error while resolving schema types."""

    default_code = "SCHEMA_ERROR"

    def __init__(self, message: str, type_name: Optional[str] = None,
                 column_name: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if type_name:
            context["type"] = type_name
        if column_name:
            context["column"] = column_name
        super().__init__(message, context=context, **kwargs)


class CircularDependencyError(SchemaError):
    """Composite types reference each other, so no declaration order exists."""

    default_code = "CIRCULAR_DEPENDENCY"

    def __init__(self, type_name: str, **kwargs):
        kwargs.setdefault("suggestions", [
            f"Check the attributes of composite type '{type_name}'",
            "Break the cycle by replacing one attribute with a json/jsonb column",
        ])
        super().__init__(
            f"Circular dependency detected involving type {type_name}",
            type_name=type_name,
            **kwargs
        )
        self.type_name = type_name


class MetadataError(PgDartError):
    """Schema metadata snapshot could not be read."""

    default_code = "METADATA_ERROR"

    def __init__(self, message: str, path: Optional[str] = None,
                 record: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if path:
            context["path"] = path
        if record:
            context["record"] = record

        kwargs.setdefault("suggestions", [
            "Check that the file is a JSON export of the schema metadata",
            "Ensure every type has 'id' and 'name' and every column has 'table_id', 'name' and 'format'",
        ])
        super().__init__(message, context=context, **kwargs)
