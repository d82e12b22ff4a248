"""Column-level target types and insert variants."""

from .introspection import SchemaColumn
from .registry import TypeRegistry
from .types import TargetType, nullable, DYNAMIC, JSON_FORMATS


def base_column_type(column: SchemaColumn, registry: TypeRegistry) -> TargetType:
    """Target type of a column before nullability is applied.

    A JSON-schema type registered for a json/jsonb column wins over the
    catalog type of its format. Formats missing from the registry fall back
    to ``dynamic``.
    """
    if column.format in JSON_FORMATS:
        override = registry.column_override(column.name)
        if override is not None:
            return override

    target = registry.get(column.format)
    return target if target is not None else DYNAMIC


def may_be_omitted_on_insert(column: SchemaColumn) -> bool:
    """Whether the server fills the column when an insert leaves it out."""
    return column.is_generated or column.is_identity or column.default_value is not None


def column_target_type(column: SchemaColumn, registry: TypeRegistry, for_insert: bool = False) -> TargetType:
    """
    Target type of a column, nullable where the value may be absent.

    Args:
        column: Column to type
        registry: Registry filled by the resolution pass
        for_insert: Also treat generated, identity and defaulted columns as
            optional, as an insert may leave them out

    Returns:
        A target type derived from the registered one; registry entries are
        never modified
    """
    target = base_column_type(column, registry)
    if column.is_nullable or (for_insert and may_be_omitted_on_insert(column)):
        return nullable(target)
    return target
