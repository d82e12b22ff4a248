"""Registry of resolved target types for one generation run."""

from typing import Dict, List, Optional, Tuple, Union

from .introspection import SchemaType
from .types import TargetType, SchemaDerivedObject, NullableType, ListType
from ..diagnostics.collector import DiagnosticCollector, JSON_SCHEMA_CONFLICT
from ..exceptions import SchemaError


class TypeRegistry:
    """Maps schema types, JSON-schema names and columns to target types.

    Catalog types are registered once, under both their id and their name,
    in dependency order. JSON-schema derived types live in their own
    namespaces so a synthesized property name never shadows a catalog type.
    """

    def __init__(self):
        self._by_id: Dict[int, Tuple[SchemaType, TargetType]] = {}
        self._by_name: Dict[str, Tuple[SchemaType, TargetType]] = {}
        self._derived: Dict[str, TargetType] = {}
        self._columns: Dict[str, TargetType] = {}
        self._json_order: List[TargetType] = []

    def register_type(self, schema_type: SchemaType, target: TargetType) -> None:
        """Register the target type of a catalog type."""
        if schema_type.id in self._by_id:
            raise SchemaError(
                f"Type {schema_type.name} is already registered",
                type_name=schema_type.name
            )
        self._by_id[schema_type.id] = (schema_type, target)
        self._by_name[schema_type.name] = (schema_type, target)

    def register_derived(self, name: str, target: TargetType) -> None:
        """Register a type synthesized from a JSON schema under ``name``."""
        self._derived[name] = target
        self._json_order.append(target)

    def register_column(self, column_name: str, target: TargetType) -> None:
        """Register a JSON-schema type overriding a column's catalog type."""
        self._columns[column_name] = target
        self._json_order.append(target)

    def get(self, key: Union[int, str]) -> Optional[TargetType]:
        """Look up a catalog type by id or name."""
        entry = self._by_id.get(key) if isinstance(key, int) else self._by_name.get(key)
        return entry[1] if entry else None

    def get_schema_type(self, key: Union[int, str]) -> Optional[SchemaType]:
        entry = self._by_id.get(key) if isinstance(key, int) else self._by_name.get(key)
        return entry[0] if entry else None

    def get_derived(self, name: str) -> Optional[TargetType]:
        return self._derived.get(name)

    def column_override(self, column_name: str) -> Optional[TargetType]:
        return self._columns.get(column_name)

    def __contains__(self, key: Union[int, str]) -> bool:
        if isinstance(key, int):
            return key in self._by_id
        return key in self._by_name

    def __len__(self) -> int:
        return len(self._by_id)

    def catalog_entries(self) -> List[Tuple[SchemaType, TargetType]]:
        """Registered catalog types in registration order."""
        return list(self._by_id.values())

    def derived_entries(self) -> Dict[str, TargetType]:
        return dict(self._derived)

    def column_entries(self) -> Dict[str, TargetType]:
        return dict(self._columns)

    def schema_derived_objects(
        self, diagnostics: Optional[DiagnosticCollector] = None
    ) -> List[SchemaDerivedObject]:
        """Every JSON-schema record reachable from registered entries.

        Records are returned in registration order, once per class name.
        When records with different fields share a class name the first one
        is kept and each other shape is reported as ``JSON_SCHEMA_CONFLICT``.
        """
        found: Dict[str, SchemaDerivedObject] = {}
        conflicts: List[SchemaDerivedObject] = []
        for target in self._json_order:
            _collect_objects(target, found, conflicts)

        if diagnostics is not None:
            for record in conflicts:
                kept = found[record.class_name]
                diagnostics.warning(
                    JSON_SCHEMA_CONFLICT,
                    f"JSON schema records named {record.class_name} have different fields "
                    f"({_field_names(kept)} vs {_field_names(record)}), keeping the first",
                    subject=record.name
                )
        return list(found.values())


def _field_names(record: SchemaDerivedObject) -> str:
    return ', '.join(f.name for f in record.fields) or 'no fields'


def _collect_objects(target: TargetType,
                     found: Dict[str, SchemaDerivedObject],
                     conflicts: List[SchemaDerivedObject]) -> None:
    if isinstance(target, NullableType):
        _collect_objects(target.inner, found, conflicts)
    elif isinstance(target, ListType):
        _collect_objects(target.element, found, conflicts)
    elif isinstance(target, SchemaDerivedObject):
        for record_field in target.fields:
            _collect_objects(record_field.type, found, conflicts)
        kept = found.setdefault(target.class_name, target)
        if kept != target and target not in conflicts:
            conflicts.append(target)
