"""Dart target types generated from Postgres schema types.

Every target type can produce three Dart fragments:

* ``type_name()`` - the Dart type used in declarations
* ``encode_expr(value)`` - an expression turning ``value`` into its JSON form
* ``decode_expr(value)`` - an expression building the Dart value from JSON

Values are immutable so a registered type can be shared between columns and
composite fields without being changed by either.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple

from ..naming import to_class_name


class TargetType:
    """Base class of all Dart target types."""

    declarable = False

    def type_name(self) -> str:
        raise NotImplementedError

    def encode_expr(self, value: str) -> str:
        raise NotImplementedError

    def decode_expr(self, value: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class ScalarType(TargetType):
    """Builtin Dart keyword type: int, double, bool, String or dynamic."""
    keyword: str

    def type_name(self) -> str:
        return self.keyword

    def encode_expr(self, value: str) -> str:
        return value

    def decode_expr(self, value: str) -> str:
        return f"{value} as {self.keyword}"


@dataclass(frozen=True)
class TemporalType(TargetType):
    """Dates, times and timestamps, sent as ISO 8601 strings."""

    def type_name(self) -> str:
        return 'DateTime'

    def encode_expr(self, value: str) -> str:
        return f"{value}.toIso8601String()"

    def decode_expr(self, value: str) -> str:
        return f"DateTime.parse({value})"


@dataclass(frozen=True)
class IntervalType(TargetType):
    """Postgres interval, read as HH:MM:SS and written as whole seconds."""

    def type_name(self) -> str:
        return 'Duration'

    def encode_expr(self, value: str) -> str:
        return f"{value}.inSeconds"

    def decode_expr(self, value: str) -> str:
        return f"parsePostgresInterval({value})"


@dataclass(frozen=True)
class ListType(TargetType):
    element: TargetType

    def type_name(self) -> str:
        return f"List<{self.element.type_name()}>"

    def encode_expr(self, value: str) -> str:
        return f"{value}.map((v) => {self.element.encode_expr('v')}).toList()"

    def decode_expr(self, value: str) -> str:
        return f"({value} as List<dynamic>).map((v) => {self.element.decode_expr('v')}).toList()"


@dataclass(frozen=True)
class NullableType(TargetType):
    """Nullable wrapper; wrapping an already nullable type collapses."""
    inner: TargetType

    def __post_init__(self):
        if isinstance(self.inner, NullableType):
            object.__setattr__(self, 'inner', self.inner.inner)

    def type_name(self) -> str:
        return f"{self.inner.type_name()}?"

    def encode_expr(self, value: str) -> str:
        return self.inner.encode_expr(value)

    def decode_expr(self, value: str) -> str:
        return f"{value} == null ? null : {self.inner.decode_expr(value)}"


@dataclass(frozen=True)
class MapType(TargetType):
    """Untyped key-value bag for free-form JSON."""
    key: TargetType
    value: TargetType

    def type_name(self) -> str:
        return f"Map<{self.key.type_name()}, {self.value.type_name()}>"

    def encode_expr(self, value: str) -> str:
        return value

    def decode_expr(self, value: str) -> str:
        return f"{value} as Map<String, dynamic>"


class _Declared(TargetType):
    """Shared behaviour of types that need their own Dart declaration."""

    declarable = True
    name: str

    @property
    def class_name(self) -> str:
        return to_class_name(self.name)

    def type_name(self) -> str:
        return self.class_name

    def encode_expr(self, value: str) -> str:
        return f"{value}.toJson()"

    def decode_expr(self, value: str) -> str:
        return f"{self.class_name}.fromJson({value})"


@dataclass(frozen=True)
class EnumType(_Declared):
    """Closed set of string values with optional per-locale labels.

    ``translations`` maps a locale code to a table of ``value -> label``.
    """
    name: str
    values: Tuple[str, ...]
    translations: Optional[Dict[str, Dict[str, str]]] = field(default=None, compare=False)


@dataclass(frozen=True)
class RecordField:
    """A named member of a record type."""
    name: str
    type: TargetType


@dataclass(frozen=True)
class CompositeType(_Declared):
    """Record mirroring a Postgres composite type."""
    name: str
    fields: Tuple[RecordField, ...] = ()


@dataclass(frozen=True)
class SchemaDerivedObject(_Declared):
    """Record synthesized from a JSON schema found in a check constraint."""
    name: str
    fields: Tuple[RecordField, ...] = ()


@dataclass(frozen=True)
class TypeReference(_Declared):
    """Reference by name to a record that is still being resolved.

    Only used for a composite attribute that points back at its own type.
    """
    name: str

    declarable = False


def nullable(target: TargetType) -> NullableType:
    """Wrap ``target`` in a nullable type, never nesting."""
    return NullableType(target)


def is_nullable(target: TargetType) -> bool:
    return isinstance(target, NullableType)


def unwrap(target: TargetType) -> TargetType:
    """Strip nullable and list wrappers down to the innermost type."""
    while isinstance(target, (NullableType, ListType)):
        target = target.inner if isinstance(target, NullableType) else target.element
    return target


STRING = ScalarType('String')
DYNAMIC = ScalarType('dynamic')


def json_map() -> MapType:
    """Fallback representation of free-form JSON."""
    return MapType(STRING, DYNAMIC)


# Builtin Postgres types with a fixed Dart representation
PG_TYPE_MAP: Dict[str, TargetType] = {
    # Bool
    'bool': ScalarType('bool'),

    # Numbers
    'int2': ScalarType('int'),
    'int4': ScalarType('int'),
    'int8': ScalarType('int'),
    'float4': ScalarType('double'),
    'float8': ScalarType('double'),
    'numeric': ScalarType('double'),

    # Time
    'time': TemporalType(),
    'timetz': TemporalType(),
    'timestamp': TemporalType(),
    'timestamptz': TemporalType(),
    'date': TemporalType(),
    'interval': IntervalType(),

    # Strings and opaque references
    'uuid': STRING,
    'text': STRING,
    'varchar': STRING,
    'bpchar': STRING,
    'citext': STRING,
    'name': STRING,
    'regclass': STRING,

    # JSON without a declared schema
    'jsonb': json_map(),
    'json': json_map(),
}

JSON_FORMATS = ('json', 'jsonb')


def describe(target: TargetType) -> Dict[str, Any]:
    """Summarize a target type for reports."""
    return {
        "kind": type(unwrap(target)).__name__,
        "dart_type": target.type_name(),
        "nullable": is_nullable(target),
    }
