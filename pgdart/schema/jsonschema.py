"""Target types derived from JSON schemas embedded in check constraints.

A ``json``/``jsonb`` column validated by a constraint such as::

    jsonb_matches_schema('{"type": "object", ...}'::json, metadata)

gets a record type built from the embedded schema instead of the generic
``Map<String, dynamic>``. The constraint must match this grammar, where ``fn``
is one of the configured schema-check functions::

    [CHECK] "("* fn "(" string-literal ["::" json|jsonb] "," expr ")" ")"*

Anything else is left alone.
"""

from typing import Any, Dict, Optional, Sequence
import json
import logging
import re

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from .introspection import SchemaColumn
from .registry import TypeRegistry
from .types import (
    TargetType, ScalarType, ListType, SchemaDerivedObject, RecordField,
    nullable, json_map, DYNAMIC, STRING, JSON_FORMATS
)
from ..diagnostics.collector import (
    DiagnosticCollector, JSON_SCHEMA_UNNAMED, JSON_SCHEMA_INVALID, CHECK_UNREADABLE
)

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_CHECK_FUNCTIONS = ('jsonb_matches_schema', 'json_matches_schema')

_CHECK_KEYWORD = re.compile(r'^\s*CHECK\b', re.IGNORECASE)

# JSON schema primitive types
_PRIMITIVES: Dict[str, TargetType] = {
    'string': STRING,
    'integer': ScalarType('int'),
    'number': ScalarType('double'),
    'boolean': ScalarType('bool'),
}


def extract_json_schema(
    check: Optional[str],
    functions: Sequence[str] = DEFAULT_SCHEMA_CHECK_FUNCTIONS,
    diagnostics: Optional[DiagnosticCollector] = None,
    subject: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Extract the JSON schema literal from a check constraint expression.

    Args:
        check: Constraint expression, with or without the CHECK keyword
        functions: Names of functions that validate a value against a schema
        diagnostics: Collector for constraints that name a schema function
            but cannot be read
        subject: Column name used in diagnostics

    Returns:
        The decoded schema, or None if the constraint is not a schema check
    """
    if not check:
        return None

    functions = tuple(fn.lower() for fn in functions)
    expression = _CHECK_KEYWORD.sub('', check, count=1).strip()
    if not any(fn in expression.lower() for fn in functions):
        return None

    if diagnostics is None:
        diagnostics = DiagnosticCollector()

    try:
        tree = sqlglot.parse_one(expression, read='postgres')
    except SqlglotError as e:
        diagnostics.warning(
            CHECK_UNREADABLE,
            f"Could not parse check constraint: {e}",
            subject=subject
        )
        return None

    while isinstance(tree, exp.Paren):
        tree = tree.this

    if not isinstance(tree, exp.Anonymous) or tree.name.lower() not in functions:
        diagnostics.warning(
            CHECK_UNREADABLE,
            "Check constraint is not a single schema validation call",
            subject=subject,
            check=check
        )
        return None

    args = tree.expressions
    literal = args[0] if args else None
    # A single ::json or ::jsonb cast around the literal
    if isinstance(literal, exp.ParseJSON) or (
        isinstance(literal, exp.Cast) and literal.to.is_type('json', 'jsonb')
    ):
        literal = literal.this
    if not isinstance(literal, exp.Literal) or not literal.is_string:
        diagnostics.warning(
            CHECK_UNREADABLE,
            f"First argument of {tree.name} is not a string literal",
            subject=subject,
            check=check
        )
        return None

    try:
        schema = json.loads(literal.this)
    except json.JSONDecodeError as e:
        diagnostics.warning(
            JSON_SCHEMA_INVALID,
            f"Embedded JSON schema is not valid JSON: {e.msg}",
            subject=subject
        )
        return None

    if not isinstance(schema, dict):
        diagnostics.warning(
            JSON_SCHEMA_INVALID,
            "Embedded JSON schema is not an object",
            subject=subject
        )
        return None

    return schema


class JsonSchemaTypeBuilder:
    """Builds target types from JSON schema documents.

    Nested array elements and object properties are registered in the
    registry under their synthesized names as they are built.
    """

    def __init__(self,
                 schema_check_functions: Sequence[str] = DEFAULT_SCHEMA_CHECK_FUNCTIONS,
                 diagnostics: Optional[DiagnosticCollector] = None):
        self.schema_check_functions = tuple(schema_check_functions)
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()

    def build(self, schema: Any, name: Optional[str], registry: TypeRegistry) -> TargetType:
        """Build the target type of ``schema``, named after ``name``."""
        if not isinstance(schema, dict):
            self.diagnostics.warning(
                JSON_SCHEMA_INVALID,
                f"Schema for {name or '<unnamed>'} is not an object, using a map",
                subject=name
            )
            return json_map()

        schema_type = schema.get('type')

        if schema_type == 'array' and schema.get('items') is not None:
            element_name = f"{name}_element" if name else None
            element = self.build(schema['items'], element_name, registry)
            if element_name:
                registry.register_derived(element_name, element)
            return ListType(element)

        if schema_type == 'object' and isinstance(schema.get('properties'), dict):
            return self._build_object(schema, name, registry)

        if isinstance(schema_type, list):
            return self._build_union(schema, schema_type, name, registry)

        if schema_type in _PRIMITIVES:
            return _PRIMITIVES[schema_type]
        if schema_type == 'null':
            return nullable(DYNAMIC)

        self.diagnostics.info(
            JSON_SCHEMA_INVALID,
            f"Unrecognized schema type {schema_type!r} for {name or '<unnamed>'}, using dynamic",
            subject=name
        )
        return DYNAMIC

    def _build_object(self, schema: Dict[str, Any], name: Optional[str], registry: TypeRegistry) -> TargetType:
        if name is None:
            self.diagnostics.warning(
                JSON_SCHEMA_UNNAMED,
                f"No name provided for object schema {json.dumps(schema)[:200]}, using a map"
            )
            return json_map()

        required = schema.get('required')
        required = set(required) if isinstance(required, list) else set()

        fields = []
        for prop_name, prop_schema in schema['properties'].items():
            prop_type = self.build(prop_schema, prop_name, registry)
            if prop_name not in required:
                prop_type = nullable(prop_type)
            registry.register_derived(prop_name, prop_type)
            fields.append(RecordField(prop_name, prop_type))

        return SchemaDerivedObject(name=name, fields=tuple(fields))

    def _build_union(self, schema: Dict[str, Any], types: list, name: Optional[str],
                     registry: TypeRegistry) -> TargetType:
        # ["<type>", "null"] is the nullable form of <type>
        non_null = [t for t in types if t != 'null']
        if not non_null:
            return nullable(DYNAMIC)
        if len(non_null) == 1:
            inner = self.build(dict(schema, type=non_null[0]), name, registry)
            return nullable(inner) if len(non_null) < len(types) else inner

        self.diagnostics.info(
            JSON_SCHEMA_INVALID,
            f"Union schema type {types!r} for {name or '<unnamed>'}, using dynamic",
            subject=name
        )
        return DYNAMIC

    def build_column(self, column: SchemaColumn, registry: TypeRegistry) -> Optional[TargetType]:
        """
        Derive and register the type of a JSON column from its check constraint.

        Returns:
            The registered type, or None if the column has no usable schema
        """
        if column.format not in JSON_FORMATS or not column.check:
            return None

        schema = extract_json_schema(
            column.check,
            functions=self.schema_check_functions,
            diagnostics=self.diagnostics,
            subject=column.name
        )
        if schema is None:
            return None

        target = self.build(schema, column.name, registry)
        if column.is_nullable:
            target = nullable(target)

        registry.register_column(column.name, target)
        logger.debug(f"Column {column.name} typed from JSON schema as {target.type_name()}")
        return target
