"""Schema metadata and type resolution."""

from .introspection import (
    MetadataLoader, GeneratorMetadata, SchemaType, SchemaColumn, SchemaTable,
    SchemaInfo, TypeAttribute, load_metadata
)
from .registry import TypeRegistry
from .graph import sort_types_by_dependency, collect_required_types
from .mapper import TypeMapper
from .jsonschema import JsonSchemaTypeBuilder, extract_json_schema
from .columns import column_target_type

__all__ = [
    "MetadataLoader",
    "GeneratorMetadata",
    "SchemaType",
    "SchemaColumn",
    "SchemaTable",
    "SchemaInfo",
    "TypeAttribute",
    "load_metadata",
    "TypeRegistry",
    "sort_types_by_dependency",
    "collect_required_types",
    "TypeMapper",
    "JsonSchemaTypeBuilder",
    "extract_json_schema",
    "column_target_type",
]
