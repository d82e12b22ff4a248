"""Core pgdart implementation."""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from .schema import (
    GeneratorMetadata, SchemaType, SchemaTable, TypeRegistry, TypeMapper,
    JsonSchemaTypeBuilder, collect_required_types
)
from .schema.mapper import DEFAULT_LOCALES
from .schema.jsonschema import DEFAULT_SCHEMA_CHECK_FUNCTIONS
from .schema.types import TargetType, EnumType, CompositeType
from .diagnostics import DiagnosticCollector
from .render import DartRenderer

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Result of one resolution pass over a metadata snapshot."""
    registry: TypeRegistry
    required_types: List[SchemaType]
    declarables: List[TargetType]
    diagnostics: DiagnosticCollector


class DartGenerator:
    """Generates Dart data models from Postgres schema metadata."""

    def __init__(self,
                 supported_locales: Sequence[str] = DEFAULT_LOCALES,
                 schema_check_functions: Sequence[str] = DEFAULT_SCHEMA_CHECK_FUNCTIONS,
                 include_schemas: Optional[Sequence[str]] = None):
        """
        Initialize the generator.

        Args:
            supported_locales: Locales every enum translation table must cover
            schema_check_functions: Check-constraint functions whose first
                argument is a JSON schema for the column
            include_schemas: Only render tables and views of these schemas
                (None renders every schema listed in the metadata)
        """
        self.supported_locales = tuple(supported_locales)
        self.schema_check_functions = tuple(schema_check_functions)
        self.include_schemas = tuple(include_schemas) if include_schemas else None

    def resolve(self, metadata: GeneratorMetadata) -> Resolution:
        """
        Resolve every type the metadata's columns need.

        Catalog types are mapped in dependency order, then JSON-schema typed
        columns are derived and registered on top.

        Raises:
            CircularDependencyError: If composite types reference each other
        """
        diagnostics = DiagnosticCollector()
        registry = TypeRegistry()
        mapper = TypeMapper(self.supported_locales, diagnostics)
        json_builder = JsonSchemaTypeBuilder(self.schema_check_functions, diagnostics)

        required_types = collect_required_types(metadata.types, metadata.columns, diagnostics)

        declarables: List[TargetType] = []
        for schema_type in required_types:
            target = mapper.map_type(schema_type, registry)
            registry.register_type(schema_type, target)
            if isinstance(target, (EnumType, CompositeType)):
                declarables.append(target)

        for column in metadata.columns:
            json_builder.build_column(column, registry)

        declarables.extend(registry.schema_derived_objects(diagnostics))

        logger.info(
            f"Resolved {len(required_types)} types, {len(declarables)} declarations, "
            f"{len(diagnostics)} diagnostics"
        )
        return Resolution(
            registry=registry,
            required_types=required_types,
            declarables=declarables,
            diagnostics=diagnostics
        )

    def generate(self, metadata: GeneratorMetadata, resolution: Optional[Resolution] = None) -> str:
        """Render Dart source for the metadata's tables and views."""
        if resolution is None:
            resolution = self.resolve(metadata)

        renderer = DartRenderer(resolution.registry)
        return renderer.render(
            declarables=resolution.declarables,
            tables=self.selected_tables(metadata),
            views=self.selected_views(metadata),
            columns_by_table=metadata.columns_by_table()
        )

    def selected_tables(self, metadata: GeneratorMetadata) -> List[SchemaTable]:
        return self._select(metadata, metadata.tables)

    def selected_views(self, metadata: GeneratorMetadata) -> List[SchemaTable]:
        return self._select(metadata, metadata.views)

    def _select(self, metadata: GeneratorMetadata, relations: List[SchemaTable]) -> List[SchemaTable]:
        schema_names = set(metadata.schema_names())
        if self.include_schemas is not None:
            schema_names &= set(self.include_schemas)
        return [relation for relation in relations if relation.schema in schema_names]
