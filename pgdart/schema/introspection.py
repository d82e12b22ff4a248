"""Schema metadata records and the snapshot loader."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Optional, Union
import json
import logging

from ..exceptions import MetadataError

logger = logging.getLogger(__name__)

# Postgres names array types after their element type with this prefix
ARRAY_PREFIX = '_'


@dataclass
class TypeAttribute:
    """A single attribute of a composite type."""
    name: str
    type_id: int


@dataclass
class SchemaType:
    """Information about a type in the database catalog."""
    id: int
    name: str
    schema: str = 'public'
    format: str = ''
    enums: List[str] = field(default_factory=list)
    attributes: List[TypeAttribute] = field(default_factory=list)
    comment: Optional[str] = None

    @property
    def is_array(self) -> bool:
        return is_array_name(self.name)

    @property
    def base_name(self) -> str:
        """Element type name for array types, the name itself otherwise."""
        return base_type_name(self.name)


@dataclass
class SchemaColumn:
    """Information about a table or view column."""
    table_id: int
    name: str
    format: str
    data_type: str = ''
    is_nullable: bool = True
    is_generated: bool = False
    is_identity: bool = False
    default_value: Optional[str] = None
    check: Optional[str] = None
    schema: str = 'public'
    table: str = ''
    comment: Optional[str] = None


@dataclass
class SchemaTable:
    """Information about a table or view."""
    id: int
    name: str
    schema: str = 'public'
    comment: Optional[str] = None


@dataclass
class SchemaInfo:
    """A schema selected for generation."""
    id: int
    name: str


@dataclass
class GeneratorMetadata:
    """Complete metadata snapshot consumed by one generation run."""
    schemas: List[SchemaInfo]
    tables: List[SchemaTable]
    views: List[SchemaTable]
    columns: List[SchemaColumn]
    types: List[SchemaType]

    def columns_by_table(self) -> Dict[int, List[SchemaColumn]]:
        """Group columns by table id, each group sorted by column name."""
        grouped: Dict[int, List[SchemaColumn]] = {}
        for column in sorted(self.columns, key=lambda c: c.name):
            grouped.setdefault(column.table_id, []).append(column)
        return grouped

    def schema_names(self) -> List[str]:
        return [schema.name for schema in self.schemas]


def is_array_name(type_name: str) -> bool:
    """Check whether a type name denotes an array type."""
    return type_name.startswith(ARRAY_PREFIX)


def base_type_name(type_name: str) -> str:
    """Strip the array prefix from a type name."""
    return type_name[len(ARRAY_PREFIX):] if is_array_name(type_name) else type_name


class MetadataLoader:
    """Builds metadata records from a JSON snapshot of the schema catalog."""

    def __init__(self, source: Optional[str] = None):
        self.source = source

    def load(self, path: Union[str, Path]) -> GeneratorMetadata:
        """Read and parse a metadata snapshot file."""
        path = Path(path)
        self.source = str(path)
        try:
            raw = json.loads(path.read_text(encoding='utf-8'))
        except OSError as e:
            raise MetadataError(f"Could not read metadata file: {e}", path=self.source) from e
        except json.JSONDecodeError as e:
            raise MetadataError(
                f"Metadata file is not valid JSON: {e.msg} (line {e.lineno})",
                path=self.source
            ) from e

        return self.parse(raw)

    def parse(self, raw: Any) -> GeneratorMetadata:
        """Parse an already decoded snapshot."""
        if not isinstance(raw, dict):
            raise MetadataError("Metadata snapshot must be a JSON object", path=self.source)

        metadata = GeneratorMetadata(
            schemas=[self._parse_schema(r) for r in self._records(raw, 'schemas')],
            tables=[self._parse_table(r, 'tables') for r in self._records(raw, 'tables')],
            views=[self._parse_table(r, 'views') for r in self._records(raw, 'views')],
            columns=[self._parse_column(r) for r in self._records(raw, 'columns')],
            types=[self._parse_type(r) for r in self._records(raw, 'types')],
        )
        logger.debug(
            f"Loaded metadata: {len(metadata.tables)} tables, {len(metadata.views)} views, "
            f"{len(metadata.columns)} columns, {len(metadata.types)} types"
        )
        return metadata

    def _records(self, raw: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        records = raw.get(key, [])
        if not isinstance(records, list):
            raise MetadataError(f"'{key}' must be a list", path=self.source, record=key)
        for record in records:
            if not isinstance(record, dict):
                raise MetadataError(f"Every entry of '{key}' must be an object", path=self.source, record=key)
        return records

    def _require(self, record: Dict[str, Any], kind: str, *keys: str) -> None:
        missing = [key for key in keys if key not in record]
        if missing:
            label = record.get('name', '<unnamed>')
            raise MetadataError(
                f"{kind} '{label}' is missing required fields: {', '.join(missing)}",
                path=self.source,
                record=kind
            )

    def _parse_schema(self, record: Dict[str, Any]) -> SchemaInfo:
        self._require(record, 'schema', 'name')
        return SchemaInfo(id=record.get('id', 0), name=record['name'])

    def _parse_table(self, record: Dict[str, Any], kind: str) -> SchemaTable:
        self._require(record, kind[:-1], 'id', 'name')
        return SchemaTable(
            id=record['id'],
            name=record['name'],
            schema=record.get('schema', 'public'),
            comment=record.get('comment')
        )

    def _parse_column(self, record: Dict[str, Any]) -> SchemaColumn:
        self._require(record, 'column', 'table_id', 'name', 'format')
        return SchemaColumn(
            table_id=record['table_id'],
            name=record['name'],
            format=record['format'],
            data_type=record.get('data_type') or '',
            is_nullable=bool(record.get('is_nullable', True)),
            is_generated=bool(record.get('is_generated', False)),
            is_identity=bool(record.get('is_identity', False)),
            default_value=record.get('default_value'),
            check=record.get('check'),
            schema=record.get('schema', 'public'),
            table=record.get('table', ''),
            comment=record.get('comment')
        )

    def _parse_type(self, record: Dict[str, Any]) -> SchemaType:
        self._require(record, 'type', 'id', 'name')
        attributes = []
        for attr in record.get('attributes') or []:
            self._require(attr, 'attribute', 'name', 'type_id')
            attributes.append(TypeAttribute(name=attr['name'], type_id=attr['type_id']))

        return SchemaType(
            id=record['id'],
            name=record['name'],
            schema=record.get('schema', 'public'),
            format=record.get('format') or '',
            enums=list(record.get('enums') or []),
            attributes=attributes,
            comment=record.get('comment')
        )


def load_metadata(path: Union[str, Path]) -> GeneratorMetadata:
    """Load a metadata snapshot from a JSON file."""
    return MetadataLoader().load(path)
