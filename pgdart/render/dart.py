"""Dart source rendering for resolved types, tables and views."""

from typing import Dict, List, Sequence, Tuple
import logging

from ..naming import to_class_name, to_property_name
from ..schema.introspection import SchemaColumn, SchemaTable
from ..schema.registry import TypeRegistry
from ..schema.columns import column_target_type
from ..schema.types import (
    TargetType, EnumType, CompositeType, SchemaDerivedObject, nullable, is_nullable
)

logger = logging.getLogger(__name__)

SELECT = 'Select'
INSERT = 'Insert'
UPDATE = 'Update'

TABLE_OPERATIONS = (SELECT, INSERT, UPDATE)
VIEW_OPERATIONS = (SELECT,)

PRELUDE = """Duration parsePostgresInterval(String interval) {
  // Regular expression to match HH:MM:SS format
  final regex = RegExp(r'^([0-9]{2}):([0-5][0-9]):([0-5][0-9])$');
  final match = regex.firstMatch(interval);

  if (match == null) {
    throw FormatException('Invalid interval format. Expected HH:MM:SS');
  }

  final hours = int.parse(match.group(1)!);
  final minutes = int.parse(match.group(2)!);
  final seconds = int.parse(match.group(3)!);

  return Duration(
    hours: hours,
    minutes: minutes,
    seconds: seconds,
  );
}

abstract class JsonSerializable {
  Map<String, dynamic> toJson();

  // Implementing classes provide a matching factory constructor
  factory JsonSerializable.fromJson(Map<String, dynamic> json) {
    throw UnimplementedError();
  }
}
"""


def dart_string(value: str) -> str:
    """Quote ``value`` as a single-quoted Dart string literal."""
    escaped = (
        value.replace('\\', '\\\\')
        .replace("'", "\\'")
        .replace('$', '\\$')
        .replace('\n', '\\n')
    )
    return f"'{escaped}'"


def _parameters(entries: Sequence[str], indent: str = '    ') -> str:
    """Render a named parameter list, or ``()`` when there are no entries."""
    if not entries:
        return '()'
    body = ','.join(f"\n{indent}{entry}" for entry in entries)
    return f"({{{body}\n{indent[:-2]}}})"


def _arguments(entries: Sequence[str], indent: str = '    ') -> str:
    """Render a call's argument list."""
    if not entries:
        return '()'
    body = ','.join(f"\n{indent}{entry}" for entry in entries)
    return f"({body}\n{indent[:-2]})"


class RecordRenderer:
    """Renders the shared parts of a JSON serializable Dart class.

    ``members`` pairs the JSON key of each member with its declared type.
    """

    def __init__(self, class_name: str, members: List[Tuple[str, TargetType]]):
        self.class_name = class_name
        self.members = members

    def fields(self) -> List[str]:
        return [f"  final {t.type_name()} {to_property_name(key)};" for key, t in self.members]

    def constructor(self) -> str:
        entries = [
            f"{'' if is_nullable(t) else 'required '}this.{to_property_name(key)}"
            for key, t in self.members
        ]
        return f"  const {self.class_name}{_parameters(entries)};"

    def generate_map(self) -> str:
        params = [f"{nullable(t).type_name()} {to_property_name(key)}" for key, t in self.members]
        entries = ','.join(
            f"\n    if ({to_property_name(key)} != null) {dart_string(key)}: {t.encode_expr(to_property_name(key))}"
            for key, t in self.members
        )
        closing = '\n  ' if entries else ''
        return f"  static Map<String, dynamic> _generateMap{_parameters(params)} => {{{entries}{closing}}};"

    def to_json(self) -> str:
        args = [f"{to_property_name(key)}: {to_property_name(key)}" for key, _ in self.members]
        return f"  @override\n  Map<String, dynamic> toJson() => _generateMap{_arguments(args)};"

    def from_json(self) -> str:
        args = [
            f"{to_property_name(key)}: {t.decode_expr(f'jsonObject[{dart_string(key)}]')}"
            for key, t in self.members
        ]
        return (
            f"  @override\n"
            f"  factory {self.class_name}.fromJson(Map<String, dynamic> jsonObject) {{\n"
            f"    return {self.class_name}{_arguments(args, '      ')};\n"
            f"  }}"
        )

    def copy_with(self) -> str:
        params = [f"{nullable(t).type_name()} {to_property_name(key)}" for key, t in self.members]
        args = [
            f"{to_property_name(key)}: {to_property_name(key)} ?? this.{to_property_name(key)}"
            for key, _ in self.members
        ]
        return (
            f"  {self.class_name} copyWith{_parameters(params)} {{\n"
            f"    return {self.class_name}{_arguments(args, '      ')};\n"
            f"  }}"
        )

    def render(self, header: Sequence[str] = (), extra: Sequence[str] = ()) -> str:
        lines = [f"class {self.class_name} implements JsonSerializable {{"]
        lines.extend(header)
        lines.extend(self.fields())
        for section in (self.constructor(), self.generate_map(), self.to_json(),
                        self.from_json(), self.copy_with(), *extra):
            lines.append('')
            lines.append(section)
        lines.append('}')
        return '\n'.join(lines)


class DartRenderer:
    """Renders Dart declarations from a filled type registry."""

    def __init__(self, registry: TypeRegistry):
        self.registry = registry

    def render(self,
               declarables: Sequence[TargetType],
               tables: Sequence[SchemaTable],
               views: Sequence[SchemaTable],
               columns_by_table: Dict[int, List[SchemaColumn]]) -> str:
        """Render the complete Dart source file."""
        sections = [PRELUDE]
        sections.extend(self.render_declaration(t) for t in declarables)
        sections.extend(
            self.render_row_class(table, columns_by_table.get(table.id, []), TABLE_OPERATIONS)
            for table in tables
        )
        sections.extend(
            self.render_row_class(view, columns_by_table.get(view.id, []), VIEW_OPERATIONS)
            for view in views
        )
        logger.debug(
            f"Rendered {len(declarables)} declarations, {len(tables)} tables, {len(views)} views"
        )
        return '\n\n'.join(sections) + '\n'

    def render_declaration(self, target: TargetType) -> str:
        if isinstance(target, EnumType):
            return self.render_enum(target)
        if isinstance(target, CompositeType):
            return self.render_composite(target)
        if isinstance(target, SchemaDerivedObject):
            return self.render_schema_object(target)
        raise TypeError(f"{type(target).__name__} has no declaration")

    def render_enum(self, enum: EnumType) -> str:
        name = enum.class_name
        members = ',\n'.join(f"  {to_property_name(v)}" for v in enum.values)
        to_json_cases = '\n'.join(
            f"      case {name}.{to_property_name(v)}:\n        return {dart_string(v)};"
            for v in enum.values
        )
        from_json_cases = '\n'.join(
            f"      case {dart_string(v)}:\n        return {name}.{to_property_name(v)};"
            for v in enum.values
        )

        lines = [
            f"enum {name} {{",
            f"{members};",
            "",
            "  String toJson() {",
            "    switch (this) {",
            to_json_cases,
            "    }",
            "  }",
            "",
            f"  factory {name}.fromJson(String name) {{",
            "    switch (name) {",
            from_json_cases,
            "    }",
            "    throw ArgumentError.value(name, \"name\", \"No enum value with that name\");",
            "  }",
        ]
        if enum.translations:
            lines.extend(["", *self._render_translations(enum)])
        lines.append("}")
        return '\n'.join(lines)

    @staticmethod
    def _render_translations(enum: EnumType) -> List[str]:
        lines = ["  static const Map<String, Map<String, String>> translations = {"]
        for locale, labels in enum.translations.items():
            lines.append(f"    {dart_string(locale)}: {{")
            for value in enum.values:
                if value in labels:
                    lines.append(f"      {dart_string(value)}: {dart_string(labels[value])},")
            lines.append("    },")
        lines.extend([
            "  };",
            "",
            "  String? label(String locale) => translations[locale]?[toJson()];",
        ])
        return lines

    def render_composite(self, composite: CompositeType) -> str:
        # Composite attributes are always nullable in Postgres
        members = [(f.name, nullable(f.type)) for f in composite.fields]
        return RecordRenderer(composite.class_name, members).render()

    def render_schema_object(self, record: SchemaDerivedObject) -> str:
        members = [(f.name, f.type) for f in record.fields]
        return RecordRenderer(record.class_name, members).render()

    def render_row_class(self,
                         relation: SchemaTable,
                         columns: List[SchemaColumn],
                         operations: Sequence[str]) -> str:
        """Render the row class of a table or view."""
        class_name = f"{to_class_name(relation.name)}Row"
        members = [(c.name, column_target_type(c, self.registry)) for c in columns]
        record = RecordRenderer(class_name, members)

        extra = []
        if INSERT in operations:
            extra.append(self._render_for_insert(columns))

        header = [f"  static const tableName = {dart_string(relation.name)};", ""]
        return record.render(header=header, extra=extra)

    def _render_for_insert(self, columns: List[SchemaColumn]) -> str:
        params = []
        for column in columns:
            target = column_target_type(column, self.registry, for_insert=True)
            required = '' if is_nullable(target) else 'required '
            params.append(f"{required}{target.type_name()} {to_property_name(column.name)}")
        args = [f"{to_property_name(c.name)}: {to_property_name(c.name)}" for c in columns]
        return f"  static Map<String, dynamic> forInsert{_parameters(params)} => _generateMap{_arguments(args)};"
