"""Dependency ordering and closure of schema types."""

from typing import Dict, List, Optional, Set
import logging

from .introspection import SchemaType, SchemaColumn, is_array_name, base_type_name
from ..diagnostics.collector import DiagnosticCollector, TYPE_NOT_FOUND
from ..exceptions import CircularDependencyError

logger = logging.getLogger(__name__)

_UNVISITED = 0
_IN_PROGRESS = 1
_DONE = 2


def type_dependencies(types: List[SchemaType]) -> Dict[int, List[int]]:
    """Build the edges of the type graph.

    A type depends on the type of each of its attributes, except itself.
    An array type also depends on its element type when that type is present.
    """
    ids_by_name = {t.name: t.id for t in types}
    dependencies: Dict[int, List[int]] = {}

    for schema_type in types:
        deps = [attr.type_id for attr in schema_type.attributes if attr.type_id != schema_type.id]
        if schema_type.is_array:
            base_id = ids_by_name.get(schema_type.base_name)
            if base_id is not None and base_id != schema_type.id:
                deps.append(base_id)
        # Keep first occurrence order, drop duplicates
        dependencies[schema_type.id] = list(dict.fromkeys(deps))

    return dependencies


def sort_types_by_dependency(types: List[SchemaType]) -> List[SchemaType]:
    """
    Sort types so that every type comes after the types it depends on.

    Array types are grouped at the end, keeping their relative order, unless a
    non-array type in the input uses them as an attribute type; those stay
    where the depth-first order put them.

    Args:
        types: Types to sort

    Returns:
        The same types in declaration order

    Raises:
        CircularDependencyError: If the attribute references form a cycle
    """
    nodes: Dict[int, SchemaType] = {t.id: t for t in types}
    dependencies = type_dependencies(types)
    state: Dict[int, int] = {}
    ordered: List[SchemaType] = []

    def visit(type_id: int) -> None:
        node = nodes.get(type_id)
        if node is None:
            return

        mark = state.get(type_id, _UNVISITED)
        if mark == _IN_PROGRESS:
            raise CircularDependencyError(node.name)
        if mark == _DONE:
            return

        state[type_id] = _IN_PROGRESS
        for dep_id in dependencies[type_id]:
            visit(dep_id)
        state[type_id] = _DONE
        ordered.append(node)

    for type_id in nodes:
        visit(type_id)

    pinned: Set[int] = set()
    for schema_type in ordered:
        if not schema_type.is_array:
            pinned.update(dependencies[schema_type.id])

    head = [t for t in ordered if not t.is_array or t.id in pinned]
    tail = [t for t in ordered if t.is_array and t.id not in pinned]
    return head + tail


def collect_required_types(
    all_types: List[SchemaType],
    columns: List[SchemaColumn],
    diagnostics: Optional[DiagnosticCollector] = None
) -> List[SchemaType]:
    """
    Find the smallest set of types needed to describe ``columns``.

    Starts from the column formats (plus the element type of array formats)
    and follows attribute and array-element references transitively.

    Args:
        all_types: Complete type catalog
        columns: Columns that will be rendered
        diagnostics: Collector for columns whose format is not in the catalog

    Returns:
        Required types in dependency order
    """
    if diagnostics is None:
        diagnostics = DiagnosticCollector()

    types_by_id = {t.id: t for t in all_types}
    types_by_name = {t.name: t for t in all_types}

    direct_ids: List[int] = []
    for column in columns:
        schema_type = types_by_name.get(column.format)
        if schema_type:
            direct_ids.append(schema_type.id)
        else:
            diagnostics.warning(
                TYPE_NOT_FOUND,
                f"Type not found for column {column.name}: format: {column.format}\tdata_type: {column.data_type}",
                subject=column.name,
                table=column.table,
                format=column.format
            )

        if is_array_name(column.format):
            element_type = types_by_name.get(base_type_name(column.format))
            if element_type:
                direct_ids.append(element_type.id)

    required: Dict[int, SchemaType] = {}

    def collect(type_id: int) -> None:
        if type_id in required:
            return
        schema_type = types_by_id.get(type_id)
        if schema_type is None:
            return

        required[type_id] = schema_type
        for attr in schema_type.attributes:
            collect(attr.type_id)
        if schema_type.is_array:
            element_type = types_by_name.get(schema_type.base_name)
            if element_type:
                collect(element_type.id)

    for type_id in direct_ids:
        collect(type_id)

    logger.debug(f"Collected {len(required)} required types from {len(columns)} columns")
    return sort_types_by_dependency(list(required.values()))
