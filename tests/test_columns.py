"""Tests for column nullability and insert variants."""

import pytest

from pgdart.schema import SchemaColumn, SchemaType, TypeRegistry, column_target_type
from pgdart.schema.columns import base_column_type, may_be_omitted_on_insert
from pgdart.schema.types import (
    ScalarType, SchemaDerivedObject, NullableType, STRING, DYNAMIC, json_map, nullable
)


@pytest.fixture
def registry():
    registry = TypeRegistry()
    registry.register_type(SchemaType(20, 'int8'), ScalarType('int'))
    registry.register_type(SchemaType(25, 'text'), STRING)
    registry.register_type(SchemaType(3802, 'jsonb'), json_map())
    return registry


def column(name='value', format='int8', **kwargs):
    kwargs.setdefault('is_nullable', False)
    return SchemaColumn(table_id=1, name=name, format=format, **kwargs)


class TestColumnTargetType:
    """Test column level type derivation."""

    def test_not_null_column(self, registry):
        """Test a required column keeps its registered type."""
        assert column_target_type(column(), registry) == ScalarType('int')

    def test_nullable_column(self, registry):
        """Test nullable columns are wrapped."""
        assert column_target_type(column(is_nullable=True), registry) == nullable(ScalarType('int'))

    def test_default_value_only_affects_insert(self, registry):
        """Test a defaulted not-null column is optional on insert only."""
        defaulted = column(format='text', default_value="'draft'::text")

        base = column_target_type(defaulted, registry)
        for_insert = column_target_type(defaulted, registry, for_insert=True)

        assert not isinstance(base, NullableType)
        assert isinstance(for_insert, NullableType)
        assert for_insert.inner is base

    def test_identity_and_generated_columns(self, registry):
        """Test server populated columns are optional on insert."""
        identity = column(name='id', is_identity=True)
        generated = column(name='total', is_generated=True)

        assert column_target_type(identity, registry).type_name() == 'int'
        assert column_target_type(identity, registry, for_insert=True).type_name() == 'int?'
        assert column_target_type(generated, registry, for_insert=True).type_name() == 'int?'

    def test_insert_variant_does_not_modify_registry(self, registry):
        """Test deriving the insert variant leaves the registry entry alone."""
        column_target_type(column(default_value='0'), registry, for_insert=True)
        assert registry.get('int8') == ScalarType('int')

    def test_nullable_with_default_stays_single_wrapped(self, registry):
        """Test nullability reasons do not stack."""
        target = column_target_type(column(is_nullable=True, default_value='0'), registry, for_insert=True)
        assert target.type_name() == 'int?'

    def test_unknown_format_is_dynamic(self, registry):
        """Test formats missing from the registry fall back to dynamic."""
        assert base_column_type(column(format='geometry'), registry) == DYNAMIC

    def test_json_override(self, registry):
        """Test a JSON-schema override wins for json columns only."""
        record = SchemaDerivedObject('settings')
        registry.register_column('settings', record)

        assert base_column_type(column(name='settings', format='jsonb'), registry) == record
        assert base_column_type(column(name='settings', format='text'), registry) == STRING
        assert base_column_type(column(name='other', format='jsonb'), registry) == json_map()

    def test_may_be_omitted_on_insert(self):
        """Test which columns the server can fill in."""
        assert may_be_omitted_on_insert(column(default_value='now()'))
        assert may_be_omitted_on_insert(column(is_identity=True))
        assert may_be_omitted_on_insert(column(is_generated=True))
        assert not may_be_omitted_on_insert(column(is_nullable=True))
