"""Tests for metadata records and the snapshot loader."""

import json

import pytest

from pgdart.schema import MetadataLoader, load_metadata, SchemaType, TypeAttribute
from pgdart.schema.introspection import is_array_name, base_type_name
from pgdart.exceptions import MetadataError


class TestSchemaType:
    """Test array naming helpers."""

    def test_array_names(self):
        """Test the array prefix convention."""
        assert is_array_name('_int4')
        assert not is_array_name('int4')
        assert base_type_name('_task_status') == 'task_status'
        assert base_type_name('text') == 'text'

    def test_properties(self):
        """Test derived properties of schema types."""
        array_type = SchemaType(1009, '_text')
        assert array_type.is_array
        assert array_type.base_name == 'text'
        assert not SchemaType(25, 'text').is_array


class TestMetadataLoader:
    """Test parsing metadata snapshots."""

    def test_parse_task_tracker(self, task_tracker):
        """Test every record kind is parsed."""
        assert task_tracker.schema_names() == ['public']
        assert [t.name for t in task_tracker.tables] == ['tasks', 'user_profiles', 'log_entries']
        assert [v.name for v in task_tracker.views] == ['open_tasks']
        assert len(task_tracker.columns) == 17

        contact = next(t for t in task_tracker.types if t.name == 'contact')
        assert contact.attributes == [
            TypeAttribute('name', 25),
            TypeAttribute('address', 50003),
            TypeAttribute('phones', 1009),
        ]

    def test_column_fields(self, task_tracker):
        """Test column flags and defaults."""
        columns = {(c.table, c.name): c for c in task_tracker.columns}

        task_id = columns[('tasks', 'id')]
        assert task_id.is_identity
        assert not task_id.is_nullable
        assert columns[('tasks', 'status')].default_value == "'todo'::task_status"
        assert columns[('tasks', 'settings')].check.startswith('jsonb_matches_schema(')

    def test_columns_by_table_sorted(self, task_tracker):
        """Test columns are grouped per table and sorted by name."""
        grouped = task_tracker.columns_by_table()
        assert [c.name for c in grouped[200]] == ['id', 'status', 'title']

    def test_minimal_records(self):
        """Test optional fields get defaults."""
        metadata = MetadataLoader().parse({
            "types": [{"id": 1, "name": "mood", "enums": None, "attributes": None}],
            "columns": [{"table_id": 1, "name": "m", "format": "mood"}],
        })

        assert metadata.tables == []
        assert metadata.types[0].enums == []
        assert metadata.types[0].attributes == []
        column = metadata.columns[0]
        assert column.is_nullable
        assert column.check is None

    def test_missing_required_field(self):
        """Test records without required fields are rejected."""
        with pytest.raises(MetadataError) as exc_info:
            MetadataLoader().parse({"columns": [{"table_id": 1, "name": "broken"}]})

        assert 'format' in exc_info.value.message
        assert exc_info.value.context['record'] == 'column'

    def test_wrong_shapes(self):
        """Test non-object snapshots and non-list sections."""
        with pytest.raises(MetadataError):
            MetadataLoader().parse([])
        with pytest.raises(MetadataError):
            MetadataLoader().parse({"types": {"id": 1}})
        with pytest.raises(MetadataError):
            MetadataLoader().parse({"types": ["int4"]})


class TestLoadMetadata:
    """Test loading snapshots from files."""

    def test_load_file(self, metadata_file):
        """Test loading a snapshot file."""
        metadata = load_metadata(metadata_file)
        assert len(metadata.types) == 16

    def test_invalid_json(self, tmp_path):
        """Test unreadable JSON reports the file."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(MetadataError) as exc_info:
            load_metadata(path)

        assert exc_info.value.context['path'] == str(path)
        assert 'not valid JSON' in exc_info.value.message

    def test_missing_file(self, tmp_path):
        """Test a missing file is a metadata error."""
        with pytest.raises(MetadataError):
            load_metadata(tmp_path / "missing.json")

    def test_roundtrip_through_json(self, tmp_path, task_tracker_raw):
        """Test the loader accepts its own input format written to disk."""
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(task_tracker_raw, indent=2))
        assert load_metadata(path).schema_names() == ['public']
