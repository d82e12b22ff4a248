"""Tests for the pgdart command line interface."""

import json

import pytest
from click.testing import CliRunner

from pgdart.cli import cli
from example_schemas import CYCLIC_METADATA


@pytest.fixture
def runner():
    return CliRunner()


class TestGenerateCommand:
    """Test the generate command."""

    def test_generate_to_stdout(self, runner, metadata_file):
        """Test the Dart source is printed when no output file is given."""
        result = runner.invoke(cli, ['generate', str(metadata_file), '--diagnostics', 'none'])

        assert result.exit_code == 0
        assert result.output.startswith('Duration parsePostgresInterval(String interval) {')
        assert 'class TasksRow implements JsonSerializable {' in result.output

    def test_generate_to_file(self, runner, metadata_file, tmp_path):
        """Test writing the Dart source to a file."""
        target = tmp_path / 'models.dart'
        result = runner.invoke(cli, ['generate', str(metadata_file), '-o', str(target)])

        assert result.exit_code == 0
        assert 'Wrote 7 declarations' in result.output
        assert 'enum TaskStatus {' in target.read_text()

    def test_diagnostics_reported(self, runner, metadata_file, tmp_path):
        """Test diagnostics are reported after generating."""
        target = tmp_path / 'models.dart'
        result = runner.invoke(cli, ['generate', str(metadata_file), '-o', str(target)])

        assert '=== pgdart Diagnostics ===' in result.output
        assert 'type_not_found (geom)' in result.output

    def test_schema_option(self, runner, metadata_file, tmp_path):
        """Test rendering only tables of a selected schema."""
        target = tmp_path / 'models.dart'
        result = runner.invoke(cli, ['generate', str(metadata_file), '-o', str(target), '--schema', 'audit'])

        assert result.exit_code == 0
        assert 'TasksRow' not in target.read_text()

    def test_cycle_aborts(self, runner, tmp_path):
        """Test circular composites abort with an error message."""
        path = tmp_path / 'cyclic.json'
        path.write_text(json.dumps(CYCLIC_METADATA))

        result = runner.invoke(cli, ['generate', str(path)])

        assert result.exit_code == 1
        assert 'CIRCULAR_DEPENDENCY' in result.output

    def test_invalid_metadata_aborts(self, runner, tmp_path):
        """Test unreadable snapshots abort with suggestions."""
        path = tmp_path / 'broken.json'
        path.write_text('{"columns": [{"name": "x"}]}')

        result = runner.invoke(cli, ['generate', str(path)])

        assert result.exit_code == 1
        assert 'METADATA_ERROR' in result.output
        assert 'Suggestions' in result.output


class TestListingCommands:
    """Test the types and tables commands."""

    def test_types(self, runner, metadata_file):
        """Test listing resolved types."""
        result = runner.invoke(cli, ['types', str(metadata_file)])

        assert result.exit_code == 0
        assert 'task_status (50001) -> TaskStatus' in result.output
        assert '_task_status (50002) -> List<TaskStatus>' in result.output
        assert 'column settings -> Settings?' in result.output
        assert 'column preferences -> Preferences' in result.output

    def test_tables(self, runner, metadata_file):
        """Test listing tables and views with column types."""
        result = runner.invoke(cli, ['tables', str(metadata_file)])

        assert result.exit_code == 0
        assert '  - public.tasks (8 columns)' in result.output
        assert '      estimate: Duration?' in result.output
        assert '  - public.open_tasks (3 columns)' in result.output
        assert 'log_entries' not in result.output

    def test_types_json(self, runner, metadata_file):
        """Test the JSON listing of resolved types."""
        result = runner.invoke(cli, ['types', str(metadata_file), '--json'])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        status = next(t for t in payload['types'] if t['name'] == 'task_status')
        assert status == {"name": "task_status", "id": 50001, "kind": "EnumType",
                          "dart_type": "TaskStatus", "nullable": False}
        assert payload['columns']['settings']['kind'] == 'SchemaDerivedObject'
        assert payload['columns']['settings']['nullable'] is True
