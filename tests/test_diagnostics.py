"""Tests for diagnostics collection and reporting."""

import json
import logging

import pytest

from pgdart.diagnostics import DiagnosticCollector, ConsoleReporter, JsonReporter, create_reporter
from pgdart.diagnostics.collector import TYPE_NOT_FOUND, NO_MATCHING_TYPE


@pytest.fixture
def collector():
    collector = DiagnosticCollector()
    collector.warning(TYPE_NOT_FOUND, "Type not found for column geom", subject='geom', format='geometry')
    collector.warning(TYPE_NOT_FOUND, "Type not found for column area", subject='area')
    collector.info(NO_MATCHING_TYPE, "Could not find matching type for: tsvector", subject='tsvector')
    return collector


class TestDiagnosticCollector:
    """Test recording diagnostics."""

    def test_record(self, collector):
        """Test diagnostics keep their fields and order."""
        assert len(collector) == 3
        first = collector.diagnostics[0]
        assert first.code == TYPE_NOT_FOUND
        assert first.level == 'warning'
        assert first.context == {'format': 'geometry'}
        assert collector.diagnostics[2].level == 'info'

    def test_counts(self, collector):
        """Test counting per code."""
        assert collector.counts() == {TYPE_NOT_FOUND: 2, NO_MATCHING_TYPE: 1}

    def test_diagnostics_are_a_copy(self, collector):
        """Test callers cannot change the recorded list."""
        collector.diagnostics.clear()
        assert len(collector) == 3

    def test_log_all(self, collector, caplog):
        """Test diagnostics can be replayed through logging."""
        with caplog.at_level(logging.INFO):
            collector.log_all(logging.getLogger('pgdart.test'))

        levels = [record.levelno for record in caplog.records if record.name == 'pgdart.test']
        assert levels == [logging.WARNING, logging.WARNING, logging.INFO]


class TestReporters:
    """Test report formats."""

    def test_console_report(self, collector):
        """Test the human readable report."""
        report = ConsoleReporter(collector).report()

        assert 'Total: 3' in report
        assert f'  {TYPE_NOT_FOUND}: 2' in report
        assert f'[warning] {TYPE_NOT_FOUND} (geom): Type not found for column geom' in report

    def test_console_report_empty(self):
        """Test a run without diagnostics."""
        assert 'No diagnostics' in ConsoleReporter(DiagnosticCollector()).report()

    def test_json_report(self, collector):
        """Test the machine readable report."""
        payload = json.loads(JsonReporter(collector).report())

        assert payload['total'] == 3
        assert payload['counts'][TYPE_NOT_FOUND] == 2
        assert payload['diagnostics'][0]['subject'] == 'geom'

    def test_create_reporter(self, collector):
        """Test reporter selection by format."""
        assert isinstance(create_reporter(collector, 'console'), ConsoleReporter)
        assert isinstance(create_reporter(collector, 'json'), JsonReporter)
        with pytest.raises(ValueError):
            create_reporter(collector, 'xml')
