"""Shared fixtures for pgdart tests."""

import copy
import json

import pytest

from pgdart.schema import MetadataLoader
from example_schemas import TASK_TRACKER_METADATA, CYCLIC_METADATA


@pytest.fixture
def task_tracker_raw():
    """Raw task tracker snapshot, safe to modify."""
    return copy.deepcopy(TASK_TRACKER_METADATA)


@pytest.fixture
def task_tracker(task_tracker_raw):
    """Parsed task tracker snapshot."""
    return MetadataLoader().parse(task_tracker_raw)


@pytest.fixture
def cyclic_metadata():
    return MetadataLoader().parse(copy.deepcopy(CYCLIC_METADATA))


@pytest.fixture
def metadata_file(tmp_path, task_tracker_raw):
    """Task tracker snapshot written to a JSON file."""
    path = tmp_path / "metadata.json"
    path.write_text(json.dumps(task_tracker_raw))
    return path
