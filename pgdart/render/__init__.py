"""Dart source rendering."""

from .dart import DartRenderer, RecordRenderer, dart_string

__all__ = [
    "DartRenderer",
    "RecordRenderer",
    "dart_string",
]
