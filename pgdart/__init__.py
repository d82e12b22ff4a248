"""pgdart - Dart data models from Postgres schema metadata."""

from .core import DartGenerator, Resolution
from .schema import load_metadata

__version__ = "0.1.0"
__all__ = ["DartGenerator", "Resolution", "load_metadata"]
