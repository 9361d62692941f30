"""Extraction engines.

The pipeline talks to engines only through ``ExtractionEngine``. The
filesystem engine is the default implementation used by the CLI.
"""

from .base import ExtractionEngine, NetworkProtocol
from .filesystem import MANIFEST_FILENAME, FilesystemExtractionEngine

__all__ = [
    "ExtractionEngine",
    "FilesystemExtractionEngine",
    "MANIFEST_FILENAME",
    "NetworkProtocol",
]
