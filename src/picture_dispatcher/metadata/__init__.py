"""Metadata extraction for picture-dispatcher.

- MetadataExtractor: Protocol defining the extraction interface
- ExifToolExtractor: Production implementation using exiftool
- StubExtractor: Stub implementation for testing
- MetadataExtractionError: Exception for extraction failures
"""

from picture_dispatcher.metadata.exif import ExifToolExtractor, resolve_exiftool_path
from picture_dispatcher.metadata.interface import (
    ExtractorUnavailableError,
    MetadataExtractionError,
    MetadataExtractor,
)
from picture_dispatcher.metadata.stub import StubExtractor, StubExtractorFactory

__all__ = [
    "ExifToolExtractor",
    "ExtractorUnavailableError",
    "MetadataExtractionError",
    "MetadataExtractor",
    "StubExtractor",
    "StubExtractorFactory",
    "resolve_exiftool_path",
]
