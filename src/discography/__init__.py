"""Discography Publisher

Builds a musician's discography from one declarative document: a validated
content graph of albums, songs and assists, synchronized lyrics, and tagged
audio downloads.
"""

__version__ = "0.1.0"

from .exceptions import (
    DiscographyError,
    SchemaError,
    FormatError,
    IntegrityError,
    MissingSourceError,
    ValidationError,
    ExternalToolError,
    ConfigurationError,
)
from .models.config import WorkspaceConfig, load_config
from .domain.catalog import Catalog, build_catalog, load_catalog

__all__ = [
    'DiscographyError',
    'SchemaError',
    'FormatError',
    'IntegrityError',
    'MissingSourceError',
    'ValidationError',
    'ExternalToolError',
    'ConfigurationError',
    'WorkspaceConfig',
    'load_config',
    'Catalog',
    'build_catalog',
    'load_catalog',
]
