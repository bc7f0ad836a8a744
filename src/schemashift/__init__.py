"""
Schemashift - MySQL/Oracle Schema and Data Translation

Reads a relational database's catalog and either exports it as scripts in
its own dialect or translates it into the other engine's dialect.

Features:
- Type mapping between MySQL and Oracle with configurable overrides
- Dialect-correct literal encoding for INSERT scripts
- Lazy, single-pass data conversion over forward-only cursors
- Offline YAML catalogs for working without a database
- Manual-review report for types that need a human decision
"""

__version__ = "0.1.0"

from schemashift.errors import (
    ConfigError,
    ConversionAborted,
    EncodingFailure,
    MetadataUnavailable,
    SchemaShiftError,
)
from schemashift.models import (
    ColumnDescriptor,
    Diagnostic,
    DiagnosticKind,
    Dialect,
    RowValue,
    TableSchema,
    TargetColumnSpec,
    ValueKind,
)
from schemashift.metadata import (
    MySQLCatalog,
    OfflineCatalog,
    OracleCatalog,
)
from schemashift.translation import (
    InsertStream,
    TranslationEngine,
    TypeMappingTable,
    adapter_for,
)
from schemashift.export import SchemaExporter
from schemashift.output import ScriptWriter

__all__ = [
    # Core models
    "ColumnDescriptor",
    "Diagnostic",
    "DiagnosticKind",
    "Dialect",
    "RowValue",
    "TableSchema",
    "TargetColumnSpec",
    "ValueKind",
    # Errors
    "ConfigError",
    "ConversionAborted",
    "EncodingFailure",
    "MetadataUnavailable",
    "SchemaShiftError",
    # Catalogs
    "MySQLCatalog",
    "OfflineCatalog",
    "OracleCatalog",
    # Translation
    "InsertStream",
    "TranslationEngine",
    "TypeMappingTable",
    "adapter_for",
    # Export and output
    "SchemaExporter",
    "ScriptWriter",
]
