"""
Cross-dialect translation: type mapping, literal encoding, DDL rendering
and the engine that ties them to a catalog.
"""

from schemashift.translation.dialects import (
    DialectAdapter,
    MySQLToOracleAdapter,
    OracleToMySQLAdapter,
    adapter_for,
)
from schemashift.translation.engine import InsertStream, TranslationEngine
from schemashift.translation.types import TypeMappingTable, parse_numeric_spec

__all__ = [
    "DialectAdapter",
    "InsertStream",
    "MySQLToOracleAdapter",
    "OracleToMySQLAdapter",
    "TranslationEngine",
    "TypeMappingTable",
    "adapter_for",
    "parse_numeric_spec",
]
