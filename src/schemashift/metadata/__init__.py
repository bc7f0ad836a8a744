"""
Catalog readers for the supported database engines.
"""

from schemashift.metadata.base import CatalogReader, ConnectionInfo, RowCursor, validate_identifier
from schemashift.metadata.mysql import MySQLCatalog
from schemashift.metadata.offline import OfflineCatalog
from schemashift.metadata.oracle import OracleCatalog
from schemashift.models import Dialect

CATALOGS = {
    Dialect.MYSQL: MySQLCatalog,
    Dialect.ORACLE: OracleCatalog,
}


def open_catalog(dialect, connection_string: str, arraysize: int = 500) -> CatalogReader:
    """Create the live catalog reader for a dialect (not yet connected)."""
    return CATALOGS[Dialect.parse(dialect)](connection_string, arraysize=arraysize)


__all__ = [
    "CatalogReader",
    "ConnectionInfo",
    "MySQLCatalog",
    "OfflineCatalog",
    "OracleCatalog",
    "RowCursor",
    "open_catalog",
    "validate_identifier",
]
