"""
Native-dialect export.

Dumps a catalog in its own dialect: the table list, CREATE TABLE scripts
and INSERT scripts whose literals are encoded for the source engine itself.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from schemashift.errors import MetadataUnavailable
from schemashift.metadata.base import CatalogReader
from schemashift.models import ColumnDescriptor, Dialect, RowValue
from schemashift.translation.ddl import render_native_table
from schemashift.translation.engine import InsertStream
from schemashift.translation.literals import encode
from schemashift.translation.types import normalize_type_name, resolve_numeric_spec

logger = logging.getLogger(__name__)

TABLE_CASES = ("upper", "lower")


def native_type_sql(column: ColumnDescriptor, dialect: Dialect) -> str:
    """
    Render a column's type in its own dialect.

    MySQL columns use the catalog's full column type (``varchar(100)``).
    Oracle NUMBER shows scale only when positive; sized types get their
    length.
    """
    if dialect is Dialect.MYSQL:
        return column.raw_type or column.native_type

    column = resolve_numeric_spec(column)
    if normalize_type_name(column.native_type) == "NUMBER":
        if column.precision:
            if column.scale:
                return f"NUMBER({column.precision},{column.scale})"
            return f"NUMBER({column.precision})"
        return column.native_type
    if column.length:
        return f"{column.native_type}({column.length})"
    return column.native_type


def _column_tuple(column: ColumnDescriptor, dialect: Dialect) -> Tuple[str, str, bool, Optional[str]]:
    default = column.default if dialect is Dialect.ORACLE else None
    return column.name, native_type_sql(column, dialect), column.nullable, default


class SchemaExporter:
    """Exports a catalog's schema and data in the catalog's own dialect."""

    def __init__(self, catalog: CatalogReader):
        self.catalog = catalog

    @property
    def dialect(self) -> Dialect:
        return self.catalog.dialect

    def list_tables(self, case: Optional[str] = None, schema: Optional[str] = None) -> List[str]:
        """
        Table names in catalog order.

        Args:
            case: ``"upper"`` or ``"lower"`` to fold names; None keeps them
        """
        if case is not None and case not in TABLE_CASES:
            raise ValueError(f"case must be one of {TABLE_CASES}, got {case!r}")
        tables = self.catalog.list_tables(schema)
        if case == "upper":
            return [t.upper() for t in tables]
        if case == "lower":
            return [t.lower() for t in tables]
        return tables

    def _table_block(self, table_name: str, schema: Optional[str]) -> str:
        columns = self.catalog.describe_columns(table_name, schema)
        if not columns:
            raise MetadataUnavailable("table has no columns or does not exist", table=table_name)
        ddl = render_native_table(table_name, [_column_tuple(c, self.dialect) for c in columns])
        return f"-- Schema for table {table_name}\n{ddl}\n"

    def export_table_schema(self, table_name: str, schema: Optional[str] = None) -> str:
        """``-- Schema for table <t>`` followed by the native DDL."""
        block = self._table_block(table_name, schema)
        logger.info(f"Exported schema of {table_name}")
        return block

    def export_database_schema(self, schema: Optional[str] = None) -> str:
        """
        Export every table, blank-line separated.

        Raises:
            MetadataUnavailable: with ``partial`` holding the tables exported
                before the failing one.
        """
        blocks: List[str] = []
        tables = self.catalog.list_tables(schema)
        if not tables:
            logger.warning(f"No tables found in schema {schema or '(current)'}")
        for table_name in tables:
            try:
                blocks.append(self._table_block(table_name, schema))
            except MetadataUnavailable as e:
                e.partial = "\n".join(blocks)
                raise
        logger.info(f"Exported schema of {len(blocks)} tables")
        return "\n".join(blocks)

    def export_table_data(self, table_name: str, schema: Optional[str] = None) -> InsertStream:
        """Lazy ``INSERT INTO t (cols) VALUES (...)`` stream in the source dialect."""
        cursor = self.catalog.read_rows(table_name, schema)
        dialect = self.dialect

        def encode_literal(value: RowValue) -> str:
            return encode(value, dialect)

        return InsertStream(table_name, cursor, encode_literal, with_columns=True)
