"""
MySQL catalog reader using mysql-connector-python.

Reads table and column metadata from ``information_schema`` and opens
forward-only cursors over table rows.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from schemashift.errors import MetadataUnavailable
from schemashift.metadata.base import (
    CatalogReader,
    ConnectionInfo,
    RowCursor,
    validate_identifier,
)
from schemashift.models import ColumnDescriptor, Dialect

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3306

_LIST_TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = COALESCE(%s, DATABASE())
      AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

_COLUMNS_SQL = """
    SELECT column_name, data_type, column_type, character_maximum_length,
           is_nullable, column_default
    FROM information_schema.columns
    WHERE table_schema = COALESCE(%s, DATABASE())
      AND table_name = %s
    ORDER BY ordinal_position
"""


def _text(value: Any) -> Optional[str]:
    # information_schema columns come back as bytes on some server versions
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


def _split_qualified(table_name: str, schema: Optional[str]):
    if "." in table_name:
        schema, table_name = table_name.split(".", 1)
    return schema, table_name


class MySQLCatalog(CatalogReader):
    """
    Catalog of a MySQL database.

    Column precision/scale are left unset for DECIMAL columns; the
    translation layer parses them from the ``COLUMN_TYPE`` text carried
    in ``raw_type``.
    """

    dialect = Dialect.MYSQL

    def __init__(self, connection_string: str, arraysize: int = 500):
        """
        Initialize catalog with a MySQL connection string.

        Args:
            connection_string: ``user/pwd@host:port/database``
            arraysize: rows fetched per round trip when reading data
        """
        self.connection_string = connection_string
        self.arraysize = arraysize
        self._conn = None

    @property
    def connection(self):
        if self._conn is None:
            self.connect()
        return self._conn

    def connect(self) -> None:
        """Establish database connection."""
        import mysql.connector

        info = ConnectionInfo.parse(self.connection_string)
        try:
            self._conn = mysql.connector.connect(
                host=info.host,
                port=info.port or DEFAULT_PORT,
                database=info.database or None,
                user=info.user,
                password=info.password,
            )
        except mysql.connector.Error as e:
            logger.error(f"Failed to connect to MySQL at {info.host}: {e}")
            raise MetadataUnavailable(f"cannot connect to {info.host}: {e}") from e
        logger.info(f"Connected to MySQL database {info.database} as {info.user}")

    def disconnect(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _fetch_all(self, sql: str, params: Sequence[Any], table: Optional[str] = None) -> List[tuple]:
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, tuple(params))
            return cursor.fetchall()
        except Exception as e:
            logger.error(f"Catalog query failed: {e}")
            raise MetadataUnavailable(str(e), table=table) from e
        finally:
            cursor.close()

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        if schema is not None:
            validate_identifier(schema)
        rows = self._fetch_all(_LIST_TABLES_SQL, (schema,))
        return [_text(row[0]) for row in rows]

    def describe_columns(self, table_name: str, schema: Optional[str] = None) -> List[ColumnDescriptor]:
        validate_identifier(table_name)
        schema, table_name = _split_qualified(table_name, schema)

        rows = self._fetch_all(_COLUMNS_SQL, (schema, table_name), table=table_name)
        columns = []
        for name, data_type, column_type, char_length, is_nullable, default in rows:
            columns.append(ColumnDescriptor(
                name=_text(name),
                native_type=_text(data_type).upper(),
                length=int(char_length) if char_length is not None else None,
                nullable=_text(is_nullable) == "YES",
                raw_type=_text(column_type),
                default=_text(default),
            ))
        logger.debug(f"Described {len(columns)} columns of {table_name}")
        return columns

    def read_rows(self, table_name: str, schema: Optional[str] = None) -> RowCursor:
        validate_identifier(table_name)
        if schema is not None:
            validate_identifier(schema)
            qualified = f"{schema}.{table_name}"
        else:
            qualified = table_name

        conn = self.connection
        cursor = conn.cursor()
        try:
            cursor.execute(f"SELECT * FROM {qualified}")
        except Exception as e:
            cursor.close()
            logger.error(f"Cannot read rows of {qualified}: {e}")
            raise MetadataUnavailable(str(e), table=table_name) from e

        def discard_unread():
            # An unbuffered result must be drained before the connection is reused
            if getattr(conn, "unread_result", False):
                conn.consume_results()

        return RowCursor(table_name, cursor, arraysize=self.arraysize, on_close=discard_unread)
