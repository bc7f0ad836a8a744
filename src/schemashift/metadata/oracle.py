"""
Oracle catalog reader using oracledb.

Reads table and column metadata from the Oracle data dictionary views:
- USER_TABLES / ALL_TABLES
- ALL_TAB_COLUMNS
"""

from __future__ import annotations

import decimal
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

DEFAULT_PORT = 1521

# Types whose DATA_LENGTH is a declared size rather than internal storage
SIZED_TYPES = frozenset({"VARCHAR2", "NVARCHAR2", "CHAR", "NCHAR", "RAW", "VARCHAR"})
CHARACTER_TYPES = frozenset({"VARCHAR2", "NVARCHAR2", "CHAR", "NCHAR", "VARCHAR"})


def _output_type_handler(cursor, metadata):
    """
    Fetch LOB columns as plain str/bytes instead of LOB locators, and
    fractional NUMBER columns as Decimal so no digits go through float.
    """
    import oracledb

    if metadata.type_code in (oracledb.DB_TYPE_CLOB, oracledb.DB_TYPE_NCLOB):
        return cursor.var(oracledb.DB_TYPE_LONG, arraysize=cursor.arraysize)
    if metadata.type_code is oracledb.DB_TYPE_BLOB:
        return cursor.var(oracledb.DB_TYPE_LONG_RAW, arraysize=cursor.arraysize)
    if metadata.type_code is oracledb.DB_TYPE_NUMBER:
        # NUMBER(p) / NUMBER(p,0) are integers and fetch exactly as int
        if metadata.precision and metadata.scale == 0:
            return None
        return cursor.var(decimal.Decimal, arraysize=cursor.arraysize)
    return None


class OracleCatalog(CatalogReader):
    """
    Catalog of an Oracle schema.

    Owner and table names are upper-cased before dictionary lookups since
    unquoted Oracle identifiers are stored that way.
    """

    dialect = Dialect.ORACLE

    def __init__(self, connection_string: str, arraysize: int = 500):
        """
        Initialize catalog with Oracle connection.

        Args:
            connection_string: Oracle connection string (user/pwd@host:port/service,
                or user/pwd@alias for a TNS alias or EZConnect string)
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
        import oracledb

        info = ConnectionInfo.parse(self.connection_string)
        host_service = self.connection_string.rsplit("@", 1)[1]

        # Build DSN; without a port the part after @ is a TNS alias or EZConnect string
        if ":" in host_service:
            dsn = oracledb.makedsn(info.host, info.port or DEFAULT_PORT, service_name=info.database)
        else:
            dsn = host_service
        try:
            self._conn = oracledb.connect(user=info.user, password=info.password, dsn=dsn)
        except oracledb.Error as e:
            logger.error(f"Failed to connect to Oracle at {info.host}: {e}")
            raise MetadataUnavailable(f"cannot connect to {info.host}: {e}") from e
        self._conn.outputtypehandler = _output_type_handler
        logger.info(f"Connected to Oracle database as {info.user}")

    def disconnect(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def normalize_table_name(self, table_name: str) -> str:
        return table_name.upper()

    def _fetch_all(self, sql: str, params: dict, table: Optional[str] = None) -> List[Sequence[Any]]:
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, params)
            return cursor.fetchall()
        except Exception as e:
            logger.error(f"Catalog query failed: {e}")
            raise MetadataUnavailable(str(e), table=table) from e
        finally:
            cursor.close()

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        if schema is None:
            rows = self._fetch_all("SELECT table_name FROM user_tables ORDER BY table_name", {})
        else:
            validate_identifier(schema)
            rows = self._fetch_all(
                "SELECT table_name FROM all_tables WHERE owner = :owner ORDER BY table_name",
                {"owner": schema.upper()},
            )
        return [row[0] for row in rows]

    def describe_columns(self, table_name: str, schema: Optional[str] = None) -> List[ColumnDescriptor]:
        validate_identifier(table_name)
        if "." in table_name:
            schema, table_name = table_name.split(".", 1)

        rows = self._fetch_all("""
            SELECT column_name, data_type, data_length, char_length,
                   data_precision, data_scale, nullable, data_default
            FROM all_tab_columns
            WHERE owner = NVL(:owner, USER)
              AND table_name = :table_name
            ORDER BY column_id
        """, {
            "owner": schema.upper() if schema else None,
            "table_name": self.normalize_table_name(table_name),
        }, table=table_name)

        columns = []
        for name, data_type, data_length, char_length, precision, scale, nullable, default in rows:
            base_type = data_type.split("(")[0].strip().upper()
            length = None
            if base_type in CHARACTER_TYPES and char_length:
                length = int(char_length)
            elif base_type in SIZED_TYPES and data_length:
                length = int(data_length)

            columns.append(ColumnDescriptor(
                name=name,
                native_type=data_type,
                length=length,
                precision=int(precision) if precision is not None else None,
                scale=int(scale) if scale is not None else None,
                nullable=nullable == "Y",
                default=default.strip() if default else None,
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

        cursor = self.connection.cursor()
        cursor.arraysize = self.arraysize
        try:
            cursor.execute(f"SELECT * FROM {qualified}")
        except Exception as e:
            cursor.close()
            logger.error(f"Cannot read rows of {qualified}: {e}")
            raise MetadataUnavailable(str(e), table=table_name) from e
        return RowCursor(table_name, cursor, arraysize=self.arraysize)
