"""
Catalog reader contract and the forward-only row cursor shared by all
database catalogs.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, List, Optional, Sequence, Tuple

from schemashift.errors import ConversionAborted, EncodingFailure, MetadataUnavailable
from schemashift.models import ColumnDescriptor, Dialect, RowValue

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$#]*(\.[A-Za-z_][A-Za-z0-9_$#]*)?$")


def validate_identifier(name: str, table: Optional[str] = None) -> str:
    """
    Check that a table/schema name is safe to interpolate into SQL.

    Raises:
        MetadataUnavailable: for anything but a plain (optionally
            schema-qualified) identifier.
    """
    if not name or not _IDENTIFIER.match(name):
        raise MetadataUnavailable(f"invalid identifier {name!r}", table=table or name)
    return name


@dataclass(frozen=True)
class ConnectionInfo:
    """Parsed ``user/password@host:port/database`` connection string."""
    user: str
    password: str
    host: str
    port: Optional[int]
    database: str

    @classmethod
    def parse(cls, connection_string: str) -> ConnectionInfo:
        """
        Parse a connection string.

        The password may itself contain ``/`` or ``@``; the user ends at the
        first ``/`` and the host part starts after the last ``@``.
        """
        if "@" not in connection_string:
            raise ValueError("Connection string must look like user/password@host:port/database")

        user_pwd, host_part = connection_string.rsplit("@", 1)
        user, _, password = user_pwd.partition("/")

        host_port, _, database = host_part.partition("/")
        host, _, port = host_port.partition(":")
        if not user or not host:
            raise ValueError("Connection string must look like user/password@host:port/database")

        return cls(
            user=user,
            password=password,
            host=host,
            port=int(port) if port else None,
            database=database,
        )


RowTuple = Tuple[int, List[RowValue]]


class RowCursor:
    """
    Forward-only, single-pass iterator over a table's rows.

    Yields ``(row_number, values)`` with 1-based row numbers and values
    classified into RowValue at this boundary. The underlying DB-API cursor
    is closed when the rows are exhausted, on any error, or when
    :meth:`close` is called. Closing before exhaustion makes further
    iteration raise ConversionAborted.
    """

    def __init__(
        self,
        table: str,
        cursor: Any,
        columns: Optional[Sequence[str]] = None,
        arraysize: int = 500,
        on_close: Optional[Callable[[], None]] = None,
    ):
        self.table = table
        self._cursor = cursor
        if columns is None:
            columns = [d[0] for d in (cursor.description or [])]
        self.columns: List[str] = list(columns)
        self.arraysize = arraysize
        self._on_close = on_close
        self._buffer: Deque[Sequence[Any]] = deque()
        self._rows_read = 0
        self._exhausted = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def rows_read(self) -> int:
        return self._rows_read

    def close(self) -> None:
        """Release the underlying cursor. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._buffer.clear()
        # Drivers may refuse to close a cursor while results are unread
        try:
            if self._on_close is not None:
                self._on_close()
        finally:
            try:
                self._cursor.close()
            except Exception as e:
                logger.debug(f"Ignoring error while closing cursor for {self.table}: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __iter__(self):
        return self

    def __next__(self) -> RowTuple:
        if self._exhausted:
            raise StopIteration
        if self._closed:
            raise ConversionAborted(self.table, self._rows_read)

        if not self._buffer:
            self._fill()
            if not self._buffer:
                self._exhausted = True
                self.close()
                raise StopIteration

        raw = self._buffer.popleft()
        self._rows_read += 1
        row_number = self._rows_read

        values: List[RowValue] = []
        for column, item in zip(self.columns, raw):
            try:
                values.append(RowValue.of(item))
            except EncodingFailure as e:
                e.table, e.column, e.row_index = self.table, column, row_number
                logger.error(str(e))
                self.close()
                raise
        return row_number, values

    def _fill(self) -> None:
        try:
            self._buffer.extend(self._cursor.fetchmany(self.arraysize))
        except Exception as e:
            if self._closed:
                raise ConversionAborted(self.table, self._rows_read) from e
            self.close()
            logger.error(f"Error reading rows from {self.table}: {e}")
            raise MetadataUnavailable(f"error reading rows: {e}", table=self.table) from e


class CatalogReader:
    """
    Base class for catalog readers.

    A reader owns one database connection and exposes the three operations
    the translation engine needs: list tables, describe columns, read rows.
    """

    dialect: Dialect

    def connect(self) -> None:
        """Establish the connection (no-op for offline catalogs)."""

    def disconnect(self) -> None:
        """Close the connection."""

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        """Table names in catalog order; the connected schema when ``schema`` is None."""
        raise NotImplementedError("Each catalog must implement list_tables.")

    def describe_columns(self, table_name: str, schema: Optional[str] = None) -> List[ColumnDescriptor]:
        """Column descriptors in ordinal order. Empty when the table does not exist."""
        raise NotImplementedError("Each catalog must implement describe_columns.")

    def read_rows(self, table_name: str, schema: Optional[str] = None) -> RowCursor:
        """Open a forward-only cursor over the table's rows."""
        raise NotImplementedError("Each catalog must implement read_rows.")

    def normalize_table_name(self, table_name: str) -> str:
        """Name as stored in the catalog."""
        return table_name
