"""
Translation engine.

Orchestrates whole-schema, single-table and data conversions through a
dialect adapter::

    with MySQLCatalog("app/secret@db:3306/shop") as catalog:
        engine = TranslationEngine(adapter_for(catalog, Dialect.ORACLE))
        ddl = engine.convert_database_schema("shop")
        for statement in engine.convert_table_data("users"):
            ...
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from schemashift.errors import EncodingFailure, MetadataUnavailable
from schemashift.metadata.base import RowCursor
from schemashift.models import ColumnDescriptor, Diagnostic, RowValue, TableSchema
from schemashift.translation.dialects import DialectAdapter

logger = logging.getLogger(__name__)


def format_insert(table_name: str, literals: Sequence[str], columns: Optional[Sequence[str]] = None) -> str:
    """Assemble one INSERT statement from already encoded literals."""
    column_list = f" ({', '.join(columns)})" if columns else ""
    return f"INSERT INTO {table_name}{column_list} VALUES ({', '.join(literals)});"


class InsertStream:
    """
    Lazy, forward-only stream of INSERT statements over one row cursor.

    The stream can be iterated once; a second iteration raises
    RuntimeError. :meth:`close` releases the cursor and, when called while
    iterating, makes the iteration stop with ConversionAborted.
    """

    def __init__(
        self,
        table_name: str,
        cursor: RowCursor,
        encode_literal,
        with_columns: bool = False,
    ):
        self.table_name = table_name
        self._cursor = cursor
        self._encode = encode_literal
        self._with_columns = with_columns
        self._started = False
        self.rows_emitted = 0

    @property
    def columns(self) -> List[str]:
        return list(self._cursor.columns)

    @property
    def closed(self) -> bool:
        return self._cursor.closed

    def __iter__(self) -> Iterator[str]:
        if self._started:
            raise RuntimeError(f"INSERT stream for {self.table_name} can only be iterated once")
        self._started = True
        return self._generate()

    def _generate(self) -> Iterator[str]:
        columns = self._cursor.columns if self._with_columns else None
        try:
            for _, values in self._cursor:
                literals = [self._encode(v) for v in values]
                yield format_insert(self.table_name, literals, columns)
                self.rows_emitted += 1
        finally:
            self._cursor.close()
        logger.debug(f"Emitted {self.rows_emitted} INSERT statements for {self.table_name}")

    def close(self) -> None:
        self._cursor.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class TranslationEngine:
    """
    Converts schemas and data from the adapter's source dialect into its
    target dialect.

    ``diagnostics`` holds the non-fatal findings of the most recent public
    call; every public call starts from an empty list.
    """

    def __init__(self, adapter: DialectAdapter):
        self.adapter = adapter
        self.diagnostics: List[Diagnostic] = []

    @property
    def source(self):
        return self.adapter.source

    @property
    def target(self):
        return self.adapter.target

    def _translate(self, table_name: str, descriptors: Sequence[ColumnDescriptor]) -> str:
        if not descriptors:
            raise MetadataUnavailable("table has no columns or does not exist", table=table_name)
        try:
            schema = TableSchema(table_name, descriptors)
        except ValueError as e:
            raise MetadataUnavailable(str(e), table=table_name) from e

        specs = [self.adapter.map_column(table_name, d, self.diagnostics) for d in schema]
        return self.adapter.render_ddl(table_name, specs)

    def translate_columns(self, table_name: str, descriptors: Sequence[ColumnDescriptor]) -> str:
        """Map already described columns and render the target CREATE TABLE."""
        self.diagnostics = []
        return self._translate(table_name, descriptors)

    def convert_table_schema(self, table_name: str, schema: Optional[str] = None) -> str:
        """
        Describe one table through the adapter and render its target DDL.

        Raises:
            MetadataUnavailable: if the catalog query fails or the table has
                no columns.
        """
        self.diagnostics = []
        descriptors = self.adapter.describe_columns(table_name, schema)
        ddl = self._translate(table_name, descriptors)
        logger.info(f"Converted schema of {table_name} ({len(descriptors)} columns)")
        if self.adapter.table_header:
            return f"{self.adapter.table_header}\n{ddl}\n"
        return f"{ddl}\n"

    def convert_database_schema(self, schema_name: Optional[str] = None) -> str:
        """
        Convert every table of a schema, in catalog order.

        Raises:
            MetadataUnavailable: on the first table that cannot be described;
                ``partial`` holds the script text converted so far.
        """
        self.diagnostics = []
        header = self.adapter.schema_header
        tables = self.adapter.list_tables(schema_name)
        if not tables:
            logger.warning(f"No tables found in schema {schema_name or '(current)'}")
            return f"{header}\n"

        parts: List[str] = []
        for table_name in tables:
            try:
                descriptors = self.adapter.describe_columns(table_name, schema_name)
                parts.append(self._translate(table_name, descriptors))
            except MetadataUnavailable as e:
                e.partial = header + "\n" + "\n\n".join(parts) + ("\n" if parts else "")
                logger.error(f"Schema conversion stopped at {table_name} after {len(parts)} tables: {e}")
                raise
        logger.info(f"Converted {len(parts)} tables from {self.source.label} to {self.target.label}")
        return header + "\n" + "\n\n".join(parts) + "\n"

    def convert_rows(
        self,
        table_name: str,
        rows: Iterable[Sequence[Any]],
        column_order: Sequence[str],
    ) -> Iterator[str]:
        """
        Encode in-memory rows as INSERT statements, one per row.

        Row items may be RowValue instances or raw Python values, which are
        classified on the way in.

        Raises:
            EncodingFailure: for a value outside the supported variants.
            ValueError: for a row whose width differs from ``column_order``.
        """
        self.diagnostics = []
        return self._generate_rows(table_name, rows, list(column_order))

    def _generate_rows(self, table_name: str, rows, column_order: List[str]) -> Iterator[str]:
        for row_index, row in enumerate(rows, start=1):
            if len(row) != len(column_order):
                raise ValueError(
                    f"Row {row_index} of {table_name} has {len(row)} values for {len(column_order)} columns"
                )
            literals = []
            for column, item in zip(column_order, row):
                try:
                    value = item if isinstance(item, RowValue) else RowValue.of(item)
                except EncodingFailure as e:
                    e.table, e.column, e.row_index = table_name, column, row_index
                    logger.error(str(e))
                    raise
                literals.append(self.adapter.encode_literal(value))
            yield format_insert(table_name, literals)

    def convert_table_data(self, table_name: str, schema: Optional[str] = None) -> InsertStream:
        """
        Open a lazy INSERT stream over a table's rows.

        The catalog cursor is opened here; it is released when the stream is
        exhausted, fails, or is closed.
        """
        self.diagnostics = []
        cursor = self.adapter.read_rows(table_name, schema)
        logger.info(f"Converting data of {table_name} from {self.source.label} to {self.target.label}")
        return InsertStream(table_name, cursor, self.adapter.encode_literal)
