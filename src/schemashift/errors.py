"""
Exception hierarchy for schemashift.

Fatal conditions are exceptions. Non-fatal findings (unmapped types,
malformed numeric specs) are reported as Diagnostic records instead, see
``schemashift.models.Diagnostic``.
"""

from __future__ import annotations

from typing import Optional


class SchemaShiftError(Exception):
    """Base class for all schemashift errors."""


class ConfigError(SchemaShiftError):
    """The settings file could not be read or has an invalid structure."""


class MetadataUnavailable(SchemaShiftError):
    """
    A catalog query failed: connectivity, permissions, or a nonexistent
    table/schema. ``partial`` carries any output accumulated before the
    failure (e.g. the DDL of tables already converted).
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        partial: Optional[str] = None,
    ):
        self.table = table
        self.partial = partial
        self.reason = message
        super().__init__(message)

    def __str__(self) -> str:
        if self.table:
            return f"Metadata unavailable for table {self.table}: {self.reason}"
        return f"Metadata unavailable: {self.reason}"


class EncodingFailure(SchemaShiftError):
    """
    A row value's runtime type is outside the supported variants.

    Raised at the read boundary without table context; the engine fills in
    ``table``, ``column`` and ``row_index`` before re-raising.
    """

    def __init__(
        self,
        python_type: str,
        table: Optional[str] = None,
        column: Optional[str] = None,
        row_index: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.python_type = python_type
        self.table = table
        self.column = column
        self.row_index = row_index
        self.detail = detail
        super().__init__(python_type)

    def __str__(self) -> str:
        where = []
        if self.table:
            where.append(f"table {self.table}")
        if self.column:
            where.append(f"column {self.column}")
        if self.row_index is not None:
            where.append(f"row {self.row_index}")
        location = ", ".join(where) if where else "unknown location"
        reason = self.detail or f"unsupported value type {self.python_type}"
        return f"Cannot encode value at {location}: {reason}"


class ConversionAborted(SchemaShiftError):
    """The row cursor was closed by the host while a conversion was running."""

    def __init__(self, table: str, rows_emitted: int = 0):
        self.table = table
        self.rows_emitted = rows_emitted
        super().__init__(f"Conversion of table {table} aborted after {rows_emitted} rows")
