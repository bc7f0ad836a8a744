"""
Dialect adapters: one per supported (source, target) direction.

An adapter binds a source catalog to the type mapping, literal encoding and
DDL rendering of the target dialect. The translation engine talks to
adapters only, never to catalogs directly.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Type

from schemashift.metadata.base import CatalogReader, RowCursor
from schemashift.models import (
    ColumnDescriptor,
    Diagnostic,
    DiagnosticKind,
    Dialect,
    RowValue,
    TargetColumnSpec,
)
from schemashift.translation.ddl import render_create_table
from schemashift.translation.literals import encode
from schemashift.translation.types import (
    TypeMappingTable,
    get_mapping_table,
    normalize_type_name,
    resolve_numeric_spec,
)

logger = logging.getLogger(__name__)


class DialectAdapter:
    """
    Base adapter.

    Subclasses set ``source`` and ``target``; ``table_header`` is the
    optional comment line prefixed to single-table conversions.
    """

    source: Dialect
    target: Dialect
    table_header: Optional[str] = None

    def __init__(self, catalog: CatalogReader, overrides: Optional[Mapping[str, str]] = None):
        if catalog.dialect is not self.source:
            raise ValueError(
                f"{type(self).__name__} needs a {self.source.label} catalog, got {catalog.dialect.label}"
            )
        self.catalog = catalog
        if overrides:
            self.mapping = TypeMappingTable(self.source, self.target, overrides)
        else:
            self.mapping = get_mapping_table(self.source, self.target)

    @property
    def schema_header(self) -> str:
        return f"-- Converted database schema from {self.source.label} to {self.target.label}"

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        return self.catalog.list_tables(schema)

    def describe_columns(self, table_name: str, schema: Optional[str] = None) -> List[ColumnDescriptor]:
        return self.catalog.describe_columns(table_name, schema)

    def read_rows(self, table_name: str, schema: Optional[str] = None) -> RowCursor:
        return self.catalog.read_rows(table_name, schema)

    def map_column(
        self,
        table_name: str,
        descriptor: ColumnDescriptor,
        diagnostics: Optional[List[Diagnostic]] = None,
    ) -> TargetColumnSpec:
        """Resolve the numeric spec of a descriptor and map it to the target."""
        descriptor = resolve_numeric_spec(descriptor, diagnostics, table=table_name)
        return self.mapping.map_column(descriptor, diagnostics, table=table_name)

    def encode_literal(self, value: RowValue) -> str:
        return encode(value, self.target)

    def render_ddl(self, table_name: str, specs: Sequence[TargetColumnSpec]) -> str:
        return render_create_table(table_name, specs)


class MySQLToOracleAdapter(DialectAdapter):
    source = Dialect.MYSQL
    target = Dialect.ORACLE


class OracleToMySQLAdapter(DialectAdapter):
    source = Dialect.ORACLE
    target = Dialect.MYSQL
    table_header = "-- Converted table schema from Oracle to MySQL"

    def map_column(
        self,
        table_name: str,
        descriptor: ColumnDescriptor,
        diagnostics: Optional[List[Diagnostic]] = None,
    ) -> TargetColumnSpec:
        descriptor = resolve_numeric_spec(descriptor, diagnostics, table=table_name)
        spec = self.mapping.map_column(descriptor, diagnostics, table=table_name)

        # NUMBER(*, s): no precision but a fractional scale still maps to INT
        if (normalize_type_name(descriptor.native_type) == "NUMBER"
                and not descriptor.precision
                and (descriptor.scale or 0) > 0):
            message = (
                f"NUMBER with scale {descriptor.scale} but no precision mapped to "
                f"{spec.target_type}; fractional digits may be lost"
            )
            logger.warning(f"{table_name}.{descriptor.name}: {message}")
            if diagnostics is not None:
                diagnostics.append(Diagnostic(
                    kind=DiagnosticKind.AMBIGUOUS_NUMERIC,
                    native_type=descriptor.native_type,
                    message=message,
                    table=table_name,
                    column=descriptor.name,
                ))
        return spec


ADAPTERS: Dict[Tuple[Dialect, Dialect], Type[DialectAdapter]] = {
    (Dialect.MYSQL, Dialect.ORACLE): MySQLToOracleAdapter,
    (Dialect.ORACLE, Dialect.MYSQL): OracleToMySQLAdapter,
}


def adapter_for(
    catalog: CatalogReader,
    target: Dialect,
    overrides: Optional[Mapping[str, str]] = None,
) -> DialectAdapter:
    """
    Resolve the adapter translating ``catalog`` into ``target``.

    Raises:
        ValueError: if no adapter is registered for the pair, including
            translating a dialect into itself.
    """
    target = Dialect.parse(target)
    key = (catalog.dialect, target)
    if key not in ADAPTERS:
        raise ValueError(f"Conversion from {catalog.dialect.label} to {target.label} is not supported")
    return ADAPTERS[key](catalog, overrides)


def default_target(source: Dialect) -> Dialect:
    """The dialect a ``source`` catalog is converted into."""
    for src, tgt in ADAPTERS:
        if src is source:
            return tgt
    raise ValueError(f"No conversion available from {source.label}")
