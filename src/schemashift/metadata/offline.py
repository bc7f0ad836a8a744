"""
Offline catalog backed by a YAML file.

Lets the translation and export commands run without a live database::

    dialect: mysql
    schema: shop
    tables:
      users:
        columns:
          - {name: id, type: INT, nullable: false}
          - {name: name, type: VARCHAR(50)}
          - {name: balance, type: DECIMAL(10,2)}
        rows:
          - [1, "O'Brien", 12.50]

Column types may carry their size suffix; ``VARCHAR(50)`` yields length 50
and ``DECIMAL(10,2)`` keeps the composite text in ``raw_type`` so that
numeric specs are resolved the same way as for a live MySQL catalog.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from schemashift.errors import ConfigError, MetadataUnavailable
from schemashift.metadata.base import CatalogReader, RowCursor
from schemashift.models import ColumnDescriptor, Dialect

logger = logging.getLogger(__name__)

_SIZED = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_ ]*?)\s*\(\s*(\d+)(?:\s+(?:CHAR|BYTE))?\s*\)\s*$", re.IGNORECASE)

# Types whose size suffix is a length
LENGTH_TYPES = frozenset({
    "VARCHAR", "VARCHAR2", "NVARCHAR2", "CHAR", "NCHAR", "RAW", "BINARY", "VARBINARY",
})


class _ListCursor:
    """Minimal DB-API cursor over in-memory rows."""

    def __init__(self, columns: Sequence[str], rows: Sequence[Sequence[Any]]):
        self.description = [(name, None, None, None, None, None, None) for name in columns]
        self._rows = list(rows)
        self._pos = 0

    def fetchmany(self, size: int) -> List[Sequence[Any]]:
        batch = self._rows[self._pos:self._pos + size]
        self._pos += len(batch)
        return batch

    def close(self) -> None:
        self._rows = []


def _column_from_yaml(data: Dict[str, Any]) -> ColumnDescriptor:
    data = dict(data)
    type_text = str(data.pop("type", data.get("native_type", "")))
    data.pop("native_type", None)

    if "(" in type_text and "raw_type" not in data:
        data["raw_type"] = type_text
        sized = _SIZED.match(type_text)
        if sized and data.get("length") is None and sized.group(1).upper() in LENGTH_TYPES:
            data["length"] = int(sized.group(2))
        type_text = type_text.split("(", 1)[0].strip()

    data["native_type"] = type_text.upper()
    return ColumnDescriptor.from_dict(data)


class OfflineCatalog(CatalogReader):
    """Catalog read from a YAML description instead of a database."""

    def __init__(self, dialect: Union[str, Dialect], tables: Dict[str, Dict[str, Any]], schema: Optional[str] = None):
        self.dialect = Dialect.parse(dialect)
        self.schema = schema
        self._tables: Dict[str, Dict[str, Any]] = {}
        for name, spec in (tables or {}).items():
            self._tables[str(name)] = spec or {}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> OfflineCatalog:
        """
        Load a catalog file.

        Raises:
            ConfigError: if the file is missing or is not a mapping with a
                dialect and a tables section.
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read catalog file {path}: {e}") from e

        if not isinstance(data, dict) or "dialect" not in data:
            raise ConfigError(f"Catalog file {path} must define 'dialect' and 'tables'")
        tables = data.get("tables") or {}
        if not isinstance(tables, dict):
            raise ConfigError(f"'tables' in {path} must be a mapping")
        try:
            catalog = cls(data["dialect"], tables, schema=data.get("schema"))
        except ValueError as e:
            raise ConfigError(str(e)) from e
        logger.info(f"Loaded offline {catalog.dialect.label} catalog with {len(tables)} tables from {path}")
        return catalog

    def _lookup(self, table_name: str) -> Optional[Dict[str, Any]]:
        if table_name in self._tables:
            return self._tables[table_name]
        lowered = table_name.lower()
        for name, spec in self._tables.items():
            if name.lower() == lowered:
                return spec
        return None

    def _check_schema(self, schema: Optional[str]) -> None:
        if schema is not None and self.schema is not None and schema.lower() != self.schema.lower():
            raise MetadataUnavailable(f"unknown schema {schema}")

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        self._check_schema(schema)
        return list(self._tables)

    def describe_columns(self, table_name: str, schema: Optional[str] = None) -> List[ColumnDescriptor]:
        self._check_schema(schema)
        spec = self._lookup(table_name)
        if spec is None:
            return []
        try:
            return [_column_from_yaml(col) for col in spec.get("columns") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise MetadataUnavailable(f"invalid column definition: {e}", table=table_name) from e

    def read_rows(self, table_name: str, schema: Optional[str] = None) -> RowCursor:
        self._check_schema(schema)
        spec = self._lookup(table_name)
        if spec is None:
            raise MetadataUnavailable("table does not exist", table=table_name)
        columns = [col["name"] for col in spec.get("columns") or []]
        rows = [list(row) for row in spec.get("rows") or []]
        for index, row in enumerate(rows, start=1):
            if len(row) != len(columns):
                raise MetadataUnavailable(
                    f"row {index} has {len(row)} values for {len(columns)} columns",
                    table=table_name,
                )
        return RowCursor(table_name, _ListCursor(columns, rows))
