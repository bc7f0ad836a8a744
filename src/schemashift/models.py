"""
Core data models for the schemashift package.

Defines the catalog-level structures (column descriptors, table schemas),
the typed row values read from data cursors, and the diagnostics raised
while translating between dialects.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from schemashift.errors import EncodingFailure


class Dialect(str, Enum):
    """Supported relational engines."""
    MYSQL = "mysql"
    ORACLE = "oracle"

    @property
    def label(self) -> str:
        """Human-readable engine name used in script headers."""
        return {"mysql": "MySQL", "oracle": "Oracle"}[self.value]

    @classmethod
    def parse(cls, value: Union[str, Dialect]) -> Dialect:
        """Resolve a dialect from its name (case-insensitive)."""
        if isinstance(value, Dialect):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported database type: {value}") from None


@dataclass(frozen=True)
class ColumnDescriptor:
    """Metadata for a single column as reported by the source catalog."""
    name: str
    native_type: str
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = True

    # Informational, used only by native-dialect export
    raw_type: Optional[str] = None  # e.g. MySQL COLUMN_TYPE "decimal(10,2) unsigned"
    default: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "native_type": self.native_type,
            "length": self.length,
            "precision": self.precision,
            "scale": self.scale,
            "nullable": self.nullable,
            "raw_type": self.raw_type,
            "default": self.default,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ColumnDescriptor:
        """Create from dictionary. Accepts ``type`` as an alias of ``native_type``."""
        native_type = data.get("native_type", data.get("type"))
        if not native_type:
            raise ValueError(f"Column {data.get('name')!r} has no type")
        return cls(
            name=data["name"],
            native_type=str(native_type),
            length=data.get("length"),
            precision=data.get("precision"),
            scale=data.get("scale"),
            nullable=data.get("nullable", True),
            raw_type=data.get("raw_type"),
            default=data.get("default"),
        )


@dataclass(frozen=True)
class TargetColumnSpec:
    """A column already expressed in the destination dialect's vocabulary."""
    name: str
    native_type: str
    target_type: str
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    nullable: bool = True


@dataclass
class TableSchema:
    """Ordered columns of one table, in catalog enumeration order."""
    name: str
    columns: Sequence[Union[ColumnDescriptor, TargetColumnSpec]] = field(default_factory=list)

    def __post_init__(self):
        self.columns = tuple(self.columns)
        seen = set()
        for col in self.columns:
            key = col.name.lower()
            if key in seen:
                raise ValueError(f"Duplicate column {col.name!r} in table {self.name}")
            seen.add(key)

    @property
    def column_names(self) -> List[str]:
        """Return list of column names."""
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[Union[ColumnDescriptor, TargetColumnSpec]]:
        """Get column by name (case-insensitive)."""
        name_lower = name.lower()
        for col in self.columns:
            if col.name.lower() == name_lower:
                return col
        return None

    def __iter__(self) -> Iterator[Union[ColumnDescriptor, TargetColumnSpec]]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)


class ValueKind(str, Enum):
    """Closed set of row value variants."""
    NULL = "null"
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True)
class RowValue:
    """
    A typed value read from one row and one column.

    The kind is decided once, at the read boundary, by :meth:`of`. Values
    outside the supported variants never become a RowValue.
    """
    kind: ValueKind
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> RowValue:
        """
        Classify a driver-returned Python value.

        Raises:
            EncodingFailure: if the value's type is outside the variant set
                or it is a non-finite number.
        """
        if value is None:
            return NULL
        if isinstance(value, str):
            return cls(ValueKind.TEXT, value)
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return cls(ValueKind.INTEGER, int(value))
        if isinstance(value, int):
            return cls(ValueKind.INTEGER, value)
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise EncodingFailure(python_type="Decimal", detail=f"non-finite value {value}")
            return cls(ValueKind.DECIMAL, value)
        if isinstance(value, float):
            if not math.isfinite(value):
                raise EncodingFailure(python_type="float", detail=f"non-finite value {value}")
            return cls(ValueKind.DECIMAL, Decimal(repr(value)))
        # datetime before date: datetime is a date subclass
        if isinstance(value, datetime):
            return cls(ValueKind.TIMESTAMP, value)
        if isinstance(value, date):
            return cls(ValueKind.DATE, value)
        raise EncodingFailure(python_type=type(value).__name__)

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL


NULL = RowValue(ValueKind.NULL)


class DiagnosticKind(str, Enum):
    """Non-fatal findings that need manual review of the generated DDL."""
    UNMAPPED_TYPE = "unmapped_type"
    MALFORMED_NUMERIC_SPEC = "malformed_numeric_spec"
    AMBIGUOUS_NUMERIC = "ambiguous_numeric"


@dataclass(frozen=True)
class Diagnostic:
    """A warning-worthy event raised during translation."""
    kind: DiagnosticKind
    native_type: str
    message: str
    table: Optional[str] = None
    column: Optional[str] = None

    @property
    def location(self) -> str:
        """Return ``table.column`` (or whatever part is known)."""
        parts = [p for p in (self.table, self.column) if p]
        return ".".join(parts) if parts else "-"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "table": self.table,
            "column": self.column,
            "native_type": self.native_type,
            "message": self.message,
        }
