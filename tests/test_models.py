"""Tests for core data models."""

import math
from datetime import date, datetime
from decimal import Decimal

import pytest

from schemashift.errors import EncodingFailure
from schemashift.models import (
    NULL,
    ColumnDescriptor,
    Diagnostic,
    DiagnosticKind,
    Dialect,
    RowValue,
    TableSchema,
    ValueKind,
)


class TestDialect:
    """Tests for Dialect."""

    def test_parse_is_case_insensitive(self):
        assert Dialect.parse("MySQL") is Dialect.MYSQL
        assert Dialect.parse(" oracle ") is Dialect.ORACLE
        assert Dialect.parse(Dialect.ORACLE) is Dialect.ORACLE

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unsupported database type"):
            Dialect.parse("postgres")

    def test_labels(self):
        assert Dialect.MYSQL.label == "MySQL"
        assert Dialect.ORACLE.label == "Oracle"


class TestColumnDescriptor:
    """Tests for ColumnDescriptor."""

    def test_basic_column(self):
        col = ColumnDescriptor(name="id", native_type="INT", nullable=False)
        assert col.name == "id"
        assert col.length is None
        assert col.precision is None
        assert col.nullable is False

    def test_is_frozen(self):
        col = ColumnDescriptor(name="id", native_type="INT")
        with pytest.raises(AttributeError):
            col.name = "other"

    def test_serialization(self):
        col = ColumnDescriptor(
            name="AMOUNT",
            native_type="DECIMAL",
            precision=18,
            scale=2,
            raw_type="decimal(18,2)",
            default="0.00",
        )
        restored = ColumnDescriptor.from_dict(col.to_dict())
        assert restored == col

    def test_from_dict_type_alias(self):
        col = ColumnDescriptor.from_dict({"name": "x", "type": "TEXT"})
        assert col.native_type == "TEXT"

    def test_from_dict_without_type(self):
        with pytest.raises(ValueError):
            ColumnDescriptor.from_dict({"name": "x"})


class TestTableSchema:
    """Tests for TableSchema."""

    def test_keeps_catalog_order(self):
        table = TableSchema("users", [
            ColumnDescriptor(name="b", native_type="INT"),
            ColumnDescriptor(name="a", native_type="INT"),
        ])
        assert table.column_names == ["b", "a"]
        assert len(table) == 2

    def test_rejects_duplicate_names(self):
        with pytest.raises(ValueError, match="Duplicate column"):
            TableSchema("users", [
                ColumnDescriptor(name="ID", native_type="INT"),
                ColumnDescriptor(name="id", native_type="INT"),
            ])

    def test_case_insensitive_column_lookup(self):
        table = TableSchema("users", [ColumnDescriptor(name="Email", native_type="VARCHAR")])
        assert table.get_column("EMAIL").name == "Email"
        assert table.get_column("missing") is None


class TestRowValue:
    """Tests for RowValue classification."""

    def test_none_is_null(self):
        assert RowValue.of(None) is NULL
        assert NULL.is_null

    def test_text(self):
        assert RowValue.of("abc") == RowValue(ValueKind.TEXT, "abc")

    def test_bool_is_integer(self):
        assert RowValue.of(True) == RowValue(ValueKind.INTEGER, 1)
        assert RowValue.of(False) == RowValue(ValueKind.INTEGER, 0)

    def test_numbers(self):
        assert RowValue.of(42).kind is ValueKind.INTEGER
        assert RowValue.of(Decimal("1.50")) == RowValue(ValueKind.DECIMAL, Decimal("1.50"))
        assert RowValue.of(0.1) == RowValue(ValueKind.DECIMAL, Decimal("0.1"))

    def test_datetime_before_date(self):
        assert RowValue.of(datetime(2024, 1, 2, 3, 4, 5)).kind is ValueKind.TIMESTAMP
        assert RowValue.of(date(2024, 1, 2)).kind is ValueKind.DATE

    @pytest.mark.parametrize("value", [float("nan"), math.inf, Decimal("NaN"), Decimal("-Infinity")])
    def test_non_finite_rejected(self, value):
        with pytest.raises(EncodingFailure):
            RowValue.of(value)

    def test_unsupported_type(self):
        with pytest.raises(EncodingFailure) as exc_info:
            RowValue.of(b"\x00\x01")
        assert exc_info.value.python_type == "bytes"


class TestDiagnostic:
    """Tests for Diagnostic."""

    def test_location_and_dict(self):
        d = Diagnostic(
            kind=DiagnosticKind.UNMAPPED_TYPE,
            native_type="GEOMETRY",
            message="no mapping",
            table="places",
            column="shape",
        )
        assert d.location == "places.shape"
        assert d.to_dict()["kind"] == "unmapped_type"

    def test_location_unknown(self):
        d = Diagnostic(kind=DiagnosticKind.MALFORMED_NUMERIC_SPEC, native_type="DECIMAL(x)", message="m")
        assert d.location == "-"
