"""Tests for the DDL renderer."""

import pytest

from schemashift.models import TargetColumnSpec
from schemashift.translation.ddl import render_create_table, render_native_table


@pytest.fixture
def specs():
    return [
        TargetColumnSpec(name="id", native_type="NUMBER", target_type="NUMBER(10)", nullable=False),
        TargetColumnSpec(name="name", native_type="VARCHAR2", target_type="VARCHAR2(50)", length=50),
    ]


class TestRenderCreateTable:
    """Tests for render_create_table."""

    def test_layout(self, specs):
        assert render_create_table("users", specs) == (
            "CREATE TABLE users (\n"
            "    id NUMBER(10) NOT NULL,\n"
            "    name VARCHAR2(50)\n"
            ");"
        )

    def test_byte_identical(self, specs):
        assert render_create_table("users", specs) == render_create_table("users", list(specs))

    def test_no_trailing_comma_or_newline(self, specs):
        ddl = render_create_table("users", specs)
        assert ",\n)" not in ddl
        assert not ddl.endswith("\n")

    def test_single_column(self):
        spec = TargetColumnSpec(name="x", native_type="DATE", target_type="DATE")
        assert render_create_table("t", [spec]) == "CREATE TABLE t (\n    x DATE\n);"

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            render_create_table("empty", [])


class TestRenderNativeTable:
    """Tests for render_native_table."""

    def test_default_before_not_null(self):
        ddl = render_native_table("T", [("STATUS", "VARCHAR2(1)", False, "'A'")])
        assert "    STATUS VARCHAR2(1) DEFAULT 'A' NOT NULL" in ddl
