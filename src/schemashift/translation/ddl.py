"""
DDL renderer for CREATE TABLE statements.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from schemashift.models import TargetColumnSpec

INDENT = "    "


def render_column_line(
    name: str,
    type_sql: str,
    nullable: bool = True,
    default: Optional[str] = None,
) -> str:
    """Render one ``<name> <type>[ DEFAULT x][ NOT NULL]`` column line."""
    line = f"{INDENT}{name} {type_sql}"
    if default is not None:
        line += f" DEFAULT {default}"
    if not nullable:
        line += " NOT NULL"
    return line


def render_table(table_name: str, column_lines: Sequence[str]) -> str:
    """Wrap pre-rendered column lines in a CREATE TABLE statement."""
    if not column_lines:
        raise ValueError(f"Cannot render CREATE TABLE {table_name} without columns")
    body = ",\n".join(column_lines)
    return f"CREATE TABLE {table_name} (\n{body}\n);"


def render_create_table(table_name: str, specs: Iterable[TargetColumnSpec]) -> str:
    """
    Render a target-dialect CREATE TABLE statement.

    Output is deterministic and has no trailing newline::

        CREATE TABLE users (
            id NUMBER(10) NOT NULL,
            name VARCHAR2(50)
        );

    Raises:
        ValueError: if ``specs`` is empty.
    """
    lines: List[str] = [
        render_column_line(spec.name, spec.target_type, spec.nullable)
        for spec in specs
    ]
    return render_table(table_name, lines)


def render_native_table(
    table_name: str,
    columns: Iterable[Tuple[str, str, bool, Optional[str]]],
) -> str:
    """Render source-dialect DDL from ``(name, type_sql, nullable, default)`` tuples."""
    lines = [render_column_line(*col) for col in columns]
    return render_table(table_name, lines)
