"""
Type mapping tables between the supported dialects.

Each direction is a read-only mapping of normalized native type name to a
rule ``(length, precision, scale) -> target type``. Types without a rule
pass through unchanged and are reported as ``unmapped_type`` diagnostics.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from schemashift.models import (
    ColumnDescriptor,
    Diagnostic,
    DiagnosticKind,
    Dialect,
    TargetColumnSpec,
)

logger = logging.getLogger(__name__)

TypeRule = Callable[[Optional[int], Optional[int], Optional[int]], str]

_SIZE_SUFFIX = re.compile(r"\([^)]*\)")
_NON_NUMERIC_SPEC = re.compile(r"[^0-9,]")


def normalize_type_name(native_type: str) -> str:
    """
    Normalize a catalog type name for lookup.

    ``timestamp(6) with time zone`` -> ``TIMESTAMP WITH TIME ZONE``
    """
    name = _SIZE_SUFFIX.sub("", native_type or "")
    return " ".join(name.upper().split())


def parse_numeric_spec(type_string: str) -> Tuple[Optional[int], Optional[int]]:
    """
    Parse precision and scale out of a composite type string.

    Non-digit, non-comma characters are stripped before splitting on the
    comma. The first token is precision, the second scale; an absent scale
    defaults to 0. Strings without a size suffix yield ``(None, None)``.

    Raises:
        ValueError: if a size suffix is present but holds no usable
            precision, e.g. ``DECIMAL(x)``. Callers treat this as
            precision/scale absent.
    """
    if "(" not in (type_string or ""):
        return None, None

    parts = _NON_NUMERIC_SPEC.sub("", type_string).split(",")
    if not parts[0]:
        raise ValueError(f"No precision in numeric type {type_string!r}")

    precision = int(parts[0])
    scale = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    return precision, scale


# ---------------------------------------------------------------------------
# Rule builders
# ---------------------------------------------------------------------------

def _fixed(target: str) -> TypeRule:
    """Target type that takes no size attributes."""
    return lambda length, precision, scale: target


def _sized(target: str) -> TypeRule:
    """Character/binary target sized by the source length."""
    def rule(length, precision, scale):
        return f"{target}({length})" if length is not None else target
    return rule


def _mysql_decimal_to_number(length, precision, scale):
    if precision is None:
        return "NUMBER"
    return f"NUMBER({precision}, {scale if scale is not None else 0})"


def _oracle_number_to_mysql(length, precision, scale):
    if precision is not None and precision > 0:
        # NUMBER(p, -s) rounds left of the point; MySQL has no negative scale
        return f"DECIMAL({precision}, {scale if scale is not None and scale >= 0 else 0})"
    return "INT"


def _template(template: str) -> TypeRule:
    """Rule from a configured ``str.format`` template."""
    def rule(length, precision, scale):
        return template.format(length=length, precision=precision, scale=scale)
    return rule


MYSQL_TO_ORACLE_RULES: Dict[str, TypeRule] = {
    "VARCHAR": _sized("VARCHAR2"),
    "CHAR": _sized("CHAR"),
    "TINYINT": _fixed("NUMBER(3)"),
    "SMALLINT": _fixed("NUMBER(5)"),
    "MEDIUMINT": _fixed("NUMBER(7)"),
    "INT": _fixed("NUMBER(10)"),
    "INTEGER": _fixed("NUMBER(10)"),
    "BIGINT": _fixed("NUMBER(19)"),
    "DECIMAL": _mysql_decimal_to_number,
    "NUMERIC": _mysql_decimal_to_number,
    "FLOAT": _fixed("BINARY_FLOAT"),
    "DOUBLE": _fixed("BINARY_DOUBLE"),
    "TINYTEXT": _fixed("CLOB"),
    "TEXT": _fixed("CLOB"),
    "MEDIUMTEXT": _fixed("CLOB"),
    "LONGTEXT": _fixed("CLOB"),
    "DATE": _fixed("DATE"),
    "DATETIME": _fixed("TIMESTAMP"),
    "TIMESTAMP": _fixed("TIMESTAMP"),
    "TINYBLOB": _fixed("BLOB"),
    "BLOB": _fixed("BLOB"),
    "MEDIUMBLOB": _fixed("BLOB"),
    "LONGBLOB": _fixed("BLOB"),
    "BINARY": _sized("RAW"),
    "VARBINARY": _sized("RAW"),
}

ORACLE_TO_MYSQL_RULES: Dict[str, TypeRule] = {
    "VARCHAR2": _sized("VARCHAR"),
    "NVARCHAR2": _sized("VARCHAR"),
    "CHAR": _sized("CHAR"),
    "NCHAR": _sized("CHAR"),
    "NUMBER": _oracle_number_to_mysql,
    "FLOAT": _fixed("DOUBLE"),
    "BINARY_FLOAT": _fixed("FLOAT"),
    "BINARY_DOUBLE": _fixed("DOUBLE"),
    "DATE": _fixed("DATE"),
    "TIMESTAMP": _fixed("DATETIME"),
    "TIMESTAMP WITH TIME ZONE": _fixed("DATETIME"),
    "TIMESTAMP WITH LOCAL TIME ZONE": _fixed("DATETIME"),
    "CLOB": _fixed("TEXT"),
    "NCLOB": _fixed("TEXT"),
    "LONG": _fixed("LONGTEXT"),
    "BLOB": _fixed("LONGBLOB"),
    "RAW": _sized("VARBINARY"),
}

BUILTIN_RULES: Mapping[Tuple[Dialect, Dialect], Mapping[str, TypeRule]] = MappingProxyType({
    (Dialect.MYSQL, Dialect.ORACLE): MappingProxyType(MYSQL_TO_ORACLE_RULES),
    (Dialect.ORACLE, Dialect.MYSQL): MappingProxyType(ORACLE_TO_MYSQL_RULES),
})


def direction_key(source: Dialect, target: Dialect) -> str:
    """Settings key of a direction, e.g. ``mysql_to_oracle``."""
    return f"{source.value}_to_{target.value}"


class TypeMappingTable:
    """
    Read-only type correspondence for one (source, target) direction.

    Built once from the built-in rules plus optional template overrides;
    the merged rules are exposed through a mapping proxy and never change
    afterwards, so a table can be shared between readers freely.
    """

    def __init__(
        self,
        source: Dialect,
        target: Dialect,
        overrides: Optional[Mapping[str, str]] = None,
    ):
        key = (source, target)
        if key not in BUILTIN_RULES:
            raise ValueError(f"No type mapping from {source.label} to {target.label}")

        rules: Dict[str, TypeRule] = dict(BUILTIN_RULES[key])
        for native, template in (overrides or {}).items():
            rules[normalize_type_name(native)] = _template(str(template))
            logger.debug(f"Type override {direction_key(source, target)}: {native} -> {template}")

        self.source = source
        self.target = target
        self.rules: Mapping[str, TypeRule] = MappingProxyType(rules)

    def __contains__(self, native_type: str) -> bool:
        return normalize_type_name(native_type) in self.rules

    def map_type(
        self,
        native_type: str,
        length: Optional[int] = None,
        precision: Optional[int] = None,
        scale: Optional[int] = None,
        diagnostics: Optional[List[Diagnostic]] = None,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> str:
        """
        Translate one native type into the target dialect.

        Unmapped types come back unchanged; exactly one ``unmapped_type``
        diagnostic is appended to ``diagnostics`` (when given) for each such
        call.
        """
        rule = self.rules.get(normalize_type_name(native_type))
        if rule is not None:
            return rule(length, precision, scale)

        message = (
            f"No {self.source.label} -> {self.target.label} mapping for type "
            f"{native_type!r}; passed through unchanged"
        )
        logger.warning(f"{table + '.' if table else ''}{column or ''}: {message}")
        if diagnostics is not None:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.UNMAPPED_TYPE,
                native_type=native_type,
                message=message,
                table=table,
                column=column,
            ))
        return native_type

    def map_column(
        self,
        descriptor: ColumnDescriptor,
        diagnostics: Optional[List[Diagnostic]] = None,
        table: Optional[str] = None,
    ) -> TargetColumnSpec:
        """Translate a column descriptor into a target column spec."""
        target_type = self.map_type(
            descriptor.native_type,
            descriptor.length,
            descriptor.precision,
            descriptor.scale,
            diagnostics=diagnostics,
            table=table,
            column=descriptor.name,
        )
        length, precision, scale = target_size_attributes(target_type)
        return TargetColumnSpec(
            name=descriptor.name,
            native_type=normalize_type_name(target_type),
            target_type=target_type,
            length=length,
            precision=precision,
            scale=scale,
            nullable=descriptor.nullable,
        )


NUMERIC_TYPES = frozenset({"DECIMAL", "NUMERIC", "NUMBER"})

# Target types whose single size argument is a length
LENGTH_TYPES = frozenset({
    "VARCHAR", "VARCHAR2", "NVARCHAR2", "CHAR", "NCHAR", "RAW", "BINARY", "VARBINARY",
})

_SIZE_ARGS = re.compile(r"\(\s*(\d+)\s*(?:,\s*(-?\d+)\s*)?(?:CHAR|BYTE)?\s*\)", re.IGNORECASE)


def target_size_attributes(target_type: str) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """
    Size attributes ``(length, precision, scale)`` of a rendered target type.

    ``NUMBER(10)`` -> ``(None, 10, 0)``, ``VARCHAR2(50 CHAR)`` ->
    ``(50, None, None)``. Types without a size suffix, or whose suffix is
    not a length or numeric spec (``TIMESTAMP(6)``), yield all None.
    """
    name = normalize_type_name(target_type)
    match = _SIZE_ARGS.search(target_type or "")
    if match is None:
        return None, None, None
    if name in NUMERIC_TYPES:
        return None, int(match.group(1)), int(match.group(2)) if match.group(2) else 0
    if name in LENGTH_TYPES and match.group(2) is None:
        return int(match.group(1)), None, None
    return None, None, None


def resolve_numeric_spec(
    descriptor: ColumnDescriptor,
    diagnostics: Optional[List[Diagnostic]] = None,
    table: Optional[str] = None,
) -> ColumnDescriptor:
    """
    Fill in precision/scale of a numeric column from its composite type text.

    Applies only when the catalog did not report a precision. A composite
    string that cannot be parsed leaves precision/scale absent and records a
    ``malformed_numeric_spec`` diagnostic.
    """
    if descriptor.precision is not None:
        return descriptor
    if normalize_type_name(descriptor.native_type) not in NUMERIC_TYPES:
        return descriptor

    composite = descriptor.raw_type or descriptor.native_type
    try:
        precision, scale = parse_numeric_spec(composite)
    except ValueError as e:
        logger.warning(f"{table}.{descriptor.name}: {e}; treating precision/scale as absent")
        if diagnostics is not None:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.MALFORMED_NUMERIC_SPEC,
                native_type=composite,
                message=f"Could not parse precision/scale from {composite!r}",
                table=table,
                column=descriptor.name,
            ))
        return descriptor

    if precision is None:
        return descriptor
    return replace(descriptor, precision=precision, scale=scale)


_TABLES: Dict[Tuple[Dialect, Dialect], TypeMappingTable] = {}


def get_mapping_table(source: Dialect, target: Dialect) -> TypeMappingTable:
    """Return the shared built-in table for a direction (no overrides)."""
    key = (source, target)
    if key not in _TABLES:
        _TABLES[key] = TypeMappingTable(source, target)
    return _TABLES[key]
