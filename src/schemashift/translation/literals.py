"""
Literal encoder: renders a RowValue as a SQL literal for a target dialect.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Dict, Sequence

from schemashift.models import Dialect, RowValue, ValueKind

logger = logging.getLogger(__name__)

ORACLE_DATE_FORMAT = "YYYY-MM-DD"
ORACLE_TIMESTAMP_FORMAT = "YYYY-MM-DD HH24:MI:SS.FF"


def quote_text(text: str) -> str:
    """Single-quote a string, doubling embedded single quotes."""
    return "'" + text.replace("'", "''") + "'"


def _encode_null(value, dialect: Dialect) -> str:
    return "NULL"


def _encode_text(value: str, dialect: Dialect) -> str:
    return quote_text(value)


def _encode_integer(value: int, dialect: Dialect) -> str:
    return str(int(value))


def _encode_decimal(value: Decimal, dialect: Dialect) -> str:
    # Positional notation: Decimal("1E+2") -> "100"
    text = format(value, "f")
    return "0" if text == "-0" else text


def _encode_date(value: date, dialect: Dialect) -> str:
    text = value.isoformat()
    if dialect is Dialect.ORACLE:
        return f"TO_DATE('{text}', '{ORACLE_DATE_FORMAT}')"
    return f"'{text}'"


def _encode_timestamp(value: datetime, dialect: Dialect) -> str:
    naive = value.replace(tzinfo=None)
    if dialect is Dialect.ORACLE:
        text = naive.isoformat(sep=" ", timespec="microseconds")
        return f"TO_TIMESTAMP('{text}', '{ORACLE_TIMESTAMP_FORMAT}')"
    timespec = "microseconds" if naive.microsecond else "seconds"
    return f"'{naive.isoformat(sep=' ', timespec=timespec)}'"


_ENCODERS: Dict[ValueKind, Callable[..., str]] = {
    ValueKind.NULL: _encode_null,
    ValueKind.TEXT: _encode_text,
    ValueKind.DATE: _encode_date,
    ValueKind.TIMESTAMP: _encode_timestamp,
    ValueKind.INTEGER: _encode_integer,
    ValueKind.DECIMAL: _encode_decimal,
}

_missing = set(ValueKind) - set(_ENCODERS)
if _missing:
    raise ImportError(f"Literal encoder does not handle value kinds: {sorted(k.value for k in _missing)}")


def encode(value: RowValue, dialect: Dialect) -> str:
    """
    Render ``value`` as a literal of ``dialect``.

    Every ValueKind has an encoder, so this never raises for a RowValue.
    """
    return _ENCODERS[value.kind](value.value, dialect)


def encode_python(value, dialect: Dialect) -> str:
    """
    Classify a raw driver value and encode it.

    Raises:
        EncodingFailure: if the value is outside the supported variants.
    """
    return encode(RowValue.of(value), dialect)


def encode_row(values: Sequence[RowValue], dialect: Dialect) -> str:
    """Encode a row's values, comma-joined in column order."""
    return ", ".join(encode(v, dialect) for v in values)


__all__ = [
    "encode",
    "encode_python",
    "encode_row",
    "quote_text",
]
