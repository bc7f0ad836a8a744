"""
Output module for writing generated SQL scripts.
"""

from schemashift.output.writer import MYSQL_NO_BACKSLASH_ESCAPES, ScriptWriter

__all__ = [
    "MYSQL_NO_BACKSLASH_ESCAPES",
    "ScriptWriter",
]
