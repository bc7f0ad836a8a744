"""
Utility modules.
"""

from schemashift.utils.review import ReviewReport

__all__ = ["ReviewReport"]
