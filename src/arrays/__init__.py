"""
Structural Diff Module for blib

Reports which values of an "old" nested mapping differ in a "new" one.

Usage:
    from src.arrays import diff, StructureDiffer

    diff({"a": 1, "b": {"c": 2, "d": 3}}, {"a": 1, "b": {"c": 2, "d": 4}})
    # {"b": {"d": 4}}

    # Treat "5" and 5 as equal, as string-typed storage would
    differ = StructureDiffer(loose_equality=True)
    differ.changes({"qty": 5}, {"qty": "5"})  # {}
"""

from src.arrays.differ import (
    StructureDiffer,
    diff,
    count_leaves,
    strict_equal,
    loose_equal,
)

changes = diff

__all__ = [
    "StructureDiffer",
    "diff",
    "changes",
    "count_leaves",
    "strict_equal",
    "loose_equal",
]

__version__ = "1.0.0"
