"""
Structural Differ

Computes the changes that turn an "old" nested data tree into a "new" one.
The diff is one-directional: only keys of the old tree are reported, with
the value they hold in the new tree (None when the new tree lacks them).
"""

import logging
import math
import re
import time
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional, Tuple

from src.utils.metrics_collector import MetricsCollector, get_default_collector

logger = logging.getLogger(__name__)

BRANCH_TYPES = (Mapping, list, tuple)

# Plain decimal or exponent notation only; no "1_000", "Infinity" or "nan"
NUMERIC_STRING = re.compile(r"\s*[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?\s*")


def is_branch(value: Any) -> bool:
    return isinstance(value, BRANCH_TYPES)


def _items(branch: Any) -> Iterable[Tuple[Any, Any]]:
    if isinstance(branch, Mapping):
        return branch.items()
    return enumerate(branch)


def _lookup(branch: Any, key: Any) -> Any:
    """Value at key in a mapping or sequence branch; None when absent."""
    if isinstance(branch, Mapping):
        return branch.get(key)
    if isinstance(branch, (list, tuple)) and isinstance(key, int) and 0 <= key < len(branch):
        return branch[key]
    return None


def _as_number(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return None
    if isinstance(value, str) and NUMERIC_STRING.fullmatch(value):
        return Decimal(value.strip())
    return None


def _is_nan(value: Any) -> bool:
    if isinstance(value, float):
        return math.isnan(value)
    return isinstance(value, Decimal) and value.is_nan()


def strict_equal(old_value: Any, new_value: Any) -> bool:
    """
    Typed equality: Python == except that bools only equal bools and
    NaN equals NaN.
    """
    if isinstance(old_value, bool) != isinstance(new_value, bool):
        return False
    if _is_nan(old_value) and _is_nan(new_value):
        return True
    return old_value == new_value


def loose_equal(old_value: Any, new_value: Any) -> bool:
    """
    Coercive equality for data that went through string-typed storage.

    - None and bools compare by truthiness ("" == None, 0 == False)
    - numbers and numeric strings compare by value ("5" == 5, "1.0" == 1);
      only plain decimal or exponent strings count as numeric
    - NaN equals NaN
    - anything else falls back to ==
    """
    if old_value is None or new_value is None:
        if isinstance(old_value, str) or isinstance(new_value, str):
            return (old_value or "") == (new_value or "")
        return not old_value and not new_value

    if isinstance(old_value, bool) or isinstance(new_value, bool):
        return bool(old_value) == bool(new_value)

    old_number = _as_number(old_value)
    new_number = _as_number(new_value)
    if old_number is not None and new_number is not None:
        if old_number.is_nan() or new_number.is_nan():
            return old_number.is_nan() and new_number.is_nan()
        return old_number == new_number

    return old_value == new_value


def count_leaves(change_set: Any) -> int:
    """Number of leaf values in a change set."""
    if not is_branch(change_set):
        return 1
    return sum(count_leaves(value) for _, value in _items(change_set))


class StructureDiffer:
    """
    Recursive, one-directional diff of nested mappings.

    Mappings, lists and tuples are branches; everything else is a leaf.
    Sequence branches are walked by index and reported as dicts keyed by
    that index.
    """

    def __init__(
        self,
        loose_equality: bool = False,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize the differ.

        Args:
            loose_equality: Compare leaves with loose_equal instead of
                strict_equal
            metrics: Collector to record reported changes and timings.
                It must have the blib metrics registered.
        """
        self.loose_equality = loose_equality
        self.metrics = metrics
        self._equal = loose_equal if loose_equality else strict_equal
        logger.debug(f"Initialized StructureDiffer (loose_equality={loose_equality})")

    def changes(self, old: Any, new: Any) -> Dict[Any, Any]:
        """
        Compute what changed between two trees.

        Args:
            old: Tree to diff from
            new: Tree to diff against

        Returns:
            Dict shaped like old holding only the keys whose value differs,
            with the new value (None if missing in new). Nested branches are
            included only when something beneath them differs. When either
            tree is empty the result is empty, even if the other one is not.
        """
        if not old or not new:
            logger.debug("Empty input, skipping diff")
            return {}

        start_time = time.perf_counter()
        result = self._walk(old, new)
        duration = time.perf_counter() - start_time

        changed = count_leaves(result) if result else 0
        if self.metrics is not None:
            self.metrics.increment_counter("diff_changes_total", value=changed)
            self.metrics.observe_histogram(
                "processing_duration_seconds",
                duration,
                labels={"operation": "diff"}
            )

        logger.debug(
            f"Diff found {changed} changed values in {len(result)} top-level keys",
            extra={"operation": "diff", "changes": changed}
        )
        return result

    def _walk(self, old: Any, new: Any) -> Dict[Any, Any]:
        final: Dict[Any, Any] = {}

        for key, old_value in _items(old):
            new_value = _lookup(new, key)

            if is_branch(old_value):
                child = self._walk(old_value, new_value if is_branch(new_value) else {})
                if child:
                    final[key] = child
            elif not self._equal(old_value, new_value):
                final[key] = new_value

        return final


def diff(old: Any, new: Any, loose_equality: bool = False) -> Dict[Any, Any]:
    """Shortcut for StructureDiffer(loose_equality).changes(old, new)."""
    return StructureDiffer(
        loose_equality=loose_equality,
        metrics=get_default_collector()
    ).changes(old, new)
