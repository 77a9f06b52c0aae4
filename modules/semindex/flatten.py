"""
Facet flattening - tabular SELECT results to nested JSON.

Column names are split on "_". Every segment but the last names a nested
object, the last segment is the leaf key:

    authors_name   -> {"authors": {"name": "Ada"}}
    authors_names  -> {"authors": {"names": ["Ada", "Bob"]}}

When the first segment ends in "s" and so does the leaf, the column is
multi-valued: all non-null values over all rows, deduplicated, stored as a
list. Otherwise the column is single-valued and holds the value of the only
row (None when the result has zero or several rows).
"""

import logging
from typing import Any, Dict, List, Optional

from .errors import FlattenConflictError
from .models import TabularResult

logger = logging.getLogger(__name__)

SEPARATOR = "_"


def is_multi_valued(column: str) -> bool:
    segments = column.split(SEPARATOR)
    return segments[0].endswith("s") and segments[-1].endswith("s")


def _descend(root: Dict[str, Any], column: str, segments: List[str]) -> Dict[str, Any]:
    node = root
    for segment in segments:
        child = node.get(segment)
        if child is None and segment not in node:
            child = {}
            node[segment] = child
        elif not isinstance(child, dict):
            raise FlattenConflictError(column, segment)
        node = child
    return node


def _distinct(values: List[Optional[str]]) -> List[str]:
    # set semantics, order is not part of the contract
    return list(dict.fromkeys(v for v in values if v is not None))


class FacetFlattener:
    """Turns a TabularResult into a nested JSON object."""

    def flatten(self, result: TabularResult, target: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Flatten result into target (a fresh dict when omitted).

        Raises:
            FlattenConflictError: a column prefix collides with a scalar or list
        """
        out = {} if target is None else target
        if len(result) > 1:
            single = [c for c in result.vars if not is_multi_valued(c)]
            if single:
                logger.warning(
                    f"Single-valued columns {single} got {len(result)} rows, values dropped and null stored"
                )

        for column in result.vars:
            segments = column.split(SEPARATOR)
            parent = _descend(out, column, segments[:-1])
            leaf = segments[-1]

            if isinstance(parent.get(leaf), dict):
                raise FlattenConflictError(column, leaf)

            if is_multi_valued(column):
                parent[leaf] = _distinct(result.collect_values(column))
            else:
                parent[leaf] = result.collect_value(column)
        return out


def merge_fragment(base: Dict[str, Any], fragment: Dict[str, Any], path: str = "") -> Dict[str, Any]:
    """
    Deep-merge fragment into a copy of base and return the copy.

    Objects merge recursively, leaves from fragment win. An object meeting a
    non-object on either side raises FlattenConflictError and leaves base untouched.
    """
    merged = dict(base)
    for key, value in fragment.items():
        where = f"{path}{SEPARATOR}{key}" if path else key
        if key not in merged:
            merged[key] = value
            continue
        current = merged[key]
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_fragment(current, value, where)
        elif isinstance(current, dict) or isinstance(value, dict):
            raise FlattenConflictError(where, key)
        else:
            merged[key] = value
    return merged
