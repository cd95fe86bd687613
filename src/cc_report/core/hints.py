"""Query hints for locating data inside result files.

A hint pairs a ``jq`` path with a human-readable description and a scope. The
scope tells the merge engine how the query must change when many single-item
documents are combined into one parent document:

- ``single_item``: written against one namespaced document; rewritten to apply
  per element of the merged collection.
- ``all_items``: already addresses the collection; unchanged.
- ``parent_level``: addresses parent fields of the merged document; unchanged.

Hints are immutable and hashable so they can be de-duplicated in sets.
"""

from __future__ import annotations

import dataclasses
import enum
import re

from cc_report.constants import NAMESPACE_ROOTS
from cc_report.core.types import _require


class HintScope(enum.StrEnum):
    """How a hint is rewritten during hierarchical merging."""

    SINGLE_ITEM = "single_item"
    ALL_ITEMS = "all_items"
    PARENT_LEVEL = "parent_level"


def _has_namespace_root(query: str) -> bool:
    # ".raw" and ".raw.x" / ".raw[0]" qualify, ".rawdata" does not
    return any(
        query == root or query.startswith((f"{root}.", f"{root}[", f"{root} "))
        for root in NAMESPACE_ROOTS
    )


# ".items[]" style accessor produced by merge rewriting
_COLLECTION_PREFIX_RE = re.compile(r"^\.[A-Za-z_][A-Za-z0-9_]*\[\]")


def _has_item_root(query: str) -> bool:
    match = _COLLECTION_PREFIX_RE.match(query)
    return match is not None and _has_namespace_root(query[match.end() :])


@dataclasses.dataclass(frozen=True, slots=True)
class QueryHint:
    """A queryable path into a result document.

    Attributes:
        query: ``jq`` expression rooted at ``.raw`` or ``.calculated``
            (``all_items`` hints may prefix the root with a collection
            accessor such as ``.items[]``; parent-level hints may use any
            root starting with ``.``)
        description: What the query returns, shown next to the example
        scope: Merge-time rewrite rule
    """

    query: str
    description: str
    scope: HintScope = HintScope.SINGLE_ITEM

    def __post_init__(self) -> None:
        """Validate query shape for the declared scope."""
        _require(
            condition=isinstance(self.query, str) and self.query.strip() != "",
            message="must be a non-empty string",
            field_name="QueryHint.query",
        )
        _require(
            condition=isinstance(self.description, str)
            and self.description.strip() != "",
            message="must be a non-empty string",
            field_name="QueryHint.description",
        )
        # Accept plain strings for ergonomic construction from literals
        if not isinstance(self.scope, HintScope):
            object.__setattr__(self, "scope", HintScope(self.scope))

        if self.scope is HintScope.PARENT_LEVEL:
            _require(
                condition=self.query.startswith("."),
                message="must start with '.'",
                field_name="QueryHint.query",
            )
        elif self.scope is HintScope.ALL_ITEMS:
            _require(
                condition=_has_namespace_root(self.query)
                or _has_item_root(self.query),
                message=(
                    f"must start with one of {list(NAMESPACE_ROOTS)}, optionally "
                    f"behind a collection accessor such as '.items[]', got {self.query!r}"
                ),
                field_name="QueryHint.query",
            )
        else:
            _require(
                condition=_has_namespace_root(self.query),
                message=f"must start with one of {list(NAMESPACE_ROOTS)}, got {self.query!r}",
                field_name="QueryHint.query",
            )
