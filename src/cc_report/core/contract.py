"""The contract every data provider implements.

Providers expose the same underlying fields two ways:

- ``to_flat_view``: a lossy ``KEY -> str`` projection for the text consumer.
- ``to_namespaced_document``: the lossless, provenance-tagged view persisted
  to result files.

``get_hints`` advertises ``jq`` paths into the namespaced view. Producers that
are polymorphic over data sources take any ``DataProvider``; the concrete
implementation is chosen by plain construction.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import datetime
import json
import re
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from cc_report.constants import DATA_KEY_PATTERN, LIST_SEPARATOR

if TYPE_CHECKING:
    from cc_report.core.hints import QueryHint
    from cc_report.core.types import NamespacedDocument

_DATA_KEY_RE = re.compile(DATA_KEY_PATTERN)
_SIMPLE_PATH_RE = re.compile(r"^(\.[A-Za-z_][A-Za-z0-9_]*)+$")


@runtime_checkable
class DataProvider(Protocol):
    """Duck-typed protocol for anything that contributes report data."""

    def get_hints(self) -> Sequence[QueryHint]: ...  # noqa: D102
    def to_namespaced_document(self) -> NamespacedDocument: ...  # noqa: D102
    def to_flat_view(self) -> Mapping[str, str]: ...  # noqa: D102


def is_valid_data_key(key: str) -> bool:
    """Return True for UPPER_SNAKE_CASE keys."""
    return isinstance(key, str) and bool(_DATA_KEY_RE.match(key))


def flatten_value(value: Any) -> str:
    """Render one value for the flat view.

    Lists and tuples are comma-joined, booleans become ``true``/``false``,
    ``None`` becomes an empty string, mappings become compact JSON and
    datetimes use ISO 8601. Everything else goes through ``str``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime.datetime | datetime.date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), sort_keys=True, default=str)
    if isinstance(value, list | tuple | set | frozenset):
        items = sorted(value, key=str) if isinstance(value, set | frozenset) else value
        return LIST_SEPARATOR.join(flatten_value(v) for v in items)
    return str(value)


def resolve_query(document: Mapping[str, Any], query: str) -> Any:
    """Resolve a plain dotted path such as ``.raw.github_api.name``.

    Only the ``.a.b.c`` form is supported; this is a consistency check for
    hints, not a query engine.

    Raises:
        ValueError: If the query is not a plain dotted path.
        KeyError: If a segment is missing from the document.
    """
    if not _SIMPLE_PATH_RE.match(query):
        raise ValueError(f"Only plain dotted paths can be resolved, got {query!r}")
    current: Any = document
    for segment in query.lstrip(".").split("."):
        if not isinstance(current, Mapping) or segment not in current:
            raise KeyError(f"{query}: segment {segment!r} not found")
        current = current[segment]
    return current
