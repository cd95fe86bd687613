"""Query examples and hint rewriting for merged result documents.

Nothing here executes queries. The functions format example invocations for
an external ``jq`` and rewrite hint paths so they stay valid when several
single-item documents are combined under one parent::

    {"summary": {...}, "items": [{"raw": ..., "calculated": ...}, ...]}

Rewriting is purely textual and depends only on ``(query, scope)``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
import dataclasses
import os
import re
from typing import Any

from cc_report.constants import DECOMPRESS_COMMAND, DEFAULT_MERGE_COLLECTION, QUERY_TOOL
from cc_report.core.hints import HintScope, QueryHint

_FIELD_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def generate_jq_examples(
    hints: Iterable[QueryHint], file_path: str | os.PathLike[str]
) -> list[str]:
    """Format one runnable example per hint.

    Example:
        ``xzcat var/results/x.json.xz | jq '.raw.github_api.name'  # Repository name``
    """
    path = os.fspath(file_path)
    return [
        f"{DECOMPRESS_COMMAND} {path} | {QUERY_TOOL} '{hint.query}'  # {hint.description}"
        for hint in hints
    ]


def _collection_accessor(collection: str) -> str:
    name = collection.strip().lstrip(".")
    if name.endswith("[]"):
        name = name[:-2]
    if not _FIELD_NAME_RE.fullmatch(name):
        raise ValueError(f"collection must be a plain field name, got {collection!r}")
    return f".{name}[]"


def rewrite_query_for_merge(
    query: str, scope: HintScope | str, collection: str = DEFAULT_MERGE_COLLECTION
) -> str:
    """Return the query that is valid against the merged parent document.

    Only ``single_item`` queries change: ``.raw.x`` becomes ``.items[].raw.x``.
    """
    if HintScope(scope) is not HintScope.SINGLE_ITEM:
        return query
    return f"{_collection_accessor(collection)}.{query.removeprefix('.')}"


def rewrite_hint_for_merge(
    hint: QueryHint, collection: str = DEFAULT_MERGE_COLLECTION
) -> QueryHint:
    """Rewrite one hint for the merged document.

    A rewritten ``single_item`` hint becomes ``all_items`` since it now
    addresses the whole collection; merging it again leaves it untouched.
    """
    if hint.scope is not HintScope.SINGLE_ITEM:
        return hint
    return dataclasses.replace(
        hint,
        query=rewrite_query_for_merge(hint.query, hint.scope, collection),
        scope=HintScope.ALL_ITEMS,
    )


def merge_hints(
    hint_lists: Iterable[Iterable[QueryHint]],
    collection: str = DEFAULT_MERGE_COLLECTION,
) -> list[QueryHint]:
    """Rewrite hints gathered from many per-item documents.

    Per-item providers usually emit the same hints, so the result is
    de-duplicated by ``(query, scope)``, keeping first-seen order and
    description.
    """
    seen: set[tuple[str, HintScope]] = set()
    merged: list[QueryHint] = []
    for hints in hint_lists:
        for hint in hints:
            rewritten = rewrite_hint_for_merge(hint, collection)
            key = (rewritten.query, rewritten.scope)
            if key in seen:
                continue
            seen.add(key)
            merged.append(rewritten)
    return merged


def build_merged_document(
    items: Sequence[Mapping[str, Any]],
    parent_fields: Mapping[str, Any] | None = None,
    collection: str = DEFAULT_MERGE_COLLECTION,
) -> dict[str, Any]:
    """Combine per-item documents under one parent.

    Parent fields are copied unchanged so ``parent_level`` hints keep
    resolving; the items land under ``collection`` in the given order.
    """
    name = _collection_accessor(collection)[1:-2]
    parent = dict(parent_fields or {})
    if name in parent:
        raise ValueError(f"parent_fields already contains the collection key {name!r}")
    parent[name] = [dict(item) for item in items]
    return parent
