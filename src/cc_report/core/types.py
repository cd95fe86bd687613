"""Core data types shared by providers, envelopes and result files.

Values here are plain, immutable where possible, and carry no I/O. The
``Result`` sum type makes recoverable failures part of the data flow so
callers can inspect outcomes instead of catching exceptions.
"""

from __future__ import annotations

import dataclasses
import typing

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result Monad for Explicit Error Handling ---
# Maintenance operations return one of these instead of raising so the
# calling command can continue and tests can assert on outcomes directly.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful outcome."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed outcome, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- JSON Values ---

type JsonScalar = str | int | float | bool | None
type JsonValue = JsonScalar | list[JsonValue] | dict[str, JsonValue]
type JsonObject = dict[str, JsonValue]


# --- Namespaced Documents ---


class NamespacedDocument(typing.TypedDict):
    """Provenance-tagged document persisted to result files.

    ``raw`` holds values taken verbatim from an upstream source (grouped by
    source, e.g. ``github_api``); ``calculated`` holds values derived by the
    provider (grouped by calculation, e.g. ``time_calculations``).
    """

    raw: dict[str, typing.Any]
    calculated: dict[str, typing.Any]


class ResultMetadata(typing.TypedDict, total=False):
    """Execution metadata stored next to the namespaces in a result file."""

    command: str
    arguments: str
    generated_at: str
    execution_time_ms: int


def validate_namespaced_document(document: typing.Any) -> NamespacedDocument:
    """Check the namespace shape and return the document unchanged.

    Raises:
        ValueError: If either namespace is missing or not a mapping, or if the
            two namespaces share a top-level key.
    """
    _require(
        condition=isinstance(document, typing.Mapping),
        message="must be a mapping with 'raw' and 'calculated' keys",
        field_name="document",
    )
    for namespace in ("raw", "calculated"):
        _require(
            condition=isinstance(document.get(namespace), typing.Mapping),
            message="must be present and be a mapping",
            field_name=namespace,
        )
    shared = set(document["raw"]) & set(document["calculated"])
    _require(
        condition=not shared,
        message=f"namespaces share top-level keys: {sorted(shared)}",
        field_name="document",
    )
    return typing.cast("NamespacedDocument", document)
