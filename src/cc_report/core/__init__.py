"""Core contracts and value types for the reporting pipeline."""

from cc_report.core.contract import DataProvider, flatten_value, resolve_query
from cc_report.core.errors import CommandError
from cc_report.core.hints import HintScope, QueryHint
from cc_report.core.types import (
    Failure,
    NamespacedDocument,
    Result,
    ResultMetadata,
    Success,
    validate_namespaced_document,
)

__all__ = [  # noqa: RUF022
    "DataProvider",
    "flatten_value",
    "resolve_query",
    "CommandError",
    "HintScope",
    "QueryHint",
    "NamespacedDocument",
    "ResultMetadata",
    "validate_namespaced_document",
    "Result",
    "Success",
    "Failure",
]
