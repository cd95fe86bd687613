"""Dual-output reporting core: flat key/value stream plus compressed JSON results."""

import importlib.metadata
import logging

from cc_report.config import ReportSettings, resolve_settings
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
from cc_report.envelope import (
    Action,
    ActionStatus,
    FileOperation,
    FileOperationKind,
    ResponseEnvelope,
)
from cc_report.exceptions import (
    ArtifactError,
    ConfigurationError,
    ReportError,
    ResultsDirectoryError,
    ResultsMaintenanceError,
)
from cc_report.results import (
    CleanupReport,
    ResultFileManager,
    ResultFileRecord,
    ResultFileStats,
    build_merged_document,
    generate_jq_examples,
    merge_hints,
    read_compressed_json,
    rewrite_hint_for_merge,
    write_compressed_json,
)

try:
    __version__ = importlib.metadata.version("cc-report")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
# This prevents 'No handler found' errors if the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Envelope
    "ResponseEnvelope",
    "Action",
    "ActionStatus",
    "FileOperation",
    "FileOperationKind",
    "CommandError",
    # Data contract
    "DataProvider",
    "NamespacedDocument",
    "ResultMetadata",
    "validate_namespaced_document",
    "flatten_value",
    "resolve_query",
    # Query hints
    "QueryHint",
    "HintScope",
    "generate_jq_examples",
    "rewrite_hint_for_merge",
    "merge_hints",
    "build_merged_document",
    # Result files
    "ResultFileManager",
    "ResultFileRecord",
    "ResultFileStats",
    "CleanupReport",
    "write_compressed_json",
    "read_compressed_json",
    # Result types
    "Result",
    "Success",
    "Failure",
    # Configuration
    "ReportSettings",
    "resolve_settings",
    # Exceptions
    "ReportError",
    "ConfigurationError",
    "ResultsDirectoryError",
    "ArtifactError",
    "ResultsMaintenanceError",
]
