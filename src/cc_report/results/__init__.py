"""Result file management and query hint utilities."""

from cc_report.results.artifact import (
    get_uncompressed_size,
    read_compressed_json,
    validate_compressed_file,
    write_compressed_json,
)
from cc_report.results.files import (
    CleanupReport,
    ResultFileManager,
    ResultFileRecord,
    ResultFileStats,
)
from cc_report.results.queries import (
    build_merged_document,
    generate_jq_examples,
    merge_hints,
    rewrite_hint_for_merge,
    rewrite_query_for_merge,
)

__all__ = [  # noqa: RUF022
    # Lifecycle
    "ResultFileManager",
    "ResultFileRecord",
    "ResultFileStats",
    "CleanupReport",
    # Artifacts
    "write_compressed_json",
    "read_compressed_json",
    "validate_compressed_file",
    "get_uncompressed_size",
    # Query hints
    "generate_jq_examples",
    "rewrite_query_for_merge",
    "rewrite_hint_for_merge",
    "merge_hints",
    "build_merged_document",
]
