"""
Project-wide constants for the reporting core
"""  # noqa: D200, D212, D415

# ==============================================================================
# Result Files
# ==============================================================================

RESULTS_SUBDIR = "var/results"
RESULT_FILE_EXTENSION = ".json.xz"
RESULT_DATE_FORMAT = "%Y-%m-%d"
RESULT_TIME_FORMAT = "%H-%M-%S"

# Same as `xz -z -6`
DEFAULT_COMPRESSION_PRESET = 6

# ==============================================================================
# Retention
# ==============================================================================

DEFAULT_MAX_AGE_HOURS = 168  # 7 days
DEFAULT_MAX_FILES = 50

# ==============================================================================
# Query Hints
# ==============================================================================

NAMESPACE_ROOTS = (".raw", ".calculated")
DEFAULT_MERGE_COLLECTION = "items"
DECOMPRESS_COMMAND = "xzcat"
QUERY_TOOL = "jq"

# ==============================================================================
# Flat View
# ==============================================================================

DATA_KEY_PATTERN = r"^[A-Z][A-Z0-9_]*$"
LIST_SEPARATOR = ", "
RESULT_FILE_DATA_KEY = "RESULT_FILE"
