"""Exceptions raised by the reporting core.

Only faults the caller must act on are raised. Maintenance faults (cleanup,
statistics) are reported as data instead; see ``cc_report.results.files``.
"""


class ReportError(Exception):
    """Base exception for reporting errors"""  # noqa: D415


class ConfigurationError(ReportError):
    """Raised when report settings cannot be resolved"""  # noqa: D415


class ResultsDirectoryError(ReportError):
    """Raised when the results directory cannot be created"""  # noqa: D415


class ArtifactError(ReportError):
    """Raised when a compressed result file cannot be written or read"""  # noqa: D415


class ResultsMaintenanceError(ReportError):
    """Describes a failed retention sweep (returned, not raised)"""  # noqa: D415
