"""Result file lifecycle: naming, provisioning, retention and statistics.

All operations work on one explicit results directory. Only directory
creation and artifact writes raise; listing, statistics and retention sweeps
are maintenance tasks and report problems as data so the calling command is
never aborted by them.

Concurrent processes may share the directory without locking. Every stat and
delete tolerates the file having disappeared in the meantime.
"""

from __future__ import annotations

from collections.abc import Iterator
import dataclasses
import datetime
import logging
import math
import os
from pathlib import Path
import time
from typing import TYPE_CHECKING, Any

from cc_report.constants import (
    DEFAULT_COMPRESSION_PRESET,
    DEFAULT_MAX_AGE_HOURS,
    DEFAULT_MAX_FILES,
    RESULT_DATE_FORMAT,
    RESULT_FILE_EXTENSION,
    RESULT_TIME_FORMAT,
    RESULTS_SUBDIR,
)
from cc_report.core.types import Failure, Result, Success
from cc_report.exceptions import ResultsDirectoryError, ResultsMaintenanceError
from cc_report.results.artifact import write_compressed_json

if TYPE_CHECKING:
    from cc_report.config import ReportSettings
    from cc_report.envelope import ResponseEnvelope

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class ResultFileRecord:
    """A result file as seen by one directory scan. Never cached."""

    path: Path
    mtime: float  # seconds since the epoch
    size_bytes: int

    @property
    def modified_time(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self.mtime)


@dataclasses.dataclass(frozen=True, slots=True)
class ResultFileStats:
    """Summary of the results directory."""

    total_files: int = 0
    total_size_bytes: int = 0
    oldest_file: datetime.datetime | None = None
    newest_file: datetime.datetime | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class CleanupReport:
    """Outcome of a retention sweep.

    Attributes:
        deleted: Files removed across both phases
        failures: ``(path, message)`` for files that could not be removed
    """

    deleted: int = 0
    failures: tuple[tuple[str, str], ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


def _is_unbounded(limit: float | None) -> bool:
    return limit is None or math.isinf(limit)


class ResultFileManager:
    """Manages ``<results_dir>/<command>_<YYYY-MM-DD>_<HH-MM-SS>.json.xz`` files."""

    __slots__ = ("compression_preset", "results_dir")

    def __init__(
        self,
        results_dir: str | os.PathLike[str],
        compression_preset: int = DEFAULT_COMPRESSION_PRESET,
    ) -> None:
        self.results_dir = Path(results_dir)
        self.compression_preset = compression_preset

    @classmethod
    def for_root(cls, root: str | os.PathLike[str]) -> ResultFileManager:
        """Manager for the conventional ``<root>/var/results`` directory."""
        return cls(Path(root) / RESULTS_SUBDIR)

    @classmethod
    def from_settings(cls, settings: ReportSettings) -> ResultFileManager:
        return cls(settings.results_dir, settings.compression_preset)

    def __repr__(self) -> str:
        return f"ResultFileManager({str(self.results_dir)!r})"

    # --- Naming and provisioning ---

    def generate_result_file_path(
        self, command_name: str, timestamp: datetime.datetime | None = None
    ) -> Path:
        """Build the artifact path for a command run.

        Without ``timestamp`` the local wall-clock time is used. An explicit
        timestamp is formatted from its own fields, which keeps tests
        deterministic. Two calls in the same second yield the same path.
        """
        if not command_name or not command_name.strip():
            raise ValueError("command_name must be a non-empty string")
        if "/" in command_name or os.sep in command_name:
            raise ValueError(f"command_name must not contain path separators: {command_name!r}")
        ts = timestamp or datetime.datetime.now()
        filename = (
            f"{command_name}_{ts.strftime(RESULT_DATE_FORMAT)}_"
            f"{ts.strftime(RESULT_TIME_FORMAT)}{RESULT_FILE_EXTENSION}"
        )
        return self.results_dir / filename

    def ensure_results_directory(self) -> Path:
        """Create the results directory and its parents if absent.

        Raises:
            ResultsDirectoryError: If creation fails (e.g. permission denied).
        """
        try:
            self.results_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ResultsDirectoryError(
                f"Failed to create results directory {self.results_dir}: {e}"
            ) from e
        return self.results_dir

    def write_result(
        self,
        command_name: str,
        document: Any,
        *,
        timestamp: datetime.datetime | None = None,
        envelope: ResponseEnvelope | None = None,
    ) -> Path:
        """Write ``document`` as a new artifact and return its path.

        When an envelope is given, the path, the file operation and a
        success action are recorded on it.

        Raises:
            ResultsDirectoryError: If the directory cannot be created.
            ArtifactError: If the artifact cannot be written.
        """
        self.ensure_results_directory()
        path = self.generate_result_file_path(command_name, timestamp)
        written = write_compressed_json(document, path, self.compression_preset)
        if envelope is not None:
            envelope.set_result_path(path)
            envelope.add_file(path, "created", written)
            envelope.add_action("Write result file", "success", f"Created: {path}")
        return path

    # --- Scanning ---

    def _iter_records(self) -> Iterator[ResultFileRecord]:
        """Yield records for matching files; raises if the listing fails.

        A missing directory yields nothing. Entries that cannot be stat'ed
        are logged and skipped.
        """
        try:
            entries = os.scandir(self.results_dir)
        except FileNotFoundError:
            return
        with entries:
            for entry in entries:
                if not entry.name.endswith(RESULT_FILE_EXTENSION):
                    continue
                try:
                    if not entry.is_file():
                        continue
                    st = entry.stat()
                except FileNotFoundError:
                    # Removed by a concurrent sweep between listing and stat
                    continue
                except OSError as e:
                    log.warning("Skipping unreadable result file %s: %s", entry.path, e)
                    continue
                yield ResultFileRecord(Path(entry.path), st.st_mtime, st.st_size)

    def _scan(self) -> list[ResultFileRecord]:
        records = list(self._iter_records())
        records.sort(key=lambda r: (r.mtime, r.path.name), reverse=True)
        return records

    def list_result_files(self) -> list[ResultFileRecord]:
        """Return result files newest first, ties broken by name descending.

        A missing directory yields an empty list; an unreadable one is logged
        and also yields an empty list.
        """
        try:
            return self._scan()
        except OSError as e:
            log.warning("Failed to list result files in %s: %s", self.results_dir, e)
            return []

    def get_result_file_stats(self) -> ResultFileStats:
        """Scan the directory once and summarize it. Never raises."""
        try:
            records = list(self._iter_records())
        except OSError as e:
            log.warning("Failed to get result file stats for %s: %s", self.results_dir, e)
            return ResultFileStats()
        if not records:
            return ResultFileStats()
        return ResultFileStats(
            total_files=len(records),
            total_size_bytes=sum(r.size_bytes for r in records),
            oldest_file=datetime.datetime.fromtimestamp(min(r.mtime for r in records)),
            newest_file=datetime.datetime.fromtimestamp(max(r.mtime for r in records)),
        )

    # --- Retention ---

    def clean_old_result_files(
        self,
        max_age_hours: float | None = DEFAULT_MAX_AGE_HOURS,
        max_files: float | None = DEFAULT_MAX_FILES,
        *,
        now: float | None = None,
    ) -> Result[CleanupReport, ResultsMaintenanceError]:
        """Delete result files by age, then by count.

        1. Age phase: remove every file modified before ``now - max_age_hours``.
        2. Count phase: of the survivors, keep the ``max_files`` newest and
           remove the rest (oldest first).

        ``None`` or ``math.inf`` disables a phase. Files already gone are
        neither counted nor reported. Never raises.

        Returns:
            ``Success(CleanupReport)`` with per-file failures recorded, or
            ``Failure(ResultsMaintenanceError)`` if the directory cannot be
            listed.
        """
        try:
            records = self._scan()
        except OSError as e:
            log.warning("Failed to clean old result files in %s: %s", self.results_dir, e)
            return Failure(ResultsMaintenanceError(f"Cannot list {self.results_dir}: {e}"))

        current = time.time() if now is None else now
        deleted = 0
        failures: list[tuple[str, str]] = []

        survivors = records
        if not _is_unbounded(max_age_hours):
            cutoff = current - float(max_age_hours) * 3600  # type: ignore[arg-type]
            expired = [r for r in records if r.mtime < cutoff]
            survivors = [r for r in records if r.mtime >= cutoff]
            for record in expired:
                deleted += self._delete(record, failures)

        if not _is_unbounded(max_files):
            keep = max(int(max_files), 0)  # type: ignore[arg-type]
            # survivors are newest first; the overflow is the oldest tail
            for record in reversed(survivors[keep:]):
                deleted += self._delete(record, failures)

        if deleted:
            log.info("Cleaned up %d old result files in %s.", deleted, self.results_dir)
        return Success(CleanupReport(deleted=deleted, failures=tuple(failures)))

    def clean_old_result_files_count(
        self,
        max_age_hours: float | None = DEFAULT_MAX_AGE_HOURS,
        max_files: float | None = DEFAULT_MAX_FILES,
        *,
        now: float | None = None,
    ) -> int:
        """Best-effort deleted count; zero when the sweep could not run."""
        match self.clean_old_result_files(max_age_hours, max_files, now=now):
            case Success(value=report):
                return report.deleted
            case _:
                return 0

    @staticmethod
    def _delete(record: ResultFileRecord, failures: list[tuple[str, str]]) -> int:
        try:
            record.path.unlink()
        except FileNotFoundError:
            log.debug("Result file already removed: %s", record.path)
            return 0
        except OSError as e:
            log.warning("Failed to delete result file %s: %s", record.path, e)
            failures.append((str(record.path), str(e)))
            return 0
        log.debug("Deleted result file %s", record.path)
        return 1
