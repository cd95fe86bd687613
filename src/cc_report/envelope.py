"""Response envelope: the single return type of every command.

Producers create an envelope, add data, actions, file operations,
instructions and query hints to it, and hand it upward. A terminal error is
recorded with ``set_error`` and travels as data; the envelope never raises
from its mutation methods and performs no I/O. Persisting the structured
artifact is the result file manager's job.

Example:
    ```python
    envelope = ResponseEnvelope.create()
    envelope.add_data("PROJECT_ID", 123)
    envelope.add_action("Fetched project data", ActionStatus.SUCCESS, duration_ms=1250)
    envelope.add_instruction("Generate a client-friendly report from the project data")
    print(envelope.render())
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
import dataclasses
import enum
import json
import logging
from pathlib import Path
import time
from typing import TYPE_CHECKING, Any, Self

from cc_report.constants import RESULT_FILE_DATA_KEY
from cc_report.core.contract import flatten_value, is_valid_data_key
from cc_report.results.queries import generate_jq_examples

if TYPE_CHECKING:
    import os

    from cc_report.core.contract import DataProvider
    from cc_report.core.errors import CommandError
    from cc_report.core.hints import QueryHint

log = logging.getLogger(__name__)


class ActionStatus(enum.StrEnum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class FileOperationKind(enum.StrEnum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    READ = "read"


@dataclasses.dataclass(frozen=True, slots=True)
class Action:
    """One entry of the action log."""

    label: str
    status: ActionStatus
    detail: str | None = None
    duration_ms: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class FileOperation:
    """A file touched by the command."""

    path: str
    operation: FileOperationKind
    size_bytes: int | None = None


class ResponseEnvelope:
    """Aggregates a command's reportable outcome.

    ``data`` keeps insertion order and last write wins. Actions, files,
    instructions and hints are append-only. Once ``error`` is set the command
    is considered failed, though data may still be added for diagnostics.
    """

    __slots__ = (
        "_actions",
        "_data",
        "_error",
        "_files",
        "_hints",
        "_instructions",
        "_result_path",
        "debug_log_path",
    )

    def __init__(self, *, debug_log_path: str | None = None) -> None:
        self._data: dict[str, str] = {}
        self._actions: list[Action] = []
        self._files: list[FileOperation] = []
        self._instructions: list[str] = []
        self._hints: list[QueryHint] = []
        self._result_path: str | None = None
        self._error: CommandError | None = None
        self.debug_log_path = debug_log_path

    @classmethod
    def create(cls, debug_log_path: str | None = None) -> ResponseEnvelope:
        return cls(debug_log_path=debug_log_path)

    # --- Mutation ---

    def add_data(self, key: str, value: Any) -> Self:
        """Insert or overwrite one flat value; the value is stringified."""
        if not is_valid_data_key(key):
            log.warning("Data key %r is not UPPER_SNAKE_CASE", key)
        self._data[str(key)] = flatten_value(value)
        return self

    def add_data_bulk(self, data: Mapping[str, Any]) -> Self:
        for key, value in data.items():
            self.add_data(key, value)
        return self

    def merge(self, flat_map: Mapping[str, Any]) -> Self:
        """Copy every entry of a provider's flat view into ``data``."""
        return self.add_data_bulk(flat_map)

    def add_provider(self, provider: DataProvider) -> Self:
        """Ingest a provider's flat view and its query hints."""
        self.merge(provider.to_flat_view())
        return self.add_hints(provider.get_hints())

    def add_action(
        self,
        label: str,
        status: ActionStatus | str,
        detail: str | None = None,
        duration_ms: int | None = None,
    ) -> Self:
        self._actions.append(Action(label, ActionStatus(status), detail, duration_ms))
        return self

    @contextmanager
    def timed_action(self, label: str, detail: str | None = None) -> Iterator[Self]:
        """Record one action with its measured duration.

        The action is ``success`` when the block completes and ``failed`` with
        the exception message when it raises; the exception propagates.
        """
        start = time.perf_counter()
        try:
            yield self
        except Exception as e:
            self.add_action(label, ActionStatus.FAILED, str(e), _elapsed_ms(start))
            raise
        self.add_action(label, ActionStatus.SUCCESS, detail, _elapsed_ms(start))

    def add_file(
        self,
        path: str | os.PathLike[str],
        operation: FileOperationKind | str,
        size_bytes: int | None = None,
    ) -> Self:
        self._files.append(
            FileOperation(str(path), FileOperationKind(operation), size_bytes)
        )
        return self

    def add_instruction(self, instruction: str) -> Self:
        self._instructions.append(instruction)
        return self

    def add_hint(self, hint: QueryHint) -> Self:
        self._hints.append(hint)
        return self

    def add_hints(self, hints: Iterable[QueryHint]) -> Self:
        self._hints.extend(hints)
        return self

    def set_result_path(self, path: str | os.PathLike[str]) -> Self:
        """Record where the structured artifact was written."""
        self._result_path = str(Path(path))
        self._data[RESULT_FILE_DATA_KEY] = self._result_path
        return self

    def set_error(self, error: CommandError) -> Self:
        """Record the terminal error; a second call replaces the first."""
        if self._error is not None:
            log.warning(
                "Envelope error set twice; replacing %s(%s) with %s(%s)",
                self._error.error_type,
                self._error.message,
                error.error_type,
                error.message,
            )
        self._error = error
        return self

    def absorb(self, other: ResponseEnvelope) -> Self:
        """Fold a sub-producer's envelope into this one.

        A failed envelope contributes only its error; otherwise actions,
        files, instructions and hints are appended and data is overwritten.
        """
        if other.error is not None:
            return self.set_error(other.error)
        self._actions.extend(other._actions)
        self._data.update(other._data)
        self._files.extend(other._files)
        self._instructions.extend(other._instructions)
        self._hints.extend(other._hints)
        if other._result_path is not None:
            self._result_path = other._result_path
        return self

    # --- Read access ---

    @property
    def data(self) -> dict[str, str]:
        return dict(self._data)

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._actions)

    @property
    def files(self) -> tuple[FileOperation, ...]:
        return tuple(self._files)

    @property
    def instructions(self) -> tuple[str, ...]:
        return tuple(self._instructions)

    @property
    def hints(self) -> tuple[QueryHint, ...]:
        return tuple(self._hints)

    @property
    def result_path(self) -> str | None:
        return self._result_path

    @property
    def error(self) -> CommandError | None:
        return self._error

    @property
    def has_error(self) -> bool:
        return self._error is not None

    @property
    def exit_code(self) -> int:
        return 1 if self._error is not None else 0

    def snapshot(self) -> ResponseEnvelope:
        """Return an independent copy; later mutations do not leak across."""
        clone = ResponseEnvelope(debug_log_path=self.debug_log_path)
        clone._data = dict(self._data)
        clone._actions = list(self._actions)
        clone._files = list(self._files)
        clone._instructions = list(self._instructions)
        clone._hints = list(self._hints)
        clone._result_path = self._result_path
        if self._error is not None:
            clone._error = dataclasses.replace(
                self._error,
                debug_info=dict(self._error.debug_info),
                context=dict(self._error.context),
            )
        return clone

    # --- Rendering for the text consumer ---

    def render(self) -> str:
        """Render the key/value stream read by the downstream consumer."""
        return _render_failure(self) if self._error else _render_success(self)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"ResponseEnvelope(data={len(self._data)}, actions={len(self._actions)}, "
            f"instructions={len(self._instructions)}, error={self.has_error})"
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _section(title: str) -> str:
    return f"=== {title} ===\n"


def _render_actions(env: ResponseEnvelope) -> str:
    if not env._actions:
        return ""
    out = _section("ACTION LOG")
    for i, action in enumerate(env._actions):
        out += f"ACTION_{i}_EVENT={action.label}\n"
        out += f"ACTION_{i}_RESULT={action.status}\n"
        if action.detail:
            out += f"ACTION_{i}_DETAILS={action.detail}\n"
        if action.duration_ms is not None:
            out += f"ACTION_{i}_DURATION_MS={action.duration_ms}\n"
    counts = {status: 0 for status in ActionStatus}
    for action in env._actions:
        counts[action.status] += 1
    out += f"TOTAL_ACTIONS={len(env._actions)}\n"
    out += f"ACTIONS_SUCCEEDED={counts[ActionStatus.SUCCESS]}\n"
    out += f"ACTIONS_FAILED={counts[ActionStatus.FAILED]}\n"
    out += f"ACTIONS_SKIPPED={counts[ActionStatus.SKIPPED]}\n\n"
    return out


def _render_files(env: ResponseEnvelope) -> str:
    if not env._files:
        return ""
    out = _section("FILES AFFECTED")
    for i, f in enumerate(env._files):
        out += f"FILE_{i}_PATH={f.path}\n"
        out += f"FILE_{i}_OPERATION={f.operation}\n"
        if f.size_bytes is not None:
            out += f"FILE_{i}_SIZE={f.size_bytes}\n"
    out += f"TOTAL_FILES={len(env._files)}\n\n"
    return out


def _render_data(env: ResponseEnvelope) -> str:
    if not env._data:
        return ""
    out = _section("DATA")
    for key, value in env._data.items():
        out += f"{key}={value}\n"
    return out + "\n"


def _render_queries(env: ResponseEnvelope) -> str:
    if env._result_path is None or not env._hints:
        return ""
    out = _section("QUERY EXAMPLES")
    for example in generate_jq_examples(env._hints, env._result_path):
        out += f"{example}\n"
    return out + "\n"


def _render_instructions(env: ResponseEnvelope) -> str:
    if not env._instructions:
        return ""
    out = _section("INSTRUCTIONS FOR LLM")
    for instruction in env._instructions:
        out += f"- {instruction}\n"
    return out


def _render_success(env: ResponseEnvelope) -> str:
    out = _section("EXECUTION SUMMARY")
    out += "EXECUTION_STATUS=SUCCESS\n"
    if env.debug_log_path:
        out += f"DEBUG_LOG={env.debug_log_path}\n"
    out += "\n"
    out += _render_actions(env)
    out += _render_files(env)
    out += _render_data(env)
    out += _render_queries(env)
    out += _render_instructions(env)
    return out


def _render_mapping(title: str, mapping: Mapping[str, Any]) -> str:
    if not mapping:
        return ""
    out = "\n" + _section(title)
    for key, value in mapping.items():
        out += f"{key.upper()}={json.dumps(value, default=str)}\n"
    return out


def _render_failure(env: ResponseEnvelope) -> str:
    error = env._error
    assert error is not None  # noqa: S101
    out = "================== COMMAND EXECUTION FAILED ==================\n"
    out += "STOP PROCESSING - DO NOT CONTINUE WITH OPERATION\n"
    out += "==============================================================\n\n"
    out += _section("ERROR DETAILS")
    out += f"ERROR_TYPE={error.error_type}\n"
    out += f"ERROR_MESSAGE={error.message}\n"
    out += f"ERROR_TIMESTAMP={error.timestamp.isoformat()}\n"
    out += _render_mapping("DEBUG INFO", error.debug_info)
    out += _render_mapping("ERROR CONTEXT", error.context)
    if env.debug_log_path:
        out += f"\nDEBUG_LOG={env.debug_log_path}\n"
        out += f"To view full debug details: cat {env.debug_log_path}\n"
    if error.traceback:
        out += "\n" + _section("STACK TRACE") + error.traceback + "\n"
    out += "\n"
    # Partial results collected before the failure stay visible
    out += _render_data(env)
    out += _render_actions(env)
    out += _render_files(env)
    out += "\n" + _section("RECOVERY INSTRUCTIONS")
    for instruction in error.recovery_instructions:
        out += f"- {instruction}\n"
    return out
