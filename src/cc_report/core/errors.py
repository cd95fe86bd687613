"""Terminal command errors with mandatory recovery instructions.

A ``CommandError`` is what a producer records on its envelope when it cannot
complete. It is data, not control flow: the envelope keeps it alongside any
partial results and renders it for the text consumer together with the steps
a user can take to fix the problem.
"""

from __future__ import annotations

import dataclasses
import datetime
import json
import os
import platform
import re
import sys
import traceback as tb
from typing import Any

from cc_report.core.types import _require

_MODULE_NOT_FOUND_RE = re.compile(r"No module named '([^']+)'")


@dataclasses.dataclass(slots=True)
class CommandError:
    """The error type recorded on a ``ResponseEnvelope``.

    Attributes:
        original: The underlying exception, or a message string
        recovery_instructions: Steps the user can take (at least one)
        debug_info: JSON-serializable diagnostics
        context: Extra key/values describing where the error occurred
        timestamp: When the error was created (UTC)
    """

    original: BaseException | str
    recovery_instructions: tuple[str, ...]
    debug_info: dict[str, Any] = dataclasses.field(default_factory=dict)
    context: dict[str, Any] = dataclasses.field(default_factory=dict)
    timestamp: datetime.datetime = dataclasses.field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC)
    )

    def __post_init__(self) -> None:
        """Require meaningful recovery instructions."""
        self.recovery_instructions = tuple(self.recovery_instructions or ())
        _require(
            condition=len(self.recovery_instructions) > 0,
            message="must include at least one recovery instruction",
            field_name="CommandError.recovery_instructions",
        )
        _require(
            condition=all(
                isinstance(i, str) and i.strip() for i in self.recovery_instructions
            ),
            message="cannot contain empty strings",
            field_name="CommandError.recovery_instructions",
        )

    @property
    def message(self) -> str:
        return str(self.original)

    @property
    def error_type(self) -> str:
        if isinstance(self.original, BaseException):
            return type(self.original).__name__
        return "UnknownError"

    @property
    def traceback(self) -> str | None:
        if (
            isinstance(self.original, BaseException)
            and self.original.__traceback__ is not None
        ):
            return "".join(tb.format_exception(self.original)).rstrip()
        return None

    def add_context(self, key: str, value: Any) -> None:
        """Attach more context as it becomes available; ``None`` is ignored."""
        if value is not None:
            self.context[key] = value

    @classmethod
    def from_exception(cls, error: BaseException | str, **context: Any) -> CommandError:
        """Wrap an arbitrary error with generated recovery guidance.

        Recognized context keys (``action``, ``command``, ``path``, ``host``,
        ``port``, ...) are used to tailor the instructions. All non-None
        context values are copied into ``debug_info`` and ``context``.
        """
        debug_info: dict[str, Any] = {
            "cwd": os.getcwd(),
            "python_version": platform.python_version(),
            "platform": sys.platform,
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
        }
        debug_info.update({k: v for k, v in context.items() if v is not None})

        err = cls(
            original=error,
            recovery_instructions=tuple(_recovery_instructions_for(error, context)),
            debug_info=debug_info,
        )
        for key, value in context.items():
            if key not in ("action", "command"):
                err.add_context(key, value)
        return err


# --- Recovery instruction heuristics ---


def _recovery_instructions_for(
    error: BaseException | str, context: dict[str, Any]
) -> list[str]:
    message = str(error)
    lowered = message.lower()

    if isinstance(error, FileNotFoundError) or "no such file" in lowered:
        path = context.get("path") or context.get("file") or context.get("directory")
        instructions = [
            f"Check if the file/directory exists: {path or 'the specified path'}",
            "Verify you are in the correct working directory",
            "Check for typos in the path",
        ]
    elif isinstance(error, PermissionError) or "permission" in lowered:
        resource = context.get("path") or context.get("file") or context.get("resource")
        resource = resource or "the resource"
        instructions = [
            f"Check permissions on: {resource}",
            "You may need to run with elevated privileges",
            f"Try: chmod 755 {resource} (adjust permissions as needed)",
        ]
    elif isinstance(error, FileExistsError) or "already exists" in lowered:
        instructions = [
            "The file or directory already exists",
            "Remove the existing file/directory or choose a different name",
        ]
    elif isinstance(error, ConnectionRefusedError) or "connection refused" in lowered:
        host = context.get("host") or context.get("url") or "the target service"
        port = f":{context['port']}" if context.get("port") else ""
        instructions = [
            f"Check if the service is running on: {host}{port}",
            "Verify network connectivity",
            "Check firewall settings",
        ]
    elif isinstance(error, TimeoutError) or "timed out" in lowered or "timeout" in lowered:
        instructions = [
            "The operation timed out",
            "Check network connectivity",
            "Try increasing the timeout value",
            "Verify the remote service is responding",
        ]
    elif isinstance(error, json.JSONDecodeError) or "json" in lowered:
        instructions = [
            "Check that the data is valid JSON",
            "Look for trailing commas, unquoted keys, or single quotes",
            "Ensure the file encoding is UTF-8",
        ]
    elif isinstance(error, ModuleNotFoundError) or "no module named" in lowered:
        match = _MODULE_NOT_FOUND_RE.search(message)
        module = match.group(1) if match else "the required module"
        instructions = [
            f"Install the missing dependency: pip install {module}",
            "Check that the correct virtual environment is active",
        ]
    else:
        instructions = [
            "Check the error message above for specific details",
            "Verify all prerequisites are installed and configured",
            "Check the command syntax and arguments",
        ]

    instructions.append("Review the debug log for full error context")
    if isinstance(error, BaseException) and error.__traceback__ is not None:
        instructions.append("Check the stack trace to identify where the error occurred")
    if context.get("command"):
        instructions.append(f"Run: {context['command']} --help (for command usage)")
    return instructions
