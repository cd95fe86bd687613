"""Reading and writing xz-compressed JSON result files.

Uses the standard ``.xz`` container through ``lzma``; no custom format.
Writes go to a temporary sibling first and are moved into place, so readers
never observe a partially written artifact.
"""

from __future__ import annotations

import json
import logging
import lzma
import os
from pathlib import Path
from typing import Any

from cc_report.constants import DEFAULT_COMPRESSION_PRESET
from cc_report.exceptions import ArtifactError

log = logging.getLogger(__name__)


def write_compressed_json(
    data: Any,
    path: str | os.PathLike[str],
    preset: int = DEFAULT_COMPRESSION_PRESET,
) -> int:
    """Serialize ``data`` as indented JSON and write it xz-compressed.

    Returns:
        Number of uncompressed bytes written.

    Raises:
        ArtifactError: If serialization or writing fails. No partial file is
            left behind.
    """
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    try:
        payload = json.dumps(data, indent=2, ensure_ascii=False, default=str).encode(
            "utf-8"
        )
        with lzma.open(tmp, "wb", format=lzma.FORMAT_XZ, preset=preset) as fh:
            fh.write(payload)
        tmp.replace(target)
    except (OSError, TypeError, ValueError, lzma.LZMAError) as e:
        tmp.unlink(missing_ok=True)
        raise ArtifactError(f"Failed to create compressed JSON file {target}: {e}") from e
    log.debug("Wrote %d bytes (uncompressed) to %s", len(payload), target)
    return len(payload)


def read_compressed_json(path: str | os.PathLike[str]) -> Any:
    """Load a result file.

    Raises:
        ArtifactError: If the file is missing, not xz, or not JSON.
    """
    try:
        with lzma.open(path, "rb") as fh:
            return json.loads(fh.read().decode("utf-8"))
    except (OSError, ValueError, lzma.LZMAError) as e:
        raise ArtifactError(f"Failed to read compressed JSON file {path}: {e}") from e


def validate_compressed_file(path: str | os.PathLike[str]) -> bool:
    """Return True if the file exists and decompresses."""
    return get_uncompressed_size(path) is not None


def get_uncompressed_size(path: str | os.PathLike[str]) -> int | None:
    """Return the decompressed size in bytes, or None if unreadable."""
    try:
        size = 0
        with lzma.open(path, "rb") as fh:
            while chunk := fh.read(64 * 1024):
                size += len(chunk)
    except (OSError, lzma.LZMAError, EOFError) as e:
        log.debug("Cannot decompress %s: %s", path, e)
        return None
    return size
