"""
Global test configuration for the reporting core.
"""

from collections.abc import Callable
import datetime
import os
from pathlib import Path
import time

import pytest

from cc_report import ResultFileManager

# --- Environment Isolation (Autouse) ---


@pytest.fixture(autouse=True)
def isolate_report_env(request, monkeypatch):
    """Ensure a clean CC_REPORT_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("CC_REPORT_"):
            monkeypatch.delenv(key, raising=False)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Component integration tests on a temporary filesystem",
        "allow_env_pollution: Keep CC_REPORT_* environment variables",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Core Fixtures ---


@pytest.fixture
def results_dir(tmp_path) -> Path:
    """A results directory path that does not exist yet."""
    return tmp_path / "var" / "results"


@pytest.fixture
def manager(results_dir) -> ResultFileManager:
    return ResultFileManager(results_dir)


@pytest.fixture
def fixed_now() -> float:
    """A fixed 'now' so retention tests never depend on the wall clock."""
    return datetime.datetime(2025, 1, 29, 12, 0, 0).timestamp()


@pytest.fixture
def make_result_file(results_dir) -> Callable[..., Path]:
    """Create a result file with a literal size and modification time.

    Usage:
        make_result_file("cmd_a.json.xz", age_hours=24, now=fixed_now, size=10)
    """

    def _make(
        name: str,
        *,
        age_hours: float = 0.0,
        now: float | None = None,
        size: int = 0,
    ) -> Path:
        results_dir.mkdir(parents=True, exist_ok=True)
        path = results_dir / name
        path.write_bytes(b"x" * size)
        mtime = (time.time() if now is None else now) - age_hours * 3600
        os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def github_repo_payload() -> dict:
    """A trimmed ``GET /repos/{owner}/{repo}`` response."""
    return {
        "id": 1296269,
        "name": "Hello-World",
        "full_name": "octocat/Hello-World",
        "owner": {"login": "octocat", "type": "User", "id": 1},
        "description": "This your first repo!",
        "html_url": "https://github.com/octocat/Hello-World",
        "homepage": "https://github.com",
        "language": "Python",
        "topics": ["octocat", "api"],
        "license": {"key": "mit", "name": "MIT License"},
        "private": False,
        "fork": False,
        "archived": False,
        "default_branch": "main",
        "stargazers_count": 80,
        "watchers_count": 80,
        "forks_count": 9,
        "open_issues_count": 0,
        "size": 108,
        "created_at": "2011-01-26T19:01:12Z",
        "updated_at": "2011-01-26T19:14:43Z",
        "pushed_at": "2011-01-26T19:06:43Z",
        "node_id": "MDEwOlJlcG9zaXRvcnkxMjk2MjY5",
    }
