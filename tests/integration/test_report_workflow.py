"""End-to-end report flow on a temporary project root.

Provider -> envelope -> result file -> text rendering, for one item and for a
merged multi-item document.
"""

import datetime

import pytest

from cc_report import (
    CommandError,
    HintScope,
    QueryHint,
    ResponseEnvelope,
    ResultFileManager,
    build_merged_document,
    merge_hints,
    read_compressed_json,
    resolve_settings,
    validate_namespaced_document,
)
from cc_report.providers import RepositoryData

pytestmark = pytest.mark.integration

NOW = datetime.datetime(2025, 1, 29, 12, 0, 0, tzinfo=datetime.UTC)
RUN_AT = datetime.datetime(2025, 1, 29, 12, 0, 0)


@pytest.fixture
def manager(tmp_path) -> ResultFileManager:
    return ResultFileManager.from_settings(resolve_settings({"project_root": tmp_path}))


def test_single_repository_report(manager, github_repo_payload):
    repo = RepositoryData.from_api_response(github_repo_payload, now=NOW)
    envelope = ResponseEnvelope.create()

    with envelope.timed_action("Fetched repository data"):
        envelope.add_provider(repo)
    document = {**repo.to_namespaced_document(), "metadata": {"command": "repo-report"}}
    path = manager.write_result("repo-report", document, timestamp=RUN_AT, envelope=envelope)
    envelope.add_instruction("Summarize the repository health")

    assert path.name == "repo-report_2025-01-29_12-00-00.json.xz"
    assert read_compressed_json(path) == document
    assert envelope.result_path == str(path)
    assert envelope.data["RESULT_FILE"] == str(path)
    assert envelope.data["REPOSITORY_FULL_NAME"] == "octocat/Hello-World"
    assert [f.path for f in envelope.files] == [str(path)]

    text = envelope.render()
    assert "EXECUTION_STATUS=SUCCESS" in text
    assert f"xzcat {path} | jq '.raw.github_api.name'  # Repository name from GitHub API" in text
    assert "ACTIONS_SUCCEEDED=2" in text
    assert manager.get_result_file_stats().total_files == 1


def test_merged_repositories_report(manager, github_repo_payload):
    other = {
        **github_repo_payload,
        "id": 2,
        "name": "Spoon-Knife",
        "full_name": "octocat/Spoon-Knife",
    }
    repos = [
        RepositoryData.from_api_response(payload, now=NOW)
        for payload in (github_repo_payload, other)
    ]
    parent_hints = [QueryHint(".summary.total", "Repositories in report", HintScope.PARENT_LEVEL)]

    document = build_merged_document(
        [r.to_namespaced_document() for r in repos],
        {"summary": {"total": len(repos)}},
    )
    hints = merge_hints([*(r.get_hints() for r in repos), parent_hints])

    envelope = ResponseEnvelope.create().add_hints(hints)
    envelope.add_data("REPOSITORY_COUNT", len(repos))
    path = manager.write_result("repos-report", document, timestamp=RUN_AT, envelope=envelope)

    stored = read_compressed_json(path)
    assert [item["raw"]["github_api"]["name"] for item in stored["items"]] == [
        "Hello-World",
        "Spoon-Knife",
    ]
    assert stored["summary"] == {"total": 2}
    for item in stored["items"]:
        validate_namespaced_document(item)
    # Same hints from both providers collapse to one set
    assert len(hints) == len(repos[0].get_hints()) + 1
    text = envelope.render()
    assert "jq '.items[].raw.github_api.name'" in text
    assert "jq '.summary.total'  # Repositories in report" in text


def test_failed_command_keeps_partial_results(manager, github_repo_payload):
    envelope = ResponseEnvelope.create()
    envelope.add_provider(RepositoryData.from_api_response(github_repo_payload, now=NOW))
    try:
        read_compressed_json(manager.results_dir / "missing.json.xz")
    except Exception as e:  # noqa: BLE001
        envelope.set_error(CommandError.from_exception(e, command="repo-report"))

    assert envelope.exit_code == 1
    text = envelope.render()
    assert "ERROR_TYPE=ArtifactError" in text
    assert "REPOSITORY_NAME=Hello-World" in text
    assert "- Run: repo-report --help (for command usage)" in text


def test_retention_after_many_runs(manager, github_repo_payload):
    repo = RepositoryData.from_api_response(github_repo_payload, now=NOW)
    for minute in range(5):
        manager.write_result(
            "repo-report",
            repo.to_namespaced_document(),
            timestamp=RUN_AT.replace(minute=minute),
        )

    assert manager.clean_old_result_files_count(max_age_hours=None, max_files=2) == 3
    assert len(manager.list_result_files()) == 2
