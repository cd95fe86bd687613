"""Unit tests for compressed JSON artifacts."""

import json
import lzma

import pytest

from cc_report import ArtifactError, read_compressed_json, write_compressed_json
from cc_report.results.artifact import get_uncompressed_size, validate_compressed_file

pytestmark = pytest.mark.unit


@pytest.fixture
def document() -> dict:
    return {
        "raw": {"github_api": {"name": "Hello-World", "topics": ["octocat", "api"]}},
        "calculated": {"time_calculations": {"age_days": 5114}},
        "metadata": {"command": "repo-report"},
    }


class TestWrite:
    def test_output_is_standard_xz_with_indented_json(self, tmp_path, document):
        path = tmp_path / "r.json.xz"

        written = write_compressed_json(document, path)

        raw = lzma.decompress(path.read_bytes())
        assert raw.decode("utf-8") == json.dumps(document, indent=2, ensure_ascii=False)
        assert written == len(raw)

    def test_no_temporary_file_is_left(self, tmp_path, document):
        path = tmp_path / "r.json.xz"
        write_compressed_json(document, path)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["r.json.xz"]

    def test_overwrite_replaces_contents(self, tmp_path):
        path = tmp_path / "r.json.xz"
        write_compressed_json({"v": 1}, path)
        write_compressed_json({"v": 2}, path)
        assert read_compressed_json(path) == {"v": 2}

    def test_non_ascii_text_is_preserved(self, tmp_path):
        path = tmp_path / "r.json.xz"
        write_compressed_json({"name": "Größe ✓"}, path)
        assert "Größe ✓" in lzma.decompress(path.read_bytes()).decode("utf-8")

    def test_missing_parent_raises_and_leaves_nothing(self, tmp_path, document):
        path = tmp_path / "absent" / "r.json.xz"
        with pytest.raises(ArtifactError, match="Failed to create compressed JSON file"):
            write_compressed_json(document, path)
        assert not path.parent.exists()

    def test_circular_data_raises_and_leaves_nothing(self, tmp_path):
        data: dict = {}
        data["self"] = data
        path = tmp_path / "r.json.xz"
        with pytest.raises(ArtifactError):
            write_compressed_json(data, path)
        assert list(tmp_path.iterdir()) == []


class TestRead:
    def test_round_trip(self, tmp_path, document):
        path = tmp_path / "r.json.xz"
        write_compressed_json(document, path)
        assert read_compressed_json(path) == document

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ArtifactError):
            read_compressed_json(tmp_path / "nope.json.xz")

    def test_plain_text_is_not_an_artifact(self, tmp_path):
        path = tmp_path / "plain.json.xz"
        path.write_text('{"not": "compressed"}')
        with pytest.raises(ArtifactError):
            read_compressed_json(path)

    def test_compressed_non_json_raises(self, tmp_path):
        path = tmp_path / "bad.json.xz"
        path.write_bytes(lzma.compress(b"{not json"))
        with pytest.raises(ArtifactError):
            read_compressed_json(path)


class TestInspection:
    def test_valid_file_reports_its_uncompressed_size(self, tmp_path, document):
        path = tmp_path / "r.json.xz"
        written = write_compressed_json(document, path)
        assert validate_compressed_file(path)
        assert get_uncompressed_size(path) == written

    def test_corrupt_or_missing_files_are_invalid(self, tmp_path):
        corrupt = tmp_path / "corrupt.json.xz"
        corrupt.write_bytes(b"\xfd7zXZ\x00garbage")
        assert not validate_compressed_file(corrupt)
        assert get_uncompressed_size(corrupt) is None
        assert get_uncompressed_size(tmp_path / "missing.json.xz") is None
