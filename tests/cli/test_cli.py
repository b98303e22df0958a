"""Tests for the pagecore CLI commands."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]


def _run(*args: str, stdin: str | None = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        input=stdin,
        cwd=REPO_ROOT,
        timeout=60,
    )


@pytest.fixture
def document_file(tmp_path, sample_document_dict) -> Path:
    path = tmp_path / "page.json"
    path.write_text(json.dumps(sample_document_dict), encoding="utf-8")
    return path


@pytest.mark.integration
def test_help_lists_commands():
    """--help should describe the document commands."""
    result = _run("--help")
    assert result.returncode == 0
    for command in ("new", "validate", "apply", "compile", "schema"):
        assert command in result.stdout


@pytest.mark.integration
def test_unknown_command_fails():
    """Unknown commands exit non-zero."""
    assert _run("explode").returncode == 1


@pytest.mark.integration
def test_new_prints_empty_document():
    """new should emit an App root without children."""
    result = _run("new", "--title", "Landing", "--state", '{"count": 0}')
    assert result.returncode == 0
    doc = json.loads(result.stdout)
    assert doc["app"]["type"] == "App"
    assert doc["app"]["props"] == {"title": "Landing", "state": {"count": 0}}
    assert "children" not in doc["app"]


@pytest.mark.integration
def test_new_rejects_bad_state():
    """new should refuse non-object state."""
    assert _run("new", "--state", "[1, 2]").returncode == 1


@pytest.mark.integration
def test_validate_clean_document(document_file):
    """A clean document validates with exit code 0."""
    result = _run("validate", str(document_file))
    assert result.returncode == 0
    assert "0 error(s), 0 warning(s)" in result.stdout


@pytest.mark.integration
def test_validate_reports_duplicates(tmp_path, sample_document_dict):
    """Duplicate ids fail validation and are listed as JSON."""
    sample_document_dict["app"]["children"][1]["id"] = "hero"
    path = tmp_path / "dup.json"
    path.write_text(json.dumps(sample_document_dict), encoding="utf-8")
    result = _run("validate", str(path), "--json")
    assert result.returncode == 1
    codes = [d["code"] for d in json.loads(result.stdout)]
    assert codes == ["duplicate_id"]


@pytest.mark.integration
def test_apply_hydrated_ops(tmp_path, document_file):
    """apply --hydrate should accept generation wire ops."""
    ops_path = tmp_path / "ops.json"
    ops_path.write_text(
        json.dumps([{"op": "updateProps", "nodeId": "b1", "props": '{"variant": "subtle"}'}]),
        encoding="utf-8",
    )
    out_path = tmp_path / "out.json"
    result = _run("apply", str(document_file), str(ops_path), "--hydrate", "-o", str(out_path))
    assert result.returncode == 0
    doc = json.loads(out_path.read_text(encoding="utf-8"))
    button = doc["app"]["children"][0]["children"][1]
    assert button["props"] == {"variant": "subtle"}


@pytest.mark.integration
def test_apply_rejects_non_list(tmp_path, document_file):
    """apply should fail when the ops file is not an array."""
    ops_path = tmp_path / "ops.json"
    ops_path.write_text('{"op": "delete", "nodeId": "b1"}', encoding="utf-8")
    assert _run("apply", str(document_file), str(ops_path)).returncode == 1


@pytest.mark.integration
def test_compile_from_stdin(sample_document_dict):
    """compile should read stdin and print HTML."""
    result = _run("compile", "-", "--adapter", "none", stdin=json.dumps(sample_document_dict))
    assert result.returncode == 0
    assert result.stdout.startswith("<!DOCTYPE html>")
    assert 'data-core-id="b1"' in result.stdout


@pytest.mark.integration
def test_compile_unknown_adapter(document_file):
    """compile should fail on unknown adapters."""
    result = _run("compile", str(document_file), "--adapter", "bootstrap")
    assert result.returncode == 1
    assert "Unknown adapter" in result.stderr


@pytest.mark.integration
def test_schema_ops():
    """schema ops should print the generation schema."""
    result = _run("schema", "ops")
    assert result.returncode == 0
    assert json.loads(result.stdout)["type"] == "array"


@pytest.mark.integration
def test_adapters_lists_builtins():
    """adapters should list both built-in adapters."""
    result = _run("adapters")
    assert result.returncode == 0
    assert "fluentlm" in result.stdout
    assert "none" in result.stdout


@pytest.mark.integration
@pytest.mark.parametrize("command", ["validate", "compile"])
def test_undecodable_document_fails_cleanly(tmp_path, command):
    """Documents that are not UTF-8 are reported, not crashed on."""
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"app": "\xff"}')
    result = _run(command, str(path))
    assert result.returncode == 1
    assert "Traceback" not in result.stderr


@pytest.mark.integration
def test_undecodable_ops_fail_cleanly(tmp_path, document_file):
    """apply reports ops files that are not UTF-8."""
    ops_path = tmp_path / "ops.json"
    ops_path.write_bytes(b'[{"op": "delete", "nodeId": "\xff"}]')
    result = _run("apply", str(document_file), str(ops_path))
    assert result.returncode == 1
    assert "Apply failed" in result.stderr
    assert "Traceback" not in result.stderr
