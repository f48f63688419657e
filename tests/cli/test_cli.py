"""Tests for the command line interface."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_cli(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
        timeout=60,
    )


@pytest.mark.integration
class TestCli:
    """Tests for the normalize, validate, render and env commands."""

    def test_normalize_prints_canonical_json(self, document_form_file):
        result = run_cli("normalize", str(document_form_file))
        assert result.returncode == 0
        canonical = json.loads(result.stdout)
        assert canonical["childrenOrder"] == ["email", "birthday", "guests", "submit"]

    def test_validate(self, document_form_file):
        result = run_cli("validate", str(document_form_file))
        assert result.returncode == 0

    def test_render_to_file(self, document_form_file, tmp_path):
        output = tmp_path / "form.html"
        result = run_cli("render", str(document_form_file), "--authoring", "-o", str(output))
        assert result.returncode == 0
        assert output.read_text(encoding="utf-8").startswith("<form")

    def test_render_malformed(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{broken", encoding="utf-8")
        result = run_cli("render", str(path))
        assert result.returncode == 1

    @pytest.mark.parametrize("command", ["normalize", "validate", "render"])
    def test_item_without_id(self, command, tmp_path):
        path = tmp_path / "no-id.json"
        path.write_text(
            json.dumps({"id": "f", "items": [{"name": "x", "fieldType": "text-input"}]}),
            encoding="utf-8",
        )
        result = run_cli(command, str(path))
        assert result.returncode == 1
        assert "Traceback" not in result.stderr

    def test_missing_file(self):
        result = run_cli("normalize", "does-not-exist.json")
        assert result.returncode == 1

    def test_env_lists_variables(self):
        result = run_cli("env")
        assert result.returncode == 0
        assert "FORMRENDER_RULE_ENGINE_DELAY_MS" in result.stdout

    def test_unknown_command(self):
        result = run_cli("bogus")
        assert result.returncode == 1
