"""Tests for the contractscope CLI.

Uses CliRunner (in-process) against the typer app.
"""

import json

import yaml

from contractscope import __version__
from contractscope.cli.main import app


class TestGlobalCLI:

    def test_help_lists_commands(self, runner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for cmd in ("analyze", "match", "version"):
            assert cmd in result.stdout

    def test_version(self, runner):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestAnalyzeCommand:

    def test_table_output(self, runner, sample_input_yaml):
        result = runner.invoke(app, ["analyze", str(sample_input_yaml)])
        assert result.exit_code == 0
        assert "Contracts" in result.stdout
        assert "/api/users" in result.stdout
        assert "$.age" in result.stdout

    def test_json_output(self, runner, sample_input_json):
        result = runner.invoke(app, ["analyze", str(sample_input_json), "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["contracts"]) == 2
        assert data["total_mismatches"] == 1

    def test_yaml_output_to_file(self, runner, sample_input_json, tmp_path):
        output = tmp_path / "out" / "result.yaml"
        result = runner.invoke(app, ["analyze", str(sample_input_json), "-f", "yaml", "-o", str(output)])
        assert result.exit_code == 0
        data = yaml.safe_load(output.read_text())
        assert [c["url"] for c in data["unmatched_frontend"]] == ["/api/orders"]

    def test_sarif_output(self, runner, sample_input_json, tmp_path):
        output = tmp_path / "contracts.sarif"
        result = runner.invoke(app, ["analyze", str(sample_input_json), "-f", "sarif", "-o", str(output)])
        assert result.exit_code == 0
        sarif = json.loads(output.read_text())
        assert sarif["version"] == "2.1.0"
        assert sarif["runs"][0]["results"]

    def test_fail_on_error(self, runner, sample_input_json):
        result = runner.invoke(app, ["analyze", str(sample_input_json), "-f", "json", "--fail-on-error"])
        assert result.exit_code == 2

    def test_fail_on_error_passes_when_clean(self, runner, tmp_path):
        path = tmp_path / "clean.json"
        path.write_text(json.dumps({
            "endpoints": [{"method": "GET", "path": "/api/users"}],
            "calls": [{"method": "GET", "url": "/api/users"}],
        }))
        result = runner.invoke(app, ["analyze", str(path), "--fail-on-error"])
        assert result.exit_code == 0

    def test_unknown_format(self, runner, sample_input_json):
        result = runner.invoke(app, ["analyze", str(sample_input_json), "--format", "xml"])
        assert result.exit_code == 1
        assert "Unknown format" in result.stdout

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_malformed_input(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"endpoints": [{"method": "GET"}]}))
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1


class TestMatchCommand:

    def test_best_match(self, runner, sample_input_yaml):
        result = runner.invoke(app, ["match", str(sample_input_yaml), "get", "/api/users/42"])
        assert result.exit_code == 0
        assert "/api/users/:id" in result.stdout
        assert "id=42" in result.stdout

    def test_all_matches(self, runner, sample_input_yaml):
        result = runner.invoke(app, ["match", str(sample_input_yaml), "ANY", "/api/users/42", "--all"])
        assert result.exit_code == 0
        assert "GET" in result.stdout
        assert "DELETE" in result.stdout

    def test_no_match(self, runner, sample_input_yaml):
        result = runner.invoke(app, ["match", str(sample_input_yaml), "GET", "/api/orders"])
        assert result.exit_code == 1
        assert "No endpoint matches" in result.stdout
