"""Tests for the patient-match Typer CLI."""

import json

import uvicorn
from typer.testing import CliRunner

from patient_match.cli import EXIT_ACCEPTED, EXIT_MALFORMED, EXIT_REJECTED, app
from patient_match.matching.profiles import LEVEL0_PROFILE, LEVEL1_PROFILE
from tests.samples import LEVEL0_PARAMETERS_XML, PASSPORT, maximal_patient_json, parameters_body, patient_json

runner = CliRunner()


class TestCheck:
    def test_accepted_json(self, tmp_path):
        path = tmp_path / "request.json"
        path.write_text(parameters_body(maximal_patient_json(LEVEL1_PROFILE)), encoding="utf-8")
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == EXIT_ACCEPTED
        assert "ACCEPTED" in result.output

    def test_accepted_xml_by_extension(self, tmp_path):
        path = tmp_path / "request.xml"
        path.write_text(LEVEL0_PARAMETERS_XML, encoding="utf-8")
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == EXIT_ACCEPTED

    def test_xml_flag(self, tmp_path):
        path = tmp_path / "request.txt"
        path.write_text(LEVEL0_PARAMETERS_XML, encoding="utf-8")
        result = runner.invoke(app, ["check", str(path), "--xml"])
        assert result.exit_code == EXIT_ACCEPTED

    def test_rejected(self, tmp_path):
        path = tmp_path / "request.json"
        path.write_text(parameters_body(patient_json(LEVEL0_PROFILE, identifier=[PASSPORT])), encoding="utf-8")
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == EXIT_REJECTED
        assert "REJECTED" in result.output

    def test_malformed(self, tmp_path):
        path = tmp_path / "request.json"
        path.write_text(json.dumps(patient_json(LEVEL0_PROFILE)), encoding="utf-8")
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == EXIT_MALFORMED
        assert "Malformed input" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["check", str(tmp_path / "nope.json")])
        assert result.exit_code != 0


class TestStart:
    def test_start_runs_the_app_factory(self, monkeypatch):
        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
        result = runner.invoke(app, ["start", "--port", "9191"])
        assert result.exit_code == 0, result.output
        target, kwargs = calls[0]
        assert target == "patient_match.server:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9191


class TestStatusAndInit:
    def test_status_without_config(self):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "patient-match status" in result.output

    def test_status_with_invalid_config(self, monkeypatch):
        monkeypatch.setenv("PATIENT_MATCH_PORT", "eighty")
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_init_writes_env_file(self, isolated_env, monkeypatch):
        # init reloads the .env it writes; monkeypatch restores os.environ afterwards.
        for key in ("PATIENT_MATCH_ACCESS_TOKENS", "PATIENT_MATCH_AUTH_ENABLED", "PATIENT_MATCH_PORT"):
            monkeypatch.setenv(key, "")
            monkeypatch.delenv(key)

        result = runner.invoke(app, ["init"], input="y\n9090\n")
        assert result.exit_code == 0, result.output

        env_text = (isolated_env / ".env").read_text(encoding="utf-8")
        assert "PATIENT_MATCH_ACCESS_TOKENS=" in env_text
        assert "PATIENT_MATCH_AUTH_ENABLED=true" in env_text
        assert "PATIENT_MATCH_PORT=9090" in env_text
        assert (isolated_env / "audit").is_dir()
