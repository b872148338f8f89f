"""
Tests for buildwatch.cli module.

Tests the command-line interface including:
- Argument parsing
- Command output
- Exit codes on errors
"""

from __future__ import annotations

import os

import pytest
import requests_mock

from buildwatch.cli import build_parser, main

API_BASE = "https://api.test"
PROJECT_URL = f"{API_BASE}/v2/projects/paper"


def run_cli(*argv: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(["--api-base", API_BASE, *argv])
    return exc_info.value.code


class TestParser:
    """Tests for argument parsing."""

    def test_build_number_optional(self):
        """Test that the build number defaults to None."""
        args = build_parser().parse_args(["build", "1.16.5"])

        assert args.version == "1.16.5"
        assert args.build is None

    def test_build_number_is_int(self):
        """Test that the build number is parsed as an integer."""
        args = build_parser().parse_args(["build", "1.16.5", "466"])

        assert args.build == 466

    def test_command_required(self):
        """Test that a command must be given."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    """Tests for command output and exit codes."""

    def test_project(self, capsys, project_json):
        """Test printing the project versions."""
        with requests_mock.Mocker() as m:
            m.get(PROJECT_URL, json=project_json)

            code = run_cli("project")

        out = capsys.readouterr().out
        assert code == 0
        assert "PROJECT Paper" in out
        assert "1.16.3, 1.16.4, 1.16.5, 1.17.0" in out
        assert "Latest:         1.17.0" in out

    def test_builds(self, capsys, version_body):
        """Test printing the build numbers of a version."""
        with requests_mock.Mocker() as m:
            m.get(f"{PROJECT_URL}/versions/1.16.5", text=version_body(465, 466))

            code = run_cli("builds", "1.16.5")

        out = capsys.readouterr().out
        assert code == 0
        assert "465 466" in out
        assert "Latest: 466" in out

    def test_build_latest(self, capsys, version_body, build_json):
        """Test printing the newest build of a version."""
        with requests_mock.Mocker() as m:
            m.get(f"{PROJECT_URL}/versions/1.16.5", text=version_body(465, 466))
            m.get(f"{PROJECT_URL}/versions/1.16.5/builds/466", json=build_json)

            code = run_cli("build", "1.16.5")

        out = capsys.readouterr().out
        assert code == 0
        assert "BUILD paper 1.16.5 #466" in out
        assert "36a72ca ChangeSummary" in out
        assert "application: paper-1.16.5-466.jar" in out
        assert "/builds/466/downloads/paper-1.16.5-466.jar" in out

    def test_build_explicit_number(self, capsys, build_json):
        """Test that an explicit build number skips the version fetch."""
        with requests_mock.Mocker() as m:
            m.get(f"{PROJECT_URL}/versions/1.16.5/builds/466", json=build_json)

            code = run_cli("build", "1.16.5", "466")

            assert m.call_count == 1
        assert code == 0

    def test_network_error_exit_code(self, capsys):
        """Test that transport failures exit with code 1."""
        with requests_mock.Mocker() as m:
            m.get(f"{PROJECT_URL}/versions/9.9.9", status_code=404)

            code = run_cli("builds", "9.9.9")

        assert code == 1
        assert "Network error:" in capsys.readouterr().out

    def test_data_error_exit_code(self, capsys, version_body):
        """Test that a version without builds exits with code 1."""
        with requests_mock.Mocker() as m:
            m.get(f"{PROJECT_URL}/versions/1.18", text=version_body())

            code = run_cli("build", "1.18")

        assert code == 1
        assert "Data error: No builds for version '1.18'" in capsys.readouterr().out

    def test_config_error_exit_code(self, capsys, tmp_path):
        """Test that a missing settings file exits with code 1."""
        code = run_cli("--config", str(tmp_path / "missing.yaml"), "project")

        assert code == 1
        assert "Configuration error:" in capsys.readouterr().out

    def test_config_directory_exit_code(self, capsys, tmp_path):
        """Test that a directory passed as --config exits with code 1."""
        code = run_cli("--config", str(tmp_path), "project")

        assert code == 1
        assert "Could not read settings file" in capsys.readouterr().out

    def test_stray_env_file_ignored(self, monkeypatch, tmp_path, project_json):
        """Test that a .env file in the working directory does not leak in."""
        env_file = tmp_path / ".env"
        env_file.write_text("BUILDWATCH_PROJECT=velocity\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        with requests_mock.Mocker() as m:
            m.get(PROJECT_URL, json=project_json)

            code = run_cli("project")

        assert code == 0
        assert "BUILDWATCH_PROJECT" not in os.environ

    def test_verbose_prints_traceback(self, capsys):
        """Test that verbose mode shows the traceback on errors."""
        with requests_mock.Mocker() as m:
            m.get(PROJECT_URL, status_code=500)

            code = run_cli("project", "--verbose")

        assert code == 1
        assert "Traceback" in capsys.readouterr().err
