"""Tests for configuration loading and the command line."""

import json

import pytest
from pydantic import ValidationError

from lecturer_portal.config import DEFAULT_API_BASE_URL, PortalConfig, load_config
from lecturer_portal.core import ConfigurationError
from lecturer_portal.main import build_parser, main


class TestLoadConfig:
    """Test layered configuration."""

    def test_defaults(self):
        config = load_config(env={})
        assert config.api_base_url == DEFAULT_API_BASE_URL
        assert config.request_timeout == 30.0
        assert config.export_dir == "exports"
        assert config.log_level == "INFO"

    def test_environment_overrides(self):
        config = load_config(env={
            "LECTURER_PORTAL_API_URL": "https://exams.example.edu/api/",
            "LECTURER_PORTAL_TIMEOUT": "12.5",
            "LECTURER_PORTAL_LOG_LEVEL": "debug",
        })
        assert config.api_base_url == "https://exams.example.edu/api"
        assert config.request_timeout == 12.5
        assert config.log_level == "DEBUG"

    def test_environment_wins_over_file(self, tmp_path):
        path = tmp_path / "portal.json"
        path.write_text(json.dumps({"api_base_url": "http://file.test/api", "export_dir": "reports"}))

        config = load_config(str(path), env={"LECTURER_PORTAL_API_URL": "http://env.test/api"})
        assert config.api_base_url == "http://env.test/api"
        assert config.export_dir == "reports"

    def test_invalid_url(self):
        with pytest.raises(ConfigurationError):
            load_config(env={"LECTURER_PORTAL_API_URL": "ftp://nope"})

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError):
            load_config(env={"LECTURER_PORTAL_TIMEOUT": "0"})

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "missing.json"), env={})

    def test_file_must_hold_an_object(self, tmp_path):
        path = tmp_path / "portal.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            load_config(str(path), env={})

    def test_config_is_immutable(self):
        config = PortalConfig()
        with pytest.raises(ValidationError):
            config.export_dir = "elsewhere"


class TestCommandLine:
    """Test the CLI sub-commands."""

    def test_grade(self, capsys):
        assert main(["grade", "8", "12", "20", "18", "25"]) == 0
        out = capsys.readouterr().out
        assert "Total: 83 / 100" in out
        assert "Grade: B" in out

    def test_grade_rejects_invalid_scores(self, capsys):
        assert main(["grade", "11", "12", "20", "18", "25"]) == 1
        assert "Assignment cannot exceed 10" in capsys.readouterr().err

    def test_show_config(self, capsys, monkeypatch):
        monkeypatch.setenv("LECTURER_PORTAL_EXPORT_DIR", "out")
        assert main(["show-config"]) == 0
        assert json.loads(capsys.readouterr().out)["export_dir"] == "out"

    def test_bad_config_file(self, capsys, tmp_path):
        assert main(["--config", str(tmp_path / "missing.json"), "show-config"]) == 2

    def test_serve_arguments(self):
        args = build_parser().parse_args(["serve", "--port", "4000"])
        assert (args.command, args.host, args.port) == ("serve", "127.0.0.1", 4000)
