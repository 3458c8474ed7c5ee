"""Tests for layered HawkeyeConfig loading and validation."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from hawkeye_cli.config import HawkeyeConfig
from hawkeye_cli.core.errors import ConfigError, MissingConfigError


@pytest.fixture
def workspace(tmp_path):
    """Isolated home, XDG dir and project directory; yields (home, project)."""
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()

    original_cwd = os.getcwd()
    os.chdir(project)
    try:
        with patch.object(Path, "home", return_value=home):
            with patch.dict(os.environ, {}, clear=True):
                yield home, project
    finally:
        os.chdir(original_cwd)


class TestConfigHierarchy:
    """Test layered configuration loading (XDG -> home -> project -> env)."""

    def test_defaults_without_files(self, workspace):
        config = HawkeyeConfig.from_env()

        assert config.server_url == ""
        assert config.log_level == "WARNING"
        assert config.queue_size == 64
        assert config.connect_timeout == 10.0
        assert config.spinner is True
        assert config.loaded_files == []

    def test_layers_override_in_order(self, workspace):
        home, project = workspace
        xdg = home / ".config" / "hawkeye"
        xdg.mkdir(parents=True)
        (xdg / "config.toml").write_text(
            '[server]\nurl = "https://xdg.test"\n\n[auth]\ntoken = "xdg-token"\n\n[project]\nid = "xdg-proj"\n'
        )
        (home / ".hawkeye.toml").write_text('[server]\nurl = "https://home.test"\n\n[project]\nid = "home-proj"\n')
        (project / "hawkeye.toml").write_text('[project]\nid = "project-proj"\nname = "checkout"\n')

        config = HawkeyeConfig.from_env()

        assert config.token == "xdg-token"
        assert config.server_url == "https://home.test"
        assert config.project_id == "project-proj"
        assert config.project_name == "checkout"
        assert len(config.loaded_files) == 3

    def test_env_overrides_files(self, workspace):
        _, project = workspace
        (project / "hawkeye.toml").write_text('[server]\nurl = "https://file.test"\n\n[stream]\nqueue_size = 8\n')
        os.environ.update({"HAWKEYE_SERVER": "https://env.test", "HAWKEYE_QUEUE_SIZE": "16"})

        config = HawkeyeConfig.from_env()

        assert config.server_url == "https://env.test"
        assert config.queue_size == 16

    def test_xdg_config_home_respected(self, workspace, tmp_path):
        xdg = tmp_path / "custom-xdg" / "hawkeye"
        xdg.mkdir(parents=True)
        (xdg / "config.toml").write_text('[auth]\norg_uuid = "org-x"\n')
        os.environ["XDG_CONFIG_HOME"] = str(tmp_path / "custom-xdg")

        assert HawkeyeConfig.from_env().org_uuid == "org-x"

    def test_profile_selects_xdg_file(self, workspace):
        home, _ = workspace
        xdg = home / ".config" / "hawkeye"
        xdg.mkdir(parents=True)
        (xdg / "config.toml").write_text('[server]\nurl = "https://default.test"\n')
        (xdg / "config-prod.toml").write_text('[server]\nurl = "https://prod.test"\n')

        assert HawkeyeConfig.from_env(profile="prod").server_url == "https://prod.test"

        os.environ["HAWKEYE_PROFILE"] = "prod"
        config = HawkeyeConfig.from_env()
        assert config.profile == "prod"
        assert config.server_url == "https://prod.test"

    def test_explicit_file_replaces_layers(self, workspace, tmp_path):
        home, _ = workspace
        (home / ".hawkeye.toml").write_text('[auth]\ntoken = "home-token"\n')
        explicit = tmp_path / "only.toml"
        explicit.write_text('[server]\nurl = "https://only.test"\n')

        config = HawkeyeConfig.from_env(config_file=str(explicit))

        assert config.server_url == "https://only.test"
        assert config.token == ""
        assert config.loaded_files == [str(explicit)]

    def test_config_file_env_var(self, workspace, tmp_path):
        explicit = tmp_path / "env.toml"
        explicit.write_text('[project]\nid = "env-file"\n')
        os.environ["HAWKEYE_CONFIG_FILE"] = str(explicit)

        assert HawkeyeConfig.from_env().project_id == "env-file"

    def test_missing_explicit_file(self, workspace, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            HawkeyeConfig.from_env(config_file=str(tmp_path / "missing.toml"))

    def test_malformed_toml(self, workspace):
        _, project = workspace
        (project / "hawkeye.toml").write_text("[server\n")

        with pytest.raises(ConfigError) as exc_info:
            HawkeyeConfig.from_env()
        assert exc_info.value.field == "config_file"


class TestValueValidation:
    """Invalid values warn and keep the previous value."""

    def test_invalid_stream_values_ignored(self, workspace):
        _, project = workspace
        (project / "hawkeye.toml").write_text(
            '[stream]\nqueue_size = 0\nconnect_timeout = "soon"\nspinner = "maybe"\n\n[logging]\nlevel = "LOUD"\n'
        )

        config = HawkeyeConfig.from_env()

        assert config.queue_size == 64
        assert config.connect_timeout == 10.0
        assert config.spinner is True
        assert config.log_level == "WARNING"

    def test_valid_stream_values(self, workspace):
        _, project = workspace
        (project / "hawkeye.toml").write_text(
            '[stream]\nqueue_size = 4\nconnect_timeout = 2.5\nspinner = false\n\n[logging]\nlevel = "warn"\n'
        )

        config = HawkeyeConfig.from_env()

        assert config.queue_size == 4
        assert config.connect_timeout == 2.5
        assert config.spinner is False
        assert config.log_level == "WARNING"

    def test_env_spinner_and_log_level(self, workspace):
        os.environ.update({"HAWKEYE_SPINNER": "off", "HAWKEYE_LOG_LEVEL": "debug"})

        config = HawkeyeConfig.from_env()

        assert config.spinner is False
        assert config.log_level == "DEBUG"

    def test_non_table_section_ignored(self, workspace):
        _, project = workspace
        (project / "hawkeye.toml").write_text('server = "https://flat.test"\n')

        assert HawkeyeConfig.from_env().server_url == ""


class TestValidate:
    def test_complete_config_passes(self):
        HawkeyeConfig(server_url="https://h.test", token="t", project_id="p").validate()

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({}, "server.url"),
            ({"server_url": "https://h.test"}, "auth.token"),
            ({"server_url": "https://h.test", "token": "t"}, "project.id"),
        ],
    )
    def test_first_missing_setting_reported(self, kwargs, field):
        with pytest.raises(MissingConfigError) as exc_info:
            HawkeyeConfig(**kwargs).validate()
        assert exc_info.value.field == field
        assert exc_info.value.remediation

    def test_project_optional(self):
        HawkeyeConfig(server_url="https://h.test", token="t").validate(require_project=False)


class TestConsoleSessionUrl:
    def test_strips_api_suffix(self):
        config = HawkeyeConfig(server_url="https://h.test/api/v1", project_id="p")
        assert config.console_session_url("s") == "https://h.test/console/project/p/session/s"

    def test_prefers_frontend_url(self):
        config = HawkeyeConfig(server_url="https://api.test", frontend_url="https://ui.test/", project_id="p")
        assert config.console_session_url("s") == "https://ui.test/console/project/p/session/s"

    def test_api_at_start_of_path_only_when_after_host(self):
        config = HawkeyeConfig(server_url="/api", project_id="p")
        assert config.console_session_url("s") == "/api/console/project/p/session/s"

    def test_requires_project_and_session(self):
        assert HawkeyeConfig(server_url="https://h.test").console_session_url("s") == ""
        assert HawkeyeConfig(server_url="https://h.test", project_id="p").console_session_url("") == ""


class TestDisplayDict:
    def test_token_masked(self):
        display = HawkeyeConfig(token="abcdefghijklmnopqrstuvwxyz").to_display_dict()
        assert display["token"] == "abcdefghijkl..."
        assert display["profile"] == "default"

    def test_empty_token(self):
        assert HawkeyeConfig().to_display_dict()["token"] == ""
