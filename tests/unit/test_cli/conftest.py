"""Shared fixtures for CLI command tests."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

CONFIGURED_ENV = {
    "HAWKEYE_SERVER": "https://hawkeye.test/api",
    "HAWKEYE_TOKEN": "tok-abcdefghijklmnop",
    "HAWKEYE_ORG_UUID": "org-1",
    "HAWKEYE_PROJECT_ID": "proj-1",
}


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """No user, project or environment config leaks into a test."""
    for key in list(os.environ):
        if key.startswith("HAWKEYE_"):
            monkeypatch.delenv(key)
    # Keep rich from treating the captured output as a terminal
    for key in ("FORCE_COLOR", "TTY_COMPATIBLE", "TTY_INTERACTIVE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    with patch.object(Path, "home", return_value=tmp_path):
        yield tmp_path


@pytest.fixture
def configured_env(monkeypatch):
    for key, value in CONFIGURED_ENV.items():
        monkeypatch.setenv(key, value)
    return dict(CONFIGURED_ENV)
