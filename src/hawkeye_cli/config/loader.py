"""HawkeyeConfig loading logic.

Provides ``_ConfigLoader``, a mixin class whose methods are inherited by
``HawkeyeConfig`` (defined in ``settings.py``). Splitting loading logic into
its own module keeps ``settings.py`` focused on field definitions and simple
accessor methods.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, cast

if TYPE_CHECKING:
    from hawkeye_cli.config.settings import HawkeyeConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from hawkeye_cli.config.parsing import (
    _normalize_log_level,
    _try_parse_bool,
    _try_parse_positive_float,
    _try_parse_positive_int,
)
from hawkeye_cli.core.errors.config import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "HAWKEYE_CONFIG_FILE"
PROFILE_ENV_VAR = "HAWKEYE_PROFILE"


class _ConfigLoader:
    """Mixin providing config-loading methods for ``HawkeyeConfig``.

    At runtime ``self`` is always a ``HawkeyeConfig`` instance.
    """

    if TYPE_CHECKING:
        server_url: str
        frontend_url: str
        token: str
        org_uuid: str
        project_id: str
        project_name: str
        log_level: str
        queue_size: int
        connect_timeout: float
        spinner: bool
        profile: str
        loaded_files: list

    @classmethod
    def from_env(
        cls,
        config_file: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> "HawkeyeConfig":
        """
        Create configuration from environment variables and TOML files.

        Priority (highest to lowest):
        1. Environment variables
        2. Project TOML config (./hawkeye.toml)
        3. User TOML config (~/.hawkeye.toml)
        4. XDG config (~/.config/hawkeye/config.toml, or config-<profile>.toml)
        5. Default values

        An explicit *config_file* (or ``HAWKEYE_CONFIG_FILE``) replaces the
        file layers.
        """
        config = cls()
        config.profile = profile or os.environ.get(PROFILE_ENV_VAR, "")

        toml_path = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
        if toml_path:
            path = Path(toml_path)
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}", field="config_file")
            config._load_toml(path)
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
            filename = f"config-{config.profile}.toml" if config.profile else "config.toml"
            xdg_config = Path(xdg_config_home) / "hawkeye" / filename
            if xdg_config.exists():
                config._load_toml(xdg_config)

            home_config = Path.home() / ".hawkeye.toml"
            if home_config.exists():
                config._load_toml(home_config)

            project_config = Path("hawkeye.toml")
            if project_config.exists():
                config._load_toml(project_config)

        config._load_env()
        return cast("HawkeyeConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from a TOML file.

        Raises:
            ConfigError: The file cannot be read or is not valid TOML.
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(
                f"Error loading config file {path}: {e}",
                field="config_file",
                remediation="Fix or remove the file",
            ) from e

        logger.debug("Loaded config from %s", path)
        self.loaded_files.append(str(path))

        server = _table(data, "server", path)
        if "url" in server:
            self.server_url = str(server["url"])
        if "frontend_url" in server:
            self.frontend_url = str(server["frontend_url"])

        auth = _table(data, "auth", path)
        if "token" in auth:
            self.token = str(auth["token"])
        if "org_uuid" in auth:
            self.org_uuid = str(auth["org_uuid"])

        project = _table(data, "project", path)
        if "id" in project:
            self.project_id = str(project["id"])
        if "name" in project:
            self.project_name = str(project["name"])

        log = _table(data, "logging", path)
        if "level" in log:
            self._set_log_level(log["level"], source=str(path))

        stream = _table(data, "stream", path)
        if "queue_size" in stream:
            self._set_queue_size(stream["queue_size"], source=str(path))
        if "connect_timeout" in stream:
            self._set_connect_timeout(stream["connect_timeout"], source=str(path))
        if "spinner" in stream:
            self._set_spinner(stream["spinner"], source=str(path))

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if server := os.environ.get("HAWKEYE_SERVER"):
            self.server_url = server
        if frontend := os.environ.get("HAWKEYE_FRONTEND_URL"):
            self.frontend_url = frontend
        if token := os.environ.get("HAWKEYE_TOKEN"):
            self.token = token
        if org := os.environ.get("HAWKEYE_ORG_UUID"):
            self.org_uuid = org
        if project_id := os.environ.get("HAWKEYE_PROJECT_ID"):
            self.project_id = project_id
        if project_name := os.environ.get("HAWKEYE_PROJECT_NAME"):
            self.project_name = project_name
        if level := os.environ.get("HAWKEYE_LOG_LEVEL"):
            self._set_log_level(level, source="HAWKEYE_LOG_LEVEL")
        if queue_size := os.environ.get("HAWKEYE_QUEUE_SIZE"):
            self._set_queue_size(queue_size, source="HAWKEYE_QUEUE_SIZE")
        if timeout := os.environ.get("HAWKEYE_CONNECT_TIMEOUT"):
            self._set_connect_timeout(timeout, source="HAWKEYE_CONNECT_TIMEOUT")
        if spinner := os.environ.get("HAWKEYE_SPINNER"):
            self._set_spinner(spinner, source="HAWKEYE_SPINNER")

    # -- Validated setters: warn and keep the current value -------------------

    def _set_log_level(self, value: Any, *, source: str) -> None:
        level = _normalize_log_level(value)
        if level is None:
            logger.warning("Ignoring invalid log level %r from %s", value, source)
            return
        self.log_level = level

    def _set_queue_size(self, value: Any, *, source: str) -> None:
        size = _try_parse_positive_int(value)
        if size is None:
            logger.warning("Ignoring invalid queue_size %r from %s: must be a positive integer", value, source)
            return
        self.queue_size = size

    def _set_connect_timeout(self, value: Any, *, source: str) -> None:
        timeout = _try_parse_positive_float(value)
        if timeout is None:
            logger.warning("Ignoring invalid connect_timeout %r from %s: must be a positive number", value, source)
            return
        self.connect_timeout = timeout

    def _set_spinner(self, value: Any, *, source: str) -> None:
        enabled = _try_parse_bool(value)
        if enabled is None:
            logger.warning("Ignoring invalid spinner %r from %s: must be boolean-compatible", value, source)
            return
        self.spinner = enabled


def _table(data: Dict[str, Any], name: str, path: Path) -> Dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        logger.warning("Ignoring [%s] in %s: expected a table", name, path)
        return {}
    return value
