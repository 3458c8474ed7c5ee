"""HawkeyeConfig dataclass.

This module defines the ``HawkeyeConfig`` class (field declarations and simple
accessor methods). Loading logic lives in the ``_ConfigLoader`` mixin
(``loader.py``) which ``HawkeyeConfig`` inherits from.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from hawkeye_cli.config.loader import _ConfigLoader
from hawkeye_cli.config.parsing import _mask_secret
from hawkeye_cli.core.errors.config import MissingConfigError


@dataclass
class HawkeyeConfig(_ConfigLoader):
    """Client configuration with support for env vars and TOML overrides."""

    # Server configuration
    server_url: str = ""
    frontend_url: str = ""  # Web console base; falls back to server_url

    # Authentication
    token: str = ""
    org_uuid: str = ""

    # Project selection
    project_id: str = ""
    project_name: str = ""

    # Logging configuration
    log_level: str = "WARNING"

    # Streaming
    queue_size: int = 64
    connect_timeout: float = 10.0
    spinner: bool = True

    profile: str = ""
    loaded_files: List[str] = field(default_factory=list)

    def validate(self, *, require_project: bool = True) -> None:
        """Raise ``MissingConfigError`` for the first required setting that is absent."""
        if not self.server_url:
            raise MissingConfigError(
                "server URL not set",
                field="server.url",
                remediation="Set HAWKEYE_SERVER or [server] url",
            )
        if not self.token:
            raise MissingConfigError(
                "not authenticated",
                field="auth.token",
                remediation="Set HAWKEYE_TOKEN or [auth] token",
            )
        if require_project and not self.project_id:
            raise MissingConfigError(
                "project not set",
                field="project.id",
                remediation="Pass --project, set HAWKEYE_PROJECT_ID, or add [project] id",
            )

    def console_session_url(self, session_id: str) -> str:
        """Web console link for *session_id*, or "" when it cannot be built."""
        if not self.project_id or not session_id:
            return ""
        base = self.frontend_url or self.server_url
        if not base:
            return ""
        base = base.rstrip("/")
        idx = base.find("/api")
        if idx > 0:
            base = base[:idx]
        return f"{base}/console/project/{self.project_id}/session/{session_id}"

    def to_display_dict(self) -> Dict[str, Any]:
        """Effective settings with the token masked."""
        return {
            "profile": self.profile or "default",
            "server_url": self.server_url,
            "frontend_url": self.frontend_url,
            "token": _mask_secret(self.token),
            "org_uuid": self.org_uuid,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "log_level": self.log_level,
            "queue_size": self.queue_size,
            "connect_timeout": self.connect_timeout,
            "spinner": self.spinner,
            "loaded_files": list(self.loaded_files),
        }
