"""Configuration for mobile-dev-agent."""

from mobiledevagent.config.paths import (
    DEFAULT_SESSION,
    last_snapshot_path,
    session_dir,
    validate_session_name,
)
from mobiledevagent.config.settings import Settings, load_settings

__all__ = [
    "DEFAULT_SESSION",
    "Settings",
    "load_settings",
    "last_snapshot_path",
    "session_dir",
    "validate_session_name",
]
