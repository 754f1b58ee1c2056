"""Configuration helpers for mobile-dev-agent."""

from __future__ import annotations

import math
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

APP_DIR_NAME = "mobile-dev-agent"

_DEFAULT_GC_KEEP_LAST = 20
_DEFAULT_GC_KEEP_FAILURE_DAYS = 7
_DEFAULT_GC_MAX_BYTES = 2 * 1024 * 1024 * 1024
_DEFAULT_SNAPSHOT_STALE_SECONDS = 300
_ENV_LOADED = False


@dataclass(frozen=True)
class Settings:
    """Holds runtime settings for the core and its CLI."""

    state_dir: Path
    cache_dir: Path
    gc_keep_last: int = _DEFAULT_GC_KEEP_LAST
    gc_keep_failure_days: float = _DEFAULT_GC_KEEP_FAILURE_DAYS
    gc_max_bytes: int = _DEFAULT_GC_MAX_BYTES
    snapshot_stale_seconds: float = _DEFAULT_SNAPSHOT_STALE_SECONDS

    @property
    def sessions_dir(self) -> Path:
        return self.state_dir / "sessions"

    @property
    def runs_dir(self) -> Path:
        return self.cache_dir / "runs"

    def with_overrides(
        self,
        *,
        gc_keep_last: Optional[int] = None,
        gc_keep_failure_days: Optional[float] = None,
        gc_max_bytes: Optional[int] = None,
        snapshot_stale_seconds: Optional[float] = None,
    ) -> "Settings":
        """Return a copy with the provided overrides applied."""

        cfg = self
        if gc_keep_last is not None:
            cfg = replace(cfg, gc_keep_last=gc_keep_last)
        if gc_keep_failure_days is not None:
            cfg = replace(cfg, gc_keep_failure_days=gc_keep_failure_days)
        if gc_max_bytes is not None:
            cfg = replace(cfg, gc_max_bytes=gc_max_bytes)
        if snapshot_stale_seconds is not None:
            cfg = replace(cfg, snapshot_stale_seconds=snapshot_stale_seconds)
        return cfg


def load_settings(
    *,
    state_dir: Optional[Path] = None,
    cache_dir: Optional[Path] = None,
    gc_keep_last: Optional[int] = None,
    gc_keep_failure_days: Optional[float] = None,
    gc_max_bytes: Optional[int] = None,
    snapshot_stale_seconds: Optional[float] = None,
) -> Settings:
    """Load settings from environment variables and overrides."""

    _ensure_env_loaded()
    settings = Settings(
        state_dir=Path(state_dir) if state_dir else resolve_state_dir(),
        cache_dir=Path(cache_dir) if cache_dir else resolve_cache_dir(),
        gc_keep_last=int(_env_number("MOBILE_DEV_AGENT_GC_KEEP_LAST", _DEFAULT_GC_KEEP_LAST)),
        gc_keep_failure_days=_env_number(
            "MOBILE_DEV_AGENT_GC_KEEP_FAILURE_DAYS", _DEFAULT_GC_KEEP_FAILURE_DAYS
        ),
        gc_max_bytes=int(_env_number("MOBILE_DEV_AGENT_GC_MAX_BYTES", _DEFAULT_GC_MAX_BYTES)),
        snapshot_stale_seconds=_env_number(
            "MOBILE_DEV_AGENT_SNAPSHOT_STALE_SECONDS", _DEFAULT_SNAPSHOT_STALE_SECONDS
        ),
    )
    return settings.with_overrides(
        gc_keep_last=gc_keep_last,
        gc_keep_failure_days=gc_keep_failure_days,
        gc_max_bytes=gc_max_bytes,
        snapshot_stale_seconds=snapshot_stale_seconds,
    )


def resolve_state_dir() -> Path:
    """State directory: sessions and their latest snapshots live here."""
    override = os.getenv("MOBILE_DEV_AGENT_STATE_DIR", "").strip()
    if override:
        return _expand(override)
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_DIR_NAME
    xdg = os.getenv("XDG_STATE_HOME", "").strip()
    if xdg:
        return _expand(xdg) / APP_DIR_NAME
    return home / ".local" / "state" / APP_DIR_NAME


def resolve_cache_dir() -> Path:
    """Cache directory: run directories live under ``runs/`` here."""
    override = os.getenv("MOBILE_DEV_AGENT_CACHE_DIR", "").strip()
    if override:
        return _expand(override)
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Caches" / APP_DIR_NAME
    xdg = os.getenv("XDG_CACHE_HOME", "").strip()
    if xdg:
        return _expand(xdg) / APP_DIR_NAME
    return home / ".cache" / APP_DIR_NAME


def _expand(raw: str) -> Path:
    return Path(raw).expanduser().resolve()


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) else default


def _ensure_env_loaded() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    _ENV_LOADED = True
    dotenv_path = Path.cwd() / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path)
