"""Pytest configuration for the mobile-dev-agent test suite."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Point state and cache directories at a per-test temp location.

    Keeps tests from reading or writing the user's real sessions and runs.
    """
    state_dir = tmp_path / "state"
    cache_dir = tmp_path / "cache"
    monkeypatch.setenv("MOBILE_DEV_AGENT_STATE_DIR", str(state_dir))
    monkeypatch.setenv("MOBILE_DEV_AGENT_CACHE_DIR", str(cache_dir))
    for name in (
        "MOBILE_DEV_AGENT_GC_KEEP_LAST",
        "MOBILE_DEV_AGENT_GC_KEEP_FAILURE_DAYS",
        "MOBILE_DEV_AGENT_GC_MAX_BYTES",
        "MOBILE_DEV_AGENT_SNAPSHOT_STALE_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    return {"state_dir": state_dir, "cache_dir": cache_dir}
