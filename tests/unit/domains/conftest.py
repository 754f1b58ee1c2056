"""Pytest fixtures for domain tests.

These fixtures support testing the bounded contexts:
- Snapshot Context (parsers, builder, store)
- Selector Context
- Retention Context
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from mobiledevagent.domains.retention import RunInfo, StartedAtSource
from mobiledevagent.domains.shared import Platform
from mobiledevagent.domains.snapshot import (
    SnapshotBuilder,
    SnapshotId,
    UISnapshot,
    parse_ios_accessibility,
)

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Snapshot Domain Fixtures
# =============================================================================


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def sample_ios_raw() -> Dict[str, Any]:
    """Sample iOS accessibility dump as returned by ``axe describe-ui``."""
    return {
        "children": [
            {
                "role": "AXButton",
                "label": "Sign in",
                "id": "btnSignIn",
                "frame": {"x": 10, "y": 20, "width": 100, "height": 40},
            },
            {
                "role": "AXTextField",
                "label": "Email",
                "id": "txtEmail",
                "frame": {"x": 10, "y": 80, "width": 200, "height": 40},
            },
            {
                "role": "AXStaticText",
                "label": "Welcome",
                "frame": {"x": 10, "y": 140, "width": 300, "height": 20},
            },
        ],
    }


@pytest.fixture
def sample_android_xml() -> str:
    """Sample uiautomator dump with a button and a text field."""
    return (
        "<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>\n"
        "<hierarchy>\n"
        '  <node index="0" text="Sign in" resource-id="com.example:id/sign_in" '
        'class="android.widget.Button" clickable="true" focusable="true" enabled="true" '
        'focused="false" bounds="[0,0][100,50]" />\n'
        '  <node index="1" text="" content-desc="Email" resource-id="com.example:id/email" '
        'class="android.widget.EditText" clickable="true" focusable="true" enabled="true" '
        'focused="true" bounds="[0,60][200,100]" />\n'
        "</hierarchy>\n"
    )


@pytest.fixture
def builder(fixed_now) -> SnapshotBuilder:
    """Builder with a pinned clock and a deterministic snapshot id."""
    return SnapshotBuilder(
        clock=lambda: fixed_now,
        id_factory=lambda: SnapshotId("snap-0001"),
    )


@pytest.fixture
def ios_snapshot(builder, sample_ios_raw) -> UISnapshot:
    elements = parse_ios_accessibility(sample_ios_raw)
    return builder.build(elements, Platform.IOS, device_id="UDID-123")


# =============================================================================
# Retention Domain Fixtures
# =============================================================================


@pytest.fixture
def make_run(fixed_now) -> Callable[..., RunInfo]:
    """Factory for RunInfo values aged relative to FIXED_NOW."""

    def _make(
        name: str,
        age_hours: float,
        size_bytes: int = 100,
        ok: Optional[bool] = True,
        root: Path = Path("/cache/runs"),
    ) -> RunInfo:
        return RunInfo(
            dir=root / name,
            started_at=fixed_now - timedelta(hours=age_hours),
            started_at_source=StartedAtSource.NAME,
            mtime_ms=0,
            ok=ok,
            size_bytes=size_bytes,
        )

    return _make


@pytest.fixture
def runs_root(tmp_path) -> Path:
    """Empty ``<cache>/runs`` directory on disk."""
    root = tmp_path / "scan-cache" / "runs"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def make_run_dir(runs_root) -> Callable[..., Path]:
    """Create a run directory on disk with an optional result.json and payload."""

    def _make(
        name: str,
        result: Optional[str] = None,
        payload_bytes: int = 0,
        mtime: Optional[float] = None,
    ) -> Path:
        run_dir = runs_root / name
        run_dir.mkdir()
        if result is not None:
            (run_dir / "result.json").write_text(result, encoding="utf-8")
        if payload_bytes:
            (run_dir / "artifacts").mkdir()
            (run_dir / "artifacts" / "log.txt").write_bytes(b"x" * payload_bytes)
        if mtime is not None:
            os.utime(run_dir, (mtime, mtime))
        return run_dir

    return _make
