"""Tests for the mobile-dev-agent command line."""

from __future__ import annotations

import json
import os
import time
from datetime import datetime, timedelta, timezone

import pytest

from mobiledevagent.cli import main

IOS_DUMP = {
    "children": [
        {"role": "AXButton", "label": "Sign in", "id": "btnSignIn", "frame": {"x": 10, "y": 20, "width": 100, "height": 40}},
        {"role": "AXTextField", "label": "Email", "id": "txtEmail", "frame": {"x": 10, "y": 80, "width": 200, "height": 40}},
        {"role": "AXStaticText", "label": "Welcome", "frame": {"x": 10, "y": 140, "width": 300, "height": 20}},
    ]
}

ANDROID_DUMP = (
    "<hierarchy>"
    '<node text="Sign in" resource-id="com.example:id/sign_in" class="android.widget.Button" '
    'clickable="true" bounds="[0,0][100,50]" />'
    "</hierarchy>"
)


def _run(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, out


@pytest.fixture
def ios_dump_path(tmp_path):
    path = tmp_path / "ios.json"
    path.write_text(json.dumps(IOS_DUMP), encoding="utf-8")
    return path


@pytest.fixture
def android_dump_path(tmp_path):
    path = tmp_path / "android.xml"
    path.write_text(ANDROID_DUMP, encoding="utf-8")
    return path


# =============================================================================
# ui parse
# =============================================================================


class TestUiParse:
    """Tests for ``ui parse``."""

    def test_parse_ios_prints_and_stores_snapshot(self, capsys, ios_dump_path, isolated_dirs):
        code, out = _run(
            capsys, "ui", "parse", "--platform", "ios", "--input", str(ios_dump_path), "--device-id", "UDID-1"
        )

        assert code == 0
        data = json.loads(out)
        assert data["platform"] == "ios"
        assert data["device_id"] == "UDID-1"
        assert [e["ref"] for e in data["elements"]] == ["e1", "e2", "e3"]

        stored = isolated_dirs["state_dir"] / "sessions" / "default" / "last_snapshot.json"
        assert json.loads(stored.read_text(encoding="utf-8"))["snapshot_id"] == data["snapshot_id"]

    def test_parse_interactive_only_tree(self, capsys, ios_dump_path):
        code, out = _run(
            capsys, "ui", "parse", "--platform", "ios", "--input", str(ios_dump_path), "-i", "--tree"
        )
        assert code == 0
        assert out == '@e1 [button] "Sign in" (10,20,100,40)\n@e2 [textbox] "Email" (10,80,200,40)\n'

    def test_parse_android_no_save(self, capsys, android_dump_path, isolated_dirs):
        code, out = _run(
            capsys, "ui", "parse", "--platform", "android", "--input", str(android_dump_path), "--no-save"
        )
        assert code == 0
        assert json.loads(out)["elements"][0]["selectors"]["android"]["resource_id"] == "com.example:id/sign_in"
        assert not (isolated_dirs["state_dir"] / "sessions").exists()

    def test_parse_missing_input_is_usage_error(self, capsys, tmp_path):
        code, out = _run(capsys, "ui", "parse", "--platform", "ios", "--input", str(tmp_path / "nope.json"))
        assert code == 2
        payload = json.loads(out)
        assert payload["ok"] is False
        assert payload["error"]["code"] == "USAGE"

    def test_parse_invalid_ios_json(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{oops", encoding="utf-8")
        code, out = _run(capsys, "ui", "parse", "--platform", "ios", "--input", str(path))
        assert code == 2
        assert "not valid JSON" in json.loads(out)["error"]["message"]

    def test_parse_non_utf8_input_is_usage_error(self, capsys, tmp_path):
        path = tmp_path / "dump.xml"
        path.write_bytes(b"\xff\xfe<hierarchy/>")
        code, out = _run(capsys, "ui", "parse", "--platform", "android", "--input", str(path))
        assert code == 2
        error = json.loads(out)["error"]
        assert error["code"] == "USAGE"
        assert error["message"].startswith("Cannot read input file")

    def test_parse_invalid_session(self, capsys, ios_dump_path):
        code, out = _run(
            capsys, "ui", "parse", "--platform", "ios", "--input", str(ios_dump_path), "--session", "../x"
        )
        assert code == 2
        assert "Invalid --session" in json.loads(out)["error"]["message"]


# =============================================================================
# ui resolve
# =============================================================================


class TestUiResolve:
    """Tests for ``ui resolve``."""

    def test_resolve_ref_after_parse(self, capsys, ios_dump_path):
        _run(capsys, "ui", "parse", "--platform", "ios", "--input", str(ios_dump_path))

        code, out = _run(capsys, "ui", "resolve", "@e1")

        assert code == 0
        data = json.loads(out)
        assert data["stale"] is False
        assert data["target"]["kind"] == "element"
        assert (data["target"]["x"], data["target"]["y"]) == (60, 40)

    def test_resolve_id_in_named_session(self, capsys, ios_dump_path):
        _run(capsys, "ui", "parse", "--platform", "ios", "--input", str(ios_dump_path), "--session", "s1")
        code, out = _run(capsys, "ui", "resolve", 'id:"txtEmail"', "--session", "s1")
        assert code == 0
        assert json.loads(out)["target"]["element"]["name"] == "Email"

    def test_resolve_coords_without_snapshot(self, capsys):
        code, out = _run(capsys, "ui", "resolve", "coords:5,6")
        assert code == 0
        assert json.loads(out)["target"] == {"kind": "coords", "x": 5, "y": 6}

    def test_resolve_without_snapshot_fails(self, capsys):
        code, out = _run(capsys, "ui", "resolve", "@e1", "--session", "empty")
        assert code == 1
        assert "No snapshot found" in json.loads(out)["error"]["message"]

    def test_resolve_miss(self, capsys, ios_dump_path):
        _run(capsys, "ui", "parse", "--platform", "ios", "--input", str(ios_dump_path))
        code, out = _run(capsys, "ui", "resolve", 'text:"Nope"')
        assert code == 2
        assert json.loads(out)["error"]["message"] == 'No matching element for selector: text:"Nope"'

    def test_resolve_bad_selector(self, capsys):
        code, out = _run(capsys, "ui", "resolve", "bogus")
        assert code == 2
        assert json.loads(out)["error"]["message"] == "Unknown selector: bogus"

    def test_resolve_corrupt_snapshot(self, capsys, isolated_dirs):
        path = isolated_dirs["state_dir"] / "sessions" / "default" / "last_snapshot.json"
        path.parent.mkdir(parents=True)
        path.write_text('{"snapshot_id": 1}', encoding="utf-8")

        code, out = _run(capsys, "ui", "resolve", "@e1")

        assert code == 1
        assert json.loads(out)["error"]["message"].startswith("Invalid snapshot file")

    @pytest.mark.parametrize(
        "bounds", [[1, 2, 3, 4], {"x": "a", "y": 0, "w": 10, "h": 10}]
    )
    def test_resolve_malformed_element_bounds(self, capsys, ios_dump_path, isolated_dirs, bounds):
        _run(capsys, "ui", "parse", "--platform", "ios", "--input", str(ios_dump_path))
        path = isolated_dirs["state_dir"] / "sessions" / "default" / "last_snapshot.json"
        stored = json.loads(path.read_text(encoding="utf-8"))
        stored["elements"][0]["bounds"] = bounds
        path.write_text(json.dumps(stored), encoding="utf-8")

        code, out = _run(capsys, "ui", "resolve", "@e1")

        assert code == 1
        error = json.loads(out)["error"]
        assert error["message"].startswith("Invalid snapshot file")
        assert any(d.startswith("elements.0.bounds") for d in error["details"])

    def test_resolve_non_utf8_snapshot(self, capsys, isolated_dirs):
        path = isolated_dirs["state_dir"] / "sessions" / "default" / "last_snapshot.json"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"\xff\xfe{")

        code, out = _run(capsys, "ui", "resolve", "@e1")

        assert code == 1
        assert json.loads(out)["error"]["message"].startswith("Invalid snapshot file")

    def test_resolve_reports_stale_snapshot(self, capsys, ios_dump_path, isolated_dirs):
        _run(capsys, "ui", "parse", "--platform", "ios", "--input", str(ios_dump_path))
        path = isolated_dirs["state_dir"] / "sessions" / "default" / "last_snapshot.json"
        stored = json.loads(path.read_text(encoding="utf-8"))
        old = datetime.now(timezone.utc) - timedelta(hours=1)
        stored["taken_at"] = old.isoformat()
        path.write_text(json.dumps(stored), encoding="utf-8")

        code, out = _run(capsys, "ui", "resolve", "@e2")

        assert code == 0
        assert json.loads(out)["stale"] is True


# =============================================================================
# gc
# =============================================================================


class TestGc:
    """Tests for ``gc``."""

    @pytest.fixture
    def runs(self, isolated_dirs):
        root = isolated_dirs["cache_dir"] / "runs"
        root.mkdir(parents=True)
        stamp = time.time() - 30 * 24 * 3600
        for day in range(1, 6):
            run_dir = root / f"202401{day:02d}-000000-x"
            run_dir.mkdir()
            (run_dir / "result.json").write_text('{"ok": true}', encoding="utf-8")
            os.utime(run_dir, (stamp, stamp))
        return root

    def test_dry_run_keeps_everything(self, capsys, runs):
        code, out = _run(capsys, "gc", "--dry-run", "--keep-last", "2", "--max-bytes", "24")

        assert code == 0
        data = json.loads(out)
        assert data["dry_run"] is True
        assert len(data["plan"]["delete"]) == 3
        assert data["report"]["deleted"] == []
        assert len(list(runs.iterdir())) == 5

    def test_gc_deletes_oldest(self, capsys, runs):
        code, out = _run(capsys, "gc", "--keep-last", "2", "--max-bytes", "24")

        assert code == 0
        data = json.loads(out)
        assert data["plan"]["keepLast"] == 2
        assert data["plan"]["afterBytes"] == 24
        assert sorted(p.name for p in runs.iterdir()) == ["20240104-000000-x", "20240105-000000-x"]
        assert len(data["report"]["deleted"]) == 3

    def test_gc_uses_env_defaults(self, capsys, runs, monkeypatch):
        monkeypatch.setenv("MOBILE_DEV_AGENT_GC_MAX_BYTES", "0")
        code, out = _run(capsys, "gc", "--dry-run")
        assert code == 0
        assert json.loads(out)["plan"]["maxBytes"] == 0
        assert len(json.loads(out)["plan"]["delete"]) == 5

    def test_gc_without_runs(self, capsys):
        code, out = _run(capsys, "gc")
        assert code == 0
        assert json.loads(out)["plan"]["totalRuns"] == 0

    def test_gc_negative_policy_is_usage_error(self, capsys):
        code, out = _run(capsys, "gc", "--keep-last", "-1")
        assert code == 2
        assert "non-negative" in json.loads(out)["error"]["message"]


class TestArgumentParsing:
    """Tests for argparse wiring."""

    def test_missing_command_exits_with_usage(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_unknown_platform_rejected(self):
        with pytest.raises(SystemExit):
            main(["ui", "parse", "--platform", "windows", "--input", "x"])
