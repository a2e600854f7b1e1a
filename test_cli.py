"""Tests for the compat-check command line."""

import json

import pytest
from compatcheck.cli import main


BEFORE = {
    "version": "1.0.0",
    "entities": [{
        "name": "OrderService",
        "kind": "interface",
        "members": [{"name": "processOrder", "kind": "method", "signature": ["Order"]}],
    }],
}

AFTER = {
    "version": "1.1.0",
    "entities": [{
        "name": "OrderService",
        "kind": "interface",
        "members": [
            {"name": "processOrder", "kind": "method", "signature": ["Order"],
             "deprecation": {"since": "1.1.0", "forRemoval": True}},
            {"name": "createOrder", "kind": "method", "signature": ["Order"]},
        ],
    }],
}


@pytest.fixture
def snapshots(tmp_path):
    before = tmp_path / "before.json"
    after = tmp_path / "after.json"
    before.write_text(json.dumps(BEFORE))
    after.write_text(json.dumps(AFTER))
    return str(before), str(after)


class TestExitCodes:
    """Test pass/fail/malformed exit codes."""

    def test_pass(self, snapshots):
        before, _ = snapshots
        assert main([before, before, "-q"]) == 0

    def test_fail_on_breaking(self, snapshots, capsys):
        before, after = snapshots
        assert main([before, after]) == 1
        out = capsys.readouterr().out
        assert "FAIL" in out
        assert "OrderService.createOrder(Order)" in out

    def test_allow_list(self, snapshots):
        before, after = snapshots
        assert main([before, after, "--allow", "Other,OrderService.createOrder", "-q"]) == 0

    def test_malformed_input(self, snapshots, tmp_path, capsys):
        before, _ = snapshots
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"entities": []}))

        assert main([before, str(bad)]) == 2
        assert "version" in capsys.readouterr().err

    def test_missing_file(self, snapshots, tmp_path):
        before, _ = snapshots
        assert main([before, str(tmp_path / "missing.json")]) == 2

    def test_undecodable_snapshot(self, snapshots, tmp_path, capsys):
        before, _ = snapshots
        bad = tmp_path / "bad.json"
        bad.write_bytes(b"\xff\xfe")

        assert main([before, str(bad), "--format", "json"]) == 2
        error = json.loads(capsys.readouterr().err)
        assert error["error"]["code"] == "MALFORMED_SNAPSHOT"
        assert error["error"]["details"]["file"] == str(bad)

    def test_directory_as_snapshot(self, snapshots, tmp_path):
        before, _ = snapshots
        assert main([before, str(tmp_path)]) == 2

    def test_undecodable_config(self, snapshots, tmp_path):
        before, after = snapshots
        config = tmp_path / "compat.yaml"
        config.write_bytes(b"\xff\xfe")

        assert main([before, after, "--config", str(config)]) == 2

    def test_tab_indented_json(self, tmp_path):
        before = tmp_path / "before.json"
        before.write_text(json.dumps(BEFORE, indent="\t"))

        assert main([str(before), str(before), "-q"]) == 0

    def test_duplicate_member_json_error(self, snapshots, tmp_path, capsys):
        before, _ = snapshots
        dup = tmp_path / "dup.json"
        dup.write_text(json.dumps({
            "version": "1.1.0",
            "entities": [{"name": "OrderService", "kind": "interface", "members": [
                {"name": "find", "kind": "method", "signature": ["String"]},
                {"name": "find", "kind": "method", "signature": ["String"]},
            ]}],
        }))

        assert main([before, str(dup), "--format", "json"]) == 2
        error = json.loads(capsys.readouterr().err)
        assert error["success"] is False
        assert error["error"]["code"] == "DUPLICATE_MEMBER"


class TestOutput:
    """Test report output options."""

    def test_json_output_file(self, snapshots, tmp_path):
        before, after = snapshots
        report_path = tmp_path / "out" / "report.json"

        assert main([before, after, "-q", "--output", str(report_path)]) == 1
        report = json.loads(report_path.read_text())
        assert report["summary"]["status"] == "fail"
        assert [c["change"] for c in report["changes"]] == ["Added", "DeprecatedMarked"]
        assert report["violations"] == []

    def test_json_stdout(self, snapshots, capsys):
        before, after = snapshots
        main([before, after, "--format", "json"])
        report = json.loads(capsys.readouterr().out)
        assert report["summary"]["breaking"] == 1

    def test_config_file(self, snapshots, tmp_path):
        before, after = snapshots
        config = tmp_path / "compat.yaml"
        config.write_text("allowBreaking: [createOrder]\n")

        assert main([before, after, "--config", str(config), "-q"]) == 0

    def test_root_path(self, tmp_path):
        before = tmp_path / "before.yaml"
        after = tmp_path / "after.yaml"
        before.write_text(json.dumps({"api": BEFORE}))
        after.write_text(json.dumps({"api": BEFORE}))

        assert main([str(before), str(after), "--root-path", "$.api", "-q"]) == 0
