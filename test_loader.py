"""Tests for snapshot loading and configuration."""

import json

import pytest
import yaml
from compatcheck import (
    CheckerConfig,
    ConfigError,
    DeprecationStatus,
    DuplicateMemberError,
    LogLevel,
    MalformedSnapshotError,
    load_snapshot,
    load_snapshot_dir,
    parse_snapshot_text,
    snapshot_from_dict,
)


ORDER_API = {
    "version": "1.1.0",
    "entities": [
        {
            "name": "OrderService",
            "kind": "interface",
            "members": [
                {"name": "processOrder", "kind": "method", "signature": ["Order"],
                 "hasDefault": False,
                 "deprecation": {"since": "1.1.0", "forRemoval": True, "targetVersion": "2.0.0"}},
                {"name": "createOrder", "kind": "method", "signature": ["Order"],
                 "hasDefault": True, "deprecation": None},
            ],
        },
        {
            "name": "Order",
            "kind": "data-class",
            "members": [
                {"name": "id", "kind": "field", "type": "UUID"},
                {"name": "note", "kind": "field", "signature": ["String"]},
            ],
        },
    ],
}


class TestSnapshotFromDict:
    """Test building snapshots from parsed documents."""

    def test_valid_document(self):
        snap = snapshot_from_dict(ORDER_API)
        assert snap.version == "1.1.0"
        assert snap.entity_names() == ["OrderService", "Order"]

        service = snap.get("OrderService")
        process = service.member("processOrder", ("Order",))
        assert process.deprecation.status == DeprecationStatus.DEPRECATED_FOR_REMOVAL
        assert process.deprecation.target_version == "2.0.0"
        assert service.member("createOrder", ("Order",)).has_default is True

        order = snap.get("Order")
        assert order.member("id", ("UUID",)) is not None
        assert order.member("note", ("String",)) is not None

    def test_for_removal_false(self):
        doc = {
            "version": "1.0.0",
            "entities": [{
                "name": "Order", "kind": "data-class",
                "members": [{"name": "legacy", "kind": "field", "type": "String",
                             "deprecation": {"since": "0.9.0", "forRemoval": False}}],
            }],
        }
        member = snapshot_from_dict(doc).get("Order").members[0]
        assert member.deprecation.status == DeprecationStatus.DEPRECATED

    def test_missing_version(self):
        with pytest.raises(MalformedSnapshotError) as exc_info:
            snapshot_from_dict({"entities": []})
        assert exc_info.value.details["path"] == "version"

    def test_numeric_version_rejected(self):
        """YAML reads 1.10 as a float, which would collapse to 1.1."""
        with pytest.raises(MalformedSnapshotError) as exc_info:
            parse_snapshot_text("version: 1.10\nentities: []\n")
        assert exc_info.value.details["path"] == "version"

    def test_missing_member_name(self):
        doc = {
            "version": "1.0.0",
            "entities": [{"name": "Order", "kind": "data-class",
                          "members": [{"kind": "field", "type": "String"}]}],
        }
        with pytest.raises(MalformedSnapshotError) as exc_info:
            snapshot_from_dict(doc)
        assert exc_info.value.details["path"] == "entities[0].members[0].name"

    def test_invalid_entity_kind(self):
        doc = {"version": "1.0.0", "entities": [{"name": "Order", "kind": "enum"}]}
        with pytest.raises(MalformedSnapshotError):
            snapshot_from_dict(doc)

    def test_field_in_interface_rejected(self):
        doc = {
            "version": "1.0.0",
            "entities": [{"name": "OrderService", "kind": "interface",
                          "members": [{"name": "id", "kind": "field", "type": "UUID"}]}],
        }
        with pytest.raises(MalformedSnapshotError):
            snapshot_from_dict(doc)

    def test_default_on_field_rejected(self):
        doc = {
            "version": "1.0.0",
            "entities": [{"name": "Order", "kind": "data-class",
                          "members": [{"name": "id", "kind": "field", "type": "UUID",
                                       "hasDefault": True}]}],
        }
        with pytest.raises(MalformedSnapshotError):
            snapshot_from_dict(doc)

    def test_deprecation_requires_since(self):
        doc = {
            "version": "1.0.0",
            "entities": [{"name": "Order", "kind": "data-class",
                          "members": [{"name": "id", "kind": "field",
                                       "deprecation": {"forRemoval": True}}]}],
        }
        with pytest.raises(MalformedSnapshotError):
            snapshot_from_dict(doc)

    def test_duplicate_member(self):
        doc = {
            "version": "1.0.0",
            "entities": [{"name": "OrderService", "kind": "interface", "members": [
                {"name": "find", "kind": "method", "signature": ["String"]},
                {"name": "find", "kind": "method", "signature": ["String"]},
            ]}],
        }
        with pytest.raises(DuplicateMemberError):
            snapshot_from_dict(doc)

    def test_duplicate_entity(self):
        doc = {
            "version": "1.0.0",
            "entities": [
                {"name": "Order", "kind": "data-class"},
                {"name": "Order", "kind": "data-class"},
            ],
        }
        with pytest.raises(MalformedSnapshotError):
            snapshot_from_dict(doc)

    def test_root_path(self):
        doc = {"package": "orders", "api": ORDER_API}
        snap = snapshot_from_dict(doc, root_path="$.api")
        assert snap.version == "1.1.0"

    def test_root_path_without_match(self):
        with pytest.raises(MalformedSnapshotError) as exc_info:
            snapshot_from_dict({"package": "orders"}, root_path="$.api")
        assert exc_info.value.details["matches"] == 0


class TestLoadSnapshot:
    """Test file-based loading."""

    def test_load_json(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text(json.dumps(ORDER_API))

        snap = load_snapshot(path)
        assert snap.version == "1.1.0"

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "api.yaml"
        path.write_text(yaml.safe_dump(ORDER_API))

        snap = load_snapshot(path)
        assert len(snap.entities) == 2

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text("{not: [valid")

        with pytest.raises(MalformedSnapshotError) as exc_info:
            load_snapshot(path)
        assert exc_info.value.details["file"] == str(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "missing.json")

    def test_parse_text(self):
        snap = parse_snapshot_text(json.dumps(ORDER_API))
        assert snap.get("Order") is not None

    def test_load_tab_indented_json(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text(json.dumps(ORDER_API, indent="\t"))

        snap = load_snapshot(path)
        assert snap.get("OrderService").member("createOrder", ("Order",)) is not None

    def test_parse_tab_indented_json_text(self):
        snap = parse_snapshot_text(json.dumps(ORDER_API, indent="\t"))
        assert snap.version == "1.1.0"

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_bytes(b"\xff\xfe\x00")

        with pytest.raises(MalformedSnapshotError) as exc_info:
            load_snapshot(path)
        assert exc_info.value.details["file"] == str(path)

    def test_directory_instead_of_file(self, tmp_path):
        folder = tmp_path / "api.json"
        folder.mkdir()

        with pytest.raises(MalformedSnapshotError):
            load_snapshot(folder)

    def test_load_dir_sorted_by_version(self, tmp_path):
        for name, version in (("a.json", "1.10.0"), ("b.yaml", "1.2.0"), ("c.json", "1.9.0")):
            doc = dict(ORDER_API, version=version)
            (tmp_path / name).write_text(json.dumps(doc))
        (tmp_path / "README.md").write_text("not a snapshot")

        snapshots = load_snapshot_dir(tmp_path)
        assert [s.version for s in snapshots] == ["1.2.0", "1.9.0", "1.10.0"]


class TestCheckerConfig:
    """Test configuration loading."""

    def test_defaults(self):
        config = CheckerConfig()
        assert config.workers == 1
        assert config.allow_breaking == frozenset()
        assert config.log_level == LogLevel.INFO

    def test_from_file(self, tmp_path):
        path = tmp_path / "compat.yaml"
        path.write_text(
            "allowBreaking:\n"
            "  - OrderService.createOrder\n"
            "workers: 4\n"
            "rootPath: $.api\n"
            "logLevel: debug\n"
            "failOnViolations: false\n"
        )

        config = CheckerConfig.from_file(path)
        assert config.allow_breaking == frozenset({"OrderService.createOrder"})
        assert config.workers == 4
        assert config.root_path == "$.api"
        assert config.log_level == LogLevel.DEBUG
        assert config.fail_on_violations is False

    def test_with_allowed_merges(self):
        config = CheckerConfig(allow_breaking=frozenset({"A"})).with_allowed(["B", " C ", ""])
        assert config.allow_breaking == frozenset({"A", "B", "C"})

    def test_invalid_workers(self):
        with pytest.raises(ConfigError):
            CheckerConfig.from_dict({"workers": 0})

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError):
            CheckerConfig.from_dict({"logLevel": "LOUD"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            CheckerConfig.from_file(tmp_path / "missing.yaml")

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "compat.yaml"
        path.write_bytes(b"\xff\xfe\x00")

        with pytest.raises(ConfigError):
            CheckerConfig.from_file(path)
