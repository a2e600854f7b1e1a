"""Snapshot loading from JSON/YAML API surface documents."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import MalformedSnapshotError
from .jsonpath_utils import JSONPathMatcher
from .models import (
    DeprecationState,
    Entity,
    EntityKind,
    Member,
    MemberKind,
    Snapshot,
)
from .utils import build_path, get_type_name, version_sort_key

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIXES = (".json", ".yaml", ".yml")
YAML_SUFFIXES = (".yaml", ".yml")

_MEMBER_KIND_FOR_ENTITY = {
    EntityKind.INTERFACE: MemberKind.METHOD,
    EntityKind.DATA_CLASS: MemberKind.FIELD,
}


def _require(data: dict, key: str, expected: type, path: str) -> Any:
    """Fetch a required key of the expected type or fail with its path."""
    if key not in data or data[key] is None:
        raise MalformedSnapshotError(
            f"Missing required field '{key}' at {path or 'root'}",
            {"path": build_path(path, key)}
        )
    value = data[key]
    if not isinstance(value, expected):
        raise MalformedSnapshotError(
            f"Field '{key}' at {path or 'root'} must be {expected.__name__}, "
            f"got {get_type_name(value)}",
            {"path": build_path(path, key)}
        )
    return value


def _parse_enum(enum_cls, value: str, path: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise MalformedSnapshotError(
            f"Invalid kind '{value}' at {path}; expected one of: {allowed}",
            {"path": path, "value": value}
        )


def _parse_deprecation(raw: Any, path: str) -> DeprecationState:
    if raw is None:
        return DeprecationState.active()
    if not isinstance(raw, dict):
        raise MalformedSnapshotError(
            f"'deprecation' at {path} must be null or an object",
            {"path": path}
        )

    since = _require(raw, 'since', str, path)
    for_removal = raw.get('forRemoval', True)
    if not isinstance(for_removal, bool):
        raise MalformedSnapshotError(
            f"'forRemoval' at {path} must be a boolean",
            {"path": build_path(path, 'forRemoval')}
        )
    target = raw.get('targetVersion')
    if target is not None and not isinstance(target, str):
        raise MalformedSnapshotError(
            f"'targetVersion' at {path} must be a string",
            {"path": build_path(path, 'targetVersion')}
        )

    return DeprecationState.deprecated(since, for_removal=for_removal, target_version=target)


def _parse_member(raw: Any, entity_kind: EntityKind, path: str) -> Member:
    if not isinstance(raw, dict):
        raise MalformedSnapshotError(f"Member at {path} must be an object", {"path": path})

    name = _require(raw, 'name', str, path)
    kind = _parse_enum(MemberKind, _require(raw, 'kind', str, path), build_path(path, 'kind'))

    expected_kind = _MEMBER_KIND_FOR_ENTITY[entity_kind]
    if kind != expected_kind:
        raise MalformedSnapshotError(
            f"Member '{name}' at {path} is a {kind.value}; "
            f"{entity_kind.value} entities hold {expected_kind.value}s only",
            {"path": build_path(path, 'kind')}
        )

    signature = raw.get('signature') or []
    if not isinstance(signature, list) or not all(isinstance(t, str) for t in signature):
        raise MalformedSnapshotError(
            f"'signature' of '{name}' at {path} must be an array of type names",
            {"path": build_path(path, 'signature')}
        )

    if kind == MemberKind.FIELD:
        value_type = raw.get('type')
        if value_type is not None:
            if not isinstance(value_type, str):
                raise MalformedSnapshotError(
                    f"'type' of field '{name}' at {path} must be a string",
                    {"path": build_path(path, 'type')}
                )
            if signature and signature != [value_type]:
                raise MalformedSnapshotError(
                    f"Field '{name}' at {path} declares conflicting 'type' and 'signature'",
                    {"path": path}
                )
            signature = [value_type]
        elif len(signature) > 1:
            raise MalformedSnapshotError(
                f"Field '{name}' at {path} may declare at most one value type",
                {"path": build_path(path, 'signature')}
            )

    has_default = raw.get('hasDefault', False)
    if not isinstance(has_default, bool):
        raise MalformedSnapshotError(
            f"'hasDefault' of '{name}' at {path} must be a boolean",
            {"path": build_path(path, 'hasDefault')}
        )
    if has_default and kind == MemberKind.FIELD:
        raise MalformedSnapshotError(
            f"Field '{name}' at {path} cannot declare a default implementation",
            {"path": build_path(path, 'hasDefault')}
        )

    return Member(
        name=name,
        kind=kind,
        signature=tuple(signature),
        has_default=has_default,
        deprecation=_parse_deprecation(raw.get('deprecation'), build_path(path, 'deprecation')),
    )


def _parse_entity(raw: Any, path: str) -> Entity:
    if not isinstance(raw, dict):
        raise MalformedSnapshotError(f"Entity at {path} must be an object", {"path": path})

    name = _require(raw, 'name', str, path)
    kind = _parse_enum(EntityKind, _require(raw, 'kind', str, path), build_path(path, 'kind'))
    raw_members = raw.get('members') or []
    if not isinstance(raw_members, list):
        raise MalformedSnapshotError(
            f"'members' of entity '{name}' must be an array",
            {"path": build_path(path, 'members')}
        )

    members_path = build_path(path, 'members')
    members = [
        _parse_member(m, kind, build_path(members_path, i))
        for i, m in enumerate(raw_members)
    ]
    return Entity(name=name, kind=kind, members=tuple(members))


def snapshot_from_dict(data: Any, root_path: str = "$") -> Snapshot:
    """
    Build a Snapshot from a parsed document.

    Args:
        data: Parsed JSON/YAML document
        root_path: JSONPath selecting the API surface inside the document

    Returns:
        Immutable Snapshot

    Raises:
        MalformedSnapshotError: on any structural problem
        DuplicateMemberError: when two members collide inside one entity
    """
    if root_path and root_path != "$":
        try:
            matches = JSONPathMatcher.find_values(data, root_path)
        except ValueError as e:
            raise MalformedSnapshotError(str(e), {"root_path": root_path})
        if len(matches) != 1:
            raise MalformedSnapshotError(
                f"Root path '{root_path}' matched {len(matches)} nodes, expected exactly one",
                {"root_path": root_path, "matches": len(matches)}
            )
        data = matches[0]

    if not isinstance(data, dict):
        raise MalformedSnapshotError(
            f"Snapshot must be an object, got {get_type_name(data)}",
            {"type": get_type_name(data)}
        )

    version = _require(data, 'version', str, "")
    if not version:
        raise MalformedSnapshotError(
            "Field 'version' at root must not be empty",
            {"path": "version"}
        )

    raw_entities = _require(data, 'entities', list, "")
    entities = [_parse_entity(e, build_path('entities', i)) for i, e in enumerate(raw_entities)]

    return Snapshot(version=version, entities=tuple(entities))


def load_snapshot(path: str | Path, root_path: str = "$") -> Snapshot:
    """Load a snapshot from a JSON or YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    logger.debug("Loading snapshot %s", path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedSnapshotError(
            f"Cannot read snapshot file {path}: {e}",
            {"file": str(path)}
        )

    try:
        snapshot = parse_snapshot_text(content, root_path, source=str(path))
    except MalformedSnapshotError as e:
        e.details.setdefault("file", str(path))
        raise

    logger.debug(
        "Loaded snapshot %s version %s with %d entities",
        path, snapshot.version, len(snapshot.entities)
    )
    return snapshot


def load_snapshot_dir(folder: str | Path, root_path: str = "$") -> list[Snapshot]:
    """Load every snapshot file in a folder, ordered by version label."""
    folder = Path(folder)
    if not folder.is_dir():
        raise FileNotFoundError(f"Snapshot folder not found: {folder}")

    snapshots = [
        load_snapshot(p, root_path)
        for p in sorted(folder.iterdir())
        if p.suffix.lower() in SNAPSHOT_SUFFIXES
    ]
    return sorted(snapshots, key=lambda s: version_sort_key(s.version))


def parse_snapshot_text(content: str, root_path: str = "$",
                        source: Optional[str] = None) -> Snapshot:
    """
    Parse a snapshot from a JSON or YAML string.

    `.json` sources and text opening with '{' or '[' are read as JSON, so
    tab-indented documents load; `.yaml`/`.yml` sources are always YAML.
    """
    suffix = Path(source).suffix.lower() if source else ""
    as_json = suffix == ".json" or (
        suffix not in YAML_SUFFIXES and content.lstrip().startswith(("{", "["))
    )

    try:
        data = json.loads(content) if as_json else yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise MalformedSnapshotError(
            f"Failed to parse snapshot{f' {source}' if source else ''}: {e}",
            {"file": source} if source else {}
        )
    return snapshot_from_dict(data, root_path)
