"""Data models for the compatibility checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .exceptions import DuplicateMemberError, MalformedSnapshotError
from .utils import format_signature, member_identity


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class EntityKind(Enum):
    INTERFACE = "interface"
    DATA_CLASS = "data-class"


class MemberKind(Enum):
    METHOD = "method"
    FIELD = "field"


class DeprecationStatus(Enum):
    ACTIVE = "Active"
    DEPRECATED = "Deprecated"
    DEPRECATED_FOR_REMOVAL = "DeprecatedForRemoval"
    REMOVED = "Removed"


class ChangeKind(Enum):
    ADDED = "Added"
    REMOVED_MEMBER = "RemovedMember"
    SIGNATURE_CHANGED = "SignatureChanged"
    DEFAULT_ADDED = "DefaultAdded"
    DEFAULT_REMOVED = "DefaultRemoved"
    DEPRECATED_MARKED = "DeprecatedMarked"
    REMOVED_ENTITY = "RemovedEntity"
    ENTITY_KIND_CHANGED = "EntityKindChanged"


class Verdict(Enum):
    COMPATIBLE = "Compatible"
    COMPATIBLE_VIA_DEFAULT = "CompatibleViaDefault"
    COMPATIBLE_DEPRECATED = "CompatibleDeprecated"
    BREAKING = "Breaking"


class LifecyclePhase(Enum):
    DEPRECATION_INTRODUCED = "deprecation-introduced"
    REMOVAL_EXECUTED = "removal-executed"


class ViolationKind(Enum):
    REMOVED_WITHOUT_DEPRECATION = "REMOVED_WITHOUT_DEPRECATION"
    CHANGED_WITHOUT_DEPRECATION = "CHANGED_WITHOUT_DEPRECATION"
    PREMATURE_REMOVAL = "PREMATURE_REMOVAL"


@dataclass(frozen=True)
class DeprecationState:
    """Lifecycle state of a member."""
    status: DeprecationStatus = DeprecationStatus.ACTIVE
    since: Optional[str] = None
    target_version: Optional[str] = None

    @classmethod
    def active(cls) -> 'DeprecationState':
        return cls()

    @classmethod
    def deprecated(cls, since: str, for_removal: bool = True,
                   target_version: Optional[str] = None) -> 'DeprecationState':
        status = (DeprecationStatus.DEPRECATED_FOR_REMOVAL if for_removal
                  else DeprecationStatus.DEPRECATED)
        return cls(status=status, since=since, target_version=target_version)

    @classmethod
    def removed(cls) -> 'DeprecationState':
        return cls(status=DeprecationStatus.REMOVED)

    @property
    def is_active(self) -> bool:
        return self.status == DeprecationStatus.ACTIVE

    @property
    def is_deprecated(self) -> bool:
        return self.status in (
            DeprecationStatus.DEPRECATED,
            DeprecationStatus.DEPRECATED_FOR_REMOVAL,
        )

    @property
    def for_removal(self) -> bool:
        return self.status == DeprecationStatus.DEPRECATED_FOR_REMOVAL

    def to_dict(self) -> dict:
        result = {"status": self.status.value}
        if self.since is not None:
            result["since"] = self.since
        if self.target_version is not None:
            result["target_version"] = self.target_version
        return result


@dataclass(frozen=True)
class Member:
    """A method of an interface or a field of a data class."""
    name: str
    kind: MemberKind
    signature: tuple = ()
    has_default: bool = False
    deprecation: DeprecationState = field(default_factory=DeprecationState)

    def __post_init__(self):
        object.__setattr__(self, 'signature', tuple(self.signature))

    @property
    def identity(self) -> tuple:
        return (self.name, self.signature)

    def display(self) -> str:
        if self.kind == MemberKind.FIELD:
            if self.signature:
                return f"{self.name}: {', '.join(self.signature)}"
            return self.name
        return f"{self.name}{format_signature(self.signature)}"

    def to_dict(self) -> dict:
        result = {
            "name": self.name,
            "kind": self.kind.value,
            "signature": list(self.signature),
            "deprecation": self.deprecation.to_dict(),
        }
        if self.kind == MemberKind.METHOD:
            result["has_default"] = self.has_default
        return result


@dataclass(frozen=True)
class Entity:
    """
    An interface or data class tracked for compatibility.

    Members are unique by (name, signature); data-class fields are also
    unique by name. Violations raise DuplicateMemberError.
    """
    name: str
    kind: EntityKind
    members: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, 'members', tuple(self.members))

        by_identity = {}
        by_name: dict[str, list[Member]] = {}
        for member in self.members:
            if member.identity in by_identity:
                raise DuplicateMemberError(
                    self.name, member_identity(self.name, member.name, member.signature)
                )
            if member.kind == MemberKind.FIELD and member.name in by_name:
                raise DuplicateMemberError(self.name, member_identity(self.name, member.name))
            by_identity[member.identity] = member
            by_name.setdefault(member.name, []).append(member)

        object.__setattr__(self, '_by_identity', by_identity)
        object.__setattr__(self, '_by_name', by_name)

    def members_named(self, name: str) -> list[Member]:
        """All members (overloads for methods) with the given name."""
        return list(self._by_name.get(name, ()))

    def member(self, name: str, signature: tuple) -> Optional[Member]:
        """Exact lookup by name and signature."""
        return self._by_identity.get((name, tuple(signature)))

    def member_names(self) -> list[str]:
        return list(self._by_name.keys())


@dataclass(frozen=True)
class Snapshot:
    """The API surface at one released version. Immutable."""
    version: str
    entities: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, 'entities', tuple(self.entities))
        index = {}
        for entity in self.entities:
            if entity.name in index:
                raise MalformedSnapshotError(
                    f"Duplicate entity '{entity.name}' in snapshot {self.version}",
                    {"entity": entity.name},
                )
            index[entity.name] = entity
        object.__setattr__(self, '_index', MappingProxyType(index))

    @property
    def entity_map(self) -> Mapping[str, Entity]:
        """Read-only mapping of entity name to Entity in insertion order."""
        return self._index

    def get(self, name: str) -> Optional[Entity]:
        return self._index.get(name)

    def entity_names(self) -> list[str]:
        return list(self._index.keys())


@dataclass(frozen=True)
class ChangeRecord:
    """A single classified change between two snapshots."""
    entity: str
    entity_kind: EntityKind
    kind: ChangeKind
    member: Optional[str] = None
    before: Optional[Member] = None
    after: Optional[Member] = None
    verdict: Optional[Verdict] = None
    phase: Optional[LifecyclePhase] = None
    notes: tuple = ()
    # SignatureChanged only: the old overload survives, deprecated for removal
    old_kept: bool = False
    # Breaking only because of a lifecycle violation
    lifecycle_only: bool = False

    @property
    def signature(self) -> Optional[tuple]:
        ref = self.before if self.before is not None else self.after
        return ref.signature if ref is not None else None

    @property
    def identity(self) -> str:
        """Display identity of the affected member, or the entity name."""
        if self.member is None:
            return self.entity
        return member_identity(self.entity, self.member, self.signature)

    @property
    def before_state(self) -> Optional[DeprecationState]:
        return self.before.deprecation if self.before is not None else None

    @property
    def after_state(self) -> Optional[DeprecationState]:
        if self.after is not None:
            return self.after.deprecation
        if self.kind in (ChangeKind.REMOVED_MEMBER, ChangeKind.REMOVED_ENTITY):
            return DeprecationState.removed()
        return None

    def identity_keys(self) -> set[str]:
        """Every allow-list key that refers to this record."""
        keys = {self.entity}
        if self.member is not None:
            keys.add(self.member)
            keys.add(member_identity(self.entity, self.member))
            for ref in (self.before, self.after):
                if ref is not None:
                    keys.add(member_identity(self.entity, self.member, ref.signature))
        return keys

    def to_dict(self) -> dict:
        before_state = self.before_state
        after_state = self.after_state
        return {
            "entity": self.entity,
            "entity_kind": self.entity_kind.value,
            "member": self.member,
            "identity": self.identity,
            "change": self.kind.value,
            "verdict": self.verdict.value if self.verdict else None,
            "phase": self.phase.value if self.phase else None,
            "before": self.before.to_dict() if self.before else None,
            "after": self.after.to_dict() if self.after else None,
            "before_state": before_state.to_dict() if before_state else None,
            "after_state": after_state.to_dict() if after_state else None,
            "notes": list(self.notes),
            "old_kept": self.old_kept,
            "lifecycle_only": self.lifecycle_only,
        }


@dataclass(frozen=True)
class LifecycleViolation:
    """A member that skipped the deprecate-then-remove lifecycle."""
    entity: str
    identity: str
    kind: ViolationKind
    change: ChangeKind
    message: str
    before_state: Optional[DeprecationState] = None
    keys: frozenset = frozenset()

    def to_dict(self) -> dict:
        return {
            "entity": self.entity,
            "identity": self.identity,
            "violation": self.kind.value,
            "change": self.change.value,
            "message": self.message,
            "before_state": self.before_state.to_dict() if self.before_state else None,
        }


@dataclass(frozen=True)
class EntityError:
    """An entity whose comparison could not complete."""
    entity: str
    code: str
    message: str
    member: Optional[str] = None
    details: Optional[dict] = None

    def identity_keys(self) -> set[str]:
        keys = {self.entity}
        if self.member is not None:
            keys.add(self.member)
            keys.add(member_identity(self.entity, self.member))
        return keys

    def to_dict(self) -> dict:
        result = {
            "entity": self.entity,
            "code": self.code,
            "message": self.message,
            "member": self.member,
        }
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class Summary:
    """Summary statistics of a compatibility check."""
    status: str = "pass"
    before_version: str = ""
    after_version: str = ""
    total_changes: int = 0
    verdicts: dict[str, int] = field(default_factory=dict)
    breaking_count: int = 0
    violations_count: int = 0
    errors_count: int = 0
    allowed_count: int = 0
    engine_version: str = "1.0.0"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "before_version": self.before_version,
            "after_version": self.after_version,
            "total_changes": self.total_changes,
            "verdicts": dict(self.verdicts),
            "breaking": self.breaking_count,
            "violations": self.violations_count,
            "errors": self.errors_count,
            "allowed": self.allowed_count,
            "engine_version": self.engine_version,
        }


@dataclass
class ErrorResponse:
    """Error response structure for malformed input."""
    success: bool = False
    error: Optional[dict] = None

    def to_dict(self) -> dict:
        result = {"success": self.success}
        if self.error:
            result["error"] = self.error
        return result
