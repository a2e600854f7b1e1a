"""
compatcheck - API Compatibility Checker

Compares two snapshots of an API surface (interfaces and data classes with
deprecation metadata), classifies every change as compatible or breaking,
and enforces the deprecate-before-remove lifecycle.
"""

from .engine import CompatEngine, compare
from .config import CheckerConfig
from .models import (
    ChangeKind,
    ChangeRecord,
    DeprecationState,
    DeprecationStatus,
    Entity,
    EntityError,
    EntityKind,
    LifecyclePhase,
    LifecycleViolation,
    LogLevel,
    Member,
    MemberKind,
    Snapshot,
    Verdict,
    ViolationKind,
)
from .exceptions import (
    AmbiguousMatchError,
    CompatCheckError,
    ConfigError,
    DuplicateMemberError,
    MalformedSnapshotError,
)
from .differ import Differ
from .lifecycle import LifecycleValidator
from .classifier import CompatibilityClassifier
from .report import CompatReport, ReportBuilder
from .loader import (
    load_snapshot,
    load_snapshot_dir,
    parse_snapshot_text,
    snapshot_from_dict,
)

__version__ = "1.0.0"
__all__ = [
    # Engine
    "CompatEngine",
    "CheckerConfig",
    "compare",
    # Entity Model
    "Snapshot",
    "Entity",
    "EntityKind",
    "Member",
    "MemberKind",
    "DeprecationState",
    "DeprecationStatus",
    "LogLevel",
    # Pipeline stages
    "Differ",
    "LifecycleValidator",
    "CompatibilityClassifier",
    "ReportBuilder",
    # Reports
    "CompatReport",
    "ChangeRecord",
    "ChangeKind",
    "Verdict",
    "LifecyclePhase",
    "LifecycleViolation",
    "ViolationKind",
    "EntityError",
    # Errors
    "CompatCheckError",
    "MalformedSnapshotError",
    "DuplicateMemberError",
    "AmbiguousMatchError",
    "ConfigError",
    # Loading
    "load_snapshot",
    "load_snapshot_dir",
    "parse_snapshot_text",
    "snapshot_from_dict",
]
