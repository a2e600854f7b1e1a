"""Deprecate-then-remove lifecycle validation."""

from __future__ import annotations

import logging
from typing import Optional

from .models import (
    ChangeKind,
    ChangeRecord,
    LifecycleViolation,
    ViolationKind,
)
from .utils import compare_versions

logger = logging.getLogger(__name__)


class LifecycleValidator:
    """
    Checks that removed or re-signed members went through a deprecation window.

    A member may only disappear if its state in the before snapshot was
    DeprecatedForRemoval. When the deprecation names a target version, the
    removal may not happen in an earlier release.
    """

    def __init__(self, after_version: str):
        self.after_version = after_version

    @staticmethod
    def applies_to(record: ChangeRecord) -> bool:
        if record.kind == ChangeKind.REMOVED_MEMBER:
            return True
        return record.kind == ChangeKind.SIGNATURE_CHANGED and not record.old_kept

    def validate(self, record: ChangeRecord) -> Optional[LifecycleViolation]:
        """Return the violation for a candidate record, or None if the lifecycle was honored."""
        if not self.applies_to(record):
            return None

        state = record.before_state
        if state is None or not state.for_removal:
            if record.kind == ChangeKind.REMOVED_MEMBER:
                kind = ViolationKind.REMOVED_WITHOUT_DEPRECATION
                action = "removed"
            else:
                kind = ViolationKind.CHANGED_WITHOUT_DEPRECATION
                action = "changed signature"
            status = state.status.value if state is not None else "unknown"
            return self._violation(
                record, kind,
                f"{record.identity} {action} in {self.after_version} "
                f"but was {status}, not DeprecatedForRemoval"
            )

        if state.target_version and compare_versions(self.after_version, state.target_version) == -1:
            return self._violation(
                record, ViolationKind.PREMATURE_REMOVAL,
                f"{record.identity} removed in {self.after_version} before its "
                f"announced target version {state.target_version}"
            )

        return None

    def validate_all(self, records: list[ChangeRecord]) -> list[Optional[LifecycleViolation]]:
        """Validate every record; the result is aligned with the input."""
        return [self.validate(record) for record in records]

    def _violation(
        self,
        record: ChangeRecord,
        kind: ViolationKind,
        message: str
    ) -> LifecycleViolation:
        logger.warning("Lifecycle violation: %s", message)
        return LifecycleViolation(
            entity=record.entity,
            identity=record.identity,
            kind=kind,
            change=record.kind,
            message=message,
            before_state=record.before_state,
            keys=frozenset(record.identity_keys()),
        )
