"""Verdict assignment for change records."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .models import (
    ChangeKind,
    ChangeRecord,
    EntityKind,
    LifecyclePhase,
    LifecycleViolation,
    MemberKind,
    Verdict,
)


class CompatibilityClassifier:
    """
    Maps each ChangeRecord to a Verdict using a fixed rule table.

    Any record carrying a lifecycle violation is Breaking; lifecycle_only
    marks those that would otherwise pass. A signature change that leaves an
    interface with a new method lacking a default is Breaking, as an
    addition would be. Removing a member after its deprecation window is
    CompatibleDeprecated but tagged as the removal-executed phase, so
    consumers can tell the release that introduced a deprecation from the
    one that acted on it.
    """

    def __init__(self, before_version: str, after_version: str):
        self.before_version = before_version
        self.after_version = after_version
        self._rules = {
            ChangeKind.ADDED: self._classify_added,
            ChangeKind.DEFAULT_ADDED: self._classify_default_added,
            ChangeKind.DEFAULT_REMOVED: self._classify_breaking,
            ChangeKind.REMOVED_MEMBER: self._classify_removed,
            ChangeKind.SIGNATURE_CHANGED: self._classify_signature_changed,
            ChangeKind.DEPRECATED_MARKED: self._classify_deprecated,
            ChangeKind.REMOVED_ENTITY: self._classify_breaking,
            ChangeKind.ENTITY_KIND_CHANGED: self._classify_breaking,
        }

    def classify(
        self,
        record: ChangeRecord,
        violation: Optional[LifecycleViolation] = None
    ) -> ChangeRecord:
        """Return a copy of the record with its verdict, phase and notes filled in."""
        verdict, phase, notes = self._rules[record.kind](record)
        if violation is not None:
            return replace(
                record,
                verdict=Verdict.BREAKING,
                lifecycle_only=verdict != Verdict.BREAKING,
                notes=record.notes + (violation.message,),
            )
        return replace(record, verdict=verdict, phase=phase, notes=record.notes + notes)

    def _classify_added(self, record: ChangeRecord):
        if record.entity_kind == EntityKind.INTERFACE:
            return Verdict.BREAKING, None, ("implementors must add this method",)
        return Verdict.COMPATIBLE, None, ()

    def _classify_default_added(self, record: ChangeRecord):
        return Verdict.COMPATIBLE_VIA_DEFAULT, None, ()

    def _classify_breaking(self, record: ChangeRecord):
        return Verdict.BREAKING, None, ()

    def _classify_removed(self, record: ChangeRecord):
        return (
            Verdict.COMPATIBLE_DEPRECATED,
            LifecyclePhase.REMOVAL_EXECUTED,
            (self._removal_note(record),),
        )

    def _classify_signature_changed(self, record: ChangeRecord):
        if self._adds_abstract_method(record):
            return (
                Verdict.BREAKING,
                None,
                (f"implementors must add {record.after.display()}",),
            )
        if record.old_kept:
            return Verdict.COMPATIBLE_DEPRECATED, LifecyclePhase.DEPRECATION_INTRODUCED, ()
        return (
            Verdict.COMPATIBLE_DEPRECATED,
            LifecyclePhase.REMOVAL_EXECUTED,
            (self._removal_note(record),),
        )

    def _classify_deprecated(self, record: ChangeRecord):
        state = record.after_state
        if state.for_removal:
            target = f"scheduled for removal in {state.target_version}" if state.target_version \
                else "scheduled for removal"
        else:
            target = "not scheduled for removal"
        notes = [f"warning: deprecated since {state.since}, {target}"]
        if state.since and state.since != self.after_version:
            notes.append(
                f"deprecation declared since {state.since} but first appears in {self.after_version}"
            )
        return Verdict.COMPATIBLE, LifecyclePhase.DEPRECATION_INTRODUCED, tuple(notes)

    @staticmethod
    def _adds_abstract_method(record: ChangeRecord) -> bool:
        return (
            record.entity_kind == EntityKind.INTERFACE
            and record.after is not None
            and record.after.kind == MemberKind.METHOD
            and not record.after.has_default
        )

    def _removal_note(self, record: ChangeRecord) -> str:
        since = record.before_state.since if record.before_state else None
        return (
            f"final breaking step of the deprecation window (deprecated since {since}) "
            f"executed in {self.after_version}"
        )
