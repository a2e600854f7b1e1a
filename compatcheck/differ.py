"""Entity and member matching between two snapshots."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from .exceptions import AmbiguousMatchError
from .models import (
    ChangeKind,
    ChangeRecord,
    DeprecationStatus,
    Entity,
    EntityError,
    EntityKind,
    Member,
    MemberKind,
    Snapshot,
)
from .utils import format_signature

logger = logging.getLogger(__name__)

_KIND_ORDER = {kind: index for index, kind in enumerate(ChangeKind)}


def _record_sort_key(record: ChangeRecord) -> tuple:
    if record.member is None:
        return (0, "", (), _KIND_ORDER[record.kind])
    return (1, record.member, record.signature or (), _KIND_ORDER[record.kind])


def _newly_deprecated(old: Member, new: Member) -> bool:
    """True when the member moved further along the deprecation lifecycle."""
    if old.deprecation.is_active:
        return new.deprecation.is_deprecated
    return (
        old.deprecation.status == DeprecationStatus.DEPRECATED
        and new.deprecation.for_removal
    )


class Differ:
    """
    Matches entities by name and members by name then signature.

    Produces unclassified ChangeRecords; verdicts are assigned later by the
    classifier. Entities only present in the after snapshot are ignored.
    Records follow the after snapshot's entity order; entities removed in
    after have no position there, so their records come last, in before
    order. Entities whose overloads cannot be paired are reported in ``errors``
    and contribute no records.
    """

    def __init__(self, workers: int = 1):
        self.workers = workers
        self.records: list[ChangeRecord] = []
        self.errors: list[EntityError] = []
        self.entities_compared = 0

    def diff(self, before: Snapshot, after: Snapshot) -> list[ChangeRecord]:
        """
        Compare two snapshots.

        Args:
            before: Snapshot of the previous release
            after: Snapshot of the release under check

        Returns:
            ChangeRecords grouped by entity (after order, then entities
            removed from after in before order), then by member name
        """
        self.records = []
        self.errors = []

        pairs = []
        for name, new_entity in after.entity_map.items():
            old_entity = before.get(name)
            if old_entity is None:
                logger.debug("Entity %s is new in %s; nothing to check", name, after.version)
                continue
            pairs.append((old_entity, new_entity))

        removed = [
            entity for name, entity in before.entity_map.items()
            if after.get(name) is None
        ]

        for records, error in self._run(pairs):
            if error is not None:
                self.errors.append(error)
            self.records.extend(records)

        for entity in removed:
            logger.debug("Entity %s removed in %s", entity.name, after.version)
            self.records.append(ChangeRecord(
                entity=entity.name,
                entity_kind=entity.kind,
                kind=ChangeKind.REMOVED_ENTITY,
                notes=(f"{entity.kind.value} '{entity.name}' is absent from {after.version}",),
            ))

        self.entities_compared = len(pairs) + len(removed)
        return list(self.records)

    def _run(self, pairs: list[tuple[Entity, Entity]]) -> list[tuple]:
        if self.workers > 1 and len(pairs) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                # map() yields in submission order, which keeps the output stable
                return list(executor.map(self._diff_pair, pairs))
        return [self._diff_pair(pair) for pair in pairs]

    def _diff_pair(self, pair: tuple[Entity, Entity]) -> tuple[list[ChangeRecord], Optional[EntityError]]:
        old_entity, new_entity = pair
        try:
            return self.diff_entity(old_entity, new_entity), None
        except AmbiguousMatchError as e:
            logger.warning("Skipping entity %s: %s", old_entity.name, e)
            return [], EntityError(
                entity=e.entity,
                code="AMBIGUOUS_MATCH",
                message=str(e),
                member=e.member,
                details={
                    "removed": [format_signature(s) for s in e.removed],
                    "added": [format_signature(s) for s in e.added],
                },
            )

    def diff_entity(self, old_entity: Entity, new_entity: Entity) -> list[ChangeRecord]:
        """Compare one entity present in both snapshots."""
        logger.debug("Comparing entity %s", new_entity.name)

        if old_entity.kind != new_entity.kind:
            return [ChangeRecord(
                entity=new_entity.name,
                entity_kind=new_entity.kind,
                kind=ChangeKind.ENTITY_KIND_CHANGED,
                notes=(f"kind changed from {old_entity.kind.value} to {new_entity.kind.value}",),
            )]

        names = old_entity.member_names()
        seen = set(names)
        names.extend(n for n in new_entity.member_names() if n not in seen)

        records = []
        for name in names:
            records.extend(self._diff_member_group(name, old_entity, new_entity))

        return sorted(records, key=_record_sort_key)

    def _diff_member_group(
        self,
        name: str,
        old_entity: Entity,
        new_entity: Entity
    ) -> list[ChangeRecord]:
        """Compare all overloads sharing one member name."""
        old_members = old_entity.members_named(name)
        new_members = new_entity.members_named(name)
        old_by_sig = {m.signature: m for m in old_members}
        new_by_sig = {m.signature: m for m in new_members}

        common = [m for m in old_members if m.signature in new_by_sig]
        removed = [m for m in old_members if m.signature not in new_by_sig]
        added = [m for m in new_members if m.signature not in old_by_sig]

        if len(removed) > 1 and len(added) > 1:
            raise AmbiguousMatchError(
                new_entity.name,
                name,
                [m.signature for m in removed],
                [m.signature for m in added],
            )

        # One new overload introduced while an existing one turns
        # deprecated-for-removal is a signature transition, old kept
        transition = None
        if len(added) == 1 and not removed:
            for old in common:
                new = new_by_sig[old.signature]
                if not old.deprecation.for_removal and new.deprecation.for_removal:
                    transition = old
                    break

        records = []
        for old in common:
            if old is transition:
                continue
            records.extend(self._diff_same_identity(new_entity, old, new_by_sig[old.signature]))

        if transition is not None:
            records.append(self._record(
                new_entity, ChangeKind.SIGNATURE_CHANGED, name,
                before=transition, after=added[0], old_kept=True,
                notes=(
                    f"{transition.display()} kept as deprecated overload "
                    f"alongside {added[0].display()}",
                ),
            ))
        elif len(removed) == 1 and len(added) == 1:
            records.append(self._record(
                new_entity, ChangeKind.SIGNATURE_CHANGED, name,
                before=removed[0], after=added[0],
                notes=(f"{removed[0].display()} replaced by {added[0].display()}",),
            ))
        else:
            for old in removed:
                records.append(self._record(
                    new_entity, ChangeKind.REMOVED_MEMBER, name, before=old
                ))
            for new in added:
                kind = ChangeKind.ADDED
                if new.kind == MemberKind.METHOD and new.has_default:
                    kind = ChangeKind.DEFAULT_ADDED
                records.append(self._record(new_entity, kind, name, after=new))

        return records

    def _diff_same_identity(self, entity: Entity, old: Member, new: Member) -> list[ChangeRecord]:
        records = []

        if _newly_deprecated(old, new):
            records.append(self._record(
                entity, ChangeKind.DEPRECATED_MARKED, old.name, before=old, after=new
            ))

        if old.kind == MemberKind.METHOD and old.has_default != new.has_default:
            if new.has_default:
                records.append(self._record(
                    entity, ChangeKind.DEFAULT_ADDED, old.name, before=old, after=new,
                    notes=("default implementation added to existing method",),
                ))
            elif entity.kind == EntityKind.INTERFACE:
                records.append(self._record(
                    entity, ChangeKind.DEFAULT_REMOVED, old.name, before=old, after=new,
                    notes=("implementors relying on the default must now implement it",),
                ))

        return records

    @staticmethod
    def _record(
        entity: Entity,
        kind: ChangeKind,
        member: str,
        before: Optional[Member] = None,
        after: Optional[Member] = None,
        notes: tuple = (),
        old_kept: bool = False
    ) -> ChangeRecord:
        return ChangeRecord(
            entity=entity.name,
            entity_kind=entity.kind,
            kind=kind,
            member=member,
            before=before,
            after=after,
            notes=notes,
            old_kept=old_kept,
        )
