"""Report aggregation for compatibility checks."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import (
    ChangeRecord,
    EntityError,
    LifecycleViolation,
    Summary,
    Verdict,
)


@dataclass
class CompatReport:
    """Complete result of comparing two snapshots."""
    summary: Summary
    changes: list[ChangeRecord] = field(default_factory=list)
    breaking: list[ChangeRecord] = field(default_factory=list)
    violations: list[LifecycleViolation] = field(default_factory=list)
    errors: list[EntityError] = field(default_factory=list)
    allowed: frozenset = frozenset()

    @property
    def passed(self) -> bool:
        return self.summary.status == "pass"

    def _is_allowed(self, keys: Iterable[str]) -> bool:
        return bool(self.allowed & set(keys))

    def to_dict(self) -> dict:
        breaking = []
        for record in self.breaking:
            entry = record.to_dict()
            entry["allowed"] = self._is_allowed(record.identity_keys())
            breaking.append(entry)

        violations = []
        for violation in self.violations:
            entry = violation.to_dict()
            entry["allowed"] = self._is_allowed(violation.keys)
            violations.append(entry)

        errors = []
        for error in self.errors:
            entry = error.to_dict()
            entry["allowed"] = self._is_allowed(error.identity_keys())
            errors.append(entry)

        return {
            "summary": self.summary.to_dict(),
            "changes": [c.to_dict() for c in self.changes],
            "breaking": breaking,
            "violations": violations,
            "errors": errors,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def format_text(self) -> str:
        s = self.summary
        lines = [
            f"Compatibility {s.before_version} -> {s.after_version}: {s.status.upper()}",
            f"  Changes: {s.total_changes}",
        ]
        for verdict, count in s.verdicts.items():
            if count:
                lines.append(f"    {verdict}: {count}")

        if self.breaking:
            lines.append("\nBreaking changes:")
            for record in self.breaking:
                marker = " (allowed)" if self._is_allowed(record.identity_keys()) else ""
                lines.append(f"  ! [{record.kind.value}] {record.identity}{marker}")

        if self.violations:
            lines.append("\nLifecycle violations:")
            for violation in self.violations:
                marker = " (allowed)" if self._is_allowed(violation.keys) else ""
                lines.append(f"  ! [{violation.kind.value}] {violation.message}{marker}")

        if self.errors:
            lines.append("\nEntity errors:")
            for error in self.errors:
                marker = " (allowed)" if self._is_allowed(error.identity_keys()) else ""
                lines.append(f"  ! [{error.code}] {error.message}{marker}")

        other = [c for c in self.changes if c.verdict != Verdict.BREAKING]
        if other:
            lines.append("\nCompatible changes:")
            for record in other:
                lines.append(f"  + [{record.kind.value}] {record.identity}: {record.verdict.value}")
                for note in record.notes:
                    lines.append(f"      {note}")

        return "\n".join(lines)

    def print_summary(self):
        print(self.format_text())


class ReportBuilder:
    """Aggregates classified records into a CompatReport."""

    def __init__(self, allow_breaking: Iterable[str] = (), fail_on_violations: bool = True,
                 engine_version: str = "1.0.0"):
        self.allow_breaking = frozenset(allow_breaking)
        self.fail_on_violations = fail_on_violations
        self.engine_version = engine_version

    def _is_allowed(self, keys: Iterable[str]) -> bool:
        return bool(self.allow_breaking & set(keys))

    def build(
        self,
        before_version: str,
        after_version: str,
        records: list[ChangeRecord],
        violations: list[LifecycleViolation],
        errors: list[EntityError],
    ) -> CompatReport:
        verdicts = {v.value: 0 for v in Verdict}
        for record in records:
            verdicts[record.verdict.value] += 1

        breaking = [r for r in records if r.verdict == Verdict.BREAKING]

        allowed_breaking = [r for r in breaking if self._is_allowed(r.identity_keys())]
        blocking_breaking = [
            r for r in breaking
            if not self._is_allowed(r.identity_keys())
            and (self.fail_on_violations or not r.lifecycle_only)
        ]
        blocking_violations = [v for v in violations if not self._is_allowed(v.keys)]
        blocking_errors = [e for e in errors if not self._is_allowed(e.identity_keys())]

        failed = bool(blocking_breaking) or bool(blocking_errors) or (
            self.fail_on_violations and bool(blocking_violations)
        )

        allowed_count = (
            len(allowed_breaking)
            + (len(violations) - len(blocking_violations))
            + (len(errors) - len(blocking_errors))
        )

        summary = Summary(
            status="fail" if failed else "pass",
            before_version=before_version,
            after_version=after_version,
            total_changes=len(records),
            verdicts=verdicts,
            breaking_count=len(breaking),
            violations_count=len(violations),
            errors_count=len(errors),
            allowed_count=allowed_count,
            engine_version=self.engine_version,
        )

        return CompatReport(
            summary=summary,
            changes=list(records),
            breaking=breaking,
            violations=list(violations),
            errors=list(errors),
            allowed=self.allow_breaking,
        )
