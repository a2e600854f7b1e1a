"""Main compatibility engine."""

from __future__ import annotations

import logging
from typing import Optional

from .classifier import CompatibilityClassifier
from .config import CheckerConfig
from .differ import Differ
from .lifecycle import LifecycleValidator
from .models import Snapshot
from .report import CompatReport, ReportBuilder
from .utils import version_sort_key

logger = logging.getLogger(__name__)


class CompatEngine:
    """
    Main engine that orchestrates the 4-stage pipeline:

    1. Diffing: Match entities and members across the two snapshots
    2. Lifecycle Validation: Check deprecate-then-remove on removals
    3. Classification: Assign a verdict to every change
    4. Reporting: Aggregate verdicts, violations and entity errors
    """

    VERSION = "1.0.0"

    def __init__(self, config: Optional[CheckerConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Checker configuration (uses defaults if not provided)
        """
        self.config = config or CheckerConfig()

    def check(self, before: Snapshot, after: Snapshot) -> CompatReport:
        """
        Compare two snapshots and build a report.

        Args:
            before: Snapshot of the previous release
            after: Snapshot of the release under check

        Returns:
            CompatReport; identical inputs always give identical reports
        """
        logger.info("Checking compatibility %s -> %s", before.version, after.version)

        # Stage 1: Diffing
        differ = Differ(workers=self.config.workers)
        candidates = differ.diff(before, after)

        # Stage 2: Lifecycle Validation
        validator = LifecycleValidator(after.version)
        violations = validator.validate_all(candidates)

        # Stage 3: Classification
        classifier = CompatibilityClassifier(before.version, after.version)
        records = [
            classifier.classify(record, violation)
            for record, violation in zip(candidates, violations)
        ]

        # Stage 4: Reporting
        builder = ReportBuilder(
            allow_breaking=self.config.allow_breaking,
            fail_on_violations=self.config.fail_on_violations,
            engine_version=self.VERSION,
        )
        report = builder.build(
            before_version=before.version,
            after_version=after.version,
            records=records,
            violations=[v for v in violations if v is not None],
            errors=differ.errors,
        )

        logger.info(
            "Compared %d entities: %d changes, %d breaking, %d violations -> %s",
            differ.entities_compared,
            report.summary.total_changes,
            report.summary.breaking_count,
            report.summary.violations_count,
            report.summary.status,
        )
        return report

    def check_history(self, snapshots: list[Snapshot]) -> list[CompatReport]:
        """
        Check every consecutive pair of snapshots in version order.

        Returns:
            One report per release step; empty for fewer than two snapshots
        """
        ordered = sorted(snapshots, key=lambda s: version_sort_key(s.version))
        reports = []
        for before, after in zip(ordered, ordered[1:]):
            reports.append(self.check(before, after))
        return reports


def compare(
    before: Snapshot,
    after: Snapshot,
    config: Optional[CheckerConfig] = None
) -> CompatReport:
    """
    Convenience function to compare two snapshots.

    Args:
        before: Snapshot of the previous release
        after: Snapshot of the release under check
        config: Optional checker configuration

    Returns:
        CompatReport
    """
    engine = CompatEngine(config)
    return engine.check(before, after)
