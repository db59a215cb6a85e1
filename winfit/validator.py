"""
Winfit constraint validator.

Checks a candidate arrangement against bounds, minimum size, visibility,
coverage and overlap constraints. Every check is computed so the report is
complete; ValidationResult.failed_kind names the first failing class.
"""

from typing import Optional

from .coverage import CoverageAnalyzer
from .types import (
    EPSILON, Arrangement, Constraints, ValidationResult, Violation, ViolationKind
)


class ConstraintValidator:
    """Validates arrangements. Never raises for constraint failures."""

    def __init__(
        self,
        constraints: Optional[Constraints] = None,
        analyzer: Optional[CoverageAnalyzer] = None,
        epsilon: float = EPSILON
    ):
        self.constraints = constraints or Constraints()
        self.analyzer = analyzer or CoverageAnalyzer()
        self.epsilon = epsilon

    def _check_bounds(self, arrangement: Arrangement) -> list[Violation]:
        violations = []
        for app_id, rect in arrangement.rects.items():
            if not rect.in_bounds(self.epsilon) or rect.width <= 0 or rect.height <= 0:
                violations.append(Violation(
                    ViolationKind.BOUNDS, app_id,
                    f"rect ({rect.x:.3f}, {rect.y:.3f}, {rect.width:.3f}, "
                    f"{rect.height:.3f}) leaves the screen"
                ))
        return violations

    def _check_min_size(self, arrangement: Arrangement) -> list[Violation]:
        violations = []
        screen = arrangement.screen
        tolerance = self.epsilon * max(screen.width, screen.height)
        for spec in arrangement.windows:
            rect = arrangement.rects[spec.app_id]
            width = rect.width * screen.width
            height = rect.height * screen.height
            if width + tolerance < spec.min_width or height + tolerance < spec.min_height:
                violations.append(Violation(
                    ViolationKind.MIN_SIZE, spec.app_id,
                    f"{width:.0f}x{height:.0f} below minimum "
                    f"{spec.min_width:.0f}x{spec.min_height:.0f}"
                ))
        return violations

    def _check_visibility(self, visible: dict[str, float]) -> list[Violation]:
        threshold = self.constraints.min_visible_fraction
        return [
            Violation(ViolationKind.VISIBILITY, app_id,
                      f"visible {fraction:.2f} < {threshold:.2f}")
            for app_id, fraction in visible.items()
            if fraction + self.epsilon < threshold
        ]

    def _check_coverage(self, arrangement: Arrangement, coverage: float) -> list[Violation]:
        target = self.constraints.coverage_target(arrangement.mode)
        if coverage + self.epsilon < target:
            return [Violation(ViolationKind.COVERAGE, None,
                              f"coverage {coverage:.3f} < {target:.3f}")]
        return []

    def _check_overlaps(self, arrangement: Arrangement, count: int) -> list[Violation]:
        limit = self.constraints.overlap_limit(arrangement.mode)
        if limit is None:
            return []
        limit += arrangement.overlap_allowance
        if count > limit:
            return [Violation(ViolationKind.OVERLAP, None,
                              f"{count} overlapping pairs > {limit}")]
        return []

    def validate(self, arrangement: Arrangement) -> ValidationResult:
        """
        Validate an arrangement.

        Returns:
            ValidationResult with pass/fail, achieved coverage and the full
            violation list ordered by constraint priority.
        """
        report = self.analyzer.analyze(arrangement)

        violations = (
            self._check_bounds(arrangement)
            + self._check_min_size(arrangement)
            + self._check_visibility(report.visible_fractions)
            + self._check_coverage(arrangement, report.coverage)
            + self._check_overlaps(arrangement, len(report.overlaps))
        )

        return ValidationResult(
            passed=not violations,
            coverage=report.coverage,
            violations=violations,
            visible_fractions=report.visible_fractions,
            overlaps=report.overlaps,
        )
