"""
Winfit layout solver.

Runs classification, focus resolution, role assignment, sizing, positioning
and validation for one request, and walks the relaxation ladder when the
default arrangement fails. Solving is stateless: nothing outlives a call.
"""

import logging
import math
from typing import Optional, Sequence

from .classifier import ArchetypeClassifier
from .context import ContextResolver
from .coverage import CoverageAnalyzer
from .errors import InvalidInputError
from .positioner import Positioner
from .priors import PreferencePrior
from .roles import assign_roles
from .sizing import SizingPolicy
from .strategies import LADDER, Strategy
from .types import (
    AppRequest, Archetype, Arrangement, Constraints, Diagnostic, DiagnosticKind,
    LayoutMode, Screen, SolveResult, ValidationResult, ViolationKind,
    WindowPlacement, WindowSpec
)
from .validator import ConstraintValidator

logger = logging.getLogger(__name__)


def _progress(result: ValidationResult) -> tuple:
    """Ranks results: fewer violations in earlier classes first, then coverage."""
    counts = tuple(-len(result.violations_of(kind)) for kind in ViolationKind)
    return counts, result.coverage


class LayoutSolver:
    """
    Computes window arrangements.

    A solver instance only holds read-only collaborators, so one instance can
    serve concurrent callers.
    """

    def __init__(
        self,
        classifier: Optional[ArchetypeClassifier] = None,
        resolver: Optional[ContextResolver] = None,
        policy: Optional[SizingPolicy] = None,
        positioner: Optional[Positioner] = None,
        analyzer: Optional[CoverageAnalyzer] = None,
        constraints: Optional[Constraints] = None,
        ladder: Sequence[Strategy] = LADDER
    ):
        """
        Initialize solver.

        Args:
            classifier: Archetype classifier.
            resolver: Context and focus resolver.
            policy: Sizing policy.
            positioner: Positioner.
            analyzer: Coverage analyzer (grid resolution).
            constraints: Default constraints when a call passes none.
            ladder: Ordered relaxation strategies.
        """
        self.classifier = classifier or ArchetypeClassifier()
        self.resolver = resolver or ContextResolver()
        self.policy = policy or SizingPolicy()
        self.positioner = positioner or Positioner()
        self.analyzer = analyzer or CoverageAnalyzer()
        self.constraints = constraints or Constraints()
        self.ladder = tuple(ladder)

    @staticmethod
    def _normalize_apps(apps: Sequence[AppRequest | str]) -> list[AppRequest]:
        if not apps:
            raise InvalidInputError("app list is empty")

        requests = []
        seen = set()
        for app in apps:
            request = AppRequest(app) if isinstance(app, str) else app
            app_id = request.app_id.strip() if isinstance(request.app_id, str) else ""
            if not app_id:
                raise InvalidInputError("app identifiers must be non-empty strings")
            if app_id in seen:
                raise InvalidInputError(f"duplicate app identifier {app_id!r}")
            seen.add(app_id)

            archetype = request.archetype
            if archetype is not None and not isinstance(archetype, Archetype):
                try:
                    archetype = Archetype(str(archetype).lower())
                except ValueError:
                    raise InvalidInputError(
                        f"unknown archetype {request.archetype!r} for {app_id!r}"
                    ) from None
            requests.append(AppRequest(app_id, archetype))
        return requests

    @staticmethod
    def _check_screen(width: float, height: float) -> Screen:
        for value in (width, height):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInputError(f"screen dimensions must be numbers, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise InvalidInputError(f"screen dimensions must be positive, got {width}x{height}")
        return Screen(float(width), float(height))

    @staticmethod
    def _check_mode(mode: LayoutMode | str) -> LayoutMode:
        if isinstance(mode, LayoutMode):
            return mode
        try:
            return LayoutMode(str(mode).lower())
        except ValueError:
            raise InvalidInputError(f"unknown layout mode {mode!r}") from None

    @staticmethod
    def _check_constraints(constraints: Constraints) -> Constraints:
        if not 0.0 <= constraints.min_visible_fraction <= 1.0:
            raise InvalidInputError("visibility threshold must be within [0, 1]")
        if constraints.min_coverage is not None and not 0.0 <= constraints.min_coverage <= 1.0:
            raise InvalidInputError("coverage target must be within [0, 1]")
        if constraints.max_overlaps is not None and constraints.max_overlaps < 0:
            raise InvalidInputError("overlap limit must not be negative")
        return constraints

    def _classify(
        self,
        requests: list[AppRequest],
        diagnostics: list[Diagnostic]
    ) -> list[tuple[str, Archetype]]:
        pairs = []
        for request in requests:
            if request.archetype is not None:
                pairs.append((request.app_id, request.archetype))
                continue
            archetype, match = self.classifier.classify_detailed(request.app_id)
            logger.debug("Classified %r as %s (%s)", request.app_id, archetype.value, match)
            if match == "default":
                diagnostics.append(Diagnostic(
                    DiagnosticKind.CLASSIFICATION_AMBIGUOUS, request.app_id,
                    f"no match, defaulted to {archetype.value}",
                ))
            pairs.append((request.app_id, archetype))
        return pairs

    def _run_ladder(
        self,
        arrangement: Arrangement,
        validator: ConstraintValidator,
        result: ValidationResult,
        attempts: list[str]
    ) -> tuple[Arrangement, ValidationResult]:
        """
        Apply strategies in order until one passes; else the best seen.

        Each strategy starts from the last kept arrangement. A result is kept
        only when it ranks no worse than its input under _progress; every
        result still competes for best effort.
        """
        best, best_result = arrangement, result
        current, current_result = arrangement, result
        for strategy in self.ladder:
            if not strategy.applies_to(current.mode):
                continue
            candidate = strategy.apply(current)
            if candidate is current:
                logger.debug("Strategy %s had nothing to relax", strategy.name)
                continue

            attempts.append(strategy.name)
            candidate_result = validator.validate(candidate)
            logger.debug("Strategy %s: coverage %.3f, %d violations",
                         strategy.name, candidate_result.coverage,
                         len(candidate_result.violations))
            if candidate_result.passed:
                return candidate, candidate_result
            if _progress(candidate_result) >= _progress(current_result):
                current, current_result = candidate, candidate_result
            else:
                logger.debug("Strategy %s made things worse; not kept", strategy.name)

            score = (candidate_result.coverage, -len(candidate_result.violations))
            if score > (best_result.coverage, -len(best_result.violations)):
                best, best_result = candidate, candidate_result

        return best, best_result

    def solve(
        self,
        apps: Sequence[AppRequest | str],
        screen_width: float,
        screen_height: float,
        context: str = "",
        focus: Optional[str] = None,
        mode: LayoutMode | str = LayoutMode.AUTO,
        constraints: Optional[Constraints] = None,
        prior: Optional[PreferencePrior] = None
    ) -> SolveResult:
        """
        Solve one layout request.

        Args:
            apps: Ordered app names or AppRequest entries (non-empty).
            screen_width: Screen width (positive).
            screen_height: Screen height (positive).
            context: Free-text intent; may be empty.
            focus: Explicit focus app id.
            mode: "tile", "cascade" or "auto".
            constraints: Overrides for visibility, coverage and overlaps.
            prior: Optional preference prior biasing the sizing policy.

        Returns:
            SolveResult. Failing constraints produce a best-effort result,
            never an exception.

        Raises:
            InvalidInputError: For unusable input.
        """
        requests = self._normalize_apps(apps)
        screen = self._check_screen(screen_width, screen_height)
        mode_hint = self._check_mode(mode)
        constraints = self._check_constraints(constraints or self.constraints)

        diagnostics: list[Diagnostic] = []
        pairs = self._classify(requests, diagnostics)

        resolution = self.resolver.resolve(context, pairs, focus)
        if resolution.source == "explicit":
            diagnostics.append(Diagnostic(
                DiagnosticKind.EXPLICIT_FOCUS, resolution.focused_app, "focus supplied by caller"
            ))
        roles = assign_roles(pairs, resolution.focused_app)

        windows = []
        for order, (app_id, archetype) in enumerate(pairs):
            min_width, min_height = self.policy.min_size(archetype)
            windows.append(WindowSpec(
                app_id=app_id,
                archetype=archetype,
                role=roles[app_id],
                order=order,
                focused=app_id == resolution.focused_app,
                min_width=min_width,
                min_height=min_height,
                aspect_ratio=min_width / min_height if min_height else 1.0,
            ))

        resolved_mode = self.positioner.resolve_mode(mode_hint, len(windows))

        priors = {}
        if prior is not None:
            for spec in windows:
                suggestion = prior.suggest(spec.app_id, spec.archetype, resolution.context)
                if suggestion is not None:
                    priors[spec.app_id] = suggestion

        sizing = self.policy.size_all(windows, screen, resolved_mode, priors)
        for axis in sizing.degenerate_axes:
            diagnostics.append(Diagnostic(
                DiagnosticKind.ARITHMETIC_DEGENERATE, None,
                f"minimum sizes exceed the screen {axis}ly; scaled down",
            ))

        arrangement = self.positioner.position(windows, sizing.sizes, screen, resolved_mode)
        validator = ConstraintValidator(constraints, self.analyzer)
        validation = validator.validate(arrangement)

        attempts = ["default"]
        best_effort = False
        if not validation.passed:
            logger.debug("Default arrangement failed on %s", validation.failed_kind.value)
            arrangement, validation = self._run_ladder(arrangement, validator, validation, attempts)
            if not validation.passed:
                best_effort = True
                diagnostics.append(Diagnostic(
                    DiagnosticKind.CONSTRAINT_UNSATISFIABLE, None,
                    f"{len(validation.violations)} violations remain after "
                    f"{len(attempts) - 1} relaxations",
                ))
                logger.warning("No arrangement satisfied all constraints; "
                               "returning best effort (coverage %.3f)", validation.coverage)

        strategy = "+".join(arrangement.applied) or "default"
        logger.info("Solved %d windows in %s mode with %s",
                    len(windows), resolved_mode.value, strategy)

        placements = []
        for spec in arrangement.windows:
            rect = arrangement.rects[spec.app_id]
            placements.append(WindowPlacement(
                app_id=spec.app_id,
                archetype=spec.archetype,
                role=spec.role,
                x=rect.x,
                y=rect.y,
                width=rect.width,
                height=rect.height,
                layer=arrangement.layers[spec.app_id],
            ))

        return SolveResult(
            windows=placements,
            validation=validation,
            context=resolution.context,
            focused_app=resolution.focused_app,
            mode=resolved_mode,
            strategy=strategy,
            best_effort=best_effort,
            diagnostics=diagnostics,
            attempts=attempts,
        )
