"""
Tests for the end-to-end layout solver.
"""

import math

import pytest

from winfit import (
    AppRequest,
    ConstraintValidator,
    Constraints,
    DiagnosticKind,
    InvalidInputError,
    LayoutSolver,
    Screen,
    SizingPolicy,
    StaticPrior,
    ViolationKind,
)
from winfit.strategies import shrink_primary_height
from winfit.types import Archetype, LayoutMode, LayoutRole

A = Archetype
R = LayoutRole

SCENARIO_A = [
    AppRequest("Code", A.CODE_WORKSPACE),
    AppRequest("Canvas", A.CONTENT_CANVAS),
    AppRequest("Text", A.TEXT_STREAM),
]


def assert_in_bounds(result):
    for window in result.windows:
        assert window.x >= -1e-6 and window.y >= -1e-6
        assert window.x + window.width <= 1 + 1e-6
        assert window.y + window.height <= 1 + 1e-6


@pytest.mark.unit
class TestScenarios:
    """Reference scenarios."""

    def test_scenario_a_code_canvas_text(self, solver):
        result = solver.solve(SCENARIO_A, 1440, 900, focus="Code")

        assert result.passed
        assert not result.best_effort
        assert result.mode == LayoutMode.CASCADE
        assert result.strategy == "default"
        assert result.attempts == ["default"]

        code, canvas, text = result.get("Code"), result.get("Canvas"), result.get("Text")
        assert code.role == R.PRIMARY
        assert canvas.role == R.CASCADE_LAYER
        assert text.role == R.SIDE_COLUMN

        assert canvas.layer > code.layer
        assert 0.20 <= text.width <= 0.30
        assert text.x + text.width == pytest.approx(1.0)
        assert 0.15 <= result.validation.visible_fractions["Code"] < 1.0
        assert result.validation.coverage >= 0.90
        assert result.has_diagnostic(DiagnosticKind.EXPLICIT_FOCUS)

    def test_scenario_b_four_archetypes_without_focus(self, solver):
        apps = [
            AppRequest("Code", A.CODE_WORKSPACE),
            AppRequest("Canvas", A.CONTENT_CANVAS),
            AppRequest("Text", A.TEXT_STREAM),
            AppRequest("Clock", A.GLANCEABLE_MONITOR),
        ]
        result = solver.solve(apps, 1440, 900)
        roles = [w.role for w in result.windows]
        clock = result.get("Clock")
        assert result.passed
        assert roles.count(R.PRIMARY) == 1
        assert not result.has_diagnostic(DiagnosticKind.EXPLICIT_FOCUS)
        assert clock.role == R.CORNER
        assert clock.area <= 0.20
        assert clock.layer == max(w.layer for w in result.windows)

    def test_scenario_c_unsatisfiable_returns_best_effort(self):
        solver = LayoutSolver(policy=SizingPolicy(min_pixels={A.CONTENT_CANVAS: (600.0, 360.0)}))
        apps = ["Safari", "Chrome", "Firefox", "Arc", "Preview"]

        result = solver.solve(apps, 800, 600)

        assert result.best_effort
        assert not result.passed
        assert result.has_diagnostic(DiagnosticKind.CONSTRAINT_UNSATISFIABLE)
        assert result.validation.violations_of(ViolationKind.MIN_SIZE)
        assert result.validation.coverage < 1.0
        assert len(result.windows) == 5
        assert result.attempts[0] == "default"
        assert len(result.attempts) > 1
        assert result.to_dict()["status"] == "best_effort"
        assert_in_bounds(result)

    def test_scenario_d_generic_names_and_coding_context(self, solver):
        result = solver.solve(["Terminal", "Browser", "Editor"], 1440, 900,
                              context="i want to code")
        assert result.context == "coding"
        assert result.focused_app == "Editor"
        assert result.get("Terminal").archetype == A.TEXT_STREAM
        assert result.get("Browser").archetype == A.CONTENT_CANVAS
        assert result.get("Editor").archetype == A.CODE_WORKSPACE
        assert result.get("Editor").role == R.PRIMARY
        assert not result.has_diagnostic(DiagnosticKind.EXPLICIT_FOCUS)


@pytest.mark.unit
class TestTiling:
    """Tiled results."""

    def test_two_windows_tile_edge_to_edge(self, solver):
        result = solver.solve(["Cursor", "Terminal"], 1440, 900)
        assert result.mode == LayoutMode.TILE
        assert result.passed
        assert sum(w.width for w in result.windows) == pytest.approx(1.0)
        cursor, terminal = result.windows
        assert cursor.x + cursor.width == pytest.approx(terminal.x)
        assert result.validation.overlaps == []
        assert result.validation.coverage == 1.0

    def test_portrait_tiles_vertically(self, solver):
        result = solver.solve(["Cursor", "Terminal"], 1080, 1920)
        assert result.passed
        assert all(w.x == 0.0 and w.width == 1.0 for w in result.windows)
        assert sum(w.height for w in result.windows) == pytest.approx(1.0)

    def test_forced_tile_for_three_windows(self, solver):
        result = solver.solve(["Cursor", "Safari", "Slack"], 1920, 1080, mode="tile")
        assert result.mode == LayoutMode.TILE
        assert sum(w.width for w in result.windows) == pytest.approx(1.0)
        assert result.validation.overlaps == []

    def test_degenerate_minimums_scaled(self, solver):
        result = solver.solve(["Cursor", "Xcode", "Zed"], 800, 600, mode="tile")
        assert result.has_diagnostic(DiagnosticKind.ARITHMETIC_DEGENERATE)
        assert result.best_effort
        assert sum(w.width for w in result.windows) == pytest.approx(1.0)
        assert_in_bounds(result)


@pytest.mark.unit
class TestProperties:
    """Invariants that hold for every solve."""

    @pytest.mark.parametrize("apps", [
        ["Cursor"],
        ["Cursor", "Safari"],
        ["Cursor", "Safari", "Slack"],
        ["Cursor", "Safari", "Arc", "Slack", "Spotify"],
        ["Figma", "Notion", "Preview", "Terminal", "htop", "Zoom"],
    ])
    @pytest.mark.parametrize("screen", [(1440, 900), (1920, 1080), (1080, 1920), (800, 600)])
    def test_bounds_and_single_primary(self, solver, apps, screen):
        result = solver.solve(apps, *screen)
        assert_in_bounds(result)
        assert [w.role for w in result.windows].count(R.PRIMARY) == 1
        assert [w.app_id for w in result.windows] == apps
        assert sorted(w.layer for w in result.windows) == list(range(len(apps)))

    def test_idempotent(self, solver):
        apps = ["Cursor", "Safari", "Arc", "Slack"]
        first = solver.solve(apps, 1440, 900, context="research")
        second = solver.solve(apps, 1440, 900, context="research")
        assert first.to_dict() == second.to_dict()

    @pytest.mark.parametrize("apps, screen", [
        (SCENARIO_A, (1440, 900)),
        (["Cursor", "Safari", "Arc", "Slack"], (1920, 1080)),
        ([AppRequest(f"C{i}", A.CODE_WORKSPACE) for i in range(5)], (1000, 800)),
    ])
    def test_cascade_stack_below_top_partly_visible(self, solver, apps, screen):
        # Docked side columns and corners sit beside or above the stack, so
        # only primary and cascade layers under the topmost one are checked.
        result = solver.solve(apps, *screen, mode="cascade")
        assert result.passed
        stack = sorted(
            (w for w in result.windows if w.role in (R.PRIMARY, R.CASCADE_LAYER)),
            key=lambda w: w.layer,
        )
        assert len(stack) >= 2
        for window in stack[:-1]:
            fraction = result.validation.visible_fractions[window.app_id]
            assert 0.15 <= fraction < 1.0

    def test_single_window(self, solver):
        result = solver.solve(["Cursor"], 1440, 900)
        assert result.mode == LayoutMode.TILE
        assert result.passed
        window = result.windows[0]
        assert (window.x, window.y, window.width, window.height) == (0.0, 0.0, 1.0, 1.0)


@pytest.mark.unit
class TestDiagnosticsAndOptions:

    def test_ambiguous_name_flagged(self, solver):
        result = solver.solve(["Qwxz", "Cursor"], 1440, 900)
        assert result.get("Qwxz").archetype == A.CONTENT_CANVAS
        ambiguous = [d for d in result.diagnostics
                     if d.kind == DiagnosticKind.CLASSIFICATION_AMBIGUOUS]
        assert [d.app_id for d in ambiguous] == ["Qwxz"]

    def test_pre_classified_requests_skip_classifier(self, solver):
        result = solver.solve([AppRequest("Qwxz", A.CODE_WORKSPACE), "Safari"], 1440, 900)
        assert result.get("Qwxz").archetype == A.CODE_WORKSPACE
        assert not result.has_diagnostic(DiagnosticKind.CLASSIFICATION_AMBIGUOUS)

    def test_explicit_focus_case_insensitive(self, solver):
        result = solver.solve(["Cursor", "Safari", "Slack"], 1440, 900, focus="safari")
        assert result.focused_app == "Safari"
        assert result.get("Safari").role == R.PRIMARY
        assert result.get("Cursor").role == R.CASCADE_LAYER

    def test_prior_changes_sizes(self, solver):
        prior = StaticPrior({("Canvas", "*"): (0.4, 0.6)})
        plain = solver.solve(SCENARIO_A, 1440, 900, focus="Code")
        biased = solver.solve(SCENARIO_A, 1440, 900, focus="Code", prior=prior)
        assert plain.get("Canvas").width == pytest.approx(0.55)
        assert biased.get("Canvas").width == pytest.approx(0.475)

    def test_coverage_override(self, solver):
        result = solver.solve(SCENARIO_A, 1440, 900, focus="Code",
                              constraints=Constraints(min_coverage=0.99))
        assert result.best_effort
        assert result.validation.violations_of(ViolationKind.COVERAGE)

    def test_to_dict_shape(self, solver):
        data = solver.solve(SCENARIO_A, 1440, 900, focus="Code").to_dict()
        assert data["status"] == "passed"
        assert data["mode"] == "cascade"
        assert [w["app"] for w in data["windows"]] == ["Code", "Canvas", "Text"]
        assert set(data["windows"][0]) == {
            "app", "archetype", "role", "x", "y", "width", "height", "layer"
        }
        assert data["validation"]["passed"] is True

    def test_to_pixels(self, solver):
        result = solver.solve(SCENARIO_A, 1440, 900, focus="Code")
        x, y, w, h = result.get("Text").to_pixels(Screen(1440, 900))
        assert (x, y, w, h) == (1008, 0, 432, 900)


@pytest.mark.unit
class TestInvalidInput:

    @pytest.mark.parametrize("apps", [[], [""], ["   "], ["Cursor", "Cursor"]])
    def test_bad_app_lists(self, solver, apps):
        with pytest.raises(InvalidInputError):
            solver.solve(apps, 1440, 900)

    @pytest.mark.parametrize("width, height", [
        (0, 900), (1440, -1), (math.nan, 900), (1440, math.inf), ("1440", 900),
    ])
    def test_bad_screens(self, solver, width, height):
        with pytest.raises(InvalidInputError):
            solver.solve(["Cursor"], width, height)

    def test_bad_mode(self, solver):
        with pytest.raises(InvalidInputError):
            solver.solve(["Cursor"], 1440, 900, mode="spiral")

    def test_unknown_focus(self, solver):
        with pytest.raises(InvalidInputError):
            solver.solve(["Cursor", "Safari"], 1440, 900, focus="Photoshop")

    @pytest.mark.parametrize("constraints", [
        Constraints(min_visible_fraction=1.5),
        Constraints(min_coverage=-0.1),
        Constraints(max_overlaps=-1),
    ])
    def test_bad_constraints(self, solver, constraints):
        with pytest.raises(InvalidInputError):
            solver.solve(["Cursor"], 1440, 900, constraints=constraints)

    def test_invalid_input_is_value_error(self, solver):
        with pytest.raises(ValueError):
            solver.solve([], 1440, 900)

    def test_unknown_archetype_string(self, solver):
        with pytest.raises(InvalidInputError):
            solver.solve([AppRequest("Cursor", "spreadsheet")], 1440, 900)


@pytest.mark.unit
class TestArchetypeStrings:

    def test_archetype_value_accepted(self, solver):
        result = solver.solve([AppRequest("Log", "TEXT_STREAM"), "Cursor"], 1440, 900)
        assert result.get("Log").archetype == A.TEXT_STREAM
        assert result.get("Log").role == R.SIDE_COLUMN


@pytest.mark.unit
class TestDeepStacks:

    def test_deep_cascade_rects_distinct(self, solver):
        apps = [AppRequest(f"C{i}", A.CODE_WORKSPACE) for i in range(5)]
        result = solver.solve(apps, 1000, 800)
        rects = {(w.x, w.y, w.width, w.height) for w in result.windows}
        assert len(rects) == len(apps)
        assert result.passed
        assert result.attempts == ["default"]

    def test_extra_corners_do_not_share_a_slot(self, solver):
        apps = [AppRequest(f"M{i}", A.GLANCEABLE_MONITOR) for i in range(6)]
        result = solver.solve(apps, 1000, 800)
        rects = {(w.x, w.y, w.width, w.height) for w in result.windows}
        assert len(rects) == len(apps)
        assert not result.validation.violations_of(ViolationKind.VISIBILITY)
        assert_in_bounds(result)


@pytest.mark.unit
class TestLadderProgress:
    """Relaxations that make things worse are not built upon."""

    @pytest.fixture
    def crowded_stack(self, make_arrangement):
        # S1 is mostly hidden by S2; relocation is refused because the
        # primary would drop below 600 px.
        return make_arrangement([
            ("Code", A.CODE_WORKSPACE, R.PRIMARY, (0.02, 0.02, 0.98, 0.98)),
            ("S1", A.CONTENT_CANVAS, R.CASCADE_LAYER, (0.17, 0.2075, 0.5, 0.5)),
            ("S2", A.CONTENT_CANVAS, R.CASCADE_LAYER, (0.2, 0.25, 0.5, 0.5)),
        ], screen=Screen(1000, 800))

    def test_harmful_step_skipped(self, solver, crowded_stack):
        validator = ConstraintValidator(Constraints(), solver.analyzer)
        default = validator.validate(crowded_stack)
        assert default.failed_kind == ViolationKind.VISIBILITY

        attempts = ["default"]
        arrangement, validation = solver._run_ladder(crowded_stack, validator, default, attempts)

        assert validation.passed
        assert arrangement.applied == ("compact_cascade",)
        assert attempts == ["default", "shrink_primary_height", "compact_cascade"]
        assert arrangement.rects["Code"] == crowded_stack.rects["Code"]

    def test_shrink_alone_breaks_coverage(self, solver, crowded_stack):
        validator = ConstraintValidator(Constraints(), solver.analyzer)
        shrunk = validator.validate(shrink_primary_height(crowded_stack))
        assert shrunk.violations_of(ViolationKind.COVERAGE)
        assert shrunk.violations_of(ViolationKind.VISIBILITY)
