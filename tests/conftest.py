"""
Shared pytest fixtures for winfit tests.
"""

import pytest

from winfit import LayoutSolver, Screen
from winfit.types import Archetype, Arrangement, LayoutMode, LayoutRole, PlacementRect, WindowSpec
from winfit.sizing import DEFAULT_MIN_PIXELS


@pytest.fixture
def laptop_screen():
    """Common 1440x900 laptop screen."""
    return Screen(1440, 900)


@pytest.fixture
def standard_screen():
    """Standard 1920x1080 screen."""
    return Screen(1920, 1080)


@pytest.fixture
def portrait_screen():
    """Portrait 1080x1920 screen."""
    return Screen(1080, 1920)


@pytest.fixture
def solver():
    """Solver with default settings."""
    return LayoutSolver()


@pytest.fixture
def make_spec():
    """Factory fixture for window specs with archetype default minimums."""

    def _make(app_id, archetype, role, order=0, focused=False, min_size=None):
        min_w, min_h = min_size or DEFAULT_MIN_PIXELS[archetype]
        return WindowSpec(
            app_id=app_id,
            archetype=archetype,
            role=role,
            order=order,
            focused=focused,
            min_width=min_w,
            min_height=min_h,
            aspect_ratio=min_w / min_h,
        )

    return _make


@pytest.fixture
def make_arrangement(make_spec):
    """
    Factory fixture for hand-built arrangements.

    Entries are (app_id, archetype, role, (x, y, w, h)); layers follow entry
    order, so later entries are drawn on top.
    """

    def _make(entries, screen=None, mode=LayoutMode.CASCADE, **kwargs):
        specs = []
        rects = {}
        for order, (app_id, archetype, role, rect) in enumerate(entries):
            specs.append(make_spec(app_id, archetype, role, order))
            rects[app_id] = PlacementRect(*rect)
        return Arrangement(
            windows=tuple(specs),
            rects=rects,
            layers={spec.app_id: i for i, spec in enumerate(specs)},
            mode=mode,
            screen=screen or Screen(1440, 900),
            **kwargs,
        )

    return _make


@pytest.fixture
def scenario_a_specs(make_spec):
    """Code (focused primary), Canvas layer and Text side column."""
    return [
        make_spec("Code", Archetype.CODE_WORKSPACE, LayoutRole.PRIMARY, 0, focused=True),
        make_spec("Canvas", Archetype.CONTENT_CANVAS, LayoutRole.CASCADE_LAYER, 1),
        make_spec("Text", Archetype.TEXT_STREAM, LayoutRole.SIDE_COLUMN, 2),
    ]
