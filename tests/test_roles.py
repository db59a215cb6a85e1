"""
Unit tests for role assignment.
"""

import pytest

from winfit.roles import assign_roles
from winfit.types import Archetype, LayoutRole

A = Archetype
R = LayoutRole


@pytest.mark.unit
class TestAssignRoles:
    """Test default roles and primary promotion."""

    def test_default_roles(self):
        roles = assign_roles([
            ("Code", A.CODE_WORKSPACE),
            ("Canvas", A.CONTENT_CANVAS),
            ("Text", A.TEXT_STREAM),
            ("Clock", A.GLANCEABLE_MONITOR),
            ("Thing", A.UNKNOWN),
        ])
        assert roles == {
            "Code": R.PRIMARY,
            "Canvas": R.CASCADE_LAYER,
            "Text": R.SIDE_COLUMN,
            "Clock": R.CORNER,
            "Thing": R.CASCADE_LAYER,
        }

    def test_focused_window_becomes_primary(self):
        roles = assign_roles([("Code", A.CODE_WORKSPACE), ("Canvas", A.CONTENT_CANVAS)],
                             focused_app="Canvas")
        assert roles["Canvas"] == R.PRIMARY
        assert roles["Code"] == R.CASCADE_LAYER

    def test_exactly_one_primary_with_two_code_windows(self):
        roles = assign_roles([("Cursor", A.CODE_WORKSPACE), ("Xcode", A.CODE_WORKSPACE)],
                             focused_app="Xcode")
        assert list(roles.values()).count(R.PRIMARY) == 1
        assert roles["Xcode"] == R.PRIMARY

    def test_without_focus_first_default_primary_kept(self):
        roles = assign_roles([("Safari", A.CONTENT_CANVAS), ("Cursor", A.CODE_WORKSPACE),
                              ("Xcode", A.CODE_WORKSPACE)])
        assert roles["Cursor"] == R.PRIMARY
        assert roles["Xcode"] == R.CASCADE_LAYER

    def test_without_any_primary_first_window_promoted(self):
        roles = assign_roles([("Slack", A.TEXT_STREAM), ("Spotify", A.GLANCEABLE_MONITOR)])
        assert roles["Slack"] == R.PRIMARY
        assert roles["Spotify"] == R.CORNER

    def test_empty(self):
        assert assign_roles([]) == {}
