"""
Winfit type definitions.

Core data structures used throughout the library. All coordinates are
fractions of the screen in the unit square.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


EPSILON = 1e-6


class Archetype(Enum):
    """Behavioral categories for application windows."""

    CODE_WORKSPACE = "code_workspace"
    CONTENT_CANVAS = "content_canvas"
    TEXT_STREAM = "text_stream"
    GLANCEABLE_MONITOR = "glanceable_monitor"
    UNKNOWN = "unknown"


class LayoutRole(Enum):
    """Functional slot of a window in an arrangement."""

    PRIMARY = "primary"
    SIDE_COLUMN = "side_column"
    CASCADE_LAYER = "cascade_layer"
    CORNER = "corner"

    @property
    def priority(self) -> int:
        return _ROLE_PRIORITY[self]


_ROLE_PRIORITY = {
    LayoutRole.PRIMARY: 3,
    LayoutRole.CASCADE_LAYER: 2,
    LayoutRole.SIDE_COLUMN: 1,
    LayoutRole.CORNER: 0,
}


class LayoutMode(Enum):
    """Arrangement modes."""

    AUTO = "auto"
    TILE = "tile"
    CASCADE = "cascade"


class ViolationKind(Enum):
    """Constraint classes, in validation priority order."""

    BOUNDS = "bounds"
    MIN_SIZE = "min_size"
    VISIBILITY = "visibility"
    COVERAGE = "coverage"
    OVERLAP = "overlap"


class DiagnosticKind(Enum):
    """Informational tags attached to a solve result."""

    CLASSIFICATION_AMBIGUOUS = "classification_ambiguous"
    ARITHMETIC_DEGENERATE = "arithmetic_degenerate"
    CONSTRAINT_UNSATISFIABLE = "constraint_unsatisfiable"
    EXPLICIT_FOCUS = "explicit_focus"


@dataclass(frozen=True)
class Screen:
    """Screen dimensions in an arbitrary unit (usually pixels)."""

    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def is_landscape(self) -> bool:
        return self.width >= self.height


@dataclass(frozen=True)
class AppRequest:
    """Input entry: an app and its optional pre-resolved archetype."""

    app_id: str
    archetype: Optional[Archetype] = None


@dataclass(frozen=True)
class WindowSpec:
    """A classified window taking part in one solve call."""

    app_id: str
    archetype: Archetype
    role: LayoutRole
    order: int
    focused: bool = False
    min_width: float = 0.0   # screen units
    min_height: float = 0.0  # screen units
    aspect_ratio: float = 1.6


@dataclass(frozen=True)
class PlacementRect:
    """Normalized rectangle owned by one window."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, px: float, py: float) -> bool:
        """Half-open containment test."""
        return self.x <= px < self.right and self.y <= py < self.bottom

    def intersection_area(self, other: "PlacementRect") -> float:
        """Area shared with another rect (0 when disjoint or touching)."""
        w = min(self.right, other.right) - max(self.x, other.x)
        h = min(self.bottom, other.bottom) - max(self.y, other.y)
        if w <= 0 or h <= 0:
            return 0.0
        return w * h

    def clamped(self) -> "PlacementRect":
        """Return a copy forced inside the unit square."""
        width = min(max(self.width, 0.0), 1.0)
        height = min(max(self.height, 0.0), 1.0)
        x = min(max(self.x, 0.0), 1.0 - width)
        y = min(max(self.y, 0.0), 1.0 - height)
        return PlacementRect(x=x, y=y, width=width, height=height)

    def in_bounds(self, eps: float = EPSILON) -> bool:
        return (
            self.x >= -eps and self.y >= -eps
            and self.right <= 1.0 + eps and self.bottom <= 1.0 + eps
        )


@dataclass(frozen=True)
class Arrangement:
    """
    A candidate arrangement.

    Rects and layers are keyed by app id in input order. Layers form a
    strict total order; the higher index is drawn on top.
    """

    windows: tuple[WindowSpec, ...]
    rects: dict[str, PlacementRect]
    layers: dict[str, int]
    mode: LayoutMode
    screen: Screen
    axis: str = "horizontal"  # tiling axis
    cascade_step: float = 0.15
    overlap_allowance: int = 0
    applied: tuple[str, ...] = ()

    def window(self, app_id: str) -> WindowSpec:
        for spec in self.windows:
            if spec.app_id == app_id:
                return spec
        raise KeyError(app_id)

    def by_role(self, role: LayoutRole) -> list[WindowSpec]:
        return [w for w in self.windows if w.role == role]

    @property
    def primary(self) -> Optional[WindowSpec]:
        primaries = self.by_role(LayoutRole.PRIMARY)
        return primaries[0] if primaries else None

    def layer_order(self) -> list[str]:
        """App ids from bottom to top."""
        return sorted(self.layers, key=lambda app_id: self.layers[app_id])


@dataclass
class Constraints:
    """
    Constraint thresholds.

    min_coverage and max_overlaps override the per-mode defaults when set.
    """

    min_visible_fraction: float = 0.15
    min_coverage: Optional[float] = None
    max_overlaps: Optional[int] = None
    tile_coverage: float = 0.95
    cascade_coverage: float = 0.85

    def coverage_target(self, mode: LayoutMode) -> float:
        if self.min_coverage is not None:
            return self.min_coverage
        if mode == LayoutMode.TILE:
            return self.tile_coverage
        return self.cascade_coverage

    def overlap_limit(self, mode: LayoutMode) -> Optional[int]:
        """Maximum overlapping pairs; None is unbounded."""
        if self.max_overlaps is not None:
            return self.max_overlaps
        if mode == LayoutMode.TILE:
            return 0
        return None


@dataclass(frozen=True)
class Violation:
    """A single failed constraint."""

    kind: ViolationKind
    app_id: Optional[str] = None
    detail: str = ""

    def __str__(self) -> str:
        target = self.app_id or "screen"
        return f"{self.kind.value}: {target} ({self.detail})"


@dataclass
class Overlap:
    """Pairwise overlap between two windows."""

    app_id_1: str
    app_id_2: str
    area: float


@dataclass
class ValidationResult:
    """Outcome of validating an arrangement."""

    passed: bool
    coverage: float
    violations: list[Violation] = field(default_factory=list)
    visible_fractions: dict[str, float] = field(default_factory=dict)
    overlaps: list[Overlap] = field(default_factory=list)

    @property
    def failed_kind(self) -> Optional[ViolationKind]:
        """First failing constraint class in priority order."""
        for kind in ViolationKind:
            if any(v.kind == kind for v in self.violations):
                return kind
        return None

    def violations_of(self, kind: ViolationKind) -> list[Violation]:
        return [v for v in self.violations if v.kind == kind]


@dataclass(frozen=True)
class Diagnostic:
    """Informational note attached to a result."""

    kind: DiagnosticKind
    app_id: Optional[str] = None
    message: str = ""


@dataclass
class WindowPlacement:
    """Final placement of one window."""

    app_id: str
    archetype: Archetype
    role: LayoutRole
    x: float
    y: float
    width: float
    height: float
    layer: int

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_pixels(self, screen: Screen) -> tuple[int, int, int, int]:
        """Scale to screen units as (x, y, width, height)."""
        return (
            round(self.x * screen.width),
            round(self.y * screen.height),
            round(self.width * screen.width),
            round(self.height * screen.height),
        )


@dataclass
class SolveResult:
    """Complete output of one solve call."""

    windows: list[WindowPlacement]
    validation: ValidationResult
    context: str
    focused_app: str
    mode: LayoutMode
    strategy: str = "default"
    best_effort: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)
    attempts: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.validation.passed

    def get(self, app_id: str) -> Optional[WindowPlacement]:
        """Get placement for a specific app."""
        for window in self.windows:
            if window.app_id == app_id:
                return window
        return None

    def has_diagnostic(self, kind: DiagnosticKind) -> bool:
        return any(d.kind == kind for d in self.diagnostics)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "status": "passed" if self.passed else "best_effort",
            "context": self.context,
            "focused_app": self.focused_app,
            "mode": self.mode.value,
            "strategy": self.strategy,
            "attempts": list(self.attempts),
            "windows": [
                {
                    "app": w.app_id,
                    "archetype": w.archetype.value,
                    "role": w.role.value,
                    "x": round(w.x, 4),
                    "y": round(w.y, 4),
                    "width": round(w.width, 4),
                    "height": round(w.height, 4),
                    "layer": w.layer,
                }
                for w in self.windows
            ],
            "validation": {
                "passed": self.validation.passed,
                "coverage": round(self.validation.coverage, 4),
                "violations": [
                    {"kind": v.kind.value, "app": v.app_id, "detail": v.detail}
                    for v in self.validation.violations
                ],
            },
            "diagnostics": [
                {"kind": d.kind.value, "app": d.app_id, "message": d.message}
                for d in self.diagnostics
            ],
        }
