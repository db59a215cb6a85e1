"""
Winfit sizing policy.

Computes width/height fractions per window from a table keyed by
(archetype, role) and tiered by window count. Pixel minimums are converted to
fractions at call time, so the table itself holds fractions only.
"""

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from .types import EPSILON, Archetype, LayoutMode, LayoutRole, Screen, WindowSpec

logger = logging.getLogger(__name__)

_A = Archetype
_R = LayoutRole

# Minimum functional sizes in screen units (width, height).
DEFAULT_MIN_PIXELS: Mapping[Archetype, tuple[float, float]] = MappingProxyType({
    _A.CODE_WORKSPACE: (600.0, 400.0),
    _A.CONTENT_CANVAS: (480.0, 360.0),
    _A.TEXT_STREAM: (320.0, 400.0),
    _A.GLANCEABLE_MONITOR: (200.0, 150.0),
    _A.UNKNOWN: (400.0, 300.0),
})


@dataclass(frozen=True)
class SizeRule:
    """
    Sizing rule for an (archetype, role) pair.

    widths/heights hold base fractions for the window-count bands
    (<=2, =3, >=4). Bands are (min, max) fractions.
    """

    widths: tuple[float, float, float]
    heights: tuple[float, float, float]
    width_band: tuple[float, float]
    height_band: tuple[float, float]
    min_area: float = 0.0


SIZE_TABLE: Mapping[tuple[Archetype, LayoutRole], SizeRule] = MappingProxyType({
    (_A.CODE_WORKSPACE, _R.PRIMARY): SizeRule(
        widths=(0.80, 0.70, 0.65), heights=(0.90, 0.85, 0.85),
        width_band=(0.40, 0.90), height_band=(0.50, 1.0)),
    (_A.CONTENT_CANVAS, _R.PRIMARY): SizeRule(
        widths=(0.75, 0.65, 0.65), heights=(0.85, 0.85, 0.85),
        width_band=(0.40, 0.90), height_band=(0.50, 1.0)),
    (_A.TEXT_STREAM, _R.PRIMARY): SizeRule(
        widths=(0.75, 0.70, 0.60), heights=(0.90, 0.90, 0.90),
        width_band=(0.40, 0.75), height_band=(0.50, 1.0)),
    (_A.CONTENT_CANVAS, _R.CASCADE_LAYER): SizeRule(
        widths=(0.55, 0.55, 0.50), heights=(0.50, 0.50, 0.45),
        width_band=(0.30, 0.65), height_band=(0.30, 0.60), min_area=0.25),
    (_A.TEXT_STREAM, _R.SIDE_COLUMN): SizeRule(
        widths=(0.30, 0.30, 0.25), heights=(1.0, 1.0, 1.0),
        width_band=(0.20, 0.30), height_band=(0.40, 1.0)),
    (_A.GLANCEABLE_MONITOR, _R.CORNER): SizeRule(
        widths=(0.15, 0.15, 0.15), heights=(0.15, 0.15, 0.15),
        width_band=(0.10, 0.25), height_band=(0.10, 0.30)),
})

# Fallbacks when the (archetype, role) pair has no dedicated rule.
ROLE_DEFAULTS: Mapping[LayoutRole, SizeRule] = MappingProxyType({
    _R.PRIMARY: SizeRule(
        widths=(0.70, 0.60, 0.60), heights=(0.85, 0.80, 0.75),
        width_band=(0.40, 0.90), height_band=(0.50, 1.0)),
    _R.CASCADE_LAYER: SizeRule(
        widths=(0.50, 0.45, 0.45), heights=(0.60, 0.55, 0.50),
        width_band=(0.30, 0.65), height_band=(0.30, 0.70)),
    _R.SIDE_COLUMN: SizeRule(
        widths=(0.30, 0.25, 0.25), heights=(1.0, 1.0, 1.0),
        width_band=(0.15, 0.35), height_band=(0.40, 1.0)),
    _R.CORNER: SizeRule(
        widths=(0.15, 0.15, 0.15), heights=(0.15, 0.15, 0.15),
        width_band=(0.10, 0.25), height_band=(0.10, 0.30)),
})


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _tier(window_count: int) -> int:
    if window_count <= 2:
        return 0
    if window_count == 3:
        return 1
    return 2


def distribute(
    minimums: Sequence[float],
    caps: Sequence[float],
    focus_index: Optional[int] = None,
    focus_share: float = 0.75
) -> tuple[list[float], bool]:
    """
    Fill one axis (total 1.0) starting from per-window minimums.

    The focused window receives focus_share of the slack; the rest is split in
    proportion to the other minimums and capped, with any overflow going back
    to the focused window (or to the largest window without a focus).

    Returns:
        Tuple of (sizes, degenerate). When the minimums already exceed 1.0
        they are scaled down proportionally and degenerate is True.
    """
    total = sum(minimums)
    if not minimums:
        return [], False
    if total > 1.0 + EPSILON:
        factor = 1.0 / total
        return [m * factor for m in minimums], True

    sizes = list(minimums)
    slack = 1.0 - total
    receivers = [i for i in range(len(sizes)) if i != focus_index]

    if focus_index is None:
        focus_part = 0.0
    elif receivers:
        focus_part = slack * focus_share
    else:
        focus_part = slack

    rest = slack - focus_part
    weight = sum(minimums[i] for i in receivers)
    for i in receivers:
        if weight > 0:
            sizes[i] += rest * minimums[i] / weight
        else:
            sizes[i] += rest / len(receivers)

    overflow = 0.0
    for i in receivers:
        if sizes[i] > caps[i]:
            overflow += sizes[i] - caps[i]
            sizes[i] = caps[i]

    if focus_index is not None:
        sizes[focus_index] += focus_part + overflow
    elif overflow > 0:
        largest = max(range(len(sizes)), key=lambda i: sizes[i])
        sizes[largest] += overflow

    return sizes, False


@dataclass
class SizingResult:
    """Sizes per app id plus the axes that needed degenerate scaling."""

    sizes: dict[str, tuple[float, float]] = field(default_factory=dict)
    degenerate_axes: list[str] = field(default_factory=list)


class SizingPolicy:
    """Computes window size fractions."""

    FOCUS_SHARE = 0.75
    PRIOR_WEIGHT = 0.5

    def __init__(
        self,
        min_pixels: Optional[Mapping[Archetype, tuple[float, float]]] = None,
        focus_share: float = FOCUS_SHARE,
        prior_weight: float = PRIOR_WEIGHT,
        table: Mapping[tuple[Archetype, LayoutRole], SizeRule] = SIZE_TABLE
    ):
        """
        Initialize policy.

        Args:
            min_pixels: Minimum functional size per archetype in screen
                units. Missing archetypes fall back to the defaults.
            focus_share: Share of the slack given to the focused window.
            prior_weight: Blend weight of a preference prior.
            table: Sizing rules keyed by (archetype, role).
        """
        merged = dict(DEFAULT_MIN_PIXELS)
        merged.update(min_pixels or {})
        self.min_pixels: Mapping[Archetype, tuple[float, float]] = MappingProxyType(merged)
        self.focus_share = focus_share
        self.prior_weight = prior_weight
        self.table = table

    def rule_for(self, archetype: Archetype, role: LayoutRole) -> SizeRule:
        return self.table.get((archetype, role), ROLE_DEFAULTS[role])

    def min_size(self, archetype: Archetype) -> tuple[float, float]:
        """Minimum functional size in screen units."""
        return self.min_pixels.get(archetype, DEFAULT_MIN_PIXELS[archetype])

    def minimum_for(
        self,
        archetype: Archetype,
        role: LayoutRole,
        screen: Screen
    ) -> tuple[float, float]:
        """Pixel minimum as fractions, clamped into the rule's bands."""
        rule = self.rule_for(archetype, role)
        min_w, min_h = self.min_size(archetype)
        return (
            _clamp(min_w / screen.width, *rule.width_band),
            _clamp(min_h / screen.height, *rule.height_band),
        )

    def size_for(
        self,
        archetype: Archetype,
        role: LayoutRole,
        window_count: int,
        is_focused: bool,
        screen: Screen,
        prior: Optional[tuple[float, float]] = None
    ) -> tuple[float, float]:
        """
        Preferred (width, height) fractions for one window.

        A focused window is sized from the next roomier window-count band.
        """
        rule = self.rule_for(archetype, role)
        tier = _tier(window_count)
        if is_focused:
            tier = max(0, tier - 1)

        width, height = rule.widths[tier], rule.heights[tier]
        if prior is not None:
            weight = self.prior_weight
            width = (1 - weight) * width + weight * prior[0]
            height = (1 - weight) * height + weight * prior[1]

        if rule.min_area and width * height < rule.min_area:
            scale = math.sqrt(rule.min_area / (width * height))
            width *= scale
            height *= scale

        min_w, min_h = self.minimum_for(archetype, role, screen)
        return (
            _clamp(max(width, min_w), *rule.width_band),
            _clamp(max(height, min_h), *rule.height_band),
        )

    def _size_tiled(
        self,
        windows: Sequence[WindowSpec],
        screen: Screen,
        priors: Mapping[str, tuple[float, float]]
    ) -> SizingResult:
        horizontal = screen.is_landscape
        axis = 0 if horizontal else 1
        minimums = []
        caps = []
        for spec in windows:
            rule = self.rule_for(spec.archetype, spec.role)
            band = rule.width_band if horizontal else rule.height_band
            minimum = self.minimum_for(spec.archetype, spec.role, screen)[axis]
            prior = priors.get(spec.app_id)
            if prior is not None:
                blended = (1 - self.prior_weight) * minimum + self.prior_weight * prior[axis]
                minimum = _clamp(blended, *band)
            minimums.append(minimum)
            caps.append(band[1])

        focus_index = next((i for i, w in enumerate(windows) if w.focused), None)
        extents, degenerate = distribute(minimums, caps, focus_index, self.focus_share)

        result = SizingResult()
        for spec, extent in zip(windows, extents):
            result.sizes[spec.app_id] = (extent, 1.0) if horizontal else (1.0, extent)
        if degenerate:
            result.degenerate_axes.append("horizontal" if horizontal else "vertical")
        return result

    def _size_cascade(
        self,
        windows: Sequence[WindowSpec],
        screen: Screen,
        priors: Mapping[str, tuple[float, float]]
    ) -> SizingResult:
        count = len(windows)
        result = SizingResult()
        primary = next((w for w in windows if w.role == LayoutRole.PRIMARY), None)
        sides = [w for w in windows if w.role == LayoutRole.SIDE_COLUMN]
        for spec in windows:
            if spec is primary:
                continue
            result.sizes[spec.app_id] = self.size_for(
                spec.archetype, spec.role, count, spec.focused, screen,
                priors.get(spec.app_id),
            )
        if primary is None:
            return result

        # The primary spans the full height and whatever width the shared
        # side column leaves. Only its minimum competes with the column, and
        # the focus share of the slack goes to the primary.
        primary_w = 1.0
        if sides:
            primary_min = self.minimum_for(primary.archetype, primary.role, screen)[0]
            column_w = max(result.sizes[w.app_id][0] for w in sides)
            column_cap = max(self.rule_for(w.archetype, w.role).width_band[1] for w in sides)
            (primary_w, column_w), degenerate = distribute(
                [primary_min, column_w], [1.0, column_cap], 0, self.focus_share
            )
            if degenerate:
                result.degenerate_axes.append("horizontal")

            min_heights = [self.minimum_for(w.archetype, w.role, screen)[1] for w in sides]
            heights, degenerate = distribute(min_heights, [1.0] * len(sides))
            if degenerate:
                result.degenerate_axes.append("vertical")
            for spec, height in zip(sides, heights):
                result.sizes[spec.app_id] = (column_w, height)

        result.sizes[primary.app_id] = (primary_w, 1.0)
        return result

    def size_all(
        self,
        windows: Sequence[WindowSpec],
        screen: Screen,
        mode: LayoutMode,
        priors: Optional[Mapping[str, tuple[float, float]]] = None
    ) -> SizingResult:
        """
        Size every window for a resolved mode (TILE or CASCADE).

        Args:
            windows: Window specs in input order.
            screen: Screen dimensions.
            mode: Resolved layout mode.
            priors: Optional preferred (width, height) per app id.

        Returns:
            SizingResult.
        """
        priors = priors or {}
        if mode == LayoutMode.TILE:
            result = self._size_tiled(windows, screen, priors)
        else:
            result = self._size_cascade(windows, screen, priors)

        if result.degenerate_axes:
            logger.info("Summed minimums exceed the screen on %s; scaled down",
                        ", ".join(result.degenerate_axes))
        return result
