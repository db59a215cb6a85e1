"""
Winfit relaxation strategies.

Each strategy is a named, pure Arrangement -> Arrangement transform. The
solver applies them in LADDER order, re-validating after each one. A
transform that has nothing to do returns its input unchanged.
"""

import dataclasses
from dataclasses import dataclass
from typing import Callable

from .positioner import fit_cascade_steps
from .types import EPSILON, Arrangement, LayoutMode, LayoutRole, PlacementRect, WindowSpec

PRIMARY_SHRINK = 0.8
COMPACT_FACTOR = 0.5


def _min_fraction(arrangement: Arrangement, spec: WindowSpec) -> tuple[float, float]:
    screen = arrangement.screen
    return (
        min(spec.min_width / screen.width, 1.0),
        min(spec.min_height / screen.height, 1.0),
    )


def _docked_sides(arrangement: Arrangement) -> list[WindowSpec]:
    """Side column windows flush with the right edge."""
    return [
        spec for spec in arrangement.by_role(LayoutRole.SIDE_COLUMN)
        if abs(arrangement.rects[spec.app_id].right - 1.0) <= EPSILON
    ]


def _region_right(arrangement: Arrangement) -> float:
    sides = arrangement.by_role(LayoutRole.SIDE_COLUMN)
    return min((arrangement.rects[s.app_id].x for s in sides), default=1.0)


def _derive(arrangement: Arrangement, name: str, **changes) -> Arrangement:
    return dataclasses.replace(arrangement, applied=arrangement.applied + (name,), **changes)


def shrink_primary_height(arrangement: Arrangement) -> Arrangement:
    """Shrink the primary's height to free vertical room for cascaded peers."""
    primary = arrangement.primary
    if primary is None or not arrangement.by_role(LayoutRole.CASCADE_LAYER):
        return arrangement

    rect = arrangement.rects[primary.app_id]
    min_h = _min_fraction(arrangement, primary)[1]
    height = max(min_h, rect.height * PRIMARY_SHRINK)
    if height >= rect.height - EPSILON:
        return arrangement

    rects = dict(arrangement.rects)
    rects[primary.app_id] = dataclasses.replace(rect, height=height)
    return _derive(arrangement, "shrink_primary_height", rects=rects)


def _occluded_share(arrangement: Arrangement, app_id: str) -> float:
    """Share of a rect intersected by higher-layer rects (upper bound)."""
    rect = arrangement.rects[app_id]
    if rect.area <= 0:
        return 1.0
    layer = arrangement.layers[app_id]
    hidden = sum(
        rect.intersection_area(other)
        for other_id, other in arrangement.rects.items()
        if arrangement.layers[other_id] > layer
    )
    return min(hidden / rect.area, 1.0)


def relocate_to_free_column(arrangement: Arrangement) -> Arrangement:
    """
    Move the most occluded cascade layer into its own column.

    The column is carved out of the primary's right edge, next to any docked
    side column. Nothing changes when the primary would drop below its own
    minimum width.
    """
    primary = arrangement.primary
    stack = arrangement.by_role(LayoutRole.CASCADE_LAYER)
    if primary is None or not stack:
        return arrangement

    def deficit(spec: WindowSpec) -> float:
        rect = arrangement.rects[spec.app_id]
        min_w, min_h = _min_fraction(arrangement, spec)
        return max(min_w - rect.width, 0.0) + max(min_h - rect.height, 0.0)

    target = max(stack, key=lambda s: (_occluded_share(arrangement, s.app_id), deficit(s)))
    if _occluded_share(arrangement, target.app_id) <= EPSILON and deficit(target) <= EPSILON:
        return arrangement

    region_right = _region_right(arrangement)
    column_w = _min_fraction(arrangement, target)[0]
    column_x = region_right - column_w
    primary_rect = arrangement.rects[primary.app_id]
    if column_x - primary_rect.x < _min_fraction(arrangement, primary)[0] - EPSILON:
        return arrangement

    rects = dict(arrangement.rects)
    rects[target.app_id] = PlacementRect(column_x, 0.0, column_w, 1.0)
    rects[primary.app_id] = dataclasses.replace(primary_rect, width=column_x - primary_rect.x)
    for spec in arrangement.windows:
        if spec.role not in (LayoutRole.CASCADE_LAYER, LayoutRole.CORNER) or spec == target:
            continue
        rect = rects[spec.app_id]
        if rect.right > column_x + EPSILON:
            width = min(rect.width, column_x)
            rects[spec.app_id] = dataclasses.replace(
                rect, x=max(0.0, min(rect.x, column_x - width)), width=width
            )

    windows = tuple(
        dataclasses.replace(spec, role=LayoutRole.SIDE_COLUMN) if spec == target else spec
        for spec in arrangement.windows
    )
    return _derive(arrangement, "relocate_to_free_column", windows=windows, rects=rects)


def compact_cascade(arrangement: Arrangement) -> Arrangement:
    """Halve the per-layer cascade offset so deep stacks fit."""
    primary = arrangement.primary
    stack = sorted(
        arrangement.by_role(LayoutRole.CASCADE_LAYER),
        key=lambda s: arrangement.layers[s.app_id],
    )
    if not stack:
        return arrangement

    step = arrangement.cascade_step * COMPACT_FACTOR
    if primary is not None:
        origin = arrangement.rects[primary.app_id]
        origin_x, origin_y = origin.x, origin.y
        first = 1
    else:
        origin_x, origin_y = 0.0, 0.0
        first = 0

    region_right = _region_right(arrangement)
    rects = dict(arrangement.rects)
    step_x, step_y = fit_cascade_steps(
        [(rects[s.app_id].width, rects[s.app_id].height) for s in stack],
        (origin_x, origin_y), region_right, arrangement.screen.aspect_ratio, step, first,
    )
    for k, spec in enumerate(stack, start=first):
        rect = rects[spec.app_id]
        x = max(0.0, min(origin_x + k * step_x, region_right - rect.width))
        y = max(0.0, min(origin_y + k * step_y, 1.0 - rect.height))
        rects[spec.app_id] = dataclasses.replace(rect, x=x, y=y)

    return _derive(arrangement, "compact_cascade", rects=rects, cascade_step=step)


def _retile(arrangement: Arrangement, extents: dict[str, float]) -> dict[str, PlacementRect]:
    """Lay out tiled rects again in their current axis order."""
    horizontal = arrangement.axis == "horizontal"
    ordered = sorted(
        arrangement.rects,
        key=lambda a: arrangement.rects[a].x if horizontal else arrangement.rects[a].y,
    )
    rects = {}
    offset = 0.0
    for app_id in ordered:
        rect = arrangement.rects[app_id]
        extent = extents[app_id]
        if horizontal:
            rects[app_id] = dataclasses.replace(rect, x=offset, width=extent)
        else:
            rects[app_id] = dataclasses.replace(rect, y=offset, height=extent)
        offset += extent
    return {app_id: rects[app_id] for app_id in arrangement.rects}


def shrink_side_column(arrangement: Arrangement) -> Arrangement:
    """Shrink side columns to their architectural minimum."""
    if arrangement.mode == LayoutMode.TILE:
        return _shrink_tiled_sides(arrangement)

    sides = _docked_sides(arrangement)
    if not sides:
        return arrangement

    column_x = min(arrangement.rects[s.app_id].x for s in sides)
    column_w = 1.0 - column_x
    target_w = max(_min_fraction(arrangement, s)[0] for s in sides)
    delta = column_w - target_w
    if delta <= EPSILON:
        return arrangement

    # The primary and relocated columns grow into the freed strip; anything
    # else flush with the old column edge slides right with it.
    new_x = 1.0 - target_w
    rects = dict(arrangement.rects)
    docked = {s.app_id for s in sides}
    for spec in arrangement.windows:
        rect = arrangement.rects[spec.app_id]
        if spec.app_id in docked:
            rects[spec.app_id] = dataclasses.replace(rect, x=new_x, width=target_w)
        elif abs(rect.right - column_x) <= EPSILON:
            if spec.role in (LayoutRole.PRIMARY, LayoutRole.SIDE_COLUMN):
                rects[spec.app_id] = dataclasses.replace(rect, width=rect.width + delta)
            else:
                rects[spec.app_id] = dataclasses.replace(rect, x=rect.x + delta)
    return _derive(arrangement, "shrink_side_column", rects=rects)


def _shrink_tiled_sides(arrangement: Arrangement) -> Arrangement:
    sides = arrangement.by_role(LayoutRole.SIDE_COLUMN)
    primary = arrangement.primary
    if not sides or primary is None:
        return arrangement

    horizontal = arrangement.axis == "horizontal"
    axis = 0 if horizontal else 1

    def extent(rect: PlacementRect) -> float:
        return rect.width if horizontal else rect.height

    extents = {app_id: extent(rect) for app_id, rect in arrangement.rects.items()}
    freed = 0.0
    for spec in sides:
        minimum = _min_fraction(arrangement, spec)[axis]
        if extents[spec.app_id] - minimum > EPSILON:
            freed += extents[spec.app_id] - minimum
            extents[spec.app_id] = minimum
    if freed <= EPSILON:
        return arrangement

    extents[primary.app_id] += freed
    return _derive(arrangement, "shrink_side_column", rects=_retile(arrangement, extents))


def allow_extra_overlap(arrangement: Arrangement) -> Arrangement:
    """
    Accept one more overlap between the two lowest-priority windows.

    The lowest-priority window grows back to its minimum size, even if that
    overlaps its neighbour, and is raised above the other one.
    """
    if len(arrangement.windows) < 2:
        return arrangement

    ranked = sorted(arrangement.windows, key=lambda s: (s.role.priority, -s.order))
    lowest, other = ranked[0], ranked[1]

    rect = arrangement.rects[lowest.app_id]
    min_w, min_h = _min_fraction(arrangement, lowest)
    width = max(rect.width, min_w)
    height = max(rect.height, min_h)
    rects = dict(arrangement.rects)
    rects[lowest.app_id] = PlacementRect(
        max(0.0, min(rect.x, 1.0 - width)),
        max(0.0, min(rect.y, 1.0 - height)),
        width,
        height,
    )

    layers = dict(arrangement.layers)
    if layers[lowest.app_id] < layers[other.app_id]:
        layers[lowest.app_id], layers[other.app_id] = layers[other.app_id], layers[lowest.app_id]

    return _derive(
        arrangement, "allow_extra_overlap",
        rects=rects, layers=layers,
        overlap_allowance=arrangement.overlap_allowance + 1,
    )


@dataclass(frozen=True)
class Strategy:
    """A named relaxation step and the modes it applies to."""

    name: str
    apply: Callable[[Arrangement], Arrangement]
    modes: frozenset = frozenset({LayoutMode.TILE, LayoutMode.CASCADE})

    def applies_to(self, mode: LayoutMode) -> bool:
        return mode in self.modes


_CASCADE_ONLY = frozenset({LayoutMode.CASCADE})

LADDER: tuple[Strategy, ...] = (
    Strategy("shrink_primary_height", shrink_primary_height, _CASCADE_ONLY),
    Strategy("relocate_to_free_column", relocate_to_free_column, _CASCADE_ONLY),
    Strategy("compact_cascade", compact_cascade, _CASCADE_ONLY),
    Strategy("shrink_side_column", shrink_side_column),
    Strategy("allow_extra_overlap", allow_extra_overlap, _CASCADE_ONLY),
)
