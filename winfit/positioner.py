"""
Winfit positioner.

Places sized windows either as an edge-to-edge tiling or as a layered
cascade.
"""

from typing import Optional, Sequence

from .types import Arrangement, LayoutMode, LayoutRole, PlacementRect, Screen, WindowSpec


def fit_cascade_steps(
    sizes: Sequence[tuple[float, float]],
    origin: tuple[float, float],
    region_right: float,
    aspect_ratio: float,
    step: float,
    first: int = 1
) -> tuple[float, float]:
    """
    Per-axis layer offsets that keep every layer of a stack inside the region.

    The nominal step (vertical one scaled by aspect_ratio) shrinks until the
    deepest layer still fits, so layers spread evenly over the room left
    instead of piling up against the region edge.

    Args:
        sizes: (width, height) of each stacked layer, bottom to top.
        origin: Position of layer 0.
        region_right: Right edge of the cascade region.
        aspect_ratio: Screen width over height.
        step: Nominal horizontal step.
        first: Layer index of sizes[0].

    Returns:
        Tuple of (step_x, step_y).
    """
    origin_x, origin_y = origin
    step_x, step_y = step, step * aspect_ratio
    for k, (width, height) in enumerate(sizes, start=first):
        if k == 0:
            continue
        room_x = region_right - min(width, region_right) - origin_x
        room_y = 1.0 - min(height, 1.0) - origin_y
        step_x = min(step_x, max(room_x, 0.0) / k)
        step_y = min(step_y, max(room_y, 0.0) / k)
    return step_x, step_y


class Positioner:
    """Turns window sizes into placement rects and layer order."""

    CASCADE_ORIGIN = (0.02, 0.02)
    CASCADE_STEP = 0.15
    AUTO_TILE_MAX = 2

    def __init__(
        self,
        cascade_origin: tuple[float, float] = CASCADE_ORIGIN,
        cascade_step: float = CASCADE_STEP
    ):
        """
        Initialize positioner.

        Args:
            cascade_origin: Anchor of the primary window in cascade mode.
            cascade_step: Horizontal per-layer offset; the vertical offset
                is this value scaled by the screen aspect ratio.
        """
        self.cascade_origin = cascade_origin
        self.cascade_step = cascade_step

    @classmethod
    def resolve_mode(cls, hint: LayoutMode | str, window_count: int) -> LayoutMode:
        """Resolve AUTO into TILE (<= 2 windows) or CASCADE."""
        if isinstance(hint, str):
            hint = LayoutMode(hint.lower())
        if hint != LayoutMode.AUTO:
            return hint
        return LayoutMode.TILE if window_count <= cls.AUTO_TILE_MAX else LayoutMode.CASCADE

    def tile(
        self,
        windows: Sequence[WindowSpec],
        sizes: dict[str, tuple[float, float]],
        screen: Screen,
        axis: Optional[str] = None
    ) -> Arrangement:
        """
        Place windows edge to edge in input order.

        The last window absorbs rounding so the tiled axis sums to 1.0.
        """
        if axis is None:
            axis = "horizontal" if screen.is_landscape else "vertical"

        rects = {}
        offset = 0.0
        for i, spec in enumerate(windows):
            width, height = sizes[spec.app_id]
            if axis == "horizontal":
                extent = 1.0 - offset if i == len(windows) - 1 else width
                rects[spec.app_id] = PlacementRect(offset, 0.0, extent, height)
            else:
                extent = 1.0 - offset if i == len(windows) - 1 else height
                rects[spec.app_id] = PlacementRect(0.0, offset, width, extent)
            offset += extent

        return Arrangement(
            windows=tuple(windows),
            rects=rects,
            layers={spec.app_id: i for i, spec in enumerate(windows)},
            mode=LayoutMode.TILE,
            screen=screen,
            axis=axis,
            cascade_step=self.cascade_step,
        )

    def cascade_layer_rect(
        self,
        index: int,
        size: tuple[float, float],
        region_right: float,
        screen: Screen,
        step: Optional[float] = None,
        step_y: Optional[float] = None
    ) -> PlacementRect:
        """
        Rect of the index-th layer above the primary.

        Layers that would be clipped by the region are shifted back inside it
        so they keep their size.
        """
        step = self.cascade_step if step is None else step
        if step_y is None:
            step_y = step * screen.aspect_ratio
        origin_x, origin_y = self.cascade_origin
        width = min(size[0], region_right)
        height = min(size[1], 1.0)
        x = origin_x + index * step
        y = origin_y + index * step_y
        x = max(0.0, min(x, region_right - width))
        y = max(0.0, min(y, 1.0 - height))
        return PlacementRect(x, y, width, height)

    def cascade(
        self,
        windows: Sequence[WindowSpec],
        sizes: dict[str, tuple[float, float]],
        screen: Screen,
        step: Optional[float] = None
    ) -> Arrangement:
        """
        Layered placement.

        Side columns share a right-edge column. The primary anchors at the
        cascade origin; its size is the extent it spans from the screen's
        top-left edge, clipped to the region. Cascade layers step down and
        right over it, with the step shrunk so the deepest layer still fits.
        Corner windows sit in the region's corners; a fifth corner window
        and later ones are inset toward the centre.
        Layer order: primary, cascade layers, side columns, corners.
        """
        step = self.cascade_step if step is None else step
        origin_x, origin_y = self.cascade_origin

        primary = [w for w in windows if w.role == LayoutRole.PRIMARY]
        stack = [w for w in windows if w.role == LayoutRole.CASCADE_LAYER]
        sides = [w for w in windows if w.role == LayoutRole.SIDE_COLUMN]
        corners = [w for w in windows if w.role == LayoutRole.CORNER]

        rects = {}
        column_w = max((sizes[w.app_id][0] for w in sides), default=0.0)
        region_right = 1.0 - column_w

        y = 0.0
        for i, spec in enumerate(sides):
            height = 1.0 - y if i == len(sides) - 1 else sizes[spec.app_id][1]
            rects[spec.app_id] = PlacementRect(region_right, y, column_w, height)
            y += height

        for spec in primary:
            width, height = sizes[spec.app_id]
            rects[spec.app_id] = PlacementRect(
                origin_x,
                origin_y,
                max(min(width, region_right) - origin_x, 0.0),
                max(min(height, 1.0) - origin_y, 0.0),
            )

        first = 1 if primary else 0
        step_x, step_y = fit_cascade_steps(
            [sizes[spec.app_id] for spec in stack],
            self.cascade_origin, region_right, screen.aspect_ratio, step, first,
        )
        for k, spec in enumerate(stack, start=first):
            rects[spec.app_id] = self.cascade_layer_rect(
                k, sizes[spec.app_id], region_right, screen, step_x, step_y
            )

        for i, spec in enumerate(corners):
            width, height = sizes[spec.app_id]
            width = min(width, region_right)
            height = min(height, 1.0)
            ring, slot = divmod(i, 4)
            inset_x = min(ring * width / 2, max(region_right - width, 0.0))
            inset_y = min(ring * height / 2, 1.0 - height)
            x, y = (
                (region_right - width - inset_x, 1.0 - height - inset_y),
                (inset_x, 1.0 - height - inset_y),
                (region_right - width - inset_x, inset_y),
                (inset_x, inset_y),
            )[slot]
            rects[spec.app_id] = PlacementRect(max(x, 0.0), max(y, 0.0), width, height)

        order = primary + stack + sides + corners
        return Arrangement(
            windows=tuple(windows),
            rects={spec.app_id: rects[spec.app_id] for spec in windows},
            layers={spec.app_id: order.index(spec) for spec in windows},
            mode=LayoutMode.CASCADE,
            screen=screen,
            cascade_step=step,
        )

    def position(
        self,
        windows: Sequence[WindowSpec],
        sizes: dict[str, tuple[float, float]],
        screen: Screen,
        mode: LayoutMode
    ) -> Arrangement:
        """Place windows for a resolved mode."""
        if mode == LayoutMode.TILE:
            return self.tile(windows, sizes, screen)
        return self.cascade(windows, sizes, screen)
