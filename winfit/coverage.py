"""
Winfit coverage and overlap analyzer.

Approximates union area and per-window visibility by sampling cell centres
on a uniform grid over the unit square. Slivers thinner than one cell can be
mis-measured; lower cell_size for more precision at quadratic cost. An exact
sweep-line union would be the higher-precision alternative.
"""

import math
from dataclasses import dataclass, field
from itertools import combinations

from .types import EPSILON, Arrangement, Overlap, PlacementRect


@dataclass
class CoverageReport:
    """Sampling results for one arrangement."""

    coverage: float
    visible_fractions: dict[str, float] = field(default_factory=dict)
    sample_counts: dict[str, int] = field(default_factory=dict)
    overlaps: list[Overlap] = field(default_factory=list)


class CoverageAnalyzer:
    """Grid-sampling coverage analyzer."""

    DEFAULT_CELL_SIZE = 0.01

    def __init__(self, cell_size: float = DEFAULT_CELL_SIZE):
        """
        Initialize analyzer.

        Args:
            cell_size: Sample spacing as a fraction of the screen side.
        """
        if not 0 < cell_size <= 0.5:
            raise ValueError(f"cell_size must be in (0, 0.5], got {cell_size}")
        self.cell_size = cell_size
        self.cells = max(1, round(1.0 / cell_size))

    def _index_range(self, start: float, end: float) -> range:
        """Indices of sample centres c with start <= c < end."""
        n = self.cells
        first = math.ceil(start * n - 0.5 - EPSILON)
        last = math.ceil(end * n - 0.5 - EPSILON) - 1
        return range(max(first, 0), min(last, n - 1) + 1)

    def owner_grid(self, arrangement: Arrangement) -> list[int]:
        """
        Top-most window index per sample, row major; -1 where uncovered.

        Windows are painted in ascending layer order so later paints win.
        """
        n = self.cells
        grid = [-1] * (n * n)
        app_ids = list(arrangement.rects)
        for app_id in arrangement.layer_order():
            idx = app_ids.index(app_id)
            rect = arrangement.rects[app_id]
            cols = self._index_range(rect.x, rect.right)
            if not cols:
                continue
            fill = [idx] * len(cols)
            for row in self._index_range(rect.y, rect.bottom):
                base = row * n
                grid[base + cols.start:base + cols.stop] = fill
        return grid

    def sample_count(self, rect: PlacementRect) -> int:
        return len(self._index_range(rect.x, rect.right)) * len(self._index_range(rect.y, rect.bottom))

    def coverage(self, arrangement: Arrangement) -> float:
        """Fraction of samples covered by at least one window."""
        grid = self.owner_grid(arrangement)
        return sum(1 for owner in grid if owner >= 0) / len(grid)

    @staticmethod
    def overlaps(arrangement: Arrangement) -> list[Overlap]:
        """Pairs of windows whose interiors intersect."""
        result = []
        for a, b in combinations(arrangement.rects, 2):
            area = arrangement.rects[a].intersection_area(arrangement.rects[b])
            if area > EPSILON:
                result.append(Overlap(a, b, area))
        return result

    def analyze(self, arrangement: Arrangement) -> CoverageReport:
        """
        Analyze an arrangement.

        Returns:
            CoverageReport with total coverage, per-window visible fraction
            (samples where the window is top-most over its own samples) and
            pairwise overlaps.
        """
        grid = self.owner_grid(arrangement)
        app_ids = list(arrangement.rects)
        top_counts = [0] * len(app_ids)
        covered = 0
        for owner in grid:
            if owner >= 0:
                covered += 1
                top_counts[owner] += 1

        report = CoverageReport(coverage=covered / len(grid))
        for idx, app_id in enumerate(app_ids):
            samples = self.sample_count(arrangement.rects[app_id])
            report.sample_counts[app_id] = samples
            report.visible_fractions[app_id] = top_counts[idx] / samples if samples else 0.0
        report.overlaps = self.overlaps(arrangement)
        return report
