"""
Boundary Classifier Module.

This module turns measured ink density of the grid line segments into a
thick/thin map. Thick segments are region walls, thin segments separate cells
of the same region.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

import numpy as np

from . import BoundaryClassifierBase, GRID_SIZE, PositionType
from ..config.settings import get_settings
from ..utils.error_handling import BoundaryShapeError

# Configure logging
logger = logging.getLogger(__name__)

# 10 line positions, 9 cells along each line
LINE_COUNT = GRID_SIZE + 1
TABLE_SHAPE = (LINE_COUNT, GRID_SIZE)


class Orientation(str, Enum):
    """Direction of a boundary line."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class BoundarySegment:
    """
    A single line segment between two grid-adjacent cells (or the outer edge).

    Horizontal line ``i`` runs above row ``i`` and ``index`` is the column;
    vertical line ``j`` runs left of column ``j`` and ``index`` is the row.
    """

    orientation: Orientation
    line: int
    index: int
    count: Optional[float]
    thick: bool

    @property
    def is_outer(self) -> bool:
        return self.line in (0, GRID_SIZE)


class BoundaryMap:
    """
    Thick/thin classification of all 180 boundary segments.

    Both tables have shape (10, 9) and are indexed ``[line, index]``.
    """

    def __init__(
        self,
        horizontal: np.ndarray,
        vertical: np.ndarray,
        horizontal_counts: Optional[np.ndarray] = None,
        vertical_counts: Optional[np.ndarray] = None,
        median: Optional[float] = None,
        threshold: Optional[float] = None
    ):
        horizontal = np.asarray(horizontal, dtype=bool)
        vertical = np.asarray(vertical, dtype=bool)

        if horizontal.shape != TABLE_SHAPE or vertical.shape != TABLE_SHAPE:
            raise BoundaryShapeError(
                f"Boundary tables must have shape {TABLE_SHAPE}, "
                f"got {horizontal.shape} and {vertical.shape}"
            )

        self.horizontal = horizontal
        self.vertical = vertical
        self.horizontal_counts = horizontal_counts
        self.vertical_counts = vertical_counts
        self.median = median
        self.threshold = threshold

    def is_thick(self, orientation: Orientation, line: int, index: int) -> bool:
        table = self.horizontal if Orientation(orientation) is Orientation.HORIZONTAL else self.vertical
        return bool(table[line, index])

    def separates(self, a: PositionType, b: PositionType) -> bool:
        """
        Check whether a thick segment lies between two adjacent cells.

        Args:
            a: First cell (row, col)
            b: Second cell (row, col), orthogonally adjacent to ``a``

        Returns:
            True if the segment between the cells is thick

        Raises:
            ValueError: If the cells are not orthogonally adjacent
        """
        orientation, line, index = self.segment_between(a, b)
        return self.is_thick(orientation, line, index)

    @staticmethod
    def segment_between(a: PositionType, b: PositionType) -> Tuple[Orientation, int, int]:
        """Locate the segment separating two orthogonally adjacent cells."""
        (r1, c1), (r2, c2) = a, b

        if r1 == r2 and abs(c1 - c2) == 1:
            return Orientation.VERTICAL, max(c1, c2), r1
        if c1 == c2 and abs(r1 - r2) == 1:
            return Orientation.HORIZONTAL, max(r1, r2), c1

        raise ValueError(f"Cells {a} and {b} are not orthogonally adjacent")

    def segments(self) -> Iterator[BoundarySegment]:
        """Iterate over all segments, horizontal lines first."""
        for orientation, table, counts in (
            (Orientation.HORIZONTAL, self.horizontal, self.horizontal_counts),
            (Orientation.VERTICAL, self.vertical, self.vertical_counts),
        ):
            for line in range(LINE_COUNT):
                for index in range(GRID_SIZE):
                    count = float(counts[line, index]) if counts is not None else None
                    yield BoundarySegment(orientation, line, index, count, bool(table[line, index]))

    @property
    def thick_count(self) -> int:
        return int(self.horizontal.sum() + self.vertical.sum())


def _as_count_table(counts, name: str) -> np.ndarray:
    """
    Convert an ink-count table to a float array and check its contract.

    Raises:
        BoundaryShapeError: If the table has the wrong shape or invalid counts
    """
    try:
        table = np.asarray(counts, dtype=float)
    except (TypeError, ValueError) as e:
        raise BoundaryShapeError(f"{name} counts are not numeric: {str(e)}")

    if table.shape != TABLE_SHAPE:
        raise BoundaryShapeError(f"{name} counts must have shape {TABLE_SHAPE}, got {table.shape}")

    if not np.all(np.isfinite(table)):
        raise BoundaryShapeError(f"{name} counts contain non-finite values")

    if np.any(table < 0):
        raise BoundaryShapeError(f"{name} counts must be non-negative")

    return table


class ThresholdBoundaryClassifier(BoundaryClassifierBase):
    """
    Median-threshold boundary classifier.

    A segment is thick when its ink count exceeds ``threshold_factor`` times
    the median count over all segments. The outer perimeter is forced thick.
    """

    def __init__(
        self,
        threshold_factor: Optional[float] = None,
        force_outer_border: Optional[bool] = None
    ):
        """
        Initialize the classifier from settings, with optional overrides.

        Args:
            threshold_factor: Multiplier applied to the median count
            force_outer_border: Whether perimeter segments are always thick
        """
        self.settings = get_settings().get_nested("boundary_classifier")

        if threshold_factor is None:
            threshold_factor = self.settings.get("threshold_factor", 1.5)
        if force_outer_border is None:
            force_outer_border = self.settings.get("force_outer_border", True)

        self.threshold_factor = float(threshold_factor)
        self.force_outer_border = bool(force_outer_border)

    def classify(self, horizontal_counts, vertical_counts) -> BoundaryMap:
        """
        Classify every boundary segment as thick or thin.

        Args:
            horizontal_counts: 10x9 ink counts, ``[line, col]``
            vertical_counts: 10x9 ink counts, ``[line, row]``

        Returns:
            BoundaryMap with the classification and the threshold used

        Raises:
            BoundaryShapeError: If a count table breaks the input contract
        """
        h_counts = _as_count_table(horizontal_counts, "Horizontal")
        v_counts = _as_count_table(vertical_counts, "Vertical")

        median = float(np.median(np.concatenate([h_counts.ravel(), v_counts.ravel()])))
        threshold = self.threshold_factor * median

        horizontal = h_counts > threshold
        vertical = v_counts > threshold

        if self.force_outer_border:
            horizontal[[0, GRID_SIZE], :] = True
            vertical[[0, GRID_SIZE], :] = True

        boundary_map = BoundaryMap(
            horizontal, vertical,
            horizontal_counts=h_counts,
            vertical_counts=v_counts,
            median=median,
            threshold=threshold
        )

        logger.debug(
            f"Classified boundaries: median={median:.2f}, threshold={threshold:.2f}, "
            f"thick={boundary_map.thick_count}/{2 * LINE_COUNT * GRID_SIZE}"
        )

        return boundary_map
