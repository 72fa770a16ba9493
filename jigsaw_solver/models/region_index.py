"""
Region Index Module.

A dense position -> region id table built from a validated partition, giving
O(1) region membership queries to the solver and the validator.
"""

import logging
from typing import Iterable, List, Sequence

import numpy as np

from . import GRID_SIZE, PositionType, RegionType, RegionsType
from ..utils.error_handling import MalformedRegionsError

# Configure logging
logger = logging.getLogger(__name__)


def canonical_box_regions() -> RegionsType:
    """
    Build the standard 3x3 box partition.

    Returns:
        Nine regions, boxes numbered row-major
    """
    regions: RegionsType = []

    for box_row in range(3):
        for box_col in range(3):
            regions.append([
                (row, col)
                for row in range(box_row * 3, box_row * 3 + 3)
                for col in range(box_col * 3, box_col * 3 + 3)
            ])

    return regions


def normalize_regions(regions: Iterable[Iterable[Sequence[int]]]) -> RegionsType:
    """Convert region members (lists, tuples, numpy rows) to sorted (row, col) tuples."""
    return [sorted((int(pos[0]), int(pos[1])) for pos in region) for region in regions]


def find_partition_issues(regions: RegionsType) -> List[str]:
    """
    List every way a region collection fails to partition the grid into
    nine regions of nine cells.

    Args:
        regions: Candidate regions

    Returns:
        Human-readable issues, empty when the regions form a valid partition
    """
    issues: List[str] = []

    if len(regions) != GRID_SIZE:
        issues.append(f"found {len(regions)} regions, expected {GRID_SIZE}")

    owner = {}
    for region_id, region in enumerate(regions):
        if len(region) != GRID_SIZE:
            issues.append(f"region {region_id} has {len(region)} cells, expected {GRID_SIZE}")

        for row, col in region:
            if not (0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE):
                issues.append(f"region {region_id} contains out-of-range cell ({row}, {col})")
                continue
            if (row, col) in owner:
                issues.append(
                    f"cell ({row}, {col}) belongs to regions {owner[(row, col)]} and {region_id}"
                )
                continue
            owner[(row, col)] = region_id

    missing = [
        (row, col) for row in range(GRID_SIZE) for col in range(GRID_SIZE)
        if (row, col) not in owner
    ]
    if missing:
        issues.append(f"{len(missing)} cells belong to no region, first {missing[0]}")

    return issues


class RegionIndex:
    """
    Position -> region id lookup over a valid 9-region partition.

    Construction rejects anything that is not a partition with
    ``MalformedRegionsError``; afterwards the index is read-only.
    """

    def __init__(self, regions: Iterable[Iterable[Sequence[int]]]):
        """
        Build the index.

        Args:
            regions: Nine regions of nine (row, col) positions each

        Raises:
            MalformedRegionsError: If the regions are not a partition of the grid
        """
        normalized = normalize_regions(regions)
        issues = find_partition_issues(normalized)

        if issues:
            logger.warning(f"Rejecting malformed regions: {'; '.join(issues)}")
            raise MalformedRegionsError(
                f"Regions do not partition the grid: {issues[0]}",
                issues=issues,
                regions=normalized
            )

        self._regions = normalized
        self._table = np.full((GRID_SIZE, GRID_SIZE), -1, dtype=np.int8)
        for region_id, region in enumerate(normalized):
            for row, col in region:
                self._table[row, col] = region_id
        self._table.setflags(write=False)

        # Members stay as tuples so callers cannot reshape the partition
        self._cells = tuple(tuple(region) for region in normalized)

    @classmethod
    def standard(cls) -> "RegionIndex":
        """Index over the canonical 3x3 boxes."""
        return cls(canonical_box_regions())

    def region_of(self, row: int, col: int) -> int:
        return int(self._table[row, col])

    def cells(self, region_id: int) -> Sequence[PositionType]:
        return self._cells[region_id]

    def peers(self, row: int, col: int) -> Sequence[PositionType]:
        """Cells sharing the region of (row, col), the cell itself included."""
        return self._cells[self.region_of(row, col)]

    @property
    def regions(self) -> List[RegionType]:
        return [list(region) for region in self._cells]

    @property
    def table(self) -> np.ndarray:
        return self._table

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegionIndex):
            return NotImplemented
        return bool(np.array_equal(self._table, other._table))

    def __repr__(self) -> str:
        return f"RegionIndex(regions={len(self._cells)})"
