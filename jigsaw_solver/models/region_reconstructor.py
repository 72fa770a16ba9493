"""
Region Reconstructor Module.

This module recovers the jigsaw region partition from a classified boundary
map. Cells joined by thin segments belong to the same region, so every
connected component of the "thin segment" graph is one region.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Set

import numpy as np

from . import GRID_SIZE, PositionType, RegionReconstructorBase, RegionsType
from .boundary_classifier import BoundaryMap, TABLE_SHAPE
from .region_index import find_partition_issues, normalize_regions

# Configure logging
logger = logging.getLogger(__name__)

AdjacencyType = Dict[PositionType, List[PositionType]]


@dataclass
class ReconstructionResult:
    """
    Regions found by a reconstruction, valid or not.

    Malformed results keep their components so they can be shown for
    diagnostics; they must not be handed to the solver.
    """

    regions: RegionsType
    issues: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def region_sizes(self) -> List[int]:
        return [len(region) for region in self.regions]


class BfsRegionReconstructor(RegionReconstructorBase):
    """
    Breadth-first connected-component region reconstructor.

    Components are discovered from the first unvisited cell in row-major
    order, so region ids are stable for identical input.
    """

    def reconstruct(self, boundary_map: BoundaryMap) -> ReconstructionResult:
        """
        Recover regions from a boundary map.

        Args:
            boundary_map: Classified boundary segments

        Returns:
            ReconstructionResult with the components in discovery order
        """
        adjacency = self._build_adjacency(boundary_map)
        visited: Set[PositionType] = set()
        regions: RegionsType = []

        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                if (row, col) in visited:
                    continue
                regions.append(self._collect_component((row, col), adjacency, visited))

        issues = find_partition_issues(regions)

        if issues:
            logger.warning(
                f"Reconstructed {len(regions)} regions with sizes "
                f"{[len(region) for region in regions]}: {'; '.join(issues)}"
            )
        else:
            logger.info(f"Reconstructed {len(regions)} regions")

        return ReconstructionResult(regions=regions, issues=issues)

    def _build_adjacency(self, boundary_map: BoundaryMap) -> AdjacencyType:
        """
        Connect every pair of neighbouring cells separated by a thin segment.

        Args:
            boundary_map: Classified boundary segments

        Returns:
            Adjacency lists keyed by cell
        """
        adjacency: AdjacencyType = {
            (row, col): [] for row in range(GRID_SIZE) for col in range(GRID_SIZE)
        }

        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                # Right and down neighbours cover every pair once
                for neighbour in ((row, col + 1), (row + 1, col)):
                    if neighbour[0] >= GRID_SIZE or neighbour[1] >= GRID_SIZE:
                        continue
                    if not boundary_map.separates((row, col), neighbour):
                        adjacency[(row, col)].append(neighbour)
                        adjacency[neighbour].append((row, col))

        return adjacency

    def _collect_component(
        self,
        start: PositionType,
        adjacency: AdjacencyType,
        visited: Set[PositionType]
    ) -> List[PositionType]:
        """
        Breadth-first search from one cell, marking everything reached.

        Returns:
            Cells of the component, sorted row-major
        """
        queue = deque([start])
        visited.add(start)
        component = []

        while queue:
            cell = queue.popleft()
            component.append(cell)

            for neighbour in adjacency[cell]:
                if neighbour not in visited:
                    visited.add(neighbour)
                    queue.append(neighbour)

        return sorted(component)


def boundary_map_from_regions(regions) -> BoundaryMap:
    """
    Derive the boundary map a region layout would be drawn with.

    Segments between cells of different regions are thick, as is the outer
    perimeter. Cells missing from every region count as a region of their own.

    Args:
        regions: Region collection (need not be a valid partition)

    Returns:
        BoundaryMap of the layout
    """
    owner = np.full((GRID_SIZE, GRID_SIZE), -1, dtype=int)
    for region_id, region in enumerate(normalize_regions(regions)):
        for row, col in region:
            if 0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE:
                owner[row, col] = region_id

    horizontal = np.ones(TABLE_SHAPE, dtype=bool)
    vertical = np.ones(TABLE_SHAPE, dtype=bool)

    for line in range(1, GRID_SIZE):
        for index in range(GRID_SIZE):
            above, below = owner[line - 1, index], owner[line, index]
            horizontal[line, index] = above < 0 or above != below

            left, right = owner[index, line - 1], owner[index, line]
            vertical[line, index] = left < 0 or left != right

    return BoundaryMap(horizontal, vertical)
