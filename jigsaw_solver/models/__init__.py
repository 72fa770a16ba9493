"""
Jigsaw Sudoku Core Models.

This module provides the shared types and abstract base classes for the
solver components.
"""

import abc
from typing import List, Optional, Tuple

import numpy as np

# Define common types
CellValue = Optional[int]  # Digit 1-9, None when empty
GridType = List[List[CellValue]]  # 9x9 grid
PositionType = Tuple[int, int]  # (row, col)
RegionType = List[PositionType]  # 9 positions
RegionsType = List[RegionType]  # 9 regions
CountTableType = np.ndarray  # 10x9 ink counts per boundary line

GRID_SIZE = 9
DIGITS = range(1, GRID_SIZE + 1)


class BoundaryClassifierBase(abc.ABC):
    """Abstract base class for boundary classifiers."""

    @abc.abstractmethod
    def classify(self, horizontal_counts: CountTableType, vertical_counts: CountTableType):
        """
        Classify every boundary segment as thick or thin.

        Args:
            horizontal_counts: 10x9 ink counts of the horizontal segments
            vertical_counts: 10x9 ink counts of the vertical segments

        Returns:
            BoundaryMap with a thick flag per segment
        """
        pass


class RegionReconstructorBase(abc.ABC):
    """Abstract base class for region reconstructors."""

    @abc.abstractmethod
    def reconstruct(self, boundary_map):
        """
        Recover the region partition from a boundary map.

        Args:
            boundary_map: Classified boundary segments

        Returns:
            ReconstructionResult carrying the regions found
        """
        pass


class SolverBase(abc.ABC):
    """Abstract base class for Sudoku solvers."""

    @abc.abstractmethod
    def solve(self, grid: GridType, region_index, max_steps: Optional[int] = None):
        """
        Solve a Sudoku puzzle.

        Args:
            grid: 9x9 grid with initial values (None for empty)
            region_index: Position to region lookup
            max_steps: Step budget overriding the configured one

        Returns:
            SolveResult describing the outcome
        """
        pass
