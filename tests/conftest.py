"""
Shared fixtures for the jigsaw Sudoku solver tests.

Puzzles:
- The classic fixed-box puzzle and its solution
- A jigsaw layout derived from that solution by swapping equal digits
  between neighbouring boxes, so the same solution stays valid
"""

import numpy as np
import pytest

from jigsaw_solver.config.settings import initialize_settings


_ = None

CLASSIC_PUZZLE = [
    [5, 3, _, _, 7, _, _, _, _],
    [6, _, _, 1, 9, 5, _, _, _],
    [_, 9, 8, _, _, _, _, 6, _],
    [8, _, _, _, 6, _, _, _, 3],
    [4, _, _, 8, _, 3, _, _, 1],
    [7, _, _, _, 2, _, _, _, 6],
    [_, 6, _, _, _, _, 2, 8, _],
    [_, _, _, 4, 1, 9, _, _, 5],
    [_, _, _, _, 8, _, _, 7, 9],
]

CLASSIC_SOLUTION = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]


def _box(box_row, box_col):
    return {
        (r, c)
        for r in range(box_row * 3, box_row * 3 + 3)
        for c in range(box_col * 3, box_col * 3 + 3)
    }


def _jigsaw_regions():
    boxes = [_box(br, bc) for br in range(3) for bc in range(3)]
    # Each pair holds the same digit in CLASSIC_SOLUTION
    swaps = [
        (1, (1, 5), 2, (2, 6)),  # 5s
        (3, (3, 2), 4, (5, 3)),  # 9s
        (6, (8, 2), 7, (6, 3)),  # 5s
    ]
    for first, first_cell, second, second_cell in swaps:
        boxes[first].remove(first_cell)
        boxes[second].remove(second_cell)
        boxes[first].add(second_cell)
        boxes[second].add(first_cell)
    return [sorted(box) for box in boxes]


JIGSAW_REGIONS = _jigsaw_regions()


def ink_counts_for(regions, thick=40.0, thin=10.0):
    """Ink-count tables that draw the given layout, thick between regions."""
    owner = {}
    for region_id, region in enumerate(regions):
        for cell in region:
            owner[tuple(cell)] = region_id

    horizontal = np.full((10, 9), thick)
    vertical = np.full((10, 9), thick)
    for line in range(1, 9):
        for index in range(9):
            if owner[(line - 1, index)] == owner[(line, index)]:
                horizontal[line, index] = thin
            if owner[(index, line - 1)] == owner[(index, line)]:
                vertical[line, index] = thin
    return horizontal, vertical


@pytest.fixture(autouse=True)
def default_settings():
    """Every test starts from the default configuration."""
    return initialize_settings()


@pytest.fixture
def classic_puzzle():
    return [list(row) for row in CLASSIC_PUZZLE]


@pytest.fixture
def classic_solution():
    return [list(row) for row in CLASSIC_SOLUTION]


@pytest.fixture
def jigsaw_regions():
    return [list(region) for region in JIGSAW_REGIONS]


@pytest.fixture
def jigsaw_puzzle():
    """Known jigsaw solution with every third diagonal blanked out."""
    return [
        [None if (r + c) % 3 == 0 else CLASSIC_SOLUTION[r][c] for c in range(9)]
        for r in range(9)
    ]


@pytest.fixture
def standard_counts():
    from jigsaw_solver.models.region_index import canonical_box_regions
    return ink_counts_for(canonical_box_regions())


@pytest.fixture
def jigsaw_counts():
    return ink_counts_for(JIGSAW_REGIONS)


@pytest.fixture
def unsatisfiable_grid():
    """Row 0 needs 8 and 9 in its first two cells, but box 0 already has an 8."""
    grid = [[None] * 9 for _ in range(9)]
    grid[0] = [None, None, 1, 2, 3, 4, 5, 6, 7]
    grid[1][2] = 8
    return grid
