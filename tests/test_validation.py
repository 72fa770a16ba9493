"""
Tests for rule validation and progress comparison.
"""

import copy

import pytest

from jigsaw_solver.models.region_index import RegionIndex
from jigsaw_solver.utils.error_handling import GridShapeError
from jigsaw_solver.utils.validation import (
    CLUE_CHANGED_MESSAGE,
    CompareOutcome,
    compare,
    is_complete,
    normalize_grid,
    validate,
    validate_grid_values,
)


@pytest.fixture
def duplicate_row_grid():
    """Two 5s in row 0, in different columns and boxes."""
    grid = [[None] * 9 for _ in range(9)]
    grid[0][0] = 5
    grid[0][8] = 5
    return grid


class TestValidate:
    def test_valid_partial_grid(self, classic_puzzle):
        result = validate(classic_puzzle, classic_puzzle)

        assert result.is_valid
        assert result.violations == []

    def test_valid_solution(self, classic_puzzle, classic_solution):
        assert validate(classic_puzzle, classic_solution).is_valid

    def test_duplicate_in_row_flags_both_cells(self, duplicate_row_grid):
        result = validate(duplicate_row_grid, duplicate_row_grid)

        assert not result.is_valid
        assert result.positions() == [(0, 0), (0, 8)]
        assert all(v.message == "Digit 5 is repeated in row 1" for v in result.violations)

    def test_duplicate_in_column(self):
        grid = [[None] * 9 for _ in range(9)]
        grid[1][4] = 3
        grid[7][4] = 3

        result = validate(grid, grid)

        assert result.positions() == [(1, 4), (7, 4)]
        assert result.violations[0].message == "Digit 3 is repeated in column 5"

    def test_duplicate_in_region_only(self):
        grid = [[None] * 9 for _ in range(9)]
        grid[0][0] = 7
        grid[2][2] = 7

        result = validate(grid, grid)

        assert result.positions() == [(0, 0), (2, 2)]
        assert result.violations[0].message == "Digit 7 is repeated in region 1"

    def test_one_violation_per_unit(self):
        grid = [[None] * 9 for _ in range(9)]
        grid[0][0] = 1
        grid[0][1] = 1
        grid[0][2] = 1

        result = validate(grid, grid)
        first_cell = [v for v in result.violations if (v.row, v.col) == (0, 0)]

        # Row and region, each reported once despite two duplicates
        assert len(first_cell) == 2

    def test_jigsaw_regions_used(self, jigsaw_regions):
        grid = [[None] * 9 for _ in range(9)]
        grid[0][7] = 9
        grid[1][5] = 9

        assert validate(grid, grid).is_valid

        result = validate(grid, grid, RegionIndex(jigsaw_regions))
        assert result.positions() == [(0, 7), (1, 5)]
        assert result.violations[0].message == "Digit 9 is repeated in region 3"

    def test_changed_clue_reported_once(self, classic_puzzle, classic_solution):
        edited = copy.deepcopy(classic_solution)
        edited[0][0] = 1

        result = validate(classic_puzzle, edited)
        clue_violations = [v for v in result.violations if (v.row, v.col) == (0, 0)]

        assert len(clue_violations) == 1
        assert clue_violations[0].message == CLUE_CHANGED_MESSAGE

    def test_erased_clue_reported(self, classic_puzzle):
        edited = copy.deepcopy(classic_puzzle)
        edited[0][1] = None

        result = validate(classic_puzzle, edited)

        assert result.violations[0].row == 0
        assert result.violations[0].col == 1
        assert result.violations[0].message == CLUE_CHANGED_MESSAGE

    def test_user_entry_conflicting_with_clue(self, classic_puzzle):
        edited = copy.deepcopy(classic_puzzle)
        edited[0][2] = 5

        result = validate(classic_puzzle, edited)

        assert (0, 2) in result.positions()
        assert (0, 0) in result.positions()

    def test_violations_in_row_major_order(self):
        grid = [[None] * 9 for _ in range(9)]
        grid[8][0] = 4
        grid[8][8] = 4
        grid[0][3] = 2
        grid[0][5] = 2

        result = validate(grid, grid)

        assert result.positions() == sorted(result.positions())

    def test_idempotent(self, duplicate_row_grid):
        first = validate(duplicate_row_grid, duplicate_row_grid)
        second = validate(duplicate_row_grid, duplicate_row_grid)

        assert first == second

    def test_does_not_modify_input(self, classic_puzzle):
        before = copy.deepcopy(classic_puzzle)
        validate(classic_puzzle, classic_puzzle)

        assert classic_puzzle == before

    def test_to_dict(self, duplicate_row_grid):
        data = validate(duplicate_row_grid, duplicate_row_grid).to_dict()

        assert data["is_valid"] is False
        assert data["errors"][0] == {"row": 0, "col": 0, "message": "Digit 5 is repeated in row 1"}


class TestCompare:
    def test_correct(self, classic_puzzle, classic_solution):
        assert compare(classic_puzzle, classic_solution) is CompareOutcome.CORRECT

    def test_incomplete(self, classic_puzzle):
        assert compare(classic_puzzle, classic_puzzle) is CompareOutcome.INCOMPLETE

    def test_incorrect_full_grid(self, classic_puzzle, classic_solution):
        wrong = copy.deepcopy(classic_solution)
        # Swap two non-clue cells in row 0
        wrong[0][2], wrong[0][3] = wrong[0][3], wrong[0][2]

        assert compare(classic_puzzle, wrong) is CompareOutcome.INCORRECT

    def test_altered_clue_beats_empty_cells(self, classic_puzzle):
        edited = copy.deepcopy(classic_puzzle)
        edited[0][0] = 9

        assert compare(classic_puzzle, edited) is CompareOutcome.INCORRECT

    def test_erased_clue_is_incomplete(self, classic_puzzle, classic_solution):
        edited = copy.deepcopy(classic_solution)
        edited[0][0] = None

        assert compare(classic_puzzle, edited) is CompareOutcome.INCOMPLETE

    def test_altered_clue_beats_erased_clue(self, classic_puzzle, classic_solution):
        edited = copy.deepcopy(classic_solution)
        edited[0][0] = None
        edited[0][1] = 4

        assert compare(classic_puzzle, edited) is CompareOutcome.INCORRECT

    def test_uses_region_index(self, jigsaw_puzzle, jigsaw_regions, classic_solution):
        index = RegionIndex(jigsaw_regions)

        assert compare(jigsaw_puzzle, classic_solution, index) is CompareOutcome.CORRECT


class TestGridShape:
    @pytest.mark.parametrize("grid", [
        [],
        [[None] * 9] * 8,
        [[None] * 8] * 9,
        "not a grid",
    ])
    def test_bad_dimensions(self, grid):
        with pytest.raises(GridShapeError):
            validate_grid_values(grid)

    @pytest.mark.parametrize("value", [10, -1, 2.5, "5", True])
    def test_bad_values(self, value):
        grid = [[None] * 9 for _ in range(9)]
        grid[3][3] = value

        with pytest.raises(GridShapeError):
            validate(grid, grid)

    def test_shape_error_is_value_error(self):
        with pytest.raises(ValueError):
            compare([[0] * 9] * 9, [[0] * 3])

    def test_zero_and_none_are_equivalent(self, classic_puzzle):
        zeros = [[value or 0 for value in row] for row in classic_puzzle]

        assert normalize_grid(zeros) == classic_puzzle
        assert validate(classic_puzzle, zeros).is_valid

    def test_is_complete(self, classic_puzzle, classic_solution):
        assert is_complete(classic_solution)
        assert not is_complete(classic_puzzle)
