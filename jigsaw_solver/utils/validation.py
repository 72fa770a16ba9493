# utils/validation.py
"""
Validation functions for jigsaw Sudoku grids.

Grid shape checks raise, because a malformed grid is a programming error.
Rule checks never raise: they report violations as values so the caller can
let the user fix the grid and try again.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models import GRID_SIZE, GridType
from ..models.region_index import RegionIndex
from .error_handling import GridShapeError

# Configure logging
logger = logging.getLogger(__name__)

CLUE_CHANGED_MESSAGE = "Value was changed from its given clue"


@dataclass(frozen=True)
class Violation:
    """One rule violation tied to the offending cell."""

    row: int
    col: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row, "col": self.col, "message": self.message}


@dataclass
class ValidationResult:
    """Outcome of a rule check: validity flag and ordered violations."""

    violations: List[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def positions(self) -> List[tuple]:
        """Distinct offending positions in report order."""
        seen = []
        for violation in self.violations:
            if (violation.row, violation.col) not in seen:
                seen.append((violation.row, violation.col))
        return seen

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [violation.to_dict() for violation in self.violations],
        }


class CompareOutcome(str, Enum):
    """Progress classification of a solved or edited grid."""

    CORRECT = "correct"
    INCORRECT = "incorrect"
    INCOMPLETE = "incomplete"


def validate_grid_values(grid: Any) -> None:
    """
    Validate that the grid is 9x9 and holds only empty cells or digits 1-9.

    Empty cells may be given as ``None`` or ``0``.

    Args:
        grid: 9x9 grid representing the Sudoku puzzle.

    Raises:
        GridShapeError: If the grid has invalid dimensions or contains invalid values.
    """
    if not isinstance(grid, (list, tuple)) or len(grid) != GRID_SIZE or not all(
        isinstance(row, (list, tuple)) and len(row) == GRID_SIZE for row in grid
    ):
        raise GridShapeError("Invalid grid dimensions. Must be a 9x9 list of lists.")

    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            val = grid[r][c]
            if val is None:
                continue
            # bool is an int subclass but never a digit
            if isinstance(val, bool) or not isinstance(val, int) or not (0 <= val <= 9):
                raise GridShapeError(
                    f"Invalid value '{val}' at grid position ({r}, {c}). Must be None or integer 0-9."
                )


def normalize_grid(grid: Any) -> GridType:
    """
    Check a grid and return a fresh copy with empty cells as ``None``.

    Args:
        grid: 9x9 grid using ``None`` or ``0`` for empty cells

    Returns:
        New 9x9 grid of ``Optional[int]``

    Raises:
        GridShapeError: If the grid breaks the shape contract
    """
    validate_grid_values(grid)
    return [[int(val) if val else None for val in row] for row in grid]


def is_complete(grid: GridType) -> bool:
    """Check that no cell of the grid is empty."""
    return all(val for row in grid for val in row)


def _unit_conflicts(
    grid: GridType,
    row: int,
    col: int,
    value: int,
    region_index: RegionIndex
) -> List[Violation]:
    """
    Find duplicates of ``value`` in the row, column and region of a cell.

    At most one violation is reported per unit.
    """
    violations: List[Violation] = []

    # Check row
    if any(grid[row][i] == value for i in range(GRID_SIZE) if i != col):
        violations.append(Violation(row, col, f"Digit {value} is repeated in row {row + 1}"))

    # Check column
    if any(grid[i][col] == value for i in range(GRID_SIZE) if i != row):
        violations.append(Violation(row, col, f"Digit {value} is repeated in column {col + 1}"))

    # Check region
    region_id = region_index.region_of(row, col)
    if any(grid[r][c] == value for r, c in region_index.cells(region_id) if (r, c) != (row, col)):
        violations.append(Violation(row, col, f"Digit {value} is repeated in region {region_id + 1}"))

    return violations


def validate(
    original: GridType,
    candidate: GridType,
    region_index: Optional[RegionIndex] = None
) -> ValidationResult:
    """
    Check a candidate grid against the clues of the original and the Sudoku rules.

    A clue whose value was changed is reported once and not checked further.
    Every other filled cell is checked for duplicates in its row, column and
    region.

    Args:
        original: Grid holding the given clues
        candidate: Grid to check (partial or complete)
        region_index: Region lookup, canonical 3x3 boxes when omitted

    Returns:
        ValidationResult listing violations in row-major cell order

    Raises:
        GridShapeError: If either grid breaks the shape contract
    """
    original = normalize_grid(original)
    candidate = normalize_grid(candidate)
    region_index = region_index or RegionIndex.standard()

    violations: List[Violation] = []

    for row in range(GRID_SIZE):
        for col in range(GRID_SIZE):
            original_value = original[row][col]
            current_value = candidate[row][col]

            # Clues are never editable
            if original_value is not None and current_value != original_value:
                violations.append(Violation(row, col, CLUE_CHANGED_MESSAGE))
                continue

            if current_value is not None:
                violations.extend(_unit_conflicts(candidate, row, col, current_value, region_index))

    if violations:
        logger.debug(f"Validation found {len(violations)} violations")

    return ValidationResult(violations)


def compare(
    original: GridType,
    solved: GridType,
    region_index: Optional[RegionIndex] = None
) -> CompareOutcome:
    """
    Classify a solved or edited grid for progress display.

    A filled clue cell holding a different digit makes the grid incorrect
    regardless of empty cells. Any empty cell, an erased clue included, makes it
    incomplete. A full grid is correct only if it passes ``validate``.

    Args:
        original: Grid holding the given clues
        solved: Grid to classify
        region_index: Region lookup, canonical 3x3 boxes when omitted

    Returns:
        CompareOutcome
    """
    original = normalize_grid(original)
    solved = normalize_grid(solved)

    has_empty = False
    has_error = False

    for row in range(GRID_SIZE):
        for col in range(GRID_SIZE):
            original_value = original[row][col]
            solved_value = solved[row][col]

            if solved_value is None:
                has_empty = True
            elif original_value is not None and original_value != solved_value:
                has_error = True

    if has_error:
        return CompareOutcome.INCORRECT
    if has_empty:
        return CompareOutcome.INCOMPLETE

    result = validate(original, solved, region_index)
    return CompareOutcome.CORRECT if result.is_valid else CompareOutcome.INCORRECT
