"""
Sudoku Solver Module.

This module implements depth-first backtracking over an arbitrary region
layout, bounded by a step budget so corrupted input cannot run forever.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from . import DIGITS, GRID_SIZE, GridType, PositionType, SolverBase
from .region_index import RegionIndex
from ..config.settings import get_settings
from ..utils.error_handling import BudgetExceededError, UnsatisfiableError
from ..utils.validation import normalize_grid

# Configure logging
logger = logging.getLogger(__name__)


class SolveStatus(str, Enum):
    """Outcome of a search."""

    SOLVED = "solved"
    BUDGET_EXCEEDED = "budget_exceeded"
    UNSATISFIABLE = "unsatisfiable"


@dataclass
class SolveResult:
    """Solved grid, or the reason there is none."""

    status: SolveStatus
    grid: Optional[GridType]
    steps: int
    max_steps: int
    duration_ms: int = 0
    message: str = ""

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.SOLVED

    def raise_for_status(self) -> None:
        """
        Raise the matching solver error unless the puzzle was solved.

        Raises:
            BudgetExceededError: If the search hit its step budget
            UnsatisfiableError: If the search space was exhausted
        """
        if self.status is SolveStatus.BUDGET_EXCEEDED:
            raise BudgetExceededError(self.message, steps=self.steps, max_steps=self.max_steps)
        if self.status is SolveStatus.UNSATISFIABLE:
            raise UnsatisfiableError(self.message, {"steps": self.steps})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "grid": self.grid,
            "steps": self.steps,
            "max_steps": self.max_steps,
            "duration_ms": self.duration_ms,
            "message": self.message,
        }


@dataclass
class _SearchState:
    """Private working copy of one solve call."""

    grid: GridType
    region_index: RegionIndex
    max_steps: int
    empty_cells: List[PositionType] = field(default_factory=list)
    rows: List[Set[int]] = field(default_factory=list)
    cols: List[Set[int]] = field(default_factory=list)
    regions: List[Set[int]] = field(default_factory=list)
    steps: int = 0


class BacktrackingSolver(SolverBase):
    """
    Backtracking-based Sudoku solver.

    Empty cells are filled in row-major order with digits tried in ascending
    order; the first complete grid found is returned. Uniqueness of that
    solution is not checked.
    """

    def __init__(self, max_steps: Optional[int] = None):
        """
        Initialize backtracking solver.

        Args:
            max_steps: Step budget, taken from settings when omitted
        """
        self.settings = get_settings().get_nested("solver")

        if max_steps is None:
            max_steps = self.settings.get("max_steps", 1000000)
        self.max_steps = int(max_steps)

    def solve(
        self,
        grid: GridType,
        region_index: RegionIndex,
        max_steps: Optional[int] = None
    ) -> SolveResult:
        """
        Solve a Sudoku puzzle using backtracking.

        The caller is expected to have validated the given digits; duplicate
        clues are not detected here.

        Args:
            grid: 9x9 grid with initial values (None or 0 for empty)
            region_index: Region lookup for the puzzle
            max_steps: Step budget for this call only

        Returns:
            SolveResult with status solved, budget_exceeded or unsatisfiable

        Raises:
            GridShapeError: If the grid is not a 9x9 grid of digits
        """
        budget = self.max_steps if max_steps is None else int(max_steps)
        state = self._prepare(grid, region_index, budget)

        start_time = time.time()
        try:
            solved = self._solve_backtracking(state, 0)
        except BudgetExceededError as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.warning(f"Solver gave up: {e.message}")
            return SolveResult(
                status=SolveStatus.BUDGET_EXCEEDED,
                grid=None,
                steps=e.steps,
                max_steps=budget,
                duration_ms=duration_ms,
                message=e.message
            )

        duration_ms = int((time.time() - start_time) * 1000)

        if not solved:
            logger.info(f"Puzzle has no solution (search exhausted after {state.steps} steps)")
            return SolveResult(
                status=SolveStatus.UNSATISFIABLE,
                grid=None,
                steps=state.steps,
                max_steps=budget,
                duration_ms=duration_ms,
                message="No solution exists for the given digits and regions"
            )

        logger.info(f"Puzzle solved in {state.steps} steps ({duration_ms} ms)")
        return SolveResult(
            status=SolveStatus.SOLVED,
            grid=state.grid,
            steps=state.steps,
            max_steps=budget,
            duration_ms=duration_ms,
            message=f"Solved in {state.steps} steps"
        )

    def _prepare(self, grid: GridType, region_index: RegionIndex, budget: int) -> _SearchState:
        """
        Copy the grid and record the digits already used per unit.

        Args:
            grid: Puzzle grid
            region_index: Region lookup
            budget: Step budget

        Returns:
            Fresh search state owned by a single solve call
        """
        state = _SearchState(
            grid=normalize_grid(grid),
            region_index=region_index,
            max_steps=budget,
            rows=[set() for _ in range(GRID_SIZE)],
            cols=[set() for _ in range(GRID_SIZE)],
            regions=[set() for _ in range(GRID_SIZE)],
        )

        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                digit = state.grid[row][col]
                if digit is None:
                    # Row-major, so position k is always the first empty cell at depth k
                    state.empty_cells.append((row, col))
                    continue
                state.rows[row].add(digit)
                state.cols[col].add(digit)
                state.regions[region_index.region_of(row, col)].add(digit)

        return state

    def _solve_backtracking(self, state: _SearchState, depth: int) -> bool:
        """
        Recursive backtracking solver.

        Args:
            state: Search state of the current call
            depth: Number of empty cells already filled

        Returns:
            True if puzzle was solved, False otherwise

        Raises:
            BudgetExceededError: If the step budget is used up
        """
        state.steps += 1
        if state.steps > state.max_steps:
            raise BudgetExceededError(
                f"Solver exceeded step budget of {state.max_steps}",
                steps=state.steps - 1,
                max_steps=state.max_steps
            )

        # No empty cell left, puzzle is solved
        if depth == len(state.empty_cells):
            return True

        row, col = state.empty_cells[depth]
        region_id = state.region_index.region_of(row, col)

        for digit in DIGITS:
            if not self._is_valid_move(state, row, col, region_id, digit):
                continue

            self._place(state, row, col, region_id, digit)
            if self._solve_backtracking(state, depth + 1):
                return True

            # Backtrack and try the next digit
            self._remove(state, row, col, region_id, digit)

        return False

    def _is_valid_move(self, state: _SearchState, row: int, col: int, region_id: int, digit: int) -> bool:
        return (
            digit not in state.rows[row]
            and digit not in state.cols[col]
            and digit not in state.regions[region_id]
        )

    def _place(self, state: _SearchState, row: int, col: int, region_id: int, digit: int) -> None:
        state.grid[row][col] = digit
        state.rows[row].add(digit)
        state.cols[col].add(digit)
        state.regions[region_id].add(digit)

    def _remove(self, state: _SearchState, row: int, col: int, region_id: int, digit: int) -> None:
        state.grid[row][col] = None
        state.rows[row].discard(digit)
        state.cols[col].discard(digit)
        state.regions[region_id].discard(digit)
