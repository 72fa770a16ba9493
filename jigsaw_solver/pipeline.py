"""
Jigsaw Sudoku Pipeline Module.

This module implements the pipeline that chains boundary classification,
region reconstruction, rule validation and solving, and reports the puzzle's
lifecycle state as an explicit value.
"""

import os
import numbers
import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config.settings import get_settings, initialize_settings
from .models import GRID_SIZE, GridType, RegionsType
from .models.boundary_classifier import ThresholdBoundaryClassifier
from .models.region_index import RegionIndex, canonical_box_regions, normalize_regions
from .models.region_reconstructor import BfsRegionReconstructor, ReconstructionResult
from .models.solver import BacktrackingSolver, SolveResult
from .utils.error_handling import (
    GridShapeError, MalformedRegionsError, PipelineError, RuleViolationError,
    log_error, safe_execute
)
from .utils.validation import (
    CompareOutcome, ValidationResult, compare, normalize_grid, validate
)

# Configure logging
logger = logging.getLogger(__name__)


class PuzzleState(str, Enum):
    """Lifecycle state of a puzzle passed through the pipeline."""

    UNVALIDATED = "unvalidated"
    MALFORMED_REGIONS = "malformed-regions"
    RULE_VIOLATION = "rule-violation"
    UNSOLVED = "unsolved"
    SOLVED = "solved"


class RegionSource(str, Enum):
    """Where the regions of a puzzle came from."""

    SUPPLIED = "supplied"
    RECONSTRUCTED = "reconstructed"
    CANONICAL = "canonical"


@dataclass
class PuzzleReport:
    """Everything the pipeline learned about one puzzle."""

    state: PuzzleState = PuzzleState.UNVALIDATED
    digit_grid: Optional[GridType] = None
    regions: Optional[RegionsType] = None
    region_source: Optional[RegionSource] = None
    region_issues: List[str] = field(default_factory=list)
    initial_validation: Optional[ValidationResult] = None
    solve_result: Optional[SolveResult] = None
    final_validation: Optional[ValidationResult] = None
    processing_time: float = 0.0

    @property
    def solved_grid(self) -> Optional[GridType]:
        if self.solve_result is None:
            return None
        return self.solve_result.grid

    @property
    def success(self) -> bool:
        return self.state is PuzzleState.SOLVED

    def raise_for_state(self) -> None:
        """
        Raise the error matching a failed state, for callers that prefer exceptions.

        Raises:
            MalformedRegionsError: If the regions are not a partition
            RuleViolationError: If the given digits break the rules
            BudgetExceededError: If the solver hit its step budget
            UnsatisfiableError: If no solution exists
            PipelineError: If the puzzle was never processed
        """
        if self.state is PuzzleState.UNVALIDATED:
            raise PipelineError("Puzzle has not been processed")

        if self.state is PuzzleState.MALFORMED_REGIONS:
            raise MalformedRegionsError(
                f"Regions do not partition the grid: {'; '.join(self.region_issues)}",
                issues=self.region_issues,
                regions=self.regions
            )

        if self.state is PuzzleState.RULE_VIOLATION:
            validation = self.final_validation or self.initial_validation
            raise RuleViolationError(
                f"Grid breaks the rules at {validation.positions()}",
                validation.to_dict()
            )

        if self.state is PuzzleState.UNSOLVED:
            self.solve_result.raise_for_status()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "success": self.success,
            "digit_grid": self.digit_grid,
            "regions": [[list(pos) for pos in region] for region in self.regions or []],
            "region_source": self.region_source.value if self.region_source else None,
            "region_issues": list(self.region_issues),
            "initial_validation": self.initial_validation.to_dict() if self.initial_validation else None,
            "solve_result": self.solve_result.to_dict() if self.solve_result else None,
            "final_validation": self.final_validation.to_dict() if self.final_validation else None,
            "processing_time": self.processing_time,
        }


def _split_boundary_counts(boundary_counts: Any) -> Tuple[Any, Any]:
    """Accept ``{"horizontal": ..., "vertical": ...}`` or a (horizontal, vertical) pair."""
    if isinstance(boundary_counts, Mapping):
        try:
            return boundary_counts["horizontal"], boundary_counts["vertical"]
        except KeyError as e:
            raise PipelineError(f"Boundary counts are missing the {e} table")
    horizontal, vertical = boundary_counts
    return horizontal, vertical


class JigsawSudokuPipeline:
    """
    Main pipeline for jigsaw Sudoku solving.

    Drives a puzzle from ``unvalidated`` to one of ``malformed-regions``,
    ``rule-violation``, ``unsolved`` or ``solved``. None of those outcomes
    raise; only broken input shapes do.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the pipeline.

        Args:
            config_path: Path to configuration file (optional)
        """
        self.settings = initialize_settings(config_path) if config_path else get_settings()

        # Pipeline settings
        self.pipeline_settings = self.settings.get_nested("pipeline")
        self.validate_initial_grid = self.pipeline_settings.get("validate_initial_grid", True)
        self.validate_solution = self.pipeline_settings.get("validate_solution", True)
        self.save_intermediates = self.pipeline_settings.get("save_intermediates", False)
        self.output_dir = self.pipeline_settings.get("output_dir", "output")

        # Initialize components
        self.boundary_classifier = ThresholdBoundaryClassifier()
        self.region_reconstructor = BfsRegionReconstructor()
        self.solver = BacktrackingSolver()

        # States and results
        self.current_state: Dict[str, Any] = {
            "digit_grid": None,
            "confidence_grid": None,
            "boundary_map": None,
            "regions": None,
            "region_index": None,
            "solved_grid": None,
        }

    def process(
        self,
        digit_grid: GridType,
        confidence_grid: Optional[List[List[float]]] = None,
        regions: Optional[RegionsType] = None,
        boundary_counts: Any = None,
        max_steps: Optional[int] = None
    ) -> PuzzleReport:
        """
        Run a puzzle through region resolution, validation and solving.

        Args:
            digit_grid: Recognized or entered digits (None or 0 for empty)
            confidence_grid: Per-cell recognition confidence in [0, 1] (optional)
            regions: Pre-supplied region partition (optional)
            boundary_counts: Ink counts to reconstruct regions from (optional)
            max_steps: Solver step budget for this puzzle (optional)

        Returns:
            PuzzleReport with the final lifecycle state

        Raises:
            GridShapeError: If the digit or confidence grid has a broken shape
            BoundaryShapeError: If the boundary count tables have a broken shape
        """
        start_time = time.time()

        self._verify_digit_grid(digit_grid, confidence_grid)
        grid = normalize_grid(digit_grid)

        self._reset_state()
        self.current_state["digit_grid"] = grid
        self.current_state["confidence_grid"] = confidence_grid

        report = PuzzleReport(digit_grid=grid)

        # Stage 1: regions
        reconstruction, source = self.resolve_regions(regions, boundary_counts)
        report.regions = reconstruction.regions
        report.region_source = source
        self.current_state["regions"] = reconstruction.regions

        try:
            region_index = RegionIndex(reconstruction.regions)
        except MalformedRegionsError as e:
            log_error(e, level=logging.WARNING, context={"stage": "regions", "source": source.value})
            report.region_issues = list(e.issues)
            report.state = PuzzleState.MALFORMED_REGIONS
            return self._finish(report, start_time)

        self.current_state["region_index"] = region_index

        # Stage 2: givens must follow the rules before any search
        if self.validate_initial_grid:
            report.initial_validation = validate(grid, grid, region_index)
            if not report.initial_validation.is_valid:
                logger.warning(
                    f"Initial grid breaks the rules at {report.initial_validation.positions()}"
                )
                report.state = PuzzleState.RULE_VIOLATION
                return self._finish(report, start_time)

        # Stage 3: search
        report.solve_result = self.solver.solve(grid, region_index, max_steps=max_steps)
        if not report.solve_result.solved:
            report.state = PuzzleState.UNSOLVED
            return self._finish(report, start_time)

        self.current_state["solved_grid"] = report.solve_result.grid

        # Stage 4: double-check the solution against the clues and rules
        if self.validate_solution:
            report.final_validation = validate(grid, report.solve_result.grid, region_index)
            if not report.final_validation.is_valid:
                logger.error(
                    f"Solver returned a grid with {len(report.final_validation.violations)} violations"
                )
                report.state = PuzzleState.RULE_VIOLATION
                return self._finish(report, start_time)

        report.state = PuzzleState.SOLVED
        return self._finish(report, start_time)

    def resolve_regions(
        self,
        regions: Optional[RegionsType] = None,
        boundary_counts: Any = None
    ) -> Tuple[ReconstructionResult, RegionSource]:
        """
        Pick the regions of a puzzle.

        Supplied regions win over boundary counts; with neither, the canonical
        3x3 boxes are used.

        Args:
            regions: Pre-supplied region partition (optional)
            boundary_counts: Ink counts to reconstruct regions from (optional)

        Returns:
            Tuple of (reconstruction result, region source)
        """
        if regions is not None:
            normalized = safe_execute(
                normalize_regions, regions,
                error_type=PipelineError, error_msg="Supplied regions are not lists of (row, col) pairs"
            )
            return ReconstructionResult(regions=normalized), RegionSource.SUPPLIED

        if boundary_counts is not None:
            horizontal, vertical = _split_boundary_counts(boundary_counts)
            boundary_map = self.boundary_classifier.classify(horizontal, vertical)
            self.current_state["boundary_map"] = boundary_map
            return self.region_reconstructor.reconstruct(boundary_map), RegionSource.RECONSTRUCTED

        logger.info("No region structure supplied, using canonical 3x3 boxes")
        return ReconstructionResult(regions=canonical_box_regions()), RegionSource.CANONICAL

    def validate_edit(self, current_grid: GridType) -> ValidationResult:
        """
        Validate an edited grid against the clues of the last processed puzzle.

        Args:
            current_grid: Grid as edited by the user

        Returns:
            ValidationResult with any violations

        Raises:
            PipelineError: If no puzzle with valid regions has been processed
        """
        original, region_index = self._require_puzzle()
        return validate(original, current_grid, region_index)

    def check_progress(self, current_grid: GridType) -> CompareOutcome:
        """
        Classify an edited grid as correct, incorrect or incomplete.

        Args:
            current_grid: Grid as edited by the user

        Returns:
            CompareOutcome for progress display

        Raises:
            PipelineError: If no puzzle with valid regions has been processed
        """
        original, region_index = self._require_puzzle()
        return compare(original, current_grid, region_index)

    def _require_puzzle(self) -> Tuple[GridType, RegionIndex]:
        original = self.current_state["digit_grid"]
        region_index = self.current_state["region_index"]

        if original is None or region_index is None:
            raise PipelineError("No puzzle with valid regions has been processed")

        return original, region_index

    def _reset_state(self) -> None:
        for key in self.current_state:
            self.current_state[key] = None

    def _verify_digit_grid(
        self,
        digit_grid: GridType,
        confidence_grid: Optional[List[List[float]]]
    ) -> None:
        """
        Verify the recognized digit grid and its confidence scores.

        Args:
            digit_grid: Grid of recognized digits
            confidence_grid: Grid of confidence scores (optional)

        Raises:
            GridShapeError: If verification fails
        """
        normalize_grid(digit_grid)

        if confidence_grid is None:
            return

        if len(confidence_grid) != GRID_SIZE or any(len(row) != GRID_SIZE for row in confidence_grid):
            raise GridShapeError(
                f"Invalid confidence grid dimensions: {len(confidence_grid)}x"
                f"{len(confidence_grid[0]) if len(confidence_grid) else 0}"
            )

        for i in range(GRID_SIZE):
            for j in range(GRID_SIZE):
                confidence = confidence_grid[i][j]
                if isinstance(confidence, bool) or not isinstance(confidence, numbers.Real):
                    raise GridShapeError(f"Non-numeric confidence at position ({i}, {j}): {confidence!r}")
                if not (0.0 <= confidence <= 1.0):
                    raise GridShapeError(f"Invalid confidence at position ({i}, {j}): {confidence}")

    def _finish(self, report: PuzzleReport, start_time: float) -> PuzzleReport:
        report.processing_time = time.time() - start_time
        logger.info(f"Puzzle finished in state '{report.state.value}' ({report.processing_time:.3f}s)")

        if self.save_intermediates:
            self._save_report(report)

        return report

    def _save_report(self, report: PuzzleReport) -> None:
        """Write the report as JSON into the output directory."""
        os.makedirs(self.output_dir, exist_ok=True)
        report_path = os.path.join(self.output_dir, "report.json")

        with open(report_path, "w") as f:
            json.dump(report.to_dict(), f, indent=2)

        logger.debug(f"Report saved to {report_path}")
