#!/usr/bin/env python3
"""
Jigsaw Sudoku Solver Command-line Tool.

This script loads a puzzle from a JSON document or a text grid, resolves its
regions, validates and solves it.
"""

import os
import sys
import json
import argparse
import logging
from typing import Any, Dict, List, Optional

from .config.settings import initialize_settings
from .models import GRID_SIZE, GridType
from .pipeline import JigsawSudokuPipeline, PuzzleReport, PuzzleState
from .utils.error_handling import JigsawSudokuError, PipelineError, setup_exception_handling

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Solve jigsaw Sudoku puzzles from JSON or text files')

    parser.add_argument(
        'input',
        type=str,
        help='Puzzle JSON document or text file with a Sudoku grid'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration file'
    )

    parser.add_argument(
        '--max-steps',
        type=int,
        default=None,
        help='Solver step budget (overrides configuration)'
    )

    parser.add_argument(
        '--output',
        type=str,
        default='output',
        help='Output directory for results'
    )

    parser.add_argument(
        '--text-output',
        action='store_true',
        help='Write the solution as a text file'
    )

    parser.add_argument(
        '--visualize',
        action='store_true',
        help='Render the regions and solution to an image'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write log records to this file'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug output'
    )

    return parser.parse_args(argv)


def parse_text_file(file_path: str) -> List[List[int]]:
    """Parse a text file containing a Sudoku grid."""
    grid = []

    with open(file_path, 'r') as f:
        lines = f.readlines()

    for line in lines:
        # Remove comments and whitespace
        line = line.split('#')[0].strip()
        if not line:
            continue

        row = []
        for char in line:
            if char.isdigit():
                row.append(int(char))
            elif char in '._':  # Common empty cell indicators
                row.append(0)

        # Skip incomplete rows
        if len(row) != GRID_SIZE:
            continue

        grid.append(row)

        if len(grid) == GRID_SIZE:
            break

    if len(grid) != GRID_SIZE:
        raise ValueError(f"Invalid grid: {len(grid)} rows, expected {GRID_SIZE}")

    return grid


def load_puzzle_file(file_path: str) -> Dict[str, Any]:
    """
    Load a puzzle document.

    JSON documents carry ``cells`` and optionally ``regions``,
    ``boundary_counts`` (``horizontal``/``vertical`` tables), ``confidence``
    and ``meta``. Any other file is read as a text grid.

    Args:
        file_path: Path to the puzzle

    Returns:
        Dict with the keys accepted by ``JigsawSudokuPipeline.process``

    Raises:
        PipelineError: If the document is not a 9x9 puzzle
    """
    if os.path.splitext(file_path)[1].lower() != '.json':
        return {"digit_grid": parse_text_file(file_path)}

    try:
        with open(file_path, 'r') as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise PipelineError(f"Puzzle file {file_path} is not valid JSON: {str(e)}")

    if not isinstance(document, dict) or "cells" not in document:
        raise PipelineError(f"Puzzle file {file_path} has no 'cells' grid")

    size = document.get("size", GRID_SIZE)
    if size != GRID_SIZE:
        raise PipelineError(f"Only {GRID_SIZE}x{GRID_SIZE} puzzles are supported, got size {size}")

    return {
        "digit_grid": document["cells"],
        "confidence_grid": document.get("confidence"),
        "regions": document.get("regions"),
        "boundary_counts": document.get("boundary_counts"),
    }


def format_grid(grid: GridType) -> str:
    """Format a grid as nine lines of digits, '.' for empty cells."""
    return "\n".join(
        " ".join(str(value) if value else "." for value in row)
        for row in grid
    )


def write_results(args: argparse.Namespace, report: PuzzleReport) -> None:
    """Save the report, the solution text and the rendering as requested."""
    os.makedirs(args.output, exist_ok=True)

    with open(os.path.join(args.output, "report.json"), "w") as f:
        json.dump(report.to_dict(), f, indent=2)

    if args.text_output and report.solved_grid is not None:
        with open(os.path.join(args.output, "solution.txt"), "w") as f:
            f.write(format_grid(report.solved_grid) + "\n")

    if args.visualize and report.regions:
        # OpenCV is only needed for rendering
        from .utils.visualization import visualize_regions

        visualize_regions(
            report.digit_grid,
            report.regions,
            solved_grid=report.solved_grid,
            save_path=os.path.join(args.output, "regions.png")
        )


def print_summary(report: PuzzleReport) -> None:
    print("\nInput Grid:")
    print(format_grid(report.digit_grid))
    print(f"\nRegions: {report.region_source.value if report.region_source else 'none'}")
    print(f"State: {report.state.value}")

    if report.state is PuzzleState.MALFORMED_REGIONS:
        for issue in report.region_issues:
            print(f"  - {issue}")

    if report.state is PuzzleState.RULE_VIOLATION:
        validation = report.final_validation or report.initial_validation
        for violation in validation.violations:
            print(f"  - ({violation.row + 1}, {violation.col + 1}): {violation.message}")

    if report.solve_result is not None and not report.solve_result.solved:
        print(f"Solver: {report.solve_result.status.value} after {report.solve_result.steps} steps")

    if report.solved_grid is not None:
        print("\nSolution:")
        print(format_grid(report.solved_grid))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for solve script."""
    args = parse_args(argv)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if args.log_file:
        handlers.append(logging.FileHandler(args.log_file))

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    setup_exception_handling()

    try:
        initialize_settings(args.config)
        pipeline = JigsawSudokuPipeline()

        logger.info(f"Processing puzzle: {args.input}")
        puzzle = load_puzzle_file(args.input)
        report = pipeline.process(max_steps=args.max_steps, **puzzle)

        write_results(args, report)
        print_summary(report)

    except (JigsawSudokuError, ValueError, OSError) as e:
        logger.error(f"Error: {str(e)}")
        return 1

    logger.info(f"Results saved to: {args.output}")
    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(main())
