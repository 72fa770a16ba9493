"""
Jigsaw Sudoku Solver

This package contains modules for:
- Boundary classification from measured line ink density
- Region reconstruction and region lookup
- Rule validation of entered or solved grids
- Backtracking search over arbitrary region layouts
"""

__version__ = "1.0.0"

from .pipeline import JigsawSudokuPipeline, PuzzleReport, PuzzleState

__all__ = ["JigsawSudokuPipeline", "PuzzleReport", "PuzzleState", "__version__"]
