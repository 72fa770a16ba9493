"""
Centralized error handling and logging helpers.

This module provides the exception hierarchy of the jigsaw Sudoku solver and a
few helpers for logging and wrapping errors consistently.
"""

import sys
import traceback
import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

# Configure logging
logger = logging.getLogger(__name__)

# Type variable for function return types
T = TypeVar('T')


# Base exception class for all system errors
class JigsawSudokuError(Exception):
    """Base exception class for all jigsaw Sudoku solver errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details and context
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)


# Configuration errors
class ConfigError(JigsawSudokuError):
    """Error in system configuration."""
    pass


# Input contract errors
class GridShapeError(JigsawSudokuError, ValueError):
    """Grid is not 9x9 or holds values outside 0-9."""
    pass


class BoundaryShapeError(JigsawSudokuError, ValueError):
    """Boundary ink-count tables have the wrong shape or negative counts."""
    pass


# Region errors
class RegionError(JigsawSudokuError):
    """Base class for region partition errors."""
    pass


class MalformedRegionsError(RegionError):
    """Regions do not cover all 81 cells exactly once."""

    def __init__(
        self,
        message: str,
        issues: Optional[List[str]] = None,
        regions: Optional[List[List[Any]]] = None
    ):
        self.issues = list(issues or [])
        self.regions = regions
        super().__init__(message, {"issues": self.issues, "region_count": len(regions or [])})


# Solving errors
class SolverError(JigsawSudokuError):
    """Error solving a Sudoku puzzle."""
    pass


class RuleViolationError(SolverError):
    """The given grid breaks row, column or region uniqueness."""
    pass


class UnsatisfiableError(SolverError):
    """Search space exhausted without finding a complete assignment."""
    pass


class BudgetExceededError(SolverError):
    """Search aborted after reaching its step budget."""

    def __init__(self, message: str, steps: int = 0, max_steps: int = 0):
        self.steps = steps
        self.max_steps = max_steps
        super().__init__(message, {"steps": steps, "max_steps": max_steps})


# Pipeline errors
class PipelineError(JigsawSudokuError):
    """Error in the processing pipeline."""
    pass


def log_error(
    error: Exception,
    level: int = logging.ERROR,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log an error with context and traceback.

    Args:
        error: Exception to log
        level: Logging level
        context: Additional context information
    """
    ctx_str = f" [Context: {context}]" if context else ""

    if isinstance(error, JigsawSudokuError) and error.details:
        ctx_str += f" [Details: {error.details}]"

    error_type = type(error).__name__
    error_tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))

    logger.log(level, f"{error_type}: {str(error)}{ctx_str}\n{error_tb}")


def safe_execute(
    func: Callable[..., T],
    *args: Any,
    error_type: Type[JigsawSudokuError] = JigsawSudokuError,
    error_msg: str = "Function execution failed",
    **kwargs: Any
) -> T:
    """
    Execute a function safely, converting foreign exceptions to a specific error type.

    Args:
        func: Function to execute
        *args: Arguments to pass to function
        error_type: Type of error to raise on failure
        error_msg: Error message to use
        **kwargs: Keyword arguments to pass to function

    Returns:
        Function result

    Raises:
        The specified error_type with original exception details
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        if isinstance(e, JigsawSudokuError):
            # Our own errors already carry the right meaning
            raise

        details = {
            "original_error": str(e),
            "original_type": type(e).__name__,
            "function": getattr(func, "__name__", repr(func))
        }

        raise error_type(f"{error_msg}: {str(e)}", details) from e


def setup_exception_handling() -> None:
    """
    Set up global exception handling for unexpected errors.
    """
    def global_exception_handler(
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[Any]
    ) -> None:
        # Skip KeyboardInterrupt
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = global_exception_handler
