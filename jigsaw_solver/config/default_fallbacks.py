"""
Default configuration and fallback values for the jigsaw Sudoku solver.

This module provides defaults for all system components. Values loaded from a
configuration file are merged over these.
"""

# Default configuration with fallback values for all components
DEFAULT_CONFIG = {
    # General system settings
    "system": {
        "debug_mode": False,
        "log_level": "INFO",
    },

    # Boundary classifier settings
    "boundary_classifier": {
        "threshold_factor": 1.5,  # Thick iff ink count > factor * median
        "force_outer_border": True,  # Puzzle edge is always a region edge
    },

    # Sudoku solver settings
    "solver": {
        "max_steps": 1000000,  # Recursive invocations before giving up
    },

    # Pipeline settings
    "pipeline": {
        "validate_initial_grid": True,
        "validate_solution": True,
        "save_intermediates": False,
        "output_dir": "output",
    },

    # Rendering settings
    "visualization": {
        "cell_size": 50,
        "thin_line_width": 1,
        "thick_line_width": 3,
    },
}

# Critical thresholds that should never be violated
CRITICAL_THRESHOLDS = {
    "boundary_classifier.threshold_factor": 1.0,
    "solver.max_steps": 1,
    "visualization.cell_size": 20,
}
