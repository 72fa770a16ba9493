"""
Visualization Utilities.

This module renders a grid with its region boundaries, clue digits and
solved digits.
"""

import os
import cv2
import numpy as np
import matplotlib.pyplot as plt
from typing import Optional

from ..config.settings import get_settings
from ..models import GRID_SIZE, GridType, RegionsType
from ..models.region_reconstructor import boundary_map_from_regions

# Define types
ImageType = np.ndarray

CLUE_COLOR = (0, 0, 0)  # Black
SOLVED_COLOR = (0, 128, 0)  # Green
LINE_COLOR = (0, 0, 0)


def visualize_regions(
    grid: GridType,
    regions: RegionsType,
    solved_grid: Optional[GridType] = None,
    save_path: Optional[str] = None,
    show: bool = False,
    cell_size: Optional[int] = None
) -> ImageType:
    """
    Visualize a puzzle with its region layout.

    Segments between cells of different regions are drawn thick, so malformed
    reconstructions can be inspected the same way as valid ones.

    Args:
        grid: Clue digits (None or 0 for empty)
        regions: Region layout, valid or not
        solved_grid: Solved digits drawn in green where the clue is empty (optional)
        save_path: Path to save visualization (optional)
        show: Whether to show visualization
        cell_size: Size of each cell in pixels, from settings when omitted

    Returns:
        Visualization image (BGR)
    """
    settings = get_settings().get_nested("visualization")
    cell_size = cell_size or settings.get("cell_size", 50)
    thin_width = settings.get("thin_line_width", 1)
    thick_width = settings.get("thick_line_width", 3)

    side = GRID_SIZE * cell_size
    grid_image = np.ones((side + thick_width, side + thick_width, 3), dtype=np.uint8) * 255
    offset = thick_width // 2

    # Draw digits
    font = cv2.FONT_HERSHEY_SIMPLEX
    font_scale = cell_size / 50.0
    font_thickness = max(1, int(cell_size / 25))

    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            digit = grid[i][j]
            color = CLUE_COLOR

            if not digit and solved_grid is not None:
                digit = solved_grid[i][j]
                color = SOLVED_COLOR

            if not digit:
                continue

            text = str(digit)
            text_size = cv2.getTextSize(text, font, font_scale, font_thickness)[0]
            text_x = offset + j * cell_size + (cell_size - text_size[0]) // 2
            text_y = offset + i * cell_size + (cell_size + text_size[1]) // 2

            cv2.putText(grid_image, text, (text_x, text_y), font, font_scale, color, font_thickness)

    # Draw segments, thick where the region changes
    boundary_map = boundary_map_from_regions(regions)

    for line in range(GRID_SIZE + 1):
        for index in range(GRID_SIZE):
            # Horizontal segment above row `line`, spanning column `index`
            width = thick_width if boundary_map.horizontal[line, index] else thin_width
            y = offset + line * cell_size
            cv2.line(
                grid_image,
                (offset + index * cell_size, y), (offset + (index + 1) * cell_size, y),
                LINE_COLOR, width
            )

            # Vertical segment left of column `line`, spanning row `index`
            width = thick_width if boundary_map.vertical[line, index] else thin_width
            x = offset + line * cell_size
            cv2.line(
                grid_image,
                (x, offset + index * cell_size), (x, offset + (index + 1) * cell_size),
                LINE_COLOR, width
            )

    # Save visualization if requested
    if save_path:
        directory = os.path.dirname(save_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        cv2.imwrite(save_path, grid_image)

    # Show visualization if requested
    if show:
        plt.figure(figsize=(8, 8))
        plt.imshow(cv2.cvtColor(grid_image, cv2.COLOR_BGR2RGB))
        plt.title("Solution" if solved_grid is not None else "Puzzle Regions")
        plt.axis('off')
        plt.tight_layout()
        plt.show()

    return grid_image
