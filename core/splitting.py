"""Image splitting into puzzle pieces."""

import random
import numpy as np
from typing import Dict, List, Optional, Tuple


def split_image(image_data, rows, cols=None):
    """
    Split image into rows x cols patches.

    Args:
        image_data: Input image as numpy array
        rows: Number of horizontal divisions
        cols: Number of vertical divisions (defaults to rows)

    Returns:
        List of image patches in row-major order
    """
    if image_data is None:
        return []
    if cols is None:
        cols = rows

    height, width = image_data.shape[:2]
    patch_H = height // rows
    patch_W = width // cols

    sections = []
    for i in range(rows):
        for j in range(cols):
            y_start = i * patch_H
            y_end = (i + 1) * patch_H
            x_start = j * patch_W
            x_end = (j + 1) * patch_W

            section = image_data[y_start:y_end, x_start:x_end].copy()
            sections.append(section)

    return sections


def scramble_image(image_data: np.ndarray, rows: int, cols: int,
                   rng: Optional[random.Random] = None) -> Tuple[Dict[str, np.ndarray], List[List[str]]]:
    """
    Cut an image into shuffled pieces with opaque ids.

    Returns:
        pieces: dict of piece_id -> patch, ids assigned in shuffled order
        solution: rows x cols grid of piece ids in their original positions
    """
    if rng is None:
        rng = random
    patches = split_image(image_data, rows, cols)
    order = list(range(len(patches)))
    rng.shuffle(order)

    pieces = {}
    solution_flat = [None] * len(patches)
    for new_id, original_pos in enumerate(order):
        piece_id = f"piece_{new_id:03d}"
        pieces[piece_id] = patches[original_pos]
        solution_flat[original_pos] = piece_id

    solution = [solution_flat[r * cols:(r + 1) * cols] for r in range(rows)]
    return pieces, solution
