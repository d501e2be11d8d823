"""Loading and normalizing a directory of puzzle pieces."""

import numpy as np
from pathlib import Path
from typing import Dict, Tuple

from .image_utils import load_image_bgr, is_image_file, resize_piece


def load_pieces(directory, verbose: bool = False) -> Dict[str, np.ndarray]:
    """
    Load every image in `directory` as a piece keyed by file name.

    Pieces that are a single pixel wide or tall carry no usable edge and
    are skipped.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ValueError(f"Pieces directory not found: {directory}")

    pieces = {}
    for path in sorted(directory.iterdir()):
        if not path.is_file() or not is_image_file(path):
            continue
        img = load_image_bgr(path)
        h, w = img.shape[:2]
        if h == 1 or w == 1:
            if verbose:
                print(f"  Skipping degenerate piece {path.name} ({w}x{h})")
            continue
        pieces[path.name] = img

    if verbose:
        print(f"  Loaded {len(pieces)} pieces from {directory}")
    return pieces


def piece_size_stats(pieces: Dict[str, np.ndarray]) -> Tuple[int, int, int, int, int, int]:
    """(avg_w, avg_h, min_w, min_h, max_w, max_h) over all pieces."""
    if not pieces:
        raise ValueError("No pieces to measure")
    widths = [p.shape[1] for p in pieces.values()]
    heights = [p.shape[0] for p in pieces.values()]
    return (
        sum(widths) // len(widths),
        sum(heights) // len(heights),
        min(widths), min(heights),
        max(widths), max(heights),
    )


def normalize_pieces(pieces: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
    """Resize every piece to the average piece size."""
    avg_w, avg_h = piece_size_stats(pieces)[:2]
    return {pid: resize_piece(p, avg_w, avg_h) for pid, p in pieces.items()}


def infer_grid_shape(image_shape, piece_shape) -> Tuple[int, int]:
    """
    Estimate (rows, cols) from the size of the finished image.

    Args:
        image_shape: shape of the reference image (H, W, ...)
        piece_shape: shape of one normalized piece (h, w, ...)
    """
    rows = int(round(image_shape[0] / piece_shape[0]))
    cols = int(round(image_shape[1] / piece_shape[1]))
    return rows, cols
