"""
Solver Pipeline

Wires the image collaborators around the genetic core:
1. Load pieces from a directory (or cut a scrambled image) and normalize
2. Work out the grid shape
3. Evolve an arrangement
4. Compose the solved image
"""

import random
import cv2
import numpy as np
from typing import Dict, List, Optional, Tuple

from core.image_utils import load_image_bgr, save_image
from core.pieces import load_pieces, normalize_pieces, infer_grid_shape
from core.splitting import scramble_image
from genetic import evolve, GAConfig, EvolutionResult


def solve_puzzle(pieces: Dict, rows: int, cols: int,
                 config: Optional[GAConfig] = None,
                 verbose: bool = True) -> EvolutionResult:
    """
    Solve a puzzle from already-uniform pieces.

    Args:
        pieces: dict of piece_id -> image (all the same shape)
        rows, cols: grid shape
        config: GA parameters
        verbose: Print progress info

    Returns:
        EvolutionResult (grid of piece ids, cost, per-generation history)

    Raises:
        ConfigurationError: If pieces or grid shape are invalid
    """
    return evolve(pieces, rows, cols, config=config, verbose=verbose)


def reconstruct_image(pieces: Dict, grid: List[List],
                      show_numbers: bool = False) -> np.ndarray:
    """
    Compose the pieces of a solved grid into one image.

    Args:
        pieces: dict of piece_id -> image
        grid: rows x cols piece ids
        show_numbers: Overlay piece ids on output

    Returns:
        Reconstructed image
    """
    sample = next(iter(pieces.values()))
    piece_h, piece_w = sample.shape[:2]
    rows, cols = len(grid), len(grid[0])

    output = np.zeros((piece_h * rows, piece_w * cols) + sample.shape[2:], dtype=sample.dtype)

    for r in range(rows):
        for c in range(cols):
            piece_id = grid[r][c]
            y1, y2 = r * piece_h, (r + 1) * piece_h
            x1, x2 = c * piece_w, (c + 1) * piece_w
            output[y1:y2, x1:x2] = pieces[piece_id]

    if show_numbers:
        font = cv2.FONT_HERSHEY_SIMPLEX
        font_scale = min(piece_w, piece_h) / 160.0
        thickness = max(1, int(font_scale * 2))
        for r in range(rows):
            for c in range(cols):
                text = str(grid[r][c])
                (text_w, text_h), _ = cv2.getTextSize(text, font, font_scale, thickness)
                text_x = c * piece_w + (piece_w - text_w) // 2
                text_y = r * piece_h + (piece_h + text_h) // 2
                cv2.putText(output, text, (text_x, text_y), font, font_scale, (0, 0, 0), thickness + 2)
                cv2.putText(output, text, (text_x, text_y), font, font_scale, (255, 255, 255), thickness)

    return output


def solve_directory(pieces_dir: str, reference_image: Optional[str] = None,
                    rows: Optional[int] = None, cols: Optional[int] = None,
                    output_path: Optional[str] = None,
                    config: Optional[GAConfig] = None,
                    verbose: bool = True) -> Tuple[EvolutionResult, np.ndarray]:
    """
    Complete pipeline: load pieces → normalize → solve → reconstruct.

    The grid shape comes from `rows`/`cols` when given, otherwise from the
    size of `reference_image` divided by the average piece size.

    Returns:
        result: EvolutionResult
        solved_image: Reconstructed image
    """
    if verbose:
        print("\n" + "=" * 60)
        print("Loading pieces")
        print("=" * 60)

    pieces = normalize_pieces(load_pieces(pieces_dir, verbose=verbose))
    piece_shape = next(iter(pieces.values())).shape

    if rows is None or cols is None:
        if reference_image is None:
            raise ValueError("Provide rows and cols, or a reference image to infer them")
        rows, cols = infer_grid_shape(load_image_bgr(reference_image).shape, piece_shape)

    if verbose:
        print(f"  Grid: {rows}x{cols}, piece size {piece_shape[1]}x{piece_shape[0]}")

    result = solve_puzzle(pieces, rows, cols, config, verbose)
    solved = reconstruct_image(pieces, result.chromosome)

    if output_path:
        save_image(solved, output_path)
        if verbose:
            print(f"\nSaved: {output_path}")

    return result, solved


def solve_scrambled(image_path: str, rows: int, cols: int,
                    output_path: Optional[str] = None,
                    config: Optional[GAConfig] = None,
                    verbose: bool = True) -> Tuple[EvolutionResult, np.ndarray, List[List]]:
    """
    Cut an image into shuffled pieces and solve it (demo / benchmarking).

    Returns:
        result: EvolutionResult
        solved_image: Reconstructed image
        solution: The true grid of piece ids
    """
    image = load_image_bgr(image_path)
    seed = config.seed if config is not None else None
    pieces, solution = scramble_image(image, rows, cols, random.Random(seed))

    result = solve_puzzle(pieces, rows, cols, config, verbose)
    solved = reconstruct_image(pieces, result.chromosome)

    if verbose:
        print(f"  Neighbour accuracy: {neighbor_accuracy(result.chromosome, solution):.1%}")

    if output_path:
        save_image(solved, output_path)
        if verbose:
            print(f"\nSaved: {output_path}")

    return result, solved, solution


def neighbor_accuracy(grid: List[List], solution: List[List]) -> float:
    """
    Fraction of correct right/down neighbour pairs.

    Unlike cell-by-cell comparison this does not punish a correct
    arrangement that is shifted within the grid.
    """
    def pairs(g):
        found = set()
        for r, row in enumerate(g):
            for c, pid in enumerate(row):
                if c + 1 < len(row):
                    found.add((pid, row[c + 1], 'right'))
                if r + 1 < len(g):
                    found.add((pid, g[r + 1][c], 'down'))
        return found

    expected = pairs(solution)
    if not expected:
        return 1.0
    return len(pairs(grid) & expected) / len(expected)
