"""
Edge dissimilarity between puzzle pieces.

The score for two pieces in a direction is the Euclidean distance between
the two touching pixel lines (last column of A vs first column of B for
RIGHT, last row of A vs first row of B for DOWN, and so on), summed over
every channel. Lower is a better fit; 0 means the edges are identical.

Scores satisfy:
    dissimilarity(A, B, d) == dissimilarity(B, A, d.inverse)
so only the RIGHT and DOWN matrices are computed; LEFT and UP are their
transposes.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Mapping

from .direction import Direction
from .errors import ConfigurationError, UnknownPieceError

PieceId = Hashable


def validate_pieces(pieces: Mapping[PieceId, np.ndarray]) -> tuple:
    """
    Check that the piece set is non-empty and uniformly shaped.

    Returns:
        The shared piece shape.

    Raises:
        ConfigurationError: If there are no pieces or shapes differ.
    """
    if not pieces:
        raise ConfigurationError("No pieces provided. The piece universe must not be empty.")

    shape = None
    for piece_id, raster in pieces.items():
        raster_shape = np.shape(raster)
        if len(raster_shape) not in (2, 3) or min(raster_shape[:2]) < 1:
            raise ConfigurationError(
                f"Piece {piece_id!r}: expected (H, W) or (H, W, C) raster, got {raster_shape}"
            )
        if shape is None:
            shape = raster_shape
        elif raster_shape != shape:
            raise ConfigurationError(
                f"Piece {piece_id!r}: shape {raster_shape} doesn't match {shape}. "
                f"Normalize pieces to a uniform size first."
            )
    return shape


def extract_edge(piece: np.ndarray, direction: Direction) -> np.ndarray:
    """Pixel line of `piece` that faces a neighbour in `direction`, as float64."""
    raster = np.asarray(piece, dtype=np.float64)
    if direction is Direction.RIGHT:
        return raster[:, -1, ...]
    elif direction is Direction.LEFT:
        return raster[:, 0, ...]
    elif direction is Direction.DOWN:
        return raster[-1, :, ...]
    elif direction is Direction.UP:
        return raster[0, :, ...]
    raise ValueError(f"Unknown direction: {direction}")


def dissimilarity(piece_a: np.ndarray, piece_b: np.ndarray, direction: Direction) -> float:
    """
    Score how badly `piece_b` fits next to `piece_a` in `direction`.

    Args:
        piece_a: anchor raster
        piece_b: neighbour raster (same shape)
        direction: where piece_b sits relative to piece_a

    Returns:
        Euclidean distance between the touching edges (>= 0)
    """
    edge_a = extract_edge(piece_a, direction).ravel()
    edge_b = extract_edge(piece_b, direction.inverse).ravel()
    return float(np.sqrt(np.sum((edge_a - edge_b) ** 2)))


@dataclass
class DissimilarityMatrices:
    """
    Full pairwise dissimilarity for every direction.

    matrices[d][i, j] = dissimilarity(piece_ids[i], piece_ids[j], d).
    The diagonal is inf: a piece is never its own neighbour.
    """
    piece_ids: List[PieceId]
    matrices: Dict[Direction, np.ndarray]
    index: Dict[PieceId, int] = field(init=False)

    def __post_init__(self):
        self.index = {pid: i for i, pid in enumerate(self.piece_ids)}

    def __len__(self) -> int:
        return len(self.piece_ids)

    def position_of(self, piece_id: PieceId) -> int:
        try:
            return self.index[piece_id]
        except KeyError:
            raise UnknownPieceError(piece_id) from None

    def lookup(self, piece_a: PieceId, piece_b: PieceId, direction: Direction) -> float:
        return float(self.matrices[direction][self.position_of(piece_a), self.position_of(piece_b)])


def _pairwise_rows(facing: np.ndarray, opposite: np.ndarray, executor=None) -> np.ndarray:
    """
    Compute dist(facing[i], opposite[j]) for all i, j one row at a time.

    A full broadcast would need n*n*edge_length floats, so rows are built
    independently and optionally spread across an executor.
    """
    n = facing.shape[0]

    def row(i):
        return np.sqrt(np.sum((facing[i] - opposite) ** 2, axis=1))

    rows = executor.map(row, range(n)) if executor is not None else map(row, range(n))
    matrix = np.vstack(list(rows))
    np.fill_diagonal(matrix, np.inf)
    return matrix


def compute_dissimilarity_matrices(pieces: Mapping[PieceId, np.ndarray],
                                   executor=None) -> DissimilarityMatrices:
    """
    Precompute all pairwise edge scores.

    Args:
        pieces: dict of piece_id -> raster (uniform shape)
        executor: optional concurrent.futures executor for row-parallel work

    Returns:
        DissimilarityMatrices covering all four directions
    """
    validate_pieces(pieces)

    piece_ids = list(pieces.keys())
    stack = np.stack([np.asarray(pieces[pid], dtype=np.float64) for pid in piece_ids])
    n = len(piece_ids)

    right_edges = stack[:, :, -1, ...].reshape(n, -1)
    left_edges = stack[:, :, 0, ...].reshape(n, -1)
    bottom_edges = stack[:, -1, :, ...].reshape(n, -1)
    top_edges = stack[:, 0, :, ...].reshape(n, -1)

    right = _pairwise_rows(right_edges, left_edges, executor)
    down = _pairwise_rows(bottom_edges, top_edges, executor)

    matrices = {
        Direction.RIGHT: right,
        Direction.DOWN: down,
        Direction.LEFT: right.T.copy(),
        Direction.UP: down.T.copy(),
    }
    return DissimilarityMatrices(piece_ids=piece_ids, matrices=matrices)
