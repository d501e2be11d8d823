"""
Chromosome fitness.

Cost of an arrangement = sum of RIGHT dissimilarities over every
horizontally adjacent pair + sum of DOWN dissimilarities over every
vertically adjacent pair. Lower is better.
"""

import numpy as np
from typing import List, Mapping, Sequence, Tuple

from .direction import Direction
from .dissimilarity import DissimilarityMatrices, PieceId, compute_dissimilarity_matrices
from .errors import FitnessInvariantError

Chromosome = List[List[PieceId]]
FitnessScore = Tuple[int, float]


class FitnessEvaluator:
    """Scores chromosomes against full (untruncated) RIGHT and DOWN matrices."""

    def __init__(self, matrices: DissimilarityMatrices):
        self._index = matrices.index
        self._right = matrices.matrices[Direction.RIGHT]
        self._down = matrices.matrices[Direction.DOWN]

    @classmethod
    def from_pieces(cls, pieces: Mapping[PieceId, np.ndarray], executor=None) -> 'FitnessEvaluator':
        return cls(compute_dissimilarity_matrices(pieces, executor))

    def _to_indices(self, chromosome: Chromosome) -> np.ndarray:
        widths = {len(row) for row in chromosome}
        if len(widths) > 1:
            raise FitnessInvariantError(
                f"Chromosome rows differ in length: {[len(row) for row in chromosome]}"
            )
        try:
            return np.array([[self._index[pid] for pid in row] for row in chromosome], dtype=np.intp)
        except KeyError as exc:
            raise FitnessInvariantError(
                f"No dissimilarity entry for piece {exc.args[0]!r}: not part of this puzzle"
            ) from None

    @staticmethod
    def _check_finite(seams: np.ndarray, chromosome: Chromosome, direction: Direction) -> None:
        if np.all(np.isfinite(seams)):
            return
        r, c = (int(v) for v in np.argwhere(~np.isfinite(seams))[0])
        d_row, d_col = direction.offset
        raise FitnessInvariantError(
            f"No {direction.value} dissimilarity for adjacent pair "
            f"{chromosome[r][c]!r} at {(r, c)} -> {chromosome[r + d_row][c + d_col]!r} "
            f"at {(r + d_row, c + d_col)}"
        )

    def cost(self, chromosome: Chromosome) -> float:
        """
        Total seam cost of a chromosome.

        Raises:
            FitnessInvariantError: If an adjacent pair has no matrix entry
                (unknown piece, or a piece placed next to itself).
        """
        grid = self._to_indices(chromosome)
        if grid.size == 0:
            return 0.0

        # The two sums are independent gathers over the grid
        horizontal = self._right[grid[:, :-1], grid[:, 1:]]
        vertical = self._down[grid[:-1, :], grid[1:, :]]

        self._check_finite(horizontal, chromosome, Direction.RIGHT)
        self._check_finite(vertical, chromosome, Direction.DOWN)

        return float(horizontal.sum() + vertical.sum())

    def evaluate_generation(self, population: Sequence[Chromosome],
                            executor=None) -> List[FitnessScore]:
        """
        Score every chromosome independently.

        Returns:
            List of (index, cost) in population order
        """
        costs = executor.map(self.cost, population) if executor is not None else map(self.cost, population)
        return list(enumerate(costs))
