"""
Piece compatibility index.

For every piece and direction keeps the K best-fitting other pieces,
ranked by ascending dissimilarity, and the best-buddy relation derived
from those rankings:

    A and B are best buddies in direction d  iff
        B is A's top match in d  and  A is B's top match in d.inverse

Built once per puzzle and read-only afterwards, so one index is shared by
every crossover running in parallel.
"""

import numpy as np
from typing import Dict, List, Mapping, Optional, Set, Tuple

from .direction import Direction, ALL_DIRECTIONS
from .dissimilarity import DissimilarityMatrices, PieceId, compute_dissimilarity_matrices
from .errors import ConfigurationError, UnknownPieceError

DEFAULT_COMPATIBILITY_K = 100

CompatibilityList = List[Tuple[float, PieceId]]


class CompatibilityIndex:
    """Ranked neighbour lists and best buddies for every (piece, direction)."""

    def __init__(self, compatibilities: Dict[PieceId, Dict[Direction, CompatibilityList]],
                 executor=None):
        self._compatibilities = compatibilities
        self._best_buddies = self._generate_best_buddies(compatibilities, executor)

    @classmethod
    def from_matrices(cls, matrices: DissimilarityMatrices, k: int = DEFAULT_COMPATIBILITY_K,
                      executor=None) -> 'CompatibilityIndex':
        """
        Rank neighbours using precomputed pairwise matrices.

        Args:
            matrices: full dissimilarity matrices
            k: number of best matches kept per piece and direction
            executor: optional executor; directions are ranked independently
        """
        if k < 1:
            raise ConfigurationError(f"Compatibility list size must be >= 1, got {k}")

        piece_ids = matrices.piece_ids
        keep = min(k, len(piece_ids) - 1)

        def rank(direction):
            matrix = matrices.matrices[direction]
            # Diagonal is inf, so it always sorts past the first n-1 columns
            order = np.argsort(matrix, axis=1, kind='stable')[:, :keep]
            return direction, [
                [(float(matrix[i, j]), piece_ids[j]) for j in order[i]]
                for i in range(len(piece_ids))
            ]

        ranked = executor.map(rank, ALL_DIRECTIONS) if executor is not None else map(rank, ALL_DIRECTIONS)

        compatibilities = {pid: {} for pid in piece_ids}
        for direction, lists in ranked:
            for i, pid in enumerate(piece_ids):
                compatibilities[pid][direction] = lists[i]

        return cls(compatibilities, executor)

    @classmethod
    def from_pieces(cls, pieces: Mapping[PieceId, np.ndarray], k: int = DEFAULT_COMPATIBILITY_K,
                    executor=None) -> 'CompatibilityIndex':
        matrices = compute_dissimilarity_matrices(pieces, executor)
        return cls.from_matrices(matrices, k, executor)

    @staticmethod
    def _generate_best_buddies(compatibilities, executor=None) -> Dict[Tuple[PieceId, Direction], PieceId]:
        def buddy_of(key):
            piece, direction = key
            ranked = compatibilities[piece][direction]
            if not ranked:
                return key, None
            candidate = ranked[0][1]
            reverse = compatibilities[candidate][direction.inverse]
            if reverse and reverse[0][1] == piece:
                return key, candidate
            return key, None

        # Each (piece, direction) pair is checked independently
        keys = [(piece, direction) for piece, by_direction in compatibilities.items()
                for direction in by_direction]
        found = executor.map(buddy_of, keys) if executor is not None else map(buddy_of, keys)
        return {key: buddy for key, buddy in found if buddy is not None}

    def _lists_for(self, piece: PieceId) -> Dict[Direction, CompatibilityList]:
        try:
            return self._compatibilities[piece]
        except KeyError:
            raise UnknownPieceError(piece) from None

    def __contains__(self, piece: PieceId) -> bool:
        return piece in self._compatibilities

    def __len__(self) -> int:
        return len(self._compatibilities)

    @property
    def piece_ids(self) -> List[PieceId]:
        return list(self._compatibilities)

    def ranked_neighbors(self, piece: PieceId, direction: Direction) -> CompatibilityList:
        """(score, piece_id) pairs for `piece` in `direction`, best first."""
        return self._lists_for(piece)[direction]

    def best_buddy(self, piece: PieceId, direction: Direction) -> Optional[PieceId]:
        self._lists_for(piece)
        return self._best_buddies.get((piece, direction))

    @property
    def best_buddies(self) -> Set[Tuple[PieceId, PieceId, Direction]]:
        return {(a, b, d) for (a, d), b in self._best_buddies.items()}
