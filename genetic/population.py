"""Initial population and chromosome validity checks."""

import random
from typing import Iterable, List, Optional

from .dissimilarity import PieceId
from .fitness import Chromosome


def create_random_chromosome(piece_ids: List[PieceId], rows: int, cols: int,
                             rng: Optional[random.Random] = None) -> Chromosome:
    """Shuffle the pieces and lay them out row-major."""
    if rng is None:
        rng = random
    shuffled = list(piece_ids)
    rng.shuffle(shuffled)
    return [shuffled[r * cols:(r + 1) * cols] for r in range(rows)]


def generate_initial_population(piece_ids: Iterable[PieceId], rows: int, cols: int, size: int,
                                rng: Optional[random.Random] = None) -> List[Chromosome]:
    piece_ids = list(piece_ids)
    return [create_random_chromosome(piece_ids, rows, cols, rng) for _ in range(size)]


def is_valid_chromosome(chromosome: Chromosome, piece_ids: Iterable[PieceId],
                        rows: int, cols: int) -> bool:
    """True if the grid is rows x cols and holds every piece exactly once."""
    if len(chromosome) != rows or any(len(row) != cols for row in chromosome):
        return False
    flat = [pid for row in chromosome for pid in row]
    expected = list(piece_ids)
    return len(flat) == len(set(flat)) == len(expected) and set(flat) == set(expected)
