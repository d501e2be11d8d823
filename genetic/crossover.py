"""
Kernel-growing crossover.

Builds one child arrangement from two parents by growing a connected
"kernel" of pieces outward from a random root. Every open slot next to
the kernel gets one candidate piece, chosen by the first tier that
yields an available piece:

1. MUTUALLY AGREED - both parents put the same piece next to the anchor
   in that direction.
2. BEST BUDDY - the anchor's best buddy in that direction, if at least
   one parent already has them side by side there.
3. RANKED - the best available piece from the anchor's compatibility
   list; priority is its dissimilarity score.

Candidates sit in a min-heap. The two discrete tiers use sentinel
priorities below any dissimilarity (which is >= 0), so they always win.
When a popped candidate's piece has been placed elsewhere in the
meantime, a new candidate is generated for the same slot from the same
anchor, falling through to the next best option.

The kernel may grow in any direction but is never allowed to exceed the
rows x cols footprint. If a slot runs out of candidates the child cannot
be completed and assembly returns None; callers retry with a fresh
ChildAssembler.
"""

import heapq
import itertools
import random
from typing import Dict, List, Optional, Set, Tuple

from .compatibility import CompatibilityIndex
from .direction import Direction, ALL_DIRECTIONS
from .dissimilarity import PieceId
from .errors import AssemblyError
from .fitness import Chromosome

MUTUALLY_AGREED_PRIORITY = -2.0
BUDDY_PRIORITY = -1.0

Coordinate = Tuple[int, int]


def position_map(chromosome: Chromosome) -> Dict[PieceId, Coordinate]:
    """Map piece_id -> (row, col) for a full grid."""
    return {pid: (r, c) for r, row in enumerate(chromosome) for c, pid in enumerate(row)}


class ChildAssembler:
    """
    One crossover attempt. Owns its kernel, frontier and bounding box.

    Instances are single-use and must not be shared between threads.
    """

    def __init__(self, parent1: Chromosome, parent2: Chromosome,
                 index: CompatibilityIndex, rng: Optional[random.Random] = None):
        self.rows = len(parent1)
        self.columns = len(parent1[0]) if parent1 else 0
        if self.rows == 0 or self.columns == 0:
            raise ValueError("Parents must be non-empty grids")
        if len(parent2) != self.rows or any(len(row) != self.columns for row in parent2):
            raise ValueError(
                f"Parent shapes differ: {self.rows}x{self.columns} vs "
                f"{len(parent2)}x{len(parent2[0]) if parent2 else 0}"
            )

        self.parent1 = parent1
        self.parent2 = parent2
        self.index = index
        self.rng = rng if rng is not None else random

        self._positions1 = position_map(parent1)
        self._positions2 = position_map(parent2)

        self.kernel: Dict[PieceId, Coordinate] = {}
        self.occupied: Set[Coordinate] = set()
        self.candidates: List[tuple] = []
        self._tiebreak = itertools.count()

        self.min_row = self.max_row = 0
        self.min_col = self.max_col = 0

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    def assemble(self) -> Optional[Chromosome]:
        """
        Grow the kernel until the frontier is exhausted.

        Returns:
            Complete rows x columns child grid, or None if some slot could
            not be filled.
        """
        if self.kernel:
            raise RuntimeError("ChildAssembler is single-use; create a new instance to retry")

        self._place(self._random_root(), (0, 0))
        self._grow()

        if not self._kernel_is_full():
            return None

        return self._render()

    def _grow(self) -> None:
        while self.candidates:
            self._step()

    def _step(self) -> None:
        """Pop the best candidate and place it, discard it, or regenerate it."""
        _, _, piece, position, anchor, direction = heapq.heappop(self.candidates)

        if position in self.occupied:
            return

        if not self._is_available(piece):
            self._add_candidate(anchor, direction, position)
            return

        self._place(piece, position)

    def _random_root(self) -> PieceId:
        row = self.rng.randrange(self.rows)
        col = self.rng.randrange(self.columns)
        return self.parent1[row][col]

    def _place(self, piece: PieceId, position: Coordinate) -> None:
        self.kernel[piece] = position
        self.occupied.add(position)

        if self._kernel_is_full():
            return

        row, col = position
        directions = list(ALL_DIRECTIONS)
        self.rng.shuffle(directions)
        for direction in directions:
            d_row, d_col = direction.offset
            slot = (row + d_row, col + d_col)
            if slot not in self.occupied and self._is_in_range(slot):
                self._update_boundaries(slot)
                self._add_candidate(piece, direction, slot)

    # =========================================================================
    # CANDIDATE TIERS
    # =========================================================================

    def _add_candidate(self, anchor: PieceId, direction: Direction, position: Coordinate) -> None:
        agreed = self._mutually_agreed_piece(anchor, direction)
        if agreed is not None and self._is_available(agreed):
            self._push(MUTUALLY_AGREED_PRIORITY, agreed, position, anchor, direction)
            return

        buddy = self._best_buddy(anchor, direction)
        if buddy is not None and self._is_available(buddy):
            self._push(BUDDY_PRIORITY, buddy, position, anchor, direction)
            return

        for score, piece in self.index.ranked_neighbors(anchor, direction):
            if self._is_available(piece):
                self._push(score, piece, position, anchor, direction)
                return

    def _push(self, priority: float, piece: PieceId, position: Coordinate,
              anchor: PieceId, direction: Direction) -> None:
        heapq.heappush(self.candidates,
                       (priority, next(self._tiebreak), piece, position, anchor, direction))

    def _neighbor_in(self, parent: Chromosome, positions: Dict[PieceId, Coordinate],
                     piece: PieceId, direction: Direction) -> Optional[PieceId]:
        row, col = positions[piece]
        d_row, d_col = direction.offset
        row, col = row + d_row, col + d_col
        if 0 <= row < self.rows and 0 <= col < self.columns:
            return parent[row][col]
        return None

    def _mutually_agreed_piece(self, anchor: PieceId, direction: Direction) -> Optional[PieceId]:
        in_parent1 = self._neighbor_in(self.parent1, self._positions1, anchor, direction)
        if in_parent1 is None:
            return None
        in_parent2 = self._neighbor_in(self.parent2, self._positions2, anchor, direction)
        return in_parent1 if in_parent1 == in_parent2 else None

    def _best_buddy(self, anchor: PieceId, direction: Direction) -> Optional[PieceId]:
        buddy = self.index.best_buddy(anchor, direction)
        if buddy is None:
            return None
        if self._neighbor_in(self.parent1, self._positions1, anchor, direction) == buddy:
            return buddy
        if self._neighbor_in(self.parent2, self._positions2, anchor, direction) == buddy:
            return buddy
        return None

    # =========================================================================
    # FOOTPRINT
    # =========================================================================

    def _is_in_range(self, position: Coordinate) -> bool:
        row, col = position
        current_rows = abs(min(self.min_row, row)) + abs(max(self.max_row, row))
        current_cols = abs(min(self.min_col, col)) + abs(max(self.max_col, col))
        return current_rows < self.rows and current_cols < self.columns

    def _update_boundaries(self, position: Coordinate) -> None:
        row, col = position
        self.min_row = min(self.min_row, row)
        self.max_row = max(self.max_row, row)
        self.min_col = min(self.min_col, col)
        self.max_col = max(self.max_col, col)

    def _kernel_is_full(self) -> bool:
        return len(self.kernel) == self.rows * self.columns

    def _is_available(self, piece: PieceId) -> bool:
        return piece not in self.kernel

    def _render(self) -> Chromosome:
        grid = [[None] * self.columns for _ in range(self.rows)]
        for piece, (row, col) in self.kernel.items():
            grid[row - self.min_row][col - self.min_col] = piece
        return grid


def assemble_child(parent1: Chromosome, parent2: Chromosome, index: CompatibilityIndex,
                   rng: Optional[random.Random] = None,
                   max_attempts: Optional[int] = None) -> Tuple[Chromosome, int]:
    """
    Retry crossover with fresh assemblers until a child is complete.

    Args:
        parent1, parent2: complete parent grids
        index: shared compatibility index
        rng: random source for root choice and neighbour order
        max_attempts: give up after this many failures (None = never)

    Returns:
        (child, attempts used)

    Raises:
        AssemblyError: If max_attempts is set and exhausted.
    """
    for attempt in itertools.count(1):
        child = ChildAssembler(parent1, parent2, index, rng).assemble()
        if child is not None:
            return child, attempt
        if max_attempts is not None and attempt >= max_attempts:
            raise AssemblyError(f"Crossover failed {attempt} times in a row")
