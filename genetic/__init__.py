"""
Genetic jigsaw solver.

Pieces are equally sized, unrotated rasters keyed by id. The solver
learns which edges fit (dissimilarity + compatibility index) and evolves
a population of grid arrangements with a kernel-growing crossover.

Usage:
    from genetic import evolve, GAConfig

    result = evolve(pieces, rows=4, cols=4, config=GAConfig(seed=7))
    result.chromosome  # [[piece_id, ...], ...]
"""
from .direction import Direction
from .dissimilarity import (
    dissimilarity,
    compute_dissimilarity_matrices,
    validate_pieces,
    DissimilarityMatrices
)
from .compatibility import CompatibilityIndex, DEFAULT_COMPATIBILITY_K
from .fitness import FitnessEvaluator
from .crossover import ChildAssembler, assemble_child
from .selection import choose_one, select_parents
from .population import generate_initial_population, is_valid_chromosome
from .config import GAConfig, validate_grid
from .evolution import evolve, next_generation, select_fittest, EvolutionResult
from .errors import (
    ConfigurationError,
    UnknownPieceError,
    FitnessInvariantError,
    AssemblyError
)
