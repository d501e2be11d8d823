"""
Pipeline orchestration modules.

1. load_pieces() / scramble_image() - piece source
2. solve_puzzle() - genetic solver
3. reconstruct_image() - composes the solved grid
"""
from .solver_pipeline import (
    solve_puzzle,
    solve_directory,
    solve_scrambled,
    reconstruct_image,
    neighbor_accuracy
)
