"""Visualization utilities for puzzle solving."""
from .display import (
    display_result,
    save_result,
    plot_fitness_history
)
