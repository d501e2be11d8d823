"""GA parameters and puzzle precondition checks."""

from dataclasses import dataclass
from typing import Optional

from .compatibility import DEFAULT_COMPATIBILITY_K
from .errors import ConfigurationError

DEFAULT_POPULATION_SIZE = 500
DEFAULT_GENERATIONS = 30
DEFAULT_ELITE_COUNT = 4


@dataclass
class GAConfig:
    """
    Evolution parameters.

    workers=None lets the thread pool pick its default size.
    max_crossover_attempts=None retries a failing crossover forever.
    """
    population_size: int = DEFAULT_POPULATION_SIZE
    generations: int = DEFAULT_GENERATIONS
    compatibility_k: int = DEFAULT_COMPATIBILITY_K
    elite_count: int = DEFAULT_ELITE_COUNT
    workers: Optional[int] = None
    seed: Optional[int] = None
    max_crossover_attempts: Optional[int] = None

    def __post_init__(self):
        if self.population_size < 1:
            raise ConfigurationError(f"population_size must be >= 1, got {self.population_size}")
        if self.generations < 0:
            raise ConfigurationError(f"generations must be >= 0, got {self.generations}")
        if self.compatibility_k < 1:
            raise ConfigurationError(f"compatibility_k must be >= 1, got {self.compatibility_k}")
        if not 0 <= self.elite_count <= self.population_size:
            raise ConfigurationError(
                f"elite_count must be between 0 and population_size ({self.population_size}), "
                f"got {self.elite_count}"
            )
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")
        if self.max_crossover_attempts is not None and self.max_crossover_attempts < 1:
            raise ConfigurationError(
                f"max_crossover_attempts must be >= 1, got {self.max_crossover_attempts}"
            )


def validate_grid(rows: int, cols: int, piece_count: int) -> None:
    """
    Reject grid shapes that cannot hold the piece set.

    Raises:
        ConfigurationError: On an empty universe, zero-area grid or a
            rows x cols mismatch with the piece count.
    """
    if piece_count < 1:
        raise ConfigurationError("No pieces provided. The piece universe must not be empty.")
    if rows < 1 or cols < 1:
        raise ConfigurationError(f"Grid must have positive area, got {rows}x{cols}")
    if rows * cols != piece_count:
        raise ConfigurationError(
            f"Grid {rows}x{cols} holds {rows * cols} cells but there are {piece_count} pieces"
        )
