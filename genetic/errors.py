"""Exceptions raised by the genetic solver."""


class ConfigurationError(ValueError):
    """Invalid puzzle input or GA parameters, detected before evolution starts."""


class UnknownPieceError(KeyError):
    """A piece id that is not part of the puzzle was queried."""


class FitnessInvariantError(RuntimeError):
    """An adjacent pair has no dissimilarity entry (invalid chromosome)."""


class AssemblyError(RuntimeError):
    """Crossover kept failing past the configured retry cap."""
