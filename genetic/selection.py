"""
Roulette-wheel parent selection.

Each chromosome is weighted by 1 / cost, so a chromosome with cost 1 is
drawn three times as often as one with cost 3.

Zero-cost chromosomes (perfect tilings) have no finite weight. They are
left out of the wheel; the evolution loop carries them forward as elites.
If every chromosome costs zero the draw is uniform.
"""

import random
from typing import Optional, Sequence, Tuple

from .fitness import FitnessScore


def choose_one(fitness_scores: Sequence[FitnessScore], rng: Optional[random.Random] = None) -> int:
    """
    Draw one chromosome index with probability proportional to 1 / cost.

    Args:
        fitness_scores: (index, cost) pairs, costs >= 0
        rng: random source (module-level random if None)

    Returns:
        The drawn index
    """
    if not fitness_scores:
        raise ValueError("Cannot select from an empty population")
    if rng is None:
        rng = random

    weighted = []
    for index, cost in fitness_scores:
        if cost < 0:
            raise ValueError(f"Chromosome {index}: cost must be non-negative, got {cost}")
        if cost > 0:
            weighted.append((index, 1.0 / cost))

    if not weighted:
        return rng.choice(fitness_scores)[0]

    total = sum(weight for _, weight in weighted)
    threshold = rng.random() * total

    cumulative = 0.0
    for index, weight in weighted:
        cumulative += weight
        if cumulative >= threshold:
            return index

    # Rounding can leave the threshold a hair above the final cumulative sum
    return weighted[-1][0]


def select_parents(fitness_scores: Sequence[FitnessScore],
                   rng: Optional[random.Random] = None) -> Tuple[int, int]:
    """Two independent draws; the same index may come up twice."""
    return choose_one(fitness_scores, rng), choose_one(fitness_scores, rng)
