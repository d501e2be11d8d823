"""
Genetic evolution loop.

Per generation:
1. Score every chromosome (thread pool, numpy gathers)
2. Copy the `elite_count` cheapest chromosomes unchanged
3. Fill the remaining slots on a process pool: roulette-select two parents,
   retry crossover until a complete child comes out
4. Swap in the new population (no overlap between generations)

After the last generation the population is scored once more and the
cheapest chromosome is returned. A chromosome with zero cost cannot be
beaten, so evolution stops as soon as one appears.
"""

import multiprocessing
import os
import random
import time
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .compatibility import CompatibilityIndex
from .config import GAConfig, validate_grid
from .crossover import assemble_child
from .dissimilarity import PieceId, compute_dissimilarity_matrices, validate_pieces
from .errors import ConfigurationError
from .fitness import Chromosome, FitnessEvaluator, FitnessScore
from .population import generate_initial_population, is_valid_chromosome
from .selection import select_parents


@dataclass
class EvolutionResult:
    """Best arrangement found plus per-generation best costs."""
    chromosome: Chromosome
    cost: float
    history: List[float] = field(default_factory=list)
    generations_run: int = 0


def select_fittest(population: Sequence[Chromosome],
                   fitness_scores: Sequence[FitnessScore]) -> Optional[Tuple[Chromosome, float]]:
    """Cheapest chromosome and its cost, or None for an empty population."""
    if not population or not fitness_scores:
        return None
    index, cost = min(fitness_scores, key=lambda score: score[1])
    return population[index], cost


# Compatibility index installed once per breeding process
_worker_index: Optional[CompatibilityIndex] = None


def _install_index(index: CompatibilityIndex) -> None:
    global _worker_index
    _worker_index = index


def _breed(population: Sequence[Chromosome], fitness_scores: Sequence[FitnessScore],
           index: CompatibilityIndex, seed: int, max_attempts: Optional[int]) -> Chromosome:
    rng = random.Random(seed)
    parent1, parent2 = select_parents(fitness_scores, rng)
    child, _ = assemble_child(population[parent1], population[parent2], index, rng, max_attempts)
    return child


def _breed_batch(population: Sequence[Chromosome], fitness_scores: Sequence[FitnessScore],
                 seeds: Sequence[int], max_attempts: Optional[int],
                 index: Optional[CompatibilityIndex] = None) -> List[Chromosome]:
    """One child per seed. Without an explicit index the worker's installed one is used."""
    if index is None:
        index = _worker_index
    return [_breed(population, fitness_scores, index, seed, max_attempts) for seed in seeds]


def breeding_pool(index: CompatibilityIndex, workers: Optional[int]) -> Optional[ProcessPoolExecutor]:
    """
    Process pool for offspring generation, or None for a single worker.

    Crossover is pure Python and holds the GIL, so it runs on processes;
    the read-only index is shipped to each process once.
    """
    if (workers or os.cpu_count() or 1) <= 1:
        return None
    return ProcessPoolExecutor(max_workers=workers,
                               mp_context=multiprocessing.get_context('spawn'),
                               initializer=_install_index, initargs=(index,))


def next_generation(population: Sequence[Chromosome], fitness_scores: Sequence[FitnessScore],
                    index: CompatibilityIndex, config: GAConfig, rng: random.Random,
                    executor: Optional[Executor] = None) -> List[Chromosome]:
    """
    Build generation g+1 from generation g.

    Every offspring task gets its own seed drawn from `rng` up front, so
    the result only depends on the master seed, not on thread timing or
    on how seeds are split into batches. Batches land in per-task slots
    and are merged in submission order once all tasks finish.
    """
    ranked = sorted(fitness_scores, key=lambda score: score[1])
    elite = [[list(row) for row in population[i]] for i, _ in ranked[:config.elite_count]]

    seeds = [rng.getrandbits(64) for _ in range(config.population_size - len(elite))]
    if executor is None:
        return elite + _breed_batch(population, fitness_scores, seeds,
                                    config.max_crossover_attempts, index)

    # Batching keeps the population from being pickled once per child
    workers = config.workers or os.cpu_count() or 1
    batch_size = max(1, len(seeds) // (workers * 2))
    shared_index = None if isinstance(executor, ProcessPoolExecutor) else index
    futures = [
        executor.submit(_breed_batch, population, fitness_scores, seeds[i:i + batch_size],
                        config.max_crossover_attempts, shared_index)
        for i in range(0, len(seeds), batch_size)
    ]

    children = []
    for future in futures:
        children.extend(future.result())
    return elite + children


def evolve(pieces: Mapping[PieceId, np.ndarray], rows: int, cols: int,
           config: Optional[GAConfig] = None,
           initial_population: Optional[List[Chromosome]] = None,
           verbose: bool = False) -> EvolutionResult:
    """
    Reconstruct a rows x cols arrangement of `pieces`.

    Args:
        pieces: dict of piece_id -> raster (uniform shape)
        rows, cols: target grid shape, rows * cols == len(pieces)
        config: GA parameters (defaults if None)
        initial_population: optional starting chromosomes (random if None)
        verbose: print progress

    Returns:
        EvolutionResult with the cheapest chromosome found

    Raises:
        ConfigurationError: On invalid pieces, grid shape or population.
    """
    if config is None:
        config = GAConfig()

    validate_pieces(pieces)
    validate_grid(rows, cols, len(pieces))
    piece_ids = list(pieces.keys())

    if len(piece_ids) == 1:
        return EvolutionResult(chromosome=[[piece_ids[0]]], cost=0.0)

    if initial_population is not None:
        if not initial_population:
            raise ConfigurationError("initial_population must not be empty")
        for i, chromosome in enumerate(initial_population):
            if not is_valid_chromosome(chromosome, piece_ids, rows, cols):
                raise ConfigurationError(
                    f"Initial chromosome {i} is not a {rows}x{cols} arrangement of every piece"
                )

    start_time = time.time()
    rng = random.Random(config.seed)

    if verbose:
        print("=" * 60)
        print(f"Genetic Solver: {len(piece_ids)} pieces, {rows}x{cols} grid")
        print("=" * 60)

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        if verbose:
            print("\n[1] Computing dissimilarity matrices...")
        matrices = compute_dissimilarity_matrices(pieces, executor)

        if verbose:
            print("\n[2] Building compatibility index...")
        index = CompatibilityIndex.from_matrices(matrices, config.compatibility_k, executor)
        evaluator = FitnessEvaluator(matrices)

        if verbose:
            print(f"    {len(index.best_buddies)} best-buddy relations")
            print(f"\n[3] Evolving {config.population_size} chromosomes "
                  f"for {config.generations} generations...")

        if initial_population is not None:
            population = [[list(row) for row in chromosome] for chromosome in initial_population]
        else:
            population = generate_initial_population(piece_ids, rows, cols,
                                                     config.population_size, rng)

        history = []
        generations_run = 0
        breeder = breeding_pool(index, config.workers)
        try:
            for generation in range(config.generations):
                fitness_scores = evaluator.evaluate_generation(population, executor)
                best_cost = min(cost for _, cost in fitness_scores)
                history.append(best_cost)

                if best_cost == 0.0:
                    if verbose:
                        print(f"    Perfect arrangement found before generation {generation + 1}")
                    break

                population = next_generation(population, fitness_scores, index, config, rng, breeder)
                generations_run += 1

                if verbose:
                    print(f"    Generation {generation + 1}/{config.generations} finished - "
                          f"best cost {best_cost:.2f}")
        finally:
            if breeder is not None:
                breeder.shutdown()

        final_scores = evaluator.evaluate_generation(population, executor)

    fittest = select_fittest(population, final_scores)
    if fittest is None:
        raise RuntimeError("Population is empty: no solution")
    chromosome, cost = fittest

    if verbose:
        print(f"\nDone: {time.time() - start_time:.1f}s, cost={cost:.2f}")

    return EvolutionResult(chromosome=chromosome, cost=cost, history=history,
                           generations_run=generations_run)
