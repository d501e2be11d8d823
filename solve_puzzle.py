#!/usr/bin/env python
"""
Genetic Jigsaw Solver

Usage:
    python solve_puzzle.py <pieces_dir> (--image <reference> | --rows R --cols C) [options]
    python solve_puzzle.py --scramble <image> --rows R --cols C [options]

Examples:
    python solve_puzzle.py ./pieces --image ./original.jpg --output ./solved.png
    python solve_puzzle.py --scramble ./photo.jpg --rows 8 --cols 8 --seed 1

Architecture:
    Pieces are scored edge-to-edge once; a genetic algorithm then evolves
    arrangements with a compatibility-guided crossover.
"""

import argparse
import os
import sys

from genetic import GAConfig
from genetic.config import DEFAULT_POPULATION_SIZE, DEFAULT_GENERATIONS, DEFAULT_ELITE_COUNT
from genetic.compatibility import DEFAULT_COMPATIBILITY_K
from pipeline import solve_directory, solve_scrambled
from visualization import display_result, save_result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Genetic jigsaw puzzle solver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Crossover priorities:
  1. Pieces both parents agree on
  2. Best buddies already adjacent in a parent
  3. Most compatible available piece
        """
    )
    parser.add_argument("pieces_dir", nargs="?", help="Directory of equally sized piece images")
    parser.add_argument("--image", "-i", help="Reference image used to infer the grid shape")
    parser.add_argument("--scramble", "-s", help="Cut this image into shuffled pieces and solve it")
    parser.add_argument("--rows", "-r", type=int, help="Grid rows")
    parser.add_argument("--cols", "-c", type=int, help="Grid columns")
    parser.add_argument("--output", "-o", help="Output path for solved image")
    parser.add_argument("--figure", help="Save solved image + fitness history figure here")
    parser.add_argument("--population", type=int, default=DEFAULT_POPULATION_SIZE,
                        help=f"Population size (default {DEFAULT_POPULATION_SIZE})")
    parser.add_argument("--generations", type=int, default=DEFAULT_GENERATIONS,
                        help=f"Number of generations (default {DEFAULT_GENERATIONS})")
    parser.add_argument("--elite", type=int, default=DEFAULT_ELITE_COUNT,
                        help=f"Elite chromosomes kept per generation (default {DEFAULT_ELITE_COUNT})")
    parser.add_argument("-k", type=int, default=DEFAULT_COMPATIBILITY_K,
                        help=f"Compatibility list length (default {DEFAULT_COMPATIBILITY_K})")
    parser.add_argument("--workers", type=int, help="Worker threads (default: executor default)")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--max-attempts", type=int,
                        help="Cap on crossover retries per child (default: unbounded)")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress output")
    parser.add_argument("--no-display", action="store_true", help="Don't display result")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.scramble is None and args.pieces_dir is None:
        parser.error("either pieces_dir or --scramble is required")
    if args.scramble is not None and args.pieces_dir is not None:
        parser.error("pieces_dir and --scramble are mutually exclusive")
    if args.scramble is not None and (args.rows is None or args.cols is None):
        parser.error("--scramble needs --rows and --cols")

    source = args.scramble if args.scramble is not None else args.pieces_dir
    if not os.path.exists(source):
        print(f"Error: Not found: {source}")
        sys.exit(1)

    verbose = not args.quiet

    try:
        config = GAConfig(
            population_size=args.population,
            generations=args.generations,
            compatibility_k=args.k,
            elite_count=args.elite,
            workers=args.workers,
            seed=args.seed,
            max_crossover_attempts=args.max_attempts,
        )

        if args.scramble is not None:
            result, solved, _ = solve_scrambled(args.scramble, args.rows, args.cols,
                                                output_path=args.output, config=config,
                                                verbose=verbose)
        else:
            result, solved = solve_directory(args.pieces_dir, reference_image=args.image,
                                             rows=args.rows, cols=args.cols,
                                             output_path=args.output, config=config,
                                             verbose=verbose)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)

    if verbose:
        print(f"\nArrangement: {result.chromosome}")
        print(f"Cost: {result.cost:.4f}")

    if args.figure:
        save_result(solved, result.history, args.figure, cost=result.cost)

    if not args.no_display:
        display_result(solved, result.history, cost=result.cost)

    return result


if __name__ == "__main__":
    main()
