"""Compatibility lists and best buddies."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from genetic.compatibility import CompatibilityIndex
from genetic.direction import Direction, ALL_DIRECTIONS
from genetic.dissimilarity import compute_dissimilarity_matrices
from genetic.errors import ConfigurationError, UnknownPieceError


def test_list_length_is_min_of_k_and_universe(random_pieces):
    n = len(random_pieces)
    for k, expected in [(1, 1), (5, 5), (n - 1, n - 1), (100, n - 1)]:
        index = CompatibilityIndex.from_pieces(random_pieces, k=k)
        for pid in random_pieces:
            for direction in ALL_DIRECTIONS:
                assert len(index.ranked_neighbors(pid, direction)) == expected


def test_lists_sorted_without_self_or_duplicates(random_pieces):
    index = CompatibilityIndex.from_pieces(random_pieces, k=100)
    for pid in random_pieces:
        for direction in ALL_DIRECTIONS:
            ranked = index.ranked_neighbors(pid, direction)
            scores = [score for score, _ in ranked]
            neighbours = [other for _, other in ranked]
            assert all(a < b for a, b in zip(scores, scores[1:]))
            assert pid not in neighbours
            assert len(set(neighbours)) == len(neighbours)


def test_best_buddies_are_symmetric(random_pieces):
    index = CompatibilityIndex.from_pieces(random_pieces)
    for a, b, direction in index.best_buddies:
        assert index.best_buddy(a, direction) == b
        assert index.best_buddy(b, direction.inverse) == a
        assert (b, a, direction.inverse) in index.best_buddies


def test_best_buddies_follow_top_matches(random_pieces):
    index = CompatibilityIndex.from_pieces(random_pieces)
    for pid in random_pieces:
        for direction in ALL_DIRECTIONS:
            top = index.ranked_neighbors(pid, direction)[0][1]
            reverse_top = index.ranked_neighbors(top, direction.inverse)[0][1]
            expected = top if reverse_top == pid else None
            assert index.best_buddy(pid, direction) == expected


def test_gradient_puzzle_buddies(abcd_pieces):
    index = CompatibilityIndex.from_pieces(abcd_pieces)
    assert index.best_buddy('A', Direction.RIGHT) == 'B'
    assert index.best_buddy('B', Direction.LEFT) == 'A'
    assert index.best_buddy('A', Direction.DOWN) == 'C'
    assert index.best_buddy('D', Direction.UP) == 'B'
    assert index.ranked_neighbors('C', Direction.RIGHT)[0] == (pytest.approx(60.0), 'D')


def test_from_matrices_reuses_precomputed_scores(abcd_pieces):
    matrices = compute_dissimilarity_matrices(abcd_pieces)
    index = CompatibilityIndex.from_matrices(matrices, k=2)
    assert len(index) == 4
    assert 'A' in index and 'Z' not in index
    assert sorted(index.piece_ids) == ['A', 'B', 'C', 'D']
    for score, other in index.ranked_neighbors('A', Direction.RIGHT):
        assert score == matrices.lookup('A', other, Direction.RIGHT)


def test_unknown_piece_is_fatal(abcd_pieces):
    index = CompatibilityIndex.from_pieces(abcd_pieces)
    with pytest.raises(UnknownPieceError):
        index.ranked_neighbors('Z', Direction.UP)
    with pytest.raises(KeyError):
        index.best_buddy('Z', Direction.UP)


def test_single_piece_universe():
    index = CompatibilityIndex.from_pieces({'only': np.zeros((3, 3, 3), dtype=np.uint8)})
    for direction in ALL_DIRECTIONS:
        assert index.ranked_neighbors('only', direction) == []
        assert index.best_buddy('only', direction) is None
    assert index.best_buddies == set()


def test_invalid_k(random_pieces):
    with pytest.raises(ConfigurationError):
        CompatibilityIndex.from_pieces(random_pieces, k=0)


def test_executor_builds_the_same_index(random_pieces):
    serial = CompatibilityIndex.from_pieces(random_pieces, k=5)
    with ThreadPoolExecutor(max_workers=3) as executor:
        threaded = CompatibilityIndex.from_pieces(random_pieces, k=5, executor=executor)
    assert threaded.best_buddies == serial.best_buddies
    for pid in random_pieces:
        for direction in ALL_DIRECTIONS:
            assert threaded.ranked_neighbors(pid, direction) == serial.ranked_neighbors(pid, direction)
