"""Piece loading, reconstruction and the end-to-end pipeline."""

import random

import cv2
import numpy as np
import pytest

from conftest import make_gradient_image
from core.image_utils import load_image_bgr, save_image, resize_piece
from core.pieces import load_pieces, normalize_pieces, piece_size_stats, infer_grid_shape
from core.splitting import split_image, scramble_image
from genetic import GAConfig, ConfigurationError
from pipeline import solve_directory, solve_scrambled, reconstruct_image, neighbor_accuracy


FAST_CONFIG = dict(population_size=40, generations=10, elite_count=4, seed=3)


def test_split_and_reconstruct_round_trip(gradient_image, abcd_pieces):
    rebuilt = reconstruct_image(abcd_pieces, [['A', 'B'], ['C', 'D']])
    assert np.array_equal(rebuilt, gradient_image)


def test_split_non_square_grid():
    image = make_gradient_image(2, 3, piece_size=5)
    patches = split_image(image, 2, 3)
    assert len(patches) == 6
    assert all(p.shape == (5, 5, 3) for p in patches)
    assert np.array_equal(patches[4], image[5:10, 5:10])


def test_scramble_solution_rebuilds_image(gradient_image):
    pieces, solution = scramble_image(gradient_image, 2, 2, random.Random(0))
    assert len(pieces) == 4
    assert np.array_equal(reconstruct_image(pieces, solution), gradient_image)


def test_reconstruct_grayscale_with_numbers():
    pieces = {i: np.full((20, 20), i * 50, dtype=np.uint8) for i in range(4)}
    out = reconstruct_image(pieces, [[0, 1], [2, 3]], show_numbers=True)
    assert out.shape == (40, 40)


def test_load_pieces_skips_degenerate_and_non_images(tmp_path, abcd_pieces):
    for pid, patch in abcd_pieces.items():
        save_image(patch, tmp_path / f"{pid}.png")
    save_image(np.zeros((1, 4, 3), dtype=np.uint8), tmp_path / "sliver.png")
    (tmp_path / "notes.txt").write_text("not an image")

    pieces = load_pieces(tmp_path)
    assert sorted(pieces) == ['A.png', 'B.png', 'C.png', 'D.png']
    assert np.array_equal(pieces['A.png'], abcd_pieces['A'])


def test_load_pieces_missing_directory(tmp_path):
    with pytest.raises(ValueError):
        load_pieces(tmp_path / "nope")
    with pytest.raises(ValueError):
        load_image_bgr(tmp_path / "nope.png")


def test_normalize_to_average_size():
    pieces = {
        'a': np.zeros((10, 12, 3), dtype=np.uint8),
        'b': np.zeros((12, 14, 3), dtype=np.uint8),
    }
    assert piece_size_stats(pieces) == (13, 11, 12, 10, 14, 12)
    normalized = normalize_pieces(pieces)
    assert {p.shape for p in normalized.values()} == {(11, 13, 3)}
    assert resize_piece(pieces['a'], 12, 10) is pieces['a']


def test_infer_grid_shape():
    assert infer_grid_shape((400, 600, 3), (100, 100, 3)) == (4, 6)
    assert infer_grid_shape((398, 612), (100, 101)) == (4, 6)


def test_neighbor_accuracy():
    solution = [['A', 'B'], ['C', 'D']]
    assert neighbor_accuracy(solution, solution) == 1.0
    assert neighbor_accuracy([['B', 'A'], ['D', 'C']], solution) == 0.5
    assert neighbor_accuracy([['D', 'C'], ['B', 'A']], solution) == 0.0


def test_solve_directory_end_to_end(tmp_path, gradient_image):
    pieces, solution = scramble_image(gradient_image, 2, 2, random.Random(5))
    pieces_dir = tmp_path / "pieces"
    for pid, patch in pieces.items():
        save_image(patch, pieces_dir / f"{pid}.png")
    reference = tmp_path / "reference.png"
    save_image(gradient_image, reference)
    output = tmp_path / "out" / "solved.png"

    result, solved = solve_directory(str(pieces_dir), reference_image=str(reference),
                                     output_path=str(output),
                                     config=GAConfig(**FAST_CONFIG), verbose=False)

    expected = [[f"{pid}.png" for pid in row] for row in solution]
    assert result.chromosome == expected
    assert np.array_equal(solved, gradient_image)
    assert np.array_equal(cv2.imread(str(output)), gradient_image)


def test_solve_directory_needs_grid_shape(tmp_path, abcd_pieces):
    for pid, patch in abcd_pieces.items():
        save_image(patch, tmp_path / f"{pid}.png")
    with pytest.raises(ValueError):
        solve_directory(str(tmp_path), verbose=False)
    with pytest.raises(ConfigurationError):
        solve_directory(str(tmp_path), rows=3, cols=3, verbose=False)


def test_solve_scrambled(tmp_path, gradient_image, capsys):
    image_path = tmp_path / "image.png"
    save_image(gradient_image, image_path)

    result, solved, solution = solve_scrambled(str(image_path), 2, 2,
                                               config=GAConfig(**FAST_CONFIG), verbose=True)

    assert result.chromosome == solution
    assert np.array_equal(solved, gradient_image)
    out = capsys.readouterr().out
    assert "Generation" in out or "Perfect" in out
    assert "Neighbour accuracy: 100.0%" in out
