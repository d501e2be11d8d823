"""Shared fixtures: synthetic rasters with known solutions."""

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.splitting import split_image


def make_gradient_image(rows: int, cols: int, piece_size: int = 4) -> np.ndarray:
    """
    Image whose red channel grows with the column and green with the row.

    Neighbouring pixel lines differ by a constant step, so every correct
    seam is the unique cheapest one.
    """
    h, w = rows * piece_size, cols * piece_size
    step = 240 // max(h, w)
    yy, xx = np.mgrid[0:h, 0:w]
    image = np.zeros((h, w, 3), dtype=np.uint8)
    image[..., 0] = (xx * step).astype(np.uint8)
    image[..., 1] = (yy * step).astype(np.uint8)
    return image


@pytest.fixture
def gradient_image():
    # 8x8 image, step 30 per pixel
    return make_gradient_image(2, 2)


@pytest.fixture
def abcd_pieces(gradient_image):
    """
    2x2 puzzle: A B on top, C D below.

    A-B and C-D are the unique best horizontal seams, A-C and B-D the
    unique best vertical seams; each correct seam scores 60.
    """
    patches = split_image(gradient_image, 2, 2)
    return dict(zip("ABCD", patches))


@pytest.fixture
def random_pieces():
    rng = np.random.default_rng(0)
    return {i: rng.random(size=(5, 6, 3)) * 255.0 for i in range(12)}
