"""Low-level image operations."""

import cv2
import numpy as np
from pathlib import Path

IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.bmp', '.tif', '.tiff', '.webp'}


def is_image_file(path) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def load_image_bgr(file_path):
    """Load image using OpenCV (BGR format)."""
    img = cv2.imread(str(file_path))
    if img is None:
        raise ValueError(f"Could not load image: {file_path}")
    return img


def save_image(image: np.ndarray, output_path) -> None:
    """Write an image, creating the parent directory if needed."""
    output_dir = Path(output_path).parent
    if output_dir and str(output_dir) != '.':
        output_dir.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(output_path), image):
        raise ValueError(f"Could not write image: {output_path}")


def resize_piece(piece: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize to exactly width x height with nearest-neighbour sampling."""
    h, w = piece.shape[:2]
    if (w, h) == (width, height):
        return piece
    return cv2.resize(piece, (width, height), interpolation=cv2.INTER_NEAREST)
