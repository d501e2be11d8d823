"""Image loading, splitting and piece normalization."""
from .image_utils import load_image_bgr, save_image, resize_piece
from .splitting import split_image, scramble_image
from .pieces import load_pieces, normalize_pieces, piece_size_stats, infer_grid_shape
