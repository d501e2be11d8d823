"""Display utilities for puzzle visualization."""

import cv2
import numpy as np
import matplotlib.pyplot as plt
from typing import List, Optional
from pathlib import Path


def _to_rgb(image: np.ndarray) -> np.ndarray:
    # Convert BGR to RGB for display
    if len(image.shape) == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return image


def plot_fitness_history(ax, history: List[float]):
    """Best cost per generation on the given axes."""
    ax.plot(range(1, len(history) + 1), history, marker='o', markersize=3)
    ax.set_xlabel("Generation")
    ax.set_ylabel("Best cost")
    ax.set_title("Fitness history")
    ax.grid(True, alpha=0.3)


def _build_result_figure(solved: np.ndarray, history: List[float],
                         cost: Optional[float], figsize: tuple):
    fig, axes = plt.subplots(1, 2, figsize=figsize)

    title = "Solved"
    if cost is not None:
        title = f"Solved (Cost: {cost:.2f})"

    axes[0].imshow(_to_rgb(solved), cmap='gray' if solved.ndim == 2 else None)
    axes[0].set_title(title)
    axes[0].axis('off')

    plot_fitness_history(axes[1], history)

    plt.tight_layout()
    return fig


def display_result(solved: np.ndarray, history: List[float],
                   cost: Optional[float] = None, figsize: tuple = (12, 6)):
    """
    Display the solved image next to the per-generation best cost.

    Args:
        solved: Reconstructed image (BGR)
        history: Best cost per generation
        cost: Optional final cost to display
        figsize: Figure size
    """
    _build_result_figure(solved, history, cost, figsize)
    plt.show()


def save_result(solved: np.ndarray, history: List[float], output_path: str,
                cost: Optional[float] = None, dpi: int = 150):
    """
    Save the solved image and fitness history figure to file.

    Args:
        solved: Reconstructed image (BGR)
        history: Best cost per generation
        output_path: Path to save the figure
        cost: Optional final cost to display
        dpi: Output DPI
    """
    fig = _build_result_figure(solved, history, cost, (12, 6))

    output_dir = Path(output_path).parent
    if output_dir and str(output_dir) != '.':
        output_dir.mkdir(parents=True, exist_ok=True)

    fig.savefig(output_path, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
