"""Visualization helpers for the FOV camera model."""

from fovcam.visualization.distortion_grid import visualize_distortion_grid

__all__ = [
    "visualize_distortion_grid",
]
