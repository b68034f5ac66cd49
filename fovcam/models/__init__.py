"""Data models for the FOV camera model."""

from fovcam.models.camera_params import DISTORTION_INDEX, NUM_CAMERA_PARAMETERS, CameraParameters

__all__ = [
    "CameraParameters",
    "DISTORTION_INDEX",
    "NUM_CAMERA_PARAMETERS",
]
