"""Utility modules for the FOV camera model."""

from fovcam.utils.logging_utils import setup_logging

__all__ = [
    "setup_logging",
]
