"""Command-line interface for the FOV camera model."""

from fovcam.cli.arguments import parse_arguments

__all__ = [
    "parse_arguments",
]
