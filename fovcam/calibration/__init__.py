"""Calibration support: reprojection residuals for external optimizers."""

from fovcam.calibration.reprojection_error import ReprojectionErrorEvaluator

__all__ = [
    "ReprojectionErrorEvaluator",
]
