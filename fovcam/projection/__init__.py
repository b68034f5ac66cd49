"""FOV (ATAN) camera projection models.

This module provides the FOV distortion transform pair, derived-state
computation and the ATANCamera model with its analytic and numerical
Jacobians.
"""

from fovcam.projection.atan_camera import (
    ATANCamera,
    ProjectionStateError,
    camera_parameter_jacobian,
    project_point,
    projection_jacobian,
    ufb_project_point,
    ufb_unproject_point,
    unproject_point,
)
from fovcam.projection.derived_state import DerivedState, compute_derived_state
from fovcam.projection.distortion import FovDistortion, distortion_factor, undistort_radius
from fovcam.projection.frustum import make_frustum_matrix
from fovcam.projection.operations import ProjectionResult

__all__ = [
    "ATANCamera",
    "DerivedState",
    "FovDistortion",
    "ProjectionResult",
    "ProjectionStateError",
    "camera_parameter_jacobian",
    "compute_derived_state",
    "distortion_factor",
    "make_frustum_matrix",
    "project_point",
    "projection_jacobian",
    "ufb_project_point",
    "ufb_unproject_point",
    "undistort_radius",
    "unproject_point",
]
