"""FOV (ATAN) camera model.

Projection and unprojection through the field-of-view distortion model,
analytic and numerical Jacobians, and OpenGL frustum construction.
"""

from fovcam.models import CameraParameters
from fovcam.projection import ATANCamera, ProjectionStateError

__version__ = "0.1.0"

__all__ = [
    "ATANCamera",
    "CameraParameters",
    "ProjectionStateError",
    "__version__",
]
