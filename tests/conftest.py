"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from fovcam.config import CameraParameterStore
from fovcam.models import CameraParameters
from fovcam.projection import ATANCamera


@pytest.fixture
def default_params() -> CameraParameters:
    """Return the default normalized parameters (w = 0.07)."""

    return CameraParameters()


@pytest.fixture
def pinhole_params() -> CameraParameters:
    """Return the default parameters with distortion disabled."""

    return CameraParameters(w=0.0)


@pytest.fixture
def camera(default_params: CameraParameters) -> ATANCamera:
    """Return a 640x480 camera with the default distortion."""

    store = CameraParameterStore(default_params=default_params)
    return ATANCamera("Camera", (640, 480), store)


@pytest.fixture
def pinhole_camera(pinhole_params: CameraParameters) -> ATANCamera:
    """Return a 640x480 camera without radial distortion."""

    store = CameraParameterStore(default_params=pinhole_params)
    return ATANCamera("Pinhole", (640, 480), store)
