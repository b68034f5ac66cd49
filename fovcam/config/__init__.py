"""Configuration layer: config file management and camera parameter storage."""

from fovcam.config.config_manager import PARAMETERS_SUFFIX, ConfigManager
from fovcam.config.loader import load_config_file
from fovcam.config.parameter_store import CameraParameterStore
from fovcam.config.resolver import apply_env_overrides, merge_overrides

__all__ = [
    "PARAMETERS_SUFFIX",
    "CameraParameterStore",
    "ConfigManager",
    "apply_env_overrides",
    "load_config_file",
    "merge_overrides",
]
