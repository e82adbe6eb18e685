"""Methods to estimate the orientation of an IMU based on the data."""

__all__ = [
    "DegenerateInputError",
    "DegenerateOrientationError",
    "MadgwickIMU",
    "beta_from_gyro_error",
    "filter_update",
    "filter_update_series",
]

from quatfuse._utils_internal.math import DegenerateInputError, DegenerateOrientationError
from quatfuse.orientation_estimation._filter_update import beta_from_gyro_error, filter_update, filter_update_series
from quatfuse.orientation_estimation._madgwick import MadgwickIMU
