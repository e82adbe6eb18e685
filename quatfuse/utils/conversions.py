"""Conversion between the quaternion records, scipy rotations and IMU data in different frames."""

import numpy as np
import pandas as pd
from scipy.spatial.transform import Rotation

from quatfuse._utils_internal.fast_quaternion_math import gravity_in_sensor_frame
from quatfuse.consts import GF_SENSOR_COLS, SF_ACC_COLS, SF_GYR_COLS, SF_SENSOR_COLS
from quatfuse.utils.dtypes import Quaternion, QuaternionLike, Vector3, as_quaternion_array


def to_rotation(quat: QuaternionLike) -> Rotation:
    """Convert quaternions in (w, x, y, z) order to a scipy Rotation.

    Parameters
    ----------
    quat
        A single quaternion or an array with shape (n, 4).

    Returns
    -------
    rotation
        The rotation(s) from the sensor frame into the global frame.

    """
    arr = np.asarray(quat, dtype=np.float64)
    if arr.ndim == 1:
        arr = as_quaternion_array(arr)
    return Rotation.from_quat(np.roll(arr, -1, axis=-1))


def from_rotation(rotation: Rotation) -> Quaternion:
    """Convert a single scipy Rotation to a :class:`~quatfuse.utils.dtypes.Quaternion`."""
    if not rotation.single:
        raise ValueError("Only a single rotation can be converted to a quaternion record.")
    x, y, z, w = rotation.as_quat()
    return Quaternion(float(w), float(x), float(y), float(z))


def gravity_from_orientation(orientation: QuaternionLike) -> Vector3:
    """Calculate the gravity direction an accelerometer would measure at rest in the given orientation.

    This is the global z-axis ``[0, 0, 1]`` expressed in the sensor frame.
    If the accelerometer measures exactly this direction, the orientation filter applies no correction.
    """
    return Vector3.from_array(gravity_in_sensor_frame(as_quaternion_array(orientation)))


def transform_to_global_frame(data: pd.DataFrame, orientations: Rotation) -> pd.DataFrame:
    """Transform IMU data from the sensor frame to the global frame using the given rotations.

    Parameters
    ----------
    data
        The data to transform with the columns ``acc_x, acc_y, acc_z, gyr_x, gyr_y, gyr_z``.
    orientations
        One rotation per sample as estimated by the orientation estimation.

    Returns
    -------
    transformed_data
        The transformed data with the columns ``acc_gx, acc_gy, acc_gz, gyr_gx, gyr_gy, gyr_gz``.

    """
    if not len(data) == len(orientations):
        raise ValueError(
            "The data and the orientations need to have the same length. "
            "Orientation estimation methods return n+1 orientations. "
            "In this case, use `orientations[:-1]`."
        )
    rotated_data = data[SF_SENSOR_COLS].copy()
    rotated_data[SF_GYR_COLS] = orientations.apply(rotated_data[SF_GYR_COLS].to_numpy(copy=True))
    rotated_data[SF_ACC_COLS] = orientations.apply(rotated_data[SF_ACC_COLS].to_numpy(copy=True))
    return rotated_data.rename(columns=dict(zip(SF_SENSOR_COLS, GF_SENSOR_COLS)))


__all__ = ["from_rotation", "gravity_from_orientation", "to_rotation", "transform_to_global_frame"]
