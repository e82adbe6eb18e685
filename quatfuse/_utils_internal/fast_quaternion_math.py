"""Numba accelerated helpers for quaternions in (w, x, y, z) order."""

import numpy as np
from numba import njit


@njit(cache=True)
def rate_of_change_from_gyro(gyro, q):
    """Rate of change of the quaternion caused by the angular rate ``gyro`` (rad/s).

    This is ``0.5 * q * [0, gyro]`` written out per component.
    """
    half_q1 = 0.5 * q[0]
    half_q2 = 0.5 * q[1]
    half_q3 = 0.5 * q[2]
    half_q4 = 0.5 * q[3]
    wx, wy, wz = gyro

    qdot = np.empty(4)
    qdot[0] = -half_q2 * wx - half_q3 * wy - half_q4 * wz
    qdot[1] = half_q1 * wx + half_q3 * wz - half_q4 * wy
    qdot[2] = half_q1 * wy - half_q2 * wz + half_q4 * wx
    qdot[3] = half_q1 * wz + half_q2 * wy - half_q3 * wx
    return qdot


@njit(cache=True)
def gravity_in_sensor_frame(q):
    """Direction of the global z-axis expressed in the sensor frame described by ``q``."""
    q1, q2, q3, q4 = q
    out = np.empty(3)
    out[0] = 2.0 * q2 * q4 - 2.0 * q1 * q3
    out[1] = 2.0 * q1 * q2 + 2.0 * q3 * q4
    out[2] = 1.0 - 2.0 * q2 * q2 - 2.0 * q3 * q3
    return out


@njit(cache=True)
def norm(vec):
    # Scaled by the largest component, so that the squares neither underflow nor overflow
    scale = np.max(np.abs(vec))
    if scale == 0.0:
        return 0.0
    return scale * np.sqrt(np.sum((vec / scale) ** 2))
