"""Implementation of the gradient-descent orientation filter update (IMU variant without magnetometer)."""

from typing import Union

import numpy as np
from numba import njit
from scipy.spatial.transform import Rotation

from quatfuse._utils_internal.fast_quaternion_math import norm, rate_of_change_from_gyro
from quatfuse._utils_internal.math import (
    DegenerateInputHint,
    DegenerateOrientationError,
    _check_degenerate_hint,
    _handle_degenerate_acc,
)
from quatfuse.consts import BETA
from quatfuse.utils.conversions import from_rotation
from quatfuse.utils.dtypes import Quaternion, QuaternionLike, VectorLike, as_quaternion_array, as_vector_array

# Gradients with a smaller norm are treated as zero. This happens when the measured and the estimated gravity
# direction agree up to floating point precision, or when they point in exactly opposite directions.
_GRADIENT_NORM_FLOOR = 1e-10
# Residuals above this norm, together with a vanishing gradient, mark the opposite direction case.
_RESIDUAL_NORM_FLOOR = 1e-6


def beta_from_gyro_error(gyro_meas_error_rad_s: float) -> float:
    """Calculate the filter gain beta from the expected gyroscope measurement error.

    Parameters
    ----------
    gyro_meas_error_rad_s
        The expected error of the gyroscope in rad/s.

    Returns
    -------
    beta
        The gain ``sqrt(3/4) * gyro_meas_error_rad_s``.

    """
    return float(np.sqrt(3.0 / 4.0) * gyro_meas_error_rad_s)


@njit(cache=True)
def _filter_update(gyro, acc, prior_orientation, delta_t, beta):
    q = prior_orientation
    # Quaternion derivative measured by the gyroscope
    qdot = rate_of_change_from_gyro(gyro, q)

    acc_norm = norm(acc)
    is_degenerate = acc_norm == 0.0
    if beta > 0.0 and not is_degenerate:
        ax, ay, az = acc / acc_norm

        # Auxiliary variables to avoid repeated arithmetic
        two_seq_1 = 2.0 * q[0]
        two_seq_2 = 2.0 * q[1]
        two_seq_3 = 2.0 * q[2]

        # Objective function: estimated gravity direction minus the measured one
        f_1 = two_seq_2 * q[3] - two_seq_1 * q[2] - ax
        f_2 = two_seq_1 * q[1] + two_seq_3 * q[3] - ay
        f_3 = 1.0 - two_seq_2 * q[1] - two_seq_3 * q[2] - az

        # Jacobian of the objective function.
        # The stored terms are not negated. The signs are applied in the matrix multiplication below.
        j_11_or_24 = two_seq_3  # J_11 negated in matrix multiplication
        j_12_or_23 = 2.0 * q[3]
        j_13_or_22 = two_seq_1  # J_12 negated in matrix multiplication
        j_14_or_21 = two_seq_2
        j_32 = 2.0 * j_14_or_21  # negated in matrix multiplication
        j_33 = 2.0 * j_11_or_24  # negated in matrix multiplication

        # Gradient: J^T * f
        s = np.empty(4)
        s[0] = j_14_or_21 * f_2 - j_11_or_24 * f_1
        s[1] = j_12_or_23 * f_1 + j_13_or_22 * f_2 - j_32 * f_3
        s[2] = j_12_or_23 * f_2 - j_33 * f_3 - j_13_or_22 * f_1
        s[3] = j_14_or_21 * f_1 + j_11_or_24 * f_2

        grad_norm = norm(s)
        if grad_norm < _GRADIENT_NORM_FLOOR:
            # Either converged or the measured gravity is opposite to the estimated one
            is_degenerate = norm(np.array([f_1, f_2, f_3])) > _RESIDUAL_NORM_FLOOR
        elif norm(s - np.sum(s * q) / np.sum(q * q) * q) < _GRADIENT_NORM_FLOOR * grad_norm:
            # The gradient is parallel to q and would only change its magnitude, which the normalization removes.
            # This also happens for a measured gravity opposite to the estimated one.
            is_degenerate = True
        else:
            # NaN ends up here and propagates to the output
            qdot -= beta * (s / grad_norm)

    # Integrate the corrected rate of change
    q_new = q + qdot * delta_t

    q_norm = norm(q_new)
    if q_norm == 0.0:
        raise DegenerateOrientationError("The integrated quaternion has zero magnitude and can not be normalized.")
    return q_new / q_norm, is_degenerate


@njit(cache=True)
def _filter_update_series(gyro, acc, initial_orientation, delta_t, beta):
    out = np.empty((len(gyro) + 1, 4))
    is_degenerate = np.zeros(len(gyro), dtype=np.bool_)
    out[0] = initial_orientation
    q = initial_orientation
    for i in range(len(gyro)):
        q, degenerate = _filter_update(gyro[i], acc[i], q, delta_t, beta)
        is_degenerate[i] = degenerate
        out[i + 1] = q

    return out, is_degenerate


def filter_update(
    gyro: VectorLike,
    acc: VectorLike,
    prior_orientation: QuaternionLike,
    delta_t: float,
    *,
    beta: float = BETA,
    degenerate_acc: DegenerateInputHint = "skip",
) -> Quaternion:
    """Perform a single update step of the orientation filter.

    The rate of change of the orientation measured by the gyroscope is corrected by a single gradient descent step,
    that pulls the estimated gravity direction towards the gravity direction measured by the accelerometer.
    The corrected rate of change is integrated over ``delta_t`` and the result normalized.

    This function is pure.
    It does not modify any of its inputs and the same inputs always result in the same output.

    Parameters
    ----------
    gyro
        The angular rate in rad/s around the sensor x, y, and z axis.
    acc
        The specific force measured by the accelerometer.
        Only the direction is used, so the unit does not matter.
    prior_orientation
        The previous orientation estimate as unit quaternion in (w, x, y, z) order.
        The magnitude is not checked.
    delta_t
        Time since the previous update in seconds.
    beta
        The filter gain.
        Use :func:`beta_from_gyro_error` to calculate it from the expected gyroscope error.
        A value of 0 results in pure gyroscope integration.
    degenerate_acc
        How to handle an accelerometer sample that can not be used for the correction.
        This is the case for a sample with zero magnitude, and for a sample pointing exactly opposite to the
        gravity direction implied by ``prior_orientation`` (the gradient vanishes, but the orientation is wrong).
        With "skip", only the gyroscope is integrated for this step.
        "warn" does the same, but emits a warning.
        "raise" raises a :class:`~quatfuse.orientation_estimation.DegenerateInputError`.

    Returns
    -------
    orientation
        The new orientation estimate.

    Raises
    ------
    DegenerateOrientationError
        If the integrated quaternion has zero magnitude.

    Notes
    -----
    Non-finite inputs are not validated and result in a non-finite output.

    """
    gyro = as_vector_array(gyro)
    acc = as_vector_array(acc)
    q = as_quaternion_array(prior_orientation)
    _check_degenerate_hint(degenerate_acc)
    q_new, is_degenerate = _filter_update(gyro, acc, q, float(delta_t), float(beta))
    _handle_degenerate_acc(np.array([is_degenerate]), degenerate_acc, "filter_update", stacklevel=2)
    return Quaternion.from_array(q_new)


def filter_update_series(
    gyro: np.ndarray,
    acc: np.ndarray,
    initial_orientation: Union[QuaternionLike, Rotation],
    sampling_rate_hz: float,
    *,
    beta: float = BETA,
    degenerate_acc: DegenerateInputHint = "skip",
) -> np.ndarray:
    """Apply the filter update to a series of samples recorded with a fixed sampling rate.

    Parameters
    ----------
    gyro
        Angular rate in rad/s with shape (n, 3).
    acc
        Accelerometer data with shape (n, 3).
    initial_orientation
        The orientation before the first sample.
        Either a quaternion in (w, x, y, z) order or a single scipy Rotation.
    sampling_rate_hz
        The sampling rate of the data.
        Each update step uses ``delta_t = 1 / sampling_rate_hz``.
    beta
        The filter gain.
    degenerate_acc
        How to handle accelerometer samples that can not be used for the correction.
        See :func:`filter_update`.

    Returns
    -------
    orientations
        Array with shape (n + 1, 4) in (w, x, y, z) order.
        The first row is the initial orientation.

    """
    return _run_filter_update_series(
        gyro, acc, initial_orientation, sampling_rate_hz, beta=beta, degenerate_acc=degenerate_acc, stacklevel=2
    )


def _run_filter_update_series(
    gyro: np.ndarray,
    acc: np.ndarray,
    initial_orientation: Union[QuaternionLike, Rotation],
    sampling_rate_hz: float,
    *,
    beta: float,
    degenerate_acc: DegenerateInputHint,
    stacklevel: int,
) -> np.ndarray:
    # stacklevel follows `warnings.warn`, counted from the caller of this function
    _check_degenerate_hint(degenerate_acc)
    gyro = np.ascontiguousarray(gyro, dtype=np.float64)
    acc = np.ascontiguousarray(acc, dtype=np.float64)
    if gyro.ndim != 2 or gyro.shape[1] != 3 or acc.ndim != 2 or acc.shape[1] != 3:
        raise ValueError(f"Gyro and acc data need to have shape (n, 3). Got {gyro.shape} and {acc.shape}.")
    if len(gyro) != len(acc):
        raise ValueError("Gyro and acc data need to have the same number of samples.")
    if not sampling_rate_hz > 0:
        raise ValueError(f"The sampling rate must be positive. Got {sampling_rate_hz}.")

    if isinstance(initial_orientation, Rotation):
        initial_orientation = from_rotation(initial_orientation)
    initial_orientation = as_quaternion_array(initial_orientation)

    out, is_degenerate = _filter_update_series(gyro, acc, initial_orientation, 1.0 / sampling_rate_hz, float(beta))
    _handle_degenerate_acc(is_degenerate, degenerate_acc, "filter_update_series", stacklevel=stacklevel + 1)
    return out
