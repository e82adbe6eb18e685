from typing import Any, Union

import numpy as np
import pandas as pd
from scipy.spatial.transform import Rotation
from tpcp import cf
from typing_extensions import Self, Unpack

from quatfuse._utils_internal.math import DegenerateInputHint
from quatfuse.consts import GYRO_MEAS_ERROR_RAD_S, SF_ACC_COLS, SF_GYR_COLS
from quatfuse.orientation_estimation._filter_update import _run_filter_update_series, beta_from_gyro_error
from quatfuse.orientation_estimation.base import BaseOrientationEstimation
from quatfuse.utils.conversions import to_rotation
from quatfuse.utils.dtypes import Quaternion


class MadgwickIMU(BaseOrientationEstimation):
    """Gradient-descent orientation filter for gyroscope and accelerometer data.

    The algorithm integrates the gyroscope data and corrects each integration step with a single gradient descent
    step, that aligns the estimated direction of gravity with the direction measured by the accelerometer.
    Only the inclination is corrected, the heading is purely based on the gyroscope.
    This implementation follows the IMU variant (without magnetometer) of [1]_.

    Parameters
    ----------
    gyro_meas_error_rad_s
        The expected measurement error of the gyroscope in rad/s.
        It defines the filter gain ``beta = sqrt(3/4) * gyro_meas_error_rad_s``.
        A high value performs large corrections and should only be used if the sensor moves slowly.
        A value of 0 is identical to pure gyroscope integration.
    initial_orientation
        The orientation of the sensor before the first sample.
        Either a :class:`~quatfuse.utils.dtypes.Quaternion`, an array in (w, x, y, z) order or a scipy Rotation.
        It should be close to the actual orientation, otherwise the estimate needs some time to converge.
    degenerate_acc
        How to handle accelerometer samples that can not be used for the correction.
        These are samples with zero magnitude and samples pointing exactly opposite to the estimated gravity
        direction.
        "skip" and "warn" only integrate the gyroscope for these samples ("warn" emits a warning in addition).
        "raise" raises a :class:`~quatfuse.orientation_estimation.DegenerateInputError`.

    Attributes
    ----------
    orientation_
        The orientations as pd.DataFrame with the columns ``q_w, q_x, q_y, q_z``, including the initial
        orientation.
        This means there are len(data) + 1 orientations.
    orientation_object_
        The orientations as a single scipy Rotation object
    rotated_data_
        The data rotated into the global frame using the orientation before each sample.

    Other Parameters
    ----------------
    data
        The data passed to the estimate method.
    sampling_rate_hz
        The sampling rate of this data

    Notes
    -----
    The update step is compiled with *Numba*.
    The first execution of the algorithm will take longer as the methods need to be compiled first.

    .. [1] Madgwick, S. O. H. (2010). An efficient orientation filter for inertial and inertial/magnetic sensor arrays.
           Report x-io and University of Bristol.

    Examples
    --------
    >>> import pandas as pd
    >>> from quatfuse.consts import SF_SENSOR_COLS
    >>> data = pd.DataFrame(..., columns=SF_SENSOR_COLS)
    >>> mad = MadgwickIMU(gyro_meas_error_rad_s=0.1)
    >>> mad = mad.estimate(data, sampling_rate_hz=100)
    >>> mad.orientation_
    <pd.Dataframe with resulting quaternions>

    """

    gyro_meas_error_rad_s: float
    initial_orientation: Union[Quaternion, np.ndarray, Rotation]
    degenerate_acc: DegenerateInputHint

    def __init__(
        self,
        gyro_meas_error_rad_s: float = GYRO_MEAS_ERROR_RAD_S,
        initial_orientation: Union[Quaternion, np.ndarray, Rotation] = cf(np.array([1.0, 0.0, 0.0, 0.0])),
        degenerate_acc: DegenerateInputHint = "warn",
    ) -> None:
        self.gyro_meas_error_rad_s = gyro_meas_error_rad_s
        self.initial_orientation = initial_orientation
        self.degenerate_acc = degenerate_acc

    @property
    def beta(self) -> float:
        """The filter gain derived from ``gyro_meas_error_rad_s``."""
        return beta_from_gyro_error(self.gyro_meas_error_rad_s)

    def estimate(
        self,
        data: pd.DataFrame,
        *,
        sampling_rate_hz: float,
        **_: Unpack[dict[str, Any]],
    ) -> Self:
        """Estimate the orientation of the sensor.

        Parameters
        ----------
        data
            Continuous sensor data including gyro and acc values.
            The gyro data is expected to be in rad/s.
        sampling_rate_hz
            The sampling rate of the data in Hz

        Returns
        -------
        self
            The class instance with all result attributes populated

        """
        self.data = data
        self.sampling_rate_hz = sampling_rate_hz

        missing_cols = [c for c in (*SF_ACC_COLS, *SF_GYR_COLS) if c not in data.columns]
        if missing_cols:
            raise ValueError(f"The data is missing the following columns: {missing_cols}")

        rots = _run_filter_update_series(
            gyro=data[SF_GYR_COLS].to_numpy(),
            acc=data[SF_ACC_COLS].to_numpy(),
            initial_orientation=self.initial_orientation,
            sampling_rate_hz=sampling_rate_hz,
            beta=self.beta,
            degenerate_acc=self.degenerate_acc,
            stacklevel=2,
        )

        self.orientation_object_ = to_rotation(rots)
        return self
