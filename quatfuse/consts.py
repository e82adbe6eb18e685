"""A set of universal constants and definitions."""

from typing import Final

import numpy as np

#: Gyroscope measurement error in rad/s (5 deg/s).
#: The literal value of pi is used to match the published reference implementation.
GYRO_MEAS_ERROR_RAD_S: Final = 3.14159265358979 * (5.0 / 180.0)

#: Filter gain derived from the gyroscope measurement error
BETA: Final = float(np.sqrt(3.0 / 4.0) * GYRO_MEAS_ERROR_RAD_S)

#: Gyro cols in sensor frame
SF_GYR_COLS = ["gyr_x", "gyr_y", "gyr_z"]

#: Acc cols
SF_ACC_COLS = ["acc_x", "acc_y", "acc_z"]

#: Sensor cols
SF_SENSOR_COLS = [*SF_ACC_COLS, *SF_GYR_COLS]

#: Acc cols in the global frame
GF_ACC_COLS = ["acc_gx", "acc_gy", "acc_gz"]

#: Gyro cols in the global frame
GF_GYR_COLS = ["gyr_gx", "gyr_gy", "gyr_gz"]

#: Sensor cols in the global frame
GF_SENSOR_COLS = [*GF_ACC_COLS, *GF_GYR_COLS]

#: Quaternion cols (scalar first)
QUAT_COLS = ["q_w", "q_x", "q_y", "q_z"]
