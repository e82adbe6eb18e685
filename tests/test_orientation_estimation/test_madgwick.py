import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose
from pandas.testing import assert_frame_equal
from scipy.spatial.transform import Rotation
from tpcp.testing import TestAlgorithmMixin

from quatfuse.consts import BETA, GF_SENSOR_COLS, QUAT_COLS, SF_SENSOR_COLS
from quatfuse.orientation_estimation import DegenerateInputError, MadgwickIMU, filter_update_series
from quatfuse.utils.dtypes import Quaternion


def _static_data(n_samples=100):
    data = pd.DataFrame(np.zeros((n_samples, 6)), columns=SF_SENSOR_COLS)
    data["acc_z"] = 9.81
    return data


class TestMetaMadgwickIMU(TestAlgorithmMixin):
    __test__ = True

    ALGORITHM_CLASS = MadgwickIMU

    @pytest.fixture
    def after_action_instance(self):
        return self.ALGORITHM_CLASS().estimate(_static_data(), sampling_rate_hz=100.0)


class TestMadgwickIMU:
    def test_default_beta(self):
        assert MadgwickIMU().beta == pytest.approx(BETA)
        assert MadgwickIMU(gyro_meas_error_rad_s=0.0).beta == 0.0

    def test_static_identity(self):
        data = _static_data()
        mad = MadgwickIMU().estimate(data, sampling_rate_hz=100.0)

        assert len(mad.orientation_) == len(data) + 1
        assert list(mad.orientation_.columns) == QUAT_COLS
        assert mad.orientation_.index.name == "sample"
        assert_allclose(mad.orientation_.to_numpy(), np.tile([1.0, 0, 0, 0], (len(data) + 1, 1)), atol=1e-12)

    def test_matches_series_function(self):
        rng = np.random.default_rng(3)
        data = pd.DataFrame(rng.normal(0, 1, (200, 6)), columns=SF_SENSOR_COLS)
        data["acc_z"] += 9.81
        initial = Rotation.from_euler("xy", [5, -10], degrees=True)

        mad = MadgwickIMU(gyro_meas_error_rad_s=0.2, initial_orientation=initial).estimate(
            data, sampling_rate_hz=50.0
        )

        expected = filter_update_series(
            data[["gyr_x", "gyr_y", "gyr_z"]].to_numpy(),
            data[["acc_x", "acc_y", "acc_z"]].to_numpy(),
            initial,
            sampling_rate_hz=50.0,
            beta=mad.beta,
        )
        assert_allclose(mad.orientation_.to_numpy(), expected, atol=1e-12)

    @pytest.mark.parametrize(
        "initial_orientation",
        [Quaternion(0.0, 1.0, 0.0, 0.0), np.array([0.0, 1.0, 0.0, 0.0]), Rotation.from_euler("x", 180, degrees=True)],
    )
    def test_initial_orientation_types(self, initial_orientation):
        data = _static_data(10)
        # Upside down sensor
        data["acc_z"] *= -1
        mad = MadgwickIMU(initial_orientation=initial_orientation).estimate(data, sampling_rate_hz=100.0)

        assert_allclose(np.abs(mad.orientation_.to_numpy()), np.tile([0, 1.0, 0, 0], (11, 1)), atol=1e-10)

    def test_pure_rotation_around_gravity(self):
        # 90 deg/s around z for 1 s. This is not observable by the acc, so the gyro is integrated.
        data = _static_data(100)
        data["gyr_z"] = np.pi / 2
        mad = MadgwickIMU().estimate(data, sampling_rate_hz=100.0)

        final = mad.orientation_object_[-1]
        assert_allclose(final.as_euler("xyz", degrees=True), [0, 0, 90], atol=0.1)

    def test_rotated_data(self):
        data = _static_data(100)
        data["gyr_z"] = 0.5
        mad = MadgwickIMU().estimate(data, sampling_rate_hz=100.0)

        rotated = mad.rotated_data_
        assert list(rotated.columns) == GF_SENSOR_COLS
        assert len(rotated) == len(data)
        # Rotation around gravity does not change the global acc and gyro direction
        assert_frame_equal(
            rotated,
            data.rename(columns=dict(zip(SF_SENSOR_COLS, GF_SENSOR_COLS))),
            atol=1e-10,
            check_exact=False,
        )

    def test_missing_columns(self):
        data = _static_data().drop(columns=["gyr_y"])
        with pytest.raises(ValueError, match="gyr_y"):
            MadgwickIMU().estimate(data, sampling_rate_hz=100.0)

    def test_degenerate_acc_warns_by_default(self):
        data = _static_data()
        data.loc[10:12, ["acc_x", "acc_y", "acc_z"]] = 0.0
        with pytest.warns(UserWarning, match="3 accelerometer sample"):
            mad = MadgwickIMU().estimate(data, sampling_rate_hz=100.0)
        assert np.all(np.isfinite(mad.orientation_.to_numpy()))

    def test_degenerate_acc_warning_points_to_caller(self):
        data = _static_data()
        data.loc[10, ["acc_x", "acc_y", "acc_z"]] = 0.0
        with pytest.warns(UserWarning) as record:
            MadgwickIMU().estimate(data, sampling_rate_hz=100.0)
        assert record[0].filename == __file__

    def test_degenerate_acc_raise(self):
        data = _static_data()
        data.loc[10, ["acc_x", "acc_y", "acc_z"]] = 0.0
        with pytest.raises(DegenerateInputError):
            MadgwickIMU(degenerate_acc="raise").estimate(data, sampling_rate_hz=100.0)
