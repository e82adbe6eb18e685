import numpy as np
import pytest
from numpy.testing import assert_array_equal

from quatfuse.utils.dtypes import Quaternion, Vector3, as_quaternion_array, as_vector_array


class TestRecords:
    def test_vector_roundtrip(self):
        vec = Vector3(1.0, -2.0, 3.5)
        arr = vec.as_array()
        assert arr.dtype == np.float64
        assert Vector3.from_array(arr) == vec

    def test_quaternion_order(self):
        q = Quaternion.from_array([0.5, 0.1, 0.2, 0.3])
        assert q.w == 0.5
        assert (q.x, q.y, q.z) == (0.1, 0.2, 0.3)

    def test_identity(self):
        assert Quaternion.identity() == (1.0, 0.0, 0.0, 0.0)
        assert Quaternion.identity().norm() == 1.0

    def test_norm(self):
        assert Quaternion(1.0, 1.0, 1.0, 1.0).norm() == pytest.approx(2.0)

    @pytest.mark.parametrize("value", [[1, 2], [1, 2, 3, 4], np.zeros((3, 1))])
    def test_vector_wrong_shape(self, value):
        with pytest.raises(ValueError, match="3 components"):
            Vector3.from_array(value)

    @pytest.mark.parametrize("value", [[1, 2, 3], [1, 2, 3, 4, 5], np.zeros((1, 4))])
    def test_quaternion_wrong_shape(self, value):
        with pytest.raises(ValueError, match="4 components"):
            Quaternion.from_array(value)


class TestAsArray:
    @pytest.mark.parametrize("value", [Vector3(1, 2, 3), (1, 2, 3), [1.0, 2.0, 3.0], np.array([1, 2, 3])])
    def test_as_vector_array(self, value):
        out = as_vector_array(value)
        assert out.dtype == np.float64
        assert_array_equal(out, [1, 2, 3])

    @pytest.mark.parametrize("value", [Quaternion(1, 0, 0, 0), (1, 0, 0, 0), np.array([1, 0, 0, 0])])
    def test_as_quaternion_array(self, value):
        out = as_quaternion_array(value)
        assert out.dtype == np.float64
        assert_array_equal(out, [1, 0, 0, 0])
