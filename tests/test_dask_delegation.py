"""Tests for dask-backed LabeledArray objects.

Reshape, reduction and masking dispatch to dask and stay lazy; binning,
invert and set_value compute the data first.
"""

import dask.array as da
import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from labelstack import LabeledArray


@pytest.fixture
def lazy_stack(xyzct_stack):
    return xyzct_stack.to_dask(chunks=(3, 5, 1, 2, 2))


class TestLazyOperations:
    """Operations that keep dask data lazy."""

    def test_to_dask_and_compute(self, xyzct_stack, lazy_stack):
        assert isinstance(lazy_stack.data, da.Array)
        assert lazy_stack.dims == xyzct_stack.dims
        assert lazy_stack.voxel_size == xyzct_stack.voxel_size
        assert lazy_stack.to_dask() is lazy_stack

        computed = lazy_stack.compute()
        assert isinstance(computed.data, np.ndarray)
        assert_array_equal(computed.data, xyzct_stack.data)
        assert xyzct_stack.compute() is xyzct_stack

    def test_reshape(self, xyzct_stack, lazy_stack):
        labels = ["t", "c", "z", "y", "x"]
        result = lazy_stack.reshape(labels)
        assert isinstance(result, da.Array)
        assert_array_equal(result.compute(), xyzct_stack.reshape(labels))

    @pytest.mark.parametrize("mode", ["sum", "mean", "max", "min"])
    def test_reduce(self, xyzct_stack, lazy_stack, mode):
        result = lazy_stack.reduce(["c", "z"], mode)
        assert isinstance(result, da.Array)
        assert_allclose(result.compute(), xyzct_stack.reduce(["c", "z"], mode))

    def test_reduce_to_single_axis(self, xyzct_stack, lazy_stack):
        result = lazy_stack.reduce(["z"], "sum").compute()
        assert result.shape == (3,)
        assert_array_equal(result, xyzct_stack.reduce(["z"], "sum"))

    def test_absent_labels_become_singleton_axes(self):
        source = np.arange(12.0).reshape(4, 3)
        lazy = LabeledArray(da.from_array(source, chunks=2), ["x", "y"])

        reshaped = lazy.reshape("yzxt")
        assert isinstance(reshaped, da.Array)
        assert reshaped.shape == (3, 1, 4, 1)
        assert_array_equal(reshaped.compute()[:, 0, :, 0], source.T)

        reduced = lazy.reduce(["t", "x"], "max")
        assert isinstance(reduced, da.Array)
        assert reduced.shape == (1, 4)
        assert_array_equal(reduced.compute(), source.max(axis=1)[np.newaxis])

    def test_apply_mask(self, xyzct_stack, lazy_stack, binary_mask):
        mask = LabeledArray(np.pad(binary_mask.data, ((1, 1), (1, 1))), ["x", "y"])
        result = lazy_stack.apply_mask(mask, ["x", "y", "c"], "max")
        assert isinstance(result, da.Array)
        assert_array_equal(
            result.compute(), xyzct_stack.apply_mask(mask, ["x", "y", "c"], "max")
        )

    def test_dask_mask(self, xyzct_stack, binary_mask):
        data = np.pad(binary_mask.data, ((1, 1), (1, 1)))
        lazy_mask = LabeledArray(da.from_array(data, chunks=3), ["x", "y"])
        eager_mask = LabeledArray(data, ["x", "y"])

        result = xyzct_stack.apply_mask(lazy_mask, ["x", "y"], "sum")
        assert_array_equal(
            np.asarray(result), xyzct_stack.apply_mask(eager_mask, ["x", "y"], "sum")
        )

    def test_global_max_min(self, xyzct_stack, lazy_stack):
        assert lazy_stack.global_max_min() == xyzct_stack.global_max_min()


class TestComputingOperations:
    """Operations that return numpy-backed results."""

    def test_bin_first_two_dims(self, xyzct_stack, lazy_stack):
        binned = lazy_stack.bin_first_two_dims(2)
        assert isinstance(binned.data, np.ndarray)
        assert_array_equal(binned.data, xyzct_stack.bin_first_two_dims(2).data)

    def test_invert(self):
        stack = LabeledArray(da.from_array(np.eye(4), chunks=2), ["x", "y"])
        stack.invert()
        assert isinstance(stack.data, np.ndarray)
        assert_array_equal(stack.data, 1 - np.eye(4))

    def test_set_value(self):
        stack = LabeledArray(da.zeros((3, 3), chunks=2), ["x", "y"])
        stack.set_value(8, 1.0)
        assert isinstance(stack.data, np.ndarray)
        assert stack.data[2, 2] == 1.0

    def test_copy_keeps_dask(self, lazy_stack):
        assert lazy_stack.copy().data is lazy_stack.data
