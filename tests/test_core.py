"""Tests for the LabeledArray data model."""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from labelstack import (
    AxisLabel,
    DuplicateLabelError,
    InvalidLabelError,
    InvalidValueDomainError,
    LabelCountMismatch,
    LabeledArray,
    MissingLabelError,
    set_tags,
)


class TestAttachLabels:
    def test_basic_construction(self, xyc_stack):
        assert xyc_stack.labels == (AxisLabel.X, AxisLabel.Y, AxisLabel.C)
        assert xyc_stack.dims == ["x", "y", "c"]
        assert xyc_stack.shape == (4, 3, 2)
        assert xyc_stack.ndim == 3
        assert xyc_stack.dtype == np.uint16
        assert xyc_stack.dim_sizes == {"x": 4, "y": 3, "c": 2}

    def test_from_array_with_label_string(self):
        stack = LabeledArray.from_array(np.zeros((2, 3)), "yx", tag="img")
        assert stack.dims == ["y", "x"]
        assert stack.tag == "img"

    def test_lists_are_converted(self):
        stack = LabeledArray([[1, 2], [3, 4]], ["x", "y"])
        assert isinstance(stack.data, np.ndarray)

    @pytest.mark.parametrize("labels", [["x"], ["x", "y", "z"]])
    def test_label_count_mismatch(self, labels):
        with pytest.raises(LabelCountMismatch, match="Got"):
            LabeledArray(np.zeros((2, 3)), labels)

    def test_zero_dimensional_data_is_rejected(self):
        with pytest.raises(LabelCountMismatch):
            LabeledArray(np.float64(3.0), [])

    def test_invalid_label(self):
        with pytest.raises(InvalidLabelError):
            LabeledArray(np.zeros((2, 3)), ["x", "w"])

    def test_non_string_label(self):
        with pytest.raises(InvalidLabelError):
            LabeledArray(np.zeros((2, 3)), ["x", 1])

    def test_duplicate_label(self):
        with pytest.raises(DuplicateLabelError):
            LabeledArray(np.zeros((2, 3)), ["x", "x"])

    def test_count_is_checked_before_label_values(self):
        with pytest.raises(LabelCountMismatch):
            LabeledArray(np.zeros((2, 3)), ["w"])

    def test_repr(self, xyc_stack):
        text = repr(xyc_stack)
        assert "dims=['x', 'y', 'c']" in text
        assert "shape=(4, 3, 2)" in text


class TestDimensions:
    def test_get_dim(self, xyc_stack):
        assert xyc_stack.get_dim("x") == 4
        assert xyc_stack.get_dim(AxisLabel.C) == 2
        assert xyc_stack.get_dim("z") == 1
        assert xyc_stack.get_dim(["y"]) == 3

    def test_get_dim_single_label_only(self, xyc_stack):
        with pytest.raises(ValueError, match="only one label"):
            xyc_stack.get_dim(["x", "y"])

    def test_kind_checks(self, xyc_stack, xyzct_stack):
        assert not xyc_stack.is_volume()
        assert not xyc_stack.is_timeseries()
        assert xyc_stack.is_channel()
        assert xyzct_stack.is_volume()
        assert xyzct_stack.is_timeseries()

    def test_singleton_z_is_not_a_volume(self):
        stack = LabeledArray(np.zeros((3, 3, 1)), ["x", "y", "z"])
        assert not stack.is_volume()

    def test_get_label_permutation(self, xyc_stack):
        result = xyc_stack.get_label_permutation(["c", "z"])
        assert result.indices == (2, None)
        with pytest.raises(MissingLabelError):
            xyc_stack.get_label_permutation(["c", "z"], must_exist=True)


class TestBins:
    def test_channels_from_reduced_image(self, xyc_stack):
        ch0, ch1 = xyc_stack.get_bins(None, "sum", "c", [0, 1], ["x", "y", "c"])
        assert_array_equal(ch0, xyc_stack.data[..., 0])
        assert_array_equal(ch1, xyc_stack.data[..., 1])

    def test_bin_label_is_appended_with_warning(self, xyzct_stack):
        with pytest.warns(UserWarning, match="Bin label"):
            (bins,) = xyzct_stack.get_bins(None, "max", ["c"], 1, ["x", "y"])
        assert bins.shape == (6, 5)
        assert_array_equal(bins, xyzct_stack.data[:, :, :, 1, :].max(axis=(2, 3)))

    def test_sequence_index_keeps_axis(self, xyc_stack):
        (both,) = xyc_stack.get_bins(None, "sum", "c", [[1, 0]], ["c", "x", "y"])
        assert both.shape == (2, 4, 3)
        assert_array_equal(both[0], xyc_stack.data[..., 1])

    def test_masked_bins(self, xyc_stack, binary_mask):
        (ch1,) = xyc_stack.get_bins(binary_mask, "sum", "c", [1], ["x", "y", "c"])
        assert np.isnan(ch1[0, 0])
        assert ch1[1, 1] == 111

    def test_invalid_index(self, xyc_stack):
        with pytest.raises(ValueError, match="not a valid index"):
            xyc_stack.get_bins(None, "sum", "c", [2], ["x", "y", "c"])

    def test_more_than_one_bin_label(self, xyc_stack):
        with pytest.raises(ValueError, match="one bin label"):
            xyc_stack.get_bins(None, "sum", ["c", "z"], [0], ["x", "y", "c"])


class TestVoxelSizeAndDisplay:
    def test_voxel_size_2d_and_volume(self, xyc_stack, xyzct_stack):
        assert np.isnan(xyc_stack.get_voxel_size()).all()
        assert xyc_stack.get_voxel_size().shape == (2,)
        assert_array_equal(xyzct_stack.get_voxel_size(), [0.2, 0.2, 1.0])

    def test_set_voxel_size_returns_copy(self, xyc_stack):
        updated = xyc_stack.set_voxel_size(x=0.1, y=0.3)
        assert updated is not xyc_stack
        assert updated.voxel_size == {"x": 0.1, "y": 0.3}
        assert xyc_stack.voxel_size == {}
        assert updated.set_voxel_size(y=None).voxel_size == {"x": 0.1}

    def test_display_scale_factors(self, xyzct_stack, xyc_stack):
        assert_allclose(xyzct_stack.display_scale_factors(), [1.0, 1.0, 5.0])
        assert_array_equal(xyc_stack.display_scale_factors(), [1.0, 1.0])

    def test_display_image_sums_to_xyz(self, xyzct_stack):
        image = xyzct_stack.get_display_image()
        assert image.shape == (6, 5, 3)
        assert_array_equal(image, xyzct_stack.data.sum(axis=(3, 4)))

    def test_display_image_of_2d_data(self, xyc_stack):
        assert xyc_stack.get_display_image().shape == (4, 3, 1)


class TestMutation:
    def test_invert_binary(self, binary_mask):
        original = binary_mask.data.copy()
        result = binary_mask.invert()

        assert result is binary_mask
        assert binary_mask.is_inverted
        assert binary_mask.data.dtype == np.uint8
        assert_array_equal(binary_mask.data, 1 - original)

        binary_mask.invert()
        assert not binary_mask.is_inverted
        assert_array_equal(binary_mask.data, original)

    def test_invert_non_binary_fails_without_change(self, xyc_stack):
        before = xyc_stack.data.copy()
        with pytest.raises(InvalidValueDomainError):
            xyc_stack.invert()
        assert not xyc_stack.is_inverted
        assert_array_equal(xyc_stack.data, before)

    def test_set_value_flat_index(self):
        stack = LabeledArray(np.zeros((2, 3)), ["x", "y"])
        stack.set_value(4, 7.0)
        assert stack.data[1, 1] == 7.0

    def test_set_value_pairs_and_broadcast(self):
        stack = LabeledArray(np.zeros((2, 3)), ["x", "y"])
        stack.set_value([0, 5], [1.0, 2.0])
        stack.set_value([1, 2], 9.0)
        assert_array_equal(stack.data, [[1, 9, 9], [0, 0, 2]])

    def test_set_value_does_not_touch_caller_array(self):
        source = np.zeros((2, 2))
        stack = LabeledArray(source, ["x", "y"])
        stack.set_value(0, 1.0)
        assert source[0, 0] == 0.0

    def test_set_value_incompatible_lengths(self):
        stack = LabeledArray(np.zeros((2, 3)), ["x", "y"])
        with pytest.raises(ValueError, match="Incompatible"):
            stack.set_value([0, 1, 2], [1.0, 2.0])
        assert not stack.data.any()

    def test_set_tag_and_set_tags(self, xyc_stack, binary_mask):
        assert xyc_stack.set_tag("a").tag == "a"

        set_tags([xyc_stack, binary_mask], "same")
        assert xyc_stack.tag == binary_mask.tag == "same"

        set_tags([xyc_stack, binary_mask], ["first", "second"])
        assert (xyc_stack.tag, binary_mask.tag) == ("first", "second")

        with pytest.raises(ValueError, match="Number of tags"):
            set_tags([xyc_stack, binary_mask], ["only-one"])

    def test_copy_is_independent(self, xyc_stack):
        copied = xyc_stack.copy()
        copied.set_value(0, 999)
        assert xyc_stack.data.flat[0] == 0
        assert copied.dims == xyc_stack.dims
