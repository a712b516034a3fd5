"""LabeledArray: an N-dimensional image whose axes are named x, y, z, t, c.

This module provides the data model that the array engines operate on:

- LabeledArray: numpy or dask data plus one label per axis, validated when
  the labels are attached
- set_tags: tag bookkeeping for several stacks at once

Labels that an array does not carry are treated as size-1 axes that do not
exist, which is different from an axis that exists with size 1: absent axes
are never reduced and never block a reshape.

Key methods:
    reshape: permute to a label order without losing axes
    reduce: permute and collapse all other axes (sum/mean/max/min)
    apply_mask: reduce and multiply by a labeled mask, zero mask -> NaN
    bin_first_two_dims: block-average two axes for every slice of the rest
    global_max_min: channel-summed intensity range for display scaling
"""

from __future__ import annotations

import warnings
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import attrs
import dask.array as da
import numpy as np
from attrs import define, field

from .binning import bin_array, binning_order
from .enums import AxisLabel, ReductionMode
from .exceptions import InvalidValueDomainError, LabelCountMismatch
from .logging import get_logger
from .masking import apply_mask
from .permutation import (
    LabelLike,
    PermutationResult,
    check_unique,
    normalize_label,
    normalize_labels,
    resolve_permutation,
)
from .reduction import reduce_array
from .reshape import reshape_array
from .stats import channel_means, global_extrema

logger = get_logger(__name__)

ModeLike = Union[str, ReductionMode]


def _convert_voxel_size(value: Optional[Dict[LabelLike, float]]) -> Dict[str, float]:
    if not value:
        return {}
    return {
        normalize_label(label).value: float(size)
        for label, size in value.items()
        if size is not None
    }


@define(eq=False)
class LabeledArray:
    """
    N-dimensional image with one semantic label per axis.

    Attributes:
        tag (str): Free-form name of the image (e.g. the source file stem).
        voxel_size (dict): Physical size per label, e.g. {'x': 1e-7}.
            Only used for display scaling.

    Examples:
        >>> stack = LabeledArray(np.zeros((64, 32, 3)), ["x", "y", "c"])
        >>> stack.dims
        ['x', 'y', 'c']
        >>> stack.reduce(["y", "x"], "max").shape
        (32, 64)
    """

    _data: Any
    _labels: Tuple[AxisLabel, ...]
    tag: str = ""
    voxel_size: Dict[str, float] = field(factory=dict, converter=_convert_voxel_size)
    _is_inverted: bool = False

    def __attrs_post_init__(self) -> None:
        data = self._data
        if not isinstance(data, (np.ndarray, da.Array)):
            data = np.asarray(data)

        labels = self._labels
        labels = (labels,) if isinstance(labels, AxisLabel) else tuple(labels)

        if data.ndim == 0 or len(labels) != data.ndim:
            raise LabelCountMismatch(
                "Number of labels must be equal to number of dimensions image. "
                f"Got {len(labels)} labels and {data.ndim} dimensions."
            )
        labels = normalize_labels(labels)
        check_unique(labels)

        self._data = data
        self._labels = labels

    @classmethod
    def from_array(
        cls,
        data: Any,
        labels: Iterable[LabelLike],
        tag: str = "",
        voxel_size: Optional[Dict[LabelLike, float]] = None,
    ) -> LabeledArray:
        """
        Attach labels to an array.

        Args:
            data: numpy array, dask array or anything numpy can convert
            labels: One label per axis, e.g. ["x", "y", "c"] or "xyc"
            tag: Name of the image
            voxel_size: Physical size per label

        Raises:
            LabelCountMismatch: If the number of labels differs from the rank
            InvalidLabelError: If a label is not one of x, y, z, t, c
            DuplicateLabelError: If a label is used twice
        """
        return cls(data, labels, tag=tag, voxel_size=voxel_size)

    # Array properties
    @property
    def data(self) -> Any:
        """The image data (numpy or dask array)."""
        return self._data

    @property
    def labels(self) -> Tuple[AxisLabel, ...]:
        """Axis labels in axis order."""
        return self._labels

    @property
    def dims(self) -> List[str]:
        """Axis labels as plain strings."""
        return [label.value for label in self._labels]

    @property
    def shape(self) -> tuple:
        return self._data.shape

    @property
    def ndim(self) -> int:
        return self._data.ndim

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def dim_sizes(self) -> Dict[str, int]:
        """Size per present label."""
        return dict(zip(self.dims, self.shape))

    @property
    def is_inverted(self) -> bool:
        """True if the values were inverted an odd number of times."""
        return self._is_inverted

    # Dimension queries
    def get_dim(self, label: LabelLike) -> int:
        """Size along `label`; labels that are not in the data have size 1."""
        if isinstance(label, (list, tuple)):
            if len(label) != 1:
                raise ValueError("Please provide only one label.")
            label = label[0]
        (index,) = resolve_permutation(self._labels, (label,)).indices
        return 1 if index is None else self.shape[index]

    def is_volume(self) -> bool:
        """True if the z dimension is present with more than one slice."""
        return self.get_dim(AxisLabel.Z) > 1

    def is_timeseries(self) -> bool:
        """True if the t dimension is present with more than one frame."""
        return self.get_dim(AxisLabel.T) > 1

    def is_channel(self) -> bool:
        """True if the c dimension is present with more than one channel."""
        return self.get_dim(AxisLabel.C) > 1

    def get_label_permutation(
        self, labels: Iterable[LabelLike], must_exist: bool = False
    ) -> PermutationResult:
        """Resolve `labels` against the axes of this array."""
        return resolve_permutation(self._labels, labels, must_exist=must_exist)

    # Engine front-ends
    def reshape(self, labels: Iterable[LabelLike]) -> Any:
        """Permute the data to `labels` without dropping axes (see reshape_array)."""
        return reshape_array(self, labels)

    def reduce(self, labels: Iterable[LabelLike], mode: ModeLike) -> Any:
        """Permute to `labels` and collapse all other axes (see reduce_array)."""
        return reduce_array(self, labels, mode)

    def apply_mask(
        self,
        mask: Optional[LabeledArray],
        labels: Iterable[LabelLike],
        mode: ModeLike = ReductionMode.SUM,
    ) -> Any:
        """Reduce to `labels` and apply `mask` (see masking.apply_mask)."""
        return apply_mask(self, mask, labels, mode)

    def apply_mask_stack(
        self,
        mask: Optional[LabeledArray],
        labels: Iterable[LabelLike],
        mode: ModeLike = ReductionMode.SUM,
    ) -> LabeledArray:
        """Like apply_mask, but wrap the result as a LabeledArray over `labels`."""
        labels = normalize_labels(labels)
        masked = apply_mask(self, mask, labels, mode)
        return LabeledArray(
            masked, labels, tag=self.tag, voxel_size=self.voxel_size
        )

    def get_bins(
        self,
        mask: Optional[LabeledArray],
        mode: ModeLike,
        bin_label: Union[LabelLike, Sequence[LabelLike]],
        bin_indices: Union[int, Sequence[Any]],
        labels: Iterable[LabelLike],
    ) -> List[Any]:
        """
        Extract bins (usually channels) from the masked or reduced image.

        Args:
            mask: Labeled mask, or None
            mode: Reduction mode for axes that are not requested
            bin_label: Label of the bin axis, usually 'c'
            bin_indices: An index, or a sequence with one entry per
                requested bin. Each entry is an int (the axis is dropped)
                or a sequence of ints (the axis is kept)
            labels: Requested labels. `bin_label` is appended if missing

        Returns:
            List with one array per entry in bin_indices

        Raises:
            ValueError: If more than one bin label is given or an index is
                out of range
        """
        if isinstance(bin_label, (list, tuple)):
            if len(bin_label) != 1:
                raise ValueError("Please provide one bin label.")
            bin_label = bin_label[0]
        bin_label = normalize_label(bin_label)

        labels = normalize_labels(labels)
        if bin_label not in labels:
            warnings.warn(
                "Bin label does not exist in the requested dimensions. "
                "Adding bin label as last dimension.",
                UserWarning,
                stacklevel=2,
            )
            labels = labels + (bin_label,)

        if np.isscalar(bin_indices):
            bin_indices = [bin_indices]

        n_bins = self.get_dim(bin_label)
        for i, index in enumerate(bin_indices):
            index_array = np.asarray(index)
            if not np.issubdtype(index_array.dtype, np.integer) or np.any(
                (index_array < 0) | (index_array >= n_bins)
            ):
                raise ValueError(
                    f"Bin index {i} with a value of {index} is not a valid index "
                    f"for '{bin_label}' of size {n_bins}."
                )

        image = apply_mask(self, mask, labels, mode)
        axis = labels.index(bin_label)
        return [np.take(image, index, axis=axis) for index in bin_indices]

    def bin_first_two_dims(
        self,
        bin_factor: int,
        first_two_labels: Optional[Iterable[LabelLike]] = None,
    ) -> LabeledArray:
        """
        Block-average two axes for every slice of the others.

        Args:
            bin_factor: Positive integer tile size
            first_two_labels: Labels of the binned axes (default x, y)

        Returns:
            New LabeledArray with binned data. Labels of singleton axes are
            dropped, and the voxel size of the binned axes is multiplied by
            bin_factor
        """
        data, labels = bin_array(self, bin_factor, first_two_labels)
        factor = int(bin_factor)
        binned_labels = [label.value for label in binning_order(first_two_labels)[:2]]
        voxel_size = {
            label: size * factor if label in binned_labels else size
            for label, size in self.voxel_size.items()
        }
        return LabeledArray(
            data,
            labels,
            tag=self.tag,
            voxel_size=voxel_size,
            is_inverted=self._is_inverted,
        )

    # Statistics
    def global_max_min(self, accumulate: bool = True) -> Tuple[float, float]:
        """Return (min, max) of the channel-summed data (see global_extrema)."""
        return global_extrema(self, accumulate=accumulate)

    def get_mean_channel(self) -> np.ndarray:
        """Mean value per channel for the full data set."""
        return channel_means(self)

    # Voxel size and display
    def get_voxel_size(self) -> np.ndarray:
        """
        Voxel size of x, y (and z for volumes), NaN where unknown.

        Returns:
            numpy array of length 2 for 2D data, 3 for volumes
        """
        spatial = ["x", "y", "z"] if self.is_volume() else ["x", "y"]
        return np.array([self.voxel_size.get(label, np.nan) for label in spatial])

    def set_voxel_size(self, **sizes: Optional[float]) -> LabeledArray:
        """
        Return a copy with updated voxel sizes.

        Args:
            **sizes: Physical size per label, e.g. x=1e-7, z=5e-7. None
                removes a size
        """
        voxel_size = dict(self.voxel_size)
        for label, size in sizes.items():
            label = normalize_label(label).value
            if size is None:
                voxel_size.pop(label, None)
            else:
                voxel_size[label] = size
        return attrs.evolve(self, voxel_size=voxel_size)

    def display_scale_factors(self) -> np.ndarray:
        """Voxel size normalized to x, with unknown sizes set to 1."""
        voxel_size = self.get_voxel_size()
        with np.errstate(invalid="ignore", divide="ignore"):
            factors = voxel_size / voxel_size[0]
        factors[~np.isfinite(factors)] = 1.0
        return factors

    def get_display_image(self, mask: Optional[LabeledArray] = None) -> Any:
        """Image summed to (x, y, z) for display, masked if a mask is given."""
        return apply_mask(
            self, mask, (AxisLabel.X, AxisLabel.Y, AxisLabel.Z), ReductionMode.SUM
        )

    # Mutation
    def invert(self) -> LabeledArray:
        """
        Swap 0 and 1 in a binary image, in place.

        Returns:
            self, for chaining

        Raises:
            InvalidValueDomainError: If the image holds values other than 0 and 1
        """
        data = np.asarray(self._data)
        values = np.unique(data)
        if not np.all((values == 0) | (values == 1)):
            raise InvalidValueDomainError(
                "Image contains values apart from 0 and 1. Cannot invert."
            )

        self._data = np.logical_not(data).astype(data.dtype)
        self._is_inverted = not self._is_inverted
        logger.debug("Inverted image '%s' (is_inverted=%s)", self.tag, self._is_inverted)
        return self

    def set_value(self, index: Any, value: Any) -> LabeledArray:
        """
        Set values at flat (C-order) indices, in place.

        If `index` and `value` both hold more than one element, the i-th
        value is written to the i-th index and their lengths must match.

        Returns:
            self, for chaining

        Raises:
            ValueError: If index and value have incompatible lengths
        """
        index = np.asarray(index)
        value = np.asarray(value)
        if index.size > 1 and value.size > 1 and index.size != value.size:
            raise ValueError(
                f"Incompatible index ({index.size} elements) and value "
                f"({value.size} elements)."
            )

        data = np.array(self._data)
        np.put(data, index, value)
        self._data = data
        return self

    def set_tag(self, tag: str) -> LabeledArray:
        """Set the tag and return self."""
        self.tag = tag
        return self

    # Conversion
    def compute(self) -> LabeledArray:
        """Return a LabeledArray backed by a numpy array (dask data is computed)."""
        if isinstance(self._data, da.Array):
            return attrs.evolve(self, data=self._data.compute())
        return self

    def to_dask(self, chunks: Any = "auto") -> LabeledArray:
        """Return a LabeledArray backed by a dask array."""
        if isinstance(self._data, da.Array):
            return self
        return attrs.evolve(self, data=da.from_array(self._data, chunks=chunks))

    def copy(self) -> LabeledArray:
        """Return a copy that does not share numpy storage with this array."""
        data = self._data if isinstance(self._data, da.Array) else self._data.copy()
        return attrs.evolve(self, data=data)

    def __repr__(self) -> str:
        return (
            f"LabeledArray(dims={self.dims}, shape={self.shape}, "
            f"dtype={self.dtype}, tag={self.tag!r})"
        )


def set_tags(stacks: Sequence[LabeledArray], tags: Union[str, Sequence[str]]) -> None:
    """
    Set tags on several stacks.

    Args:
        stacks: Stacks to tag
        tags: One tag for all stacks, or one tag per stack

    Raises:
        ValueError: If a sequence of tags does not match the number of stacks
    """
    if isinstance(tags, str):
        for stack in stacks:
            stack.set_tag(tags)
        return

    if len(tags) != len(stacks):
        raise ValueError(
            f"Number of tags {len(tags)} must be the same as the number of "
            f"images {len(stacks)}."
        )
    for stack, tag in zip(stacks, tags):
        stack.set_tag(tag)
