"""Block binning of the two leading axes of a labeled array.

Binning here is real binning, not resampling: every output cell is the mean
of a tile of source cells. Rows and columns left over when the plane size is
not a multiple of the bin factor are averaged into one extra undersized
row, column and corner cell, so no boundary pixels are discarded.
"""

from __future__ import annotations

import numbers
from typing import TYPE_CHECKING, Any, Iterable, Optional, Tuple

import numpy as np

from .enums import CANONICAL_ORDER, AxisLabel
from .exceptions import InvalidBinFactorError
from .logging import get_logger
from .permutation import LabelLike, check_unique, normalize_labels
from .reshape import reshape_array, squeeze_labels

if TYPE_CHECKING:
    from .core import LabeledArray

logger = get_logger(__name__)


def validate_bin_factor(bin_factor: Any) -> int:
    """
    Check that `bin_factor` is a positive integer and return it as int.

    Integral floats such as 2.0 are accepted.

    Raises:
        InvalidBinFactorError: For booleans, non-numbers, non-integral or
            non-positive values
    """
    if isinstance(bin_factor, (bool, np.bool_)) or not isinstance(
        bin_factor, numbers.Real
    ):
        raise InvalidBinFactorError(f"Please provide valid bin factor, got {bin_factor!r}")
    if not float(bin_factor).is_integer():
        raise InvalidBinFactorError(
            f"Please provide integer value for bin factor, got {bin_factor!r}"
        )
    if bin_factor <= 0:
        raise InvalidBinFactorError(
            f"Please provide a positive bin factor, got {bin_factor!r}"
        )
    return int(bin_factor)


def _binned_dtype(dtype: np.dtype) -> np.dtype:
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.inexact):
        return dtype
    return np.dtype(np.float64)


def _downsample_2d(block: np.ndarray, p: int, q: int) -> np.ndarray:
    """Average disjoint p x q tiles of a block whose shape divides evenly."""
    m, n = block.shape
    return block.reshape(m // p, p, n // q, q).mean(axis=(1, 3))


def _bin_plane(plane: np.ndarray, factor: int, out: np.ndarray) -> None:
    m, n = plane.shape
    m_mod = m % factor
    n_mod = n % factor
    a_m = m - m_mod
    a_n = n - n_mod
    core_m = a_m // factor
    core_n = a_n // factor

    out[:core_m, :core_n] = _downsample_2d(plane[:a_m, :a_n], factor, factor)
    if m_mod > 0:
        # remaining rows at the bottom, one output row
        out[core_m, :core_n] = _downsample_2d(plane[a_m:, :a_n], m_mod, factor)[0]
    if n_mod > 0:
        # remaining columns on the right, one output column
        out[:core_m, core_n] = _downsample_2d(plane[:a_m, a_n:], factor, n_mod)[:, 0]
    if m_mod > 0 and n_mod > 0:
        out[core_m, core_n] = plane[a_m:, a_n:].mean()


def binned_shape(shape: Tuple[int, int], bin_factor: int) -> Tuple[int, int]:
    """Shape of a plane of `shape` after binning, ceil(m/b) x ceil(n/b)."""
    m, n = shape
    return (-(-m // bin_factor), -(-n // bin_factor))


def bin_plane(plane: Any, bin_factor: int) -> np.ndarray:
    """
    Block-average a 2D plane.

    Args:
        plane: 2D array of shape (m, n)
        bin_factor: Positive integer tile size

    Returns:
        Floating array of shape (ceil(m/bin_factor), ceil(n/bin_factor))

    Raises:
        InvalidBinFactorError: If bin_factor is not a positive integer
        ValueError: If plane is not 2D

    Examples:
        >>> bin_plane(np.full((3, 3), 2), 2)
        array([[2., 2.],
               [2., 2.]])
    """
    factor = validate_bin_factor(bin_factor)
    plane = np.asarray(plane)
    if plane.ndim != 2:
        raise ValueError(f"Expected a 2D plane; got shape={plane.shape}")

    out = np.empty(binned_shape(plane.shape, factor), dtype=_binned_dtype(plane.dtype))
    _bin_plane(plane, factor, out)
    return out


def binning_order(
    first_two_labels: Optional[Iterable[LabelLike]] = None,
) -> Tuple[AxisLabel, ...]:
    """
    All five labels with `first_two_labels` leading, the rest canonical.

    Raises:
        ValueError: If not exactly two labels are given
        DuplicateLabelError: If the two labels are the same
    """
    if first_two_labels is None:
        return CANONICAL_ORDER
    first_two = normalize_labels(first_two_labels)
    if len(first_two) != 2:
        raise ValueError(
            f"Please provide exactly two labels to bin over; got {len(first_two)}"
        )
    check_unique(first_two)
    return first_two + tuple(
        label for label in CANONICAL_ORDER if label not in first_two
    )


def bin_array(
    array: LabeledArray,
    bin_factor: int,
    first_two_labels: Optional[Iterable[LabelLike]] = None,
) -> Tuple[np.ndarray, Tuple[AxisLabel, ...]]:
    """
    Bin the plane spanned by two labels for every slice of the other axes.

    The array is reordered so `first_two_labels` are axes 0 and 1, followed
    by the remaining labels in canonical order (x, y, z, t, c). Each plane
    along the remaining axes is block-averaged with `bin_plane`. Axes that
    were size 1 before binning, including absent labels, are squeezed out
    and their labels dropped. If every axis is singleton, the first axis in
    binning order that the source carries is kept.

    Args:
        array: Source labeled array
        bin_factor: Positive integer tile size
        first_two_labels: Labels of the two binned axes. Defaults to
            ("x", "y")

    Returns:
        Tuple of (binned numpy array, labels of its axes)

    Raises:
        InvalidBinFactorError: If bin_factor is not a positive integer
        ValueError: If first_two_labels does not hold two labels
    """
    factor = validate_bin_factor(bin_factor)
    order = binning_order(first_two_labels)

    data = np.asarray(reshape_array(array, order))
    shape = data.shape
    plane_shape = binned_shape(shape[:2], factor)

    binned = np.empty(plane_shape + shape[2:], dtype=_binned_dtype(data.dtype))
    for index in np.ndindex(*shape[2:]):
        plane_index = (slice(None), slice(None)) + index
        _bin_plane(data[plane_index], factor, binned[plane_index])

    logger.debug(
        "Binned %s by %d over %s: %s -> %s",
        "".join(map(str, array.labels)),
        factor,
        "".join(map(str, order[:2])),
        shape,
        binned.shape,
    )
    keep = next(label for label in order if label in array.labels)
    return squeeze_labels(binned, order, shape, keep=keep)
