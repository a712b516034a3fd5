"""Dataset-wide intensity statistics used for display scaling."""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING, Tuple

import numpy as np

from .enums import AxisLabel
from .logging import get_logger
from .reduction import reduce_array
from .reshape import reshape_array

if TYPE_CHECKING:
    from .core import LabeledArray

logger = get_logger(__name__)

# y goes last so a lone y axis never ends up as a trailing singleton
GLOBAL_STATS_ORDER = (AxisLabel.X, AxisLabel.C, AxisLabel.Z, AxisLabel.T, AxisLabel.Y)


def global_extrema(array: LabeledArray, accumulate: bool = True) -> Tuple[float, float]:
    """
    Compute the intensity minimum and maximum of the channel-summed data.

    For every z slice the channels are summed (NaN propagates through the
    sum) and the minimum and maximum over all remaining axes are taken,
    ignoring NaN.

    Args:
        array: Labeled array to analyse
        accumulate: If True, return the running min/max over all z slices.
            If False, return the extrema of the last z slice only, matching
            the historical imageStack behaviour

    Returns:
        Tuple of (min, max). (nan, nan) for empty arrays or when every
        value is NaN
    """
    data = reshape_array(array, GLOBAL_STATS_ORDER)
    if data.size == 0:
        return (np.nan, np.nan)

    summed = np.sum(data, axis=1)  # x, z, t, y
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        slice_min = np.asarray(np.nanmin(summed, axis=(0, 2, 3)))
        slice_max = np.asarray(np.nanmax(summed, axis=(0, 2, 3)))

        if accumulate:
            extrema = (np.nanmin(slice_min).item(), np.nanmax(slice_max).item())
        else:
            extrema = (slice_min[-1].item(), slice_max[-1].item())

    logger.debug("Global extrema over %d z slice(s): %s", slice_min.size, extrema)
    return extrema


def channel_means(array: LabeledArray) -> np.ndarray:
    """
    Mean value per channel over all other axes.

    Returns:
        1D numpy array with one value per channel (a single value when the
        array has no channel axis)
    """
    return np.asarray(reduce_array(array, (AxisLabel.C,), "mean")).reshape(-1)
