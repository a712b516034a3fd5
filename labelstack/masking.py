"""Mask broadcasting for labeled arrays.

A mask is a labeled array of multiplicative weights. It is aligned to the
requested label order and multiplied into the (reduced) image. Cells where
the mask is zero become NaN instead of 0, which keeps "excluded by mask"
apart from "genuinely zero intensity".
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional, Union

import numpy as np

from .enums import ReductionMode
from .exceptions import MaskDimensionError
from .logging import get_logger
from .permutation import LabelLike, normalize_labels
from .reduction import normalize_mode, reduce_array
from .reshape import reshape_array

if TYPE_CHECKING:
    from .core import LabeledArray

logger = get_logger(__name__)


def _is_empty(mask: Optional[LabeledArray]) -> bool:
    return mask is None or mask.data.size == 0


def masked_dtype(dtype: np.dtype) -> np.dtype:
    """Return the dtype that can hold `dtype` values as well as NaN."""
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.inexact):
        return dtype
    return np.promote_types(dtype, np.float32)


def apply_mask(
    array: LabeledArray,
    mask: Optional[LabeledArray],
    requested_labels: Iterable[LabelLike],
    mode: Union[str, ReductionMode],
) -> Any:
    """
    Reduce an array to the requested labels and apply a mask to it.

    The image is reduced with `reduce_array`; the mask is only permuted
    (`reshape_array`), never aggregated, and multiplied in with numpy
    broadcasting. Zero mask cells are set to NaN before the multiplication.
    Integer and boolean images are promoted to a floating dtype first since
    they cannot hold NaN.

    Args:
        array: Image to mask
        mask: Labeled mask, or None to only reduce the image
        requested_labels: Output label order. Every label of the mask must
            be included
        mode: Reduction mode for the image's surplus axes (see reduce_array)

    Returns:
        numpy or dask array with one axis per requested label

    Raises:
        MaskDimensionError: If the mask has a label that is not requested
        UnknownModeError: If mode is not supported

    Examples:
        >>> image = LabeledArray(np.full((2, 2), 5, dtype=np.uint8), "xy")
        >>> mask = LabeledArray(np.array([[1, 0], [0, 1]]), "xy")
        >>> apply_mask(image, mask, "xy", "sum")
        array([[ 5., nan],
               [nan,  5.]], dtype=float32)
    """
    mode = normalize_mode(mode)
    requested = normalize_labels(requested_labels)

    if _is_empty(mask):
        return reduce_array(array, requested, mode)

    not_requested = [label for label in mask.labels if label not in requested]
    if not_requested:
        raise MaskDimensionError(
            "Mask dimension(s) "
            f"{', '.join(str(label) for label in not_requested)} must be "
            "requested, otherwise masking would silently drop them."
        )

    image = reduce_array(array, requested, mode)
    weights = reshape_array(mask, requested)

    dtype = masked_dtype(image.dtype)
    if dtype != image.dtype:
        logger.debug("Promoting %s image to %s to hold NaN", image.dtype, dtype)
        image = image.astype(dtype)

    weights = weights.astype(dtype)
    weights = np.where(weights == 0, np.nan, weights).astype(dtype)

    return image * weights
