"""Pure axis permutation of labeled arrays.

The reshape engine reorders the axes of a labeled array to a requested label
order without losing any information. Requested labels that the array does
not have are materialized as size-1 axes at their requested position, so
output axis ``i`` always corresponds to requested label ``i``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence, Tuple

import numpy as np

from .exceptions import DimensionReductionError
from .logging import get_logger
from .permutation import LabelLike, PermutationResult, resolve_permutation

if TYPE_CHECKING:
    from .core import LabeledArray

logger = get_logger(__name__)


def expand_synthesized(data: Any, permutation: PermutationResult) -> Any:
    """
    Insert size-1 axes for the synthesized slots of a permutation.

    Args:
        data: Array whose axes are the resolved slots, in requested order
        permutation: Permutation the data was transposed with

    Returns:
        Array with one axis per requested label
    """
    if not permutation.missing:
        return data
    sizes = iter(data.shape)
    new_shape = tuple(
        1 if slot.is_synthesized else next(sizes) for slot in permutation.slots
    )
    return data.reshape(new_shape)


def squeeze_labels(
    data: Any,
    labels: Sequence[LabelLike],
    sizes: Sequence[int],
    keep: Optional[LabelLike] = None,
) -> Tuple[Any, Tuple[LabelLike, ...]]:
    """
    Drop the axes whose entry in `sizes` is 1, together with their labels.

    At least one axis is always kept so the result can be labeled again: the
    axis labeled `keep` if given, otherwise the first one.

    Args:
        data: Array with one axis per label
        labels: Labels of the axes of data
        sizes: Size used to decide which axes are singleton (usually the
            shape of data, or the shape before an operation changed it)
        keep: Label of the axis kept when every axis is singleton

    Returns:
        Tuple of (squeezed data, remaining labels)
    """
    drop = tuple(i for i, size in enumerate(sizes) if size == 1)
    if len(drop) == len(sizes):
        kept_index = 0 if keep is None else list(labels).index(keep)
        drop = tuple(i for i in drop if i != kept_index)
    if drop:
        data = np.squeeze(data, axis=drop)
    kept = tuple(label for i, label in enumerate(labels) if i not in drop)
    return data, kept


def reshape_array(array: LabeledArray, requested_labels: Iterable[LabelLike]) -> Any:
    """
    Permute a labeled array to the requested label order.

    Every axis of the array has to be named in `requested_labels`; use
    `reduce_array` to collapse axes that are not wanted.

    Args:
        array: Source labeled array
        requested_labels: Output label order. Labels the array lacks become
            size-1 axes

    Returns:
        numpy or dask array with one axis per requested label

    Raises:
        DimensionReductionError: If an existing axis is not requested

    Examples:
        >>> stack = LabeledArray(np.zeros((4, 3)), "xy")
        >>> reshape_array(stack, "yzx").shape
        (3, 1, 4)
    """
    permutation = resolve_permutation(array.labels, requested_labels)

    if permutation.surplus:
        dropped = ", ".join(str(array.labels[i]) for i in permutation.surplus)
        raise DimensionReductionError(
            f"Dimensions of the image are reduced: label(s) {dropped} not requested. "
            "Use reduce_array to specify how these dimensions should be treated."
        )

    data = np.transpose(array.data, permutation.resolved_order)
    return expand_synthesized(data, permutation)
