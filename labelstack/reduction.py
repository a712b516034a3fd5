"""Dimension reduction of labeled arrays.

Collapses every axis that exists in the array but is not requested
("surplus" axes) with an aggregation, after permuting the requested axes to
the front in requested order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Union

import numpy as np

from .enums import ReductionMode
from .exceptions import EmptyReductionError, UnknownModeError
from .logging import get_logger
from .permutation import LabelLike, resolve_permutation
from .reshape import expand_synthesized, reshape_array

if TYPE_CHECKING:
    from .core import LabeledArray

logger = get_logger(__name__)

_AGGREGATORS = {
    ReductionMode.SUM: np.sum,
    ReductionMode.MEAN: np.mean,
    ReductionMode.MAX: np.max,
    ReductionMode.MIN: np.min,
}


def normalize_mode(mode: Union[str, ReductionMode]) -> ReductionMode:
    """
    Convert a mode string to its ReductionMode member.

    Raises:
        UnknownModeError: If mode is not one of sum, mean, max, min, reshaped
    """
    if isinstance(mode, ReductionMode):
        return mode
    if isinstance(mode, str):
        try:
            return ReductionMode(mode.lower())
        except ValueError:
            pass
    valid = ", ".join(m.value for m in ReductionMode)
    raise UnknownModeError(
        f"The mode '{mode}' is not recognised. Options are: {valid}"
    )


def reduce_array(
    array: LabeledArray,
    requested_labels: Iterable[LabelLike],
    mode: Union[str, ReductionMode],
) -> Any:
    """
    Permute to the requested labels and collapse all other existing axes.

    Args:
        array: Source labeled array
        requested_labels: Output label order. Labels the array lacks become
            size-1 axes
        mode: How surplus axes are collapsed:
            - 'sum': surplus axes are summed together
            - 'mean': arithmetic mean over the surplus axes
            - 'max': elementwise maximum over the surplus axes
            - 'min': elementwise minimum over the surplus axes
            - 'reshaped': no reduction; behaves like reshape_array

    Returns:
        numpy or dask array with one axis per requested label

    Raises:
        UnknownModeError: If mode is not supported
        DimensionReductionError: If mode is 'reshaped' and the array has
            axes that are not requested
        EmptyReductionError: If mode is mean, max or min and a surplus axis
            has length 0. Sum over an empty axis gives 0

    Examples:
        >>> stack = LabeledArray(np.ones((4, 3, 2)), "xyc")
        >>> reduce_array(stack, "yx", "sum").shape
        (3, 4)
    """
    mode = normalize_mode(mode)
    permutation = resolve_permutation(array.labels, requested_labels)
    surplus = permutation.surplus

    if not surplus:
        data = np.transpose(array.data, permutation.resolved_order)
        return expand_synthesized(data, permutation)

    if mode is ReductionMode.RESHAPED:
        return reshape_array(array, requested_labels)

    empty = [str(array.labels[i]) for i in surplus if array.shape[i] == 0]
    if empty and mode is not ReductionMode.SUM:
        raise EmptyReductionError(
            f"Cannot take the {mode.value} over empty label(s) {', '.join(empty)}."
        )

    n_kept = len(permutation.resolved_order)
    data = np.transpose(array.data, permutation.resolved_order + surplus)
    axes = tuple(range(n_kept, n_kept + len(surplus)))

    logger.debug(
        "Collapsing surplus label(s) %s with %s",
        ", ".join(str(array.labels[i]) for i in surplus),
        mode.value,
    )
    reduced = _AGGREGATORS[mode](data, axis=axes)
    return expand_synthesized(reduced, permutation)
