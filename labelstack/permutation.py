"""Label-to-axis permutation resolution.

Translates a requested label ordering into axis indices of a labeled array.
Every requested label resolves either to a real source axis
(``ResolvedAxis``) or to a size-1 axis that has to be synthesized
(``SynthesizedAxis``). Resolution is a pure function of the two label
tuples and is memoized, so hot loops that ask for the same ordering over
and over only pay for the lookup once.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Optional, Tuple, Union

from attrs import define

from .enums import ALLOWED_LABELS, AxisLabel
from .exceptions import DuplicateLabelError, InvalidLabelError, MissingLabelError
from .logging import get_logger

logger = get_logger(__name__)

LabelLike = Union[str, AxisLabel]


def normalize_label(label: LabelLike) -> AxisLabel:
    """
    Convert a label to its AxisLabel member.

    Args:
        label: Axis label as AxisLabel or string (case-insensitive)

    Returns:
        The matching AxisLabel

    Raises:
        InvalidLabelError: If label is not a string or not an allowed label
    """
    if isinstance(label, AxisLabel):
        return label
    if not isinstance(label, str):
        raise InvalidLabelError(
            f"Labels must be a character or string, got {type(label).__name__}"
        )
    try:
        return AxisLabel(label.lower())
    except ValueError:
        allowed = ", ".join(str(lbl) for lbl in ALLOWED_LABELS)
        raise InvalidLabelError(
            f"Label '{label}' not allowed. Please use one of these labels: {allowed}"
        ) from None


def normalize_labels(labels: Iterable[LabelLike]) -> Tuple[AxisLabel, ...]:
    """Convert a sequence of labels (or a string such as "xyz") to AxisLabels."""
    if isinstance(labels, AxisLabel):
        return (labels,)
    return tuple(normalize_label(label) for label in labels)


def check_unique(labels: Tuple[AxisLabel, ...]) -> None:
    """Raise DuplicateLabelError if any label is used more than once."""
    if len(set(labels)) != len(labels):
        repeated = sorted({str(lbl) for lbl in labels if labels.count(lbl) > 1})
        raise DuplicateLabelError(
            f"Each label can only be used once, repeated: {', '.join(repeated)}"
        )


@define(frozen=True)
class ResolvedAxis:
    """A requested label that exists as axis `source_index` of the source."""

    label: AxisLabel
    source_index: int

    @property
    def is_synthesized(self) -> bool:
        return False


@define(frozen=True)
class SynthesizedAxis:
    """A requested label absent from the source, materialized as size 1."""

    label: AxisLabel

    @property
    def source_index(self) -> None:
        return None

    @property
    def is_synthesized(self) -> bool:
        return True


AxisSlot = Union[ResolvedAxis, SynthesizedAxis]


@define(frozen=True)
class PermutationResult:
    """
    Outcome of resolving requested labels against source labels.

    Attributes:
        source_labels: Labels of the source array, one per source axis
        slots: One slot per requested label, in requested order
    """

    source_labels: Tuple[AxisLabel, ...]
    slots: Tuple[AxisSlot, ...]

    @property
    def labels(self) -> Tuple[AxisLabel, ...]:
        """Requested labels in requested order."""
        return tuple(slot.label for slot in self.slots)

    @property
    def indices(self) -> Tuple[Optional[int], ...]:
        """Source axis index per requested label, None where synthesized."""
        return tuple(slot.source_index for slot in self.slots)

    @property
    def missing(self) -> Tuple[AxisLabel, ...]:
        """Requested labels that do not exist in the source."""
        return tuple(slot.label for slot in self.slots if slot.is_synthesized)

    @property
    def resolved_order(self) -> Tuple[int, ...]:
        """Source axes of the resolved slots, in requested order."""
        return tuple(
            slot.source_index for slot in self.slots if not slot.is_synthesized
        )

    @property
    def synthesized_positions(self) -> Tuple[int, ...]:
        """Output positions that hold a synthesized size-1 axis."""
        return tuple(i for i, slot in enumerate(self.slots) if slot.is_synthesized)

    @property
    def surplus(self) -> Tuple[int, ...]:
        """Source axes that exist but were not requested, ascending."""
        requested = set(self.resolved_order)
        return tuple(
            i for i in range(len(self.source_labels)) if i not in requested
        )


@lru_cache(maxsize=256)
def _resolve(
    source: Tuple[AxisLabel, ...], requested: Tuple[AxisLabel, ...]
) -> PermutationResult:
    positions = {label: i for i, label in enumerate(source)}
    slots = tuple(
        ResolvedAxis(label, positions[label])
        if label in positions
        else SynthesizedAxis(label)
        for label in requested
    )
    result = PermutationResult(source_labels=source, slots=slots)
    logger.debug(
        "Resolved %s against %s: indices=%s",
        "".join(map(str, requested)),
        "".join(map(str, source)),
        result.indices,
    )
    return result


def resolve_permutation(
    source_labels: Iterable[LabelLike],
    requested_labels: Iterable[LabelLike],
    must_exist: bool = False,
) -> PermutationResult:
    """
    Resolve requested labels to axes of a source array.

    Args:
        source_labels: Labels of the source axes, in axis order
        requested_labels: Labels in the desired output order
        must_exist: If True, every requested label has to be present in
            the source

    Returns:
        PermutationResult with one slot per requested label

    Raises:
        InvalidLabelError: If a label is not allowed or nothing is requested
        DuplicateLabelError: If a label is repeated
        MissingLabelError: If must_exist is True and labels are absent

    Examples:
        >>> result = resolve_permutation("xyc", "cxz")
        >>> result.indices
        (2, 0, None)
    """
    source = normalize_labels(source_labels)
    requested = normalize_labels(requested_labels)

    if not requested:
        raise InvalidLabelError("Please provide a label")
    check_unique(source)
    check_unique(requested)

    result = _resolve(source, requested)

    if must_exist and result.missing:
        raise MissingLabelError(result.missing)

    return result
