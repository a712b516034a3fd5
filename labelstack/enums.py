"""Enumeration classes for labelstack type definitions."""

from enum import Enum


class AxisLabel(str, Enum):
    """Enumeration of the semantic axis labels.

    Members compare equal to their lower-case string value, so
    ``AxisLabel.X == "x"`` holds and labels can be passed as plain strings.

    Attributes:
        X: Voxel x
        Y: Voxel y
        Z: Voxel z (volume slices)
        T: Time
        C: Channel
    """

    X = "x"
    Y = "y"
    Z = "z"
    T = "t"
    C = "c"

    def __str__(self) -> str:
        return self.value


class ReductionMode(str, Enum):
    """Enumeration of the ways surplus axes can be collapsed.

    Attributes:
        SUM: Surplus axes are summed together
        MEAN: Arithmetic mean over the surplus axes
        MAX: Elementwise maximum over the surplus axes
        MIN: Elementwise minimum over the surplus axes
        RESHAPED: No reduction, plain reshape of the requested axes
    """

    SUM = "sum"
    MEAN = "mean"
    MAX = "max"
    MIN = "min"
    RESHAPED = "reshaped"

    def __str__(self) -> str:
        return self.value


# Labels in the order they are allowed and listed
ALLOWED_LABELS = tuple(AxisLabel)

# Order used to append the remaining labels when binning
CANONICAL_ORDER = (AxisLabel.X, AxisLabel.Y, AxisLabel.Z, AxisLabel.T, AxisLabel.C)
