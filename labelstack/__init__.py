from .binning import bin_array, bin_plane
from .core import LabeledArray, set_tags
from .enums import AxisLabel, ReductionMode
from .exceptions import (
    DimensionReductionError,
    DuplicateLabelError,
    EmptyReductionError,
    InvalidBinFactorError,
    InvalidLabelError,
    InvalidValueDomainError,
    LabelCountMismatch,
    LabelStackError,
    MaskDimensionError,
    MissingLabelError,
    UnknownModeError,
)
from .io import from_raw, load_npy, save_npy
from .masking import apply_mask
from .permutation import PermutationResult, resolve_permutation
from .reduction import reduce_array
from .reshape import reshape_array
from .stats import channel_means, global_extrema

__all__ = [
    "LabeledArray",
    "AxisLabel",
    "ReductionMode",
    "PermutationResult",
    "resolve_permutation",
    "reshape_array",
    "reduce_array",
    "apply_mask",
    "bin_array",
    "bin_plane",
    "global_extrema",
    "channel_means",
    "from_raw",
    "load_npy",
    "save_npy",
    "set_tags",
    "LabelStackError",
    "LabelCountMismatch",
    "InvalidLabelError",
    "DuplicateLabelError",
    "MissingLabelError",
    "DimensionReductionError",
    "EmptyReductionError",
    "UnknownModeError",
    "MaskDimensionError",
    "InvalidBinFactorError",
    "InvalidValueDomainError",
]
