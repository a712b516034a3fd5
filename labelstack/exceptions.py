"""Exception classes raised by the labelstack array engines."""

from __future__ import annotations


class LabelStackError(ValueError):
    """Base class for all labelstack validation errors."""

    pass


class LabelCountMismatch(LabelStackError):
    """Raised when the number of labels differs from the array rank."""

    pass


class InvalidLabelError(LabelStackError):
    """Raised when a label is not a string or not an allowed axis label."""

    pass


class DuplicateLabelError(LabelStackError):
    """Raised when a label is used more than once."""

    pass


class MissingLabelError(LabelStackError):
    """Raised when required labels do not exist in the array.

    Attributes:
        missing: The requested labels that are absent from the array.
    """

    def __init__(self, missing):
        self.missing = tuple(missing)
        names = ", ".join(str(label) for label in self.missing)
        super().__init__(f"Label(s) {names} do(es) not exist in image.")


class DimensionReductionError(LabelStackError):
    """Raised when a reshape would silently drop an existing axis."""

    pass


class UnknownModeError(LabelStackError):
    """Raised for an unsupported reduction mode."""

    pass


class MaskDimensionError(LabelStackError):
    """Raised when a mask carries an axis that was not requested."""

    pass


class InvalidBinFactorError(LabelStackError):
    """Raised for a bin factor that is not a positive integer."""

    pass


class InvalidValueDomainError(LabelStackError):
    """Raised when inverting data that holds values other than 0 and 1."""

    pass


class EmptyReductionError(LabelStackError):
    """Raised when mean, max or min would collapse an axis of length 0."""

    pass
