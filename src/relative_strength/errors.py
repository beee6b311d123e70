"""Error taxonomy shared by the numeric kernel, rating engine and analyzer."""

from __future__ import annotations


class RelativeStrengthError(Exception):
    """Base class for all errors raised by this package."""


class LengthMismatch(RelativeStrengthError, ValueError):
    """Raised when element-wise operands have different lengths."""


class InvalidArgument(RelativeStrengthError, ValueError):
    """Raised for out-of-range percentiles, window sizes or config values."""


class DivisionByZero(RelativeStrengthError, ZeroDivisionError):
    """Raised when a vector is divided by a near-zero scalar."""


class ValidationError(RelativeStrengthError, ValueError):
    """Raised when a rating update receives non-finite or unknown inputs."""
