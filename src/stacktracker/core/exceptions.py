"""
Stack Tracker exception hierarchy.

All library exceptions inherit from StackTrackerError, so callers can catch
library-level errors while still distinguishing specific failure modes.
"""


class StackTrackerError(Exception):
    """Base exception class for all stacktracker errors."""


class ConfigurationError(StackTrackerError):
    """Raised for configuration errors (missing keys, invalid values)."""


class APIError(StackTrackerError):
    """Raised for API communication errors."""


class SpotPriceError(APIError):
    """Raised when the spot price source fails or returns an unusable quote."""


class ValidationError(StackTrackerError):
    """Raised when a holding violates a data model invariant."""


class MetalChangeError(ValidationError):
    """Raised when an update tries to move a holding to another metal."""


class DuplicateHoldingError(ValidationError):
    """Raised when a created holding reuses an existing id."""


class FormError(StackTrackerError):
    """Base class for holding form workflow errors."""


class FormStateError(FormError):
    """Raised when a form operation is not valid in the current state."""


class ImmutableFieldError(FormError):
    """Raised when a locked form field is modified."""
