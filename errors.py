"""
Error types shared by the mapping and blending engines
"""


class InvalidInput(ValueError):
    """Raised for blank labels, empty selections and malformed weights."""


class EmptySelection(InvalidInput):
    """Raised when a blend is requested over zero rows."""


class PersistenceFailure(Exception):
    """Raised when a confirmed mapping cannot be saved to the backend."""

    def __init__(self, standardized_name, cause=None):
        self.standardized_name = standardized_name
        self.cause = cause
        message = f"Failed to save mapping '{standardized_name}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


DEGRADED_WEIGHTING_WARNING = (
    "No usable weights for the '{method}' method; falling back to simple (equal) weighting."
)
