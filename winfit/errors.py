"""
Winfit errors.

Only invalid input is a hard failure. Every other condition degrades into a
diagnostic on the solve result.
"""


class WinfitError(Exception):
    """Base class for winfit errors."""


class InvalidInputError(WinfitError, ValueError):
    """Raised when solve input is unusable; nothing is attempted."""
