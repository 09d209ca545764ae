"""
Custom exceptions for session storage.
"""


class PersistenceError(Exception):
    """Exception raised when a session cannot be saved or loaded."""

    pass
