"""
Custom exceptions for speech module.
"""


class SpeechError(Exception):
    """Base exception for speech-related errors."""

    pass


class CapabilityUnavailable(SpeechError):
    """Exception raised when speech recognition or synthesis is not supported in the runtime."""

    pass
