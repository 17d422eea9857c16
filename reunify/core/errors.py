"""
Reunify Exception Hierarchy
===========================

All recoverable failures raised by the application derive from ``ReunifyError``
so the UI can surface them as inline messages. None of these are fatal to the
process.
"""


class ReunifyError(Exception):
    """Base exception for the Reunify application."""
    pass


class ConfigurationError(ReunifyError):
    """Required configuration (e.g. the API key) is missing."""
    pass


class ValidationError(ReunifyError):
    """User input was rejected before any external call was made."""
    pass


class GenerationError(ReunifyError):
    """The image model call failed or returned no usable image."""
    pass


class LetterGenerationError(GenerationError):
    """The text model call failed."""
    pass


class AudioDeviceError(ReunifyError):
    """An audio device could not be opened or the backend is missing."""
    pass


class LocketDecodeError(ReunifyError):
    """A shared locket link could not be decoded."""
    pass
