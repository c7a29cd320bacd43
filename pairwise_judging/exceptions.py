"""
Exception classes for the pairwise judging system.

Centralized location for all custom exceptions to avoid circular imports.
"""


class ValidationError(Exception):
    """Base exception for validation-related errors."""
    pass


class ConfigurationError(Exception):
    """Base exception for configuration-related errors."""
    pass


class InvalidStateError(Exception):
    """Raised when a session operation is called in the wrong phase."""
    pass


class UnknownParticipantError(KeyError):
    """Raised when a rating is requested for a participant nobody registered."""
    pass


class CompletionError(Exception):
    """Base exception for all text-completion errors."""
    pass


class NoStructuredBlockError(CompletionError):
    """Raised when a completion response holds no parseable JSON object."""
    pass
