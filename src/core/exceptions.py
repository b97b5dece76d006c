"""
Custom exception hierarchy for the prompt study service.

All application exceptions inherit from StudySystemError.
"""


class StudySystemError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(StudySystemError):
    """Invalid or missing configuration."""

    pass


# =============================================================================
# Request Errors
# =============================================================================


class ValidationError(StudySystemError):
    """Input validation failed."""

    pass


# =============================================================================
# LLM Errors
# =============================================================================


class LLMError(StudySystemError):
    """Base for LLM-related errors."""

    pass


class LLMTimeoutError(LLMError):
    """LLM call timed out."""

    pass


class LLMInvalidResponseError(LLMError):
    """LLM returned invalid or unexpected response."""

    pass


# =============================================================================
# Persistence Errors
# =============================================================================


class PersistenceError(StudySystemError):
    """Store query or insert failed."""

    pass


class DuplicateUserError(PersistenceError):
    """Participant id is already registered."""

    pass


# =============================================================================
# Task Errors
# =============================================================================


class TaskNotFoundError(StudySystemError):
    """Task does not exist in the catalog."""

    pass


class TaskLockedError(StudySystemError):
    """Task sequence gate is closed for this participant."""

    pass
