"""
Error taxonomy for the interview workflow.
The transport layer maps these to HTTP responses; the core never does.
"""


class InterviewError(Exception):
    """Base class for all interview workflow errors."""


class NotFoundError(InterviewError):
    """Referenced candidate or session does not exist."""


class InvalidStateError(InterviewError):
    """Operation attempted outside its legal lifecycle state."""


class ValidationError(InterviewError):
    """Malformed caller input or malformed AI evaluation payload."""


class ConfigurationError(InterviewError):
    """Invalid startup configuration (e.g. round weights not summing to 1)."""
