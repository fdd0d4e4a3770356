"""Domain exceptions for content security analysis."""


class AuditError(Exception):
    """Base class for errors raised by the audit core."""


class ChatBackendError(AuditError):
    """The chat backend failed or timed out while analyzing content."""


class InvalidVectorError(AuditError, ValueError):
    """A security vector definition failed validation."""
