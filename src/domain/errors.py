"""
Domain Errors
=============

ValidationError is raised before any side effect and names the offending
field. CollaboratorError is raised inside collaborators and converted at
their boundary (fallback title, failed PublishResult); it never reaches
callers of the core.
"""


class ReputationError(Exception):
    """Base exception for the reputation engine."""
    pass


class ValidationError(ReputationError):
    """Malformed or missing input."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(ReputationError):
    """A referenced review or customer does not exist."""
    pass


class CollaboratorError(ReputationError):
    """An external service (LLM, publisher) failed."""
    pass
