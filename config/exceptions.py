"""Custom exception hierarchy for the book document and generation engine."""

from typing import Optional


class BookForgeError(Exception):
    """Base exception for all bookforge errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Provider Errors ----

class ProviderError(BookForgeError):
    """Base exception for generation provider errors."""


class RateLimitedError(ProviderError):
    """Provider rejected the call because of quota; retryable."""

    def __init__(self, message: str = "Provider rate limit exceeded", retry_after: Optional[float] = None):
        details = {}
        if retry_after is not None:
            details["retry_after"] = retry_after
        super().__init__(message, details)
        self.retry_after = retry_after


class ProviderFailureError(ProviderError):
    """Provider call failed for a reason other than rate limiting."""


class ProviderResponseParseError(ProviderError):
    """Failed to parse a provider response."""

    def __init__(self, message: str = "Failed to parse provider response", raw_response: str = ""):
        details = {"raw_response": raw_response[:200]} if raw_response else {}
        super().__init__(message, details)
        self.raw_response = raw_response


# ---- Persistence Errors ----

class PersistenceError(BookForgeError):
    """Snapshot store operation failed."""


class PersistenceCapacityExceededError(PersistenceError):
    """Snapshot did not fit into the store; in-memory state is kept."""

    def __init__(self, key: str, size: int, limit: int):
        super().__init__(
            f"Snapshot for '{key}' exceeds storage capacity",
            {"size": size, "limit": limit},
        )
        self.key = key
        self.size = size
        self.limit = limit


# ---- Document Errors ----

class DocumentError(BookForgeError):
    """Base exception for document tree errors."""


class UnresolvedNodeIdError(DocumentError):
    """No chapter or subchapter carries the requested id."""

    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}", {"node_id": node_id})
        self.node_id = node_id


class NoActiveProjectError(DocumentError):
    """Operation needs an active project but none is loaded."""

    def __init__(self, message: str = "No active project"):
        super().__init__(message)


class ProjectNotFoundError(DocumentError):
    """Project id is not present in the archive."""

    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}", {"project_id": project_id})
        self.project_id = project_id


# ---- Workflow Errors ----

class WorkflowError(BookForgeError):
    """Base exception for generation workflow errors."""


class GenerationInProgressError(WorkflowError):
    """A generation job is already running for this document."""

    def __init__(self, node_id: str):
        super().__init__("Generation already in progress", {"node_id": node_id})
        self.node_id = node_id


class OperationCancelledError(WorkflowError):
    """Cooperative cancellation stopped a batch operation."""

    def __init__(self, completed: int, total: int):
        super().__init__("Operation cancelled", {"completed": completed, "total": total})
        self.completed = completed
        self.total = total


# ---- Validation Errors ----

class ValidationError(BookForgeError):
    """Input validation failed."""


class InvalidInputError(ValidationError):
    """Caller supplied unusable input."""


class InvalidConfigError(ValidationError):
    """Configuration value is invalid."""
