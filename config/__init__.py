"""Configuration package: settings, logging, and exceptions."""

from config.exceptions import (
    BookForgeError,
    ProviderError,
    RateLimitedError,
    ProviderFailureError,
    ProviderResponseParseError,
    PersistenceError,
    PersistenceCapacityExceededError,
    DocumentError,
    UnresolvedNodeIdError,
    NoActiveProjectError,
    ProjectNotFoundError,
    WorkflowError,
    GenerationInProgressError,
    OperationCancelledError,
    ValidationError,
    InvalidInputError,
    InvalidConfigError,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "BookForgeError",
    "ProviderError",
    "RateLimitedError",
    "ProviderFailureError",
    "ProviderResponseParseError",
    "PersistenceError",
    "PersistenceCapacityExceededError",
    "DocumentError",
    "UnresolvedNodeIdError",
    "NoActiveProjectError",
    "ProjectNotFoundError",
    "WorkflowError",
    "GenerationInProgressError",
    "OperationCancelledError",
    "ValidationError",
    "InvalidInputError",
    "InvalidConfigError",
]
