"""
Exception hierarchy for ReaderFirst.

Provides specific exception types so callers can tell a failed AI call from
a missing configuration or a cache problem.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List


class ReaderFirstError(Exception):
    """Base exception for all ReaderFirst errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
        suggestion: Optional[str] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            details: Additional error details
            recoverable: Whether error can be recovered from
            suggestion: Suggested fix or workaround
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "suggestion": self.suggestion
        }

    def __str__(self) -> str:
        result = self.message
        if self.suggestion:
            result += f"\nSuggestion: {self.suggestion}"
        return result


class BackendError(ReaderFirstError):
    """Raised when a translation or AI provider fails after all retries."""

    def __init__(
        self,
        backend: str,
        message: str,
        original_error: Optional[Exception] = None,
        status_code: Optional[int] = None
    ):
        """
        Initialize backend error.

        Args:
            backend: Provider name (openai, deepl, ...)
            message: Error message
            original_error: Last underlying exception, if any
            status_code: HTTP status of the last response, if any
        """
        full_message = f"Backend '{backend}' failed: {message}"
        details = {
            "backend": backend,
            "original_error": str(original_error) if original_error else None,
            "status_code": status_code
        }

        suggestion = None
        if status_code in (401, 403):
            suggestion = f"Check the API key for {backend}. Set it in the config file or via environment variable."
        elif status_code == 429:
            suggestion = "The provider is rate limiting requests. Wait a moment or lower --concurrency."
        elif status_code is None and original_error is not None:
            suggestion = "Check network connectivity and the provider endpoint URL."

        super().__init__(full_message, details, recoverable=True, suggestion=suggestion)
        self.backend = backend
        self.original_error = original_error
        self.status_code = status_code


class ConfigurationError(ReaderFirstError):
    """Raised when configuration is invalid or incomplete."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        invalid_value: Optional[Any] = None,
        valid_values: Optional[List[Any]] = None
    ):
        """
        Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that's invalid
            invalid_value: Invalid value provided
            valid_values: List of valid values
        """
        details = {
            "config_key": config_key,
            "invalid_value": invalid_value,
            "valid_values": valid_values
        }

        suggestion = None
        if config_key and valid_values:
            suggestion = f"Valid values for {config_key}: {', '.join(map(str, valid_values))}"
        elif config_key:
            suggestion = f"Check configuration for '{config_key}'"

        super().__init__(message, details, recoverable=True, suggestion=suggestion)
        self.config_key = config_key
        self.invalid_value = invalid_value
        self.valid_values = valid_values


class CacheError(ReaderFirstError):
    """Raised when cache initialization fails and memory fallback is disabled."""

    def __init__(
        self,
        message: str,
        cache_type: Optional[str] = None,
        operation: Optional[str] = None
    ):
        details = {
            "cache_type": cache_type,
            "operation": operation
        }
        suggestion = (
            "Cache errors are non-fatal when memory fallback is enabled.\n"
            "To fix: Check disk space and permissions for the cache directory."
        )

        super().__init__(message, details, recoverable=True, suggestion=suggestion)
        self.cache_type = cache_type
        self.operation = operation
