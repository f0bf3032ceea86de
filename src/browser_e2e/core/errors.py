"""
Browser E2E Error Taxonomy - Exception classes for the e2e test bootstrap.

Configuration problems are fatal at startup. Everything else (tunnel,
session, element lookups) is raised with enough context to tell which
browser environment it came from.
"""
from typing import Optional


class BrowserE2EError(Exception):
    """Base exception for all browser e2e errors."""

    def __init__(self, message: str, environment: Optional[str] = None,
                 method: Optional[str] = None, **context):
        super().__init__(message)
        self.message = message
        self.environment = environment
        self.method = method
        self.context = context

    def __str__(self):
        parts = [self.message]
        if self.environment:
            parts.append(f"environment={self.environment}")
        if self.method:
            parts.append(f"method={self.method}")
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"context=({context_str})")
        return " | ".join(parts)


class ConfigurationError(BrowserE2EError):
    """Raised when the environment variables describe an unusable setup."""
    pass


class TunnelError(BrowserE2EError):
    """Raised when the BrowserStack Local tunnel cannot be started."""
    pass


class DriverSessionError(BrowserE2EError):
    """Raised when a WebDriver session cannot be created or used."""
    pass


class ElementTimeoutError(BrowserE2EError):
    """Raised when waiting for an element exceeds its timeout."""

    def __init__(self, message: str, timeout: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout = timeout
