"""
Core module - Data models and errors.
"""
from browser_e2e.core.errors import (
    BrowserE2EError,
    ConfigurationError,
    DriverSessionError,
    ElementTimeoutError,
    TunnelError,
)
from browser_e2e.core.models import DriverFactory, TestEnvironment, TestInputs

__all__ = [
    "BrowserE2EError",
    "ConfigurationError",
    "DriverSessionError",
    "ElementTimeoutError",
    "TunnelError",
    "DriverFactory",
    "TestEnvironment",
    "TestInputs",
]
