"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class BreatheError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(BreatheError):
    """Raised for issues related to configuration loading or validation."""


class LifecycleError(BreatheError):
    """Raised when a cache manager lifecycle step is invoked out of order."""


class PrecacheError(BreatheError):
    """Raised when one of the app shell resources cannot be fetched at install time."""


class NetworkError(BreatheError):
    """Raised when a network request fails or times out."""


class ShellUnavailableError(BreatheError):
    """
    Raised when the network is unreachable and the cached root document is missing,
    so the app shell cannot be served at all.
    """
