"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class FeedToolsError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(FeedToolsError):
    """Raised for issues related to configuration loading or validation."""


class NetworkError(FeedToolsError):
    """Raised when a remote endpoint cannot be reached or times out."""


class ParseError(FeedToolsError):
    """Raised when a remote response does not have the expected shape."""


class ArchiveError(FeedToolsError):
    """Raised when a content archive cannot be downloaded or extracted."""


class InstallationNotFoundError(FeedToolsError):
    """Raised when the Steam installation directory cannot be located."""


class PipelineBusyError(FeedToolsError):
    """
    Raised when an installation is requested while another one is still running.
    """
