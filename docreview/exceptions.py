"""
Exceptions

Exception hierarchy for the review workbench. Only gateway errors are raised
across the extraction boundary; the engine converts them into a terminal
document state.
"""


class DocReviewException(Exception):
    """Base exception for all workbench errors."""
    pass


class GatewayError(DocReviewException):
    """Raised when the extraction service call fails."""
    
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class MalformedResponseError(GatewayError):
    """Raised when the extraction service returns a payload of the wrong shape."""
    pass


class ConfigurationError(DocReviewException):
    """Raised when configuration is invalid or missing."""
    pass


class SessionError(DocReviewException):
    """Raised when a saved review session cannot be read or written."""
    pass
