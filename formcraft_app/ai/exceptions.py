"""
Custom exceptions for the ai module.
"""


class ChatFunctionError(Exception):
    """Base exception for text generation provider errors."""


class ProviderNotConfigured(ChatFunctionError):
    """Raised when no credential is configured for the provider."""


class ResponseParseError(ChatFunctionError):
    """Raised when the model output is empty or not the expected JSON."""


class APIError(ChatFunctionError):
    """Raised when the API request fails."""

    def __init__(self, message: str, status_code: int = None, response_body: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
