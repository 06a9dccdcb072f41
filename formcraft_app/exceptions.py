"""
Declared errors for the FormCraft services.

Views translate these into short ``{"error": ...}`` responses.
"""
from typing import Optional

from accounts.types import AuthErrorCode


class RefinementFailed(Exception):
    """The model was configured but refinement could not produce a valid form."""


class StorageError(Exception):
    """The relational store rejected or failed an operation."""


class FormNotFound(StorageError):
    def __init__(self, form_id):
        super().__init__(f"Form {form_id} not found")
        self.form_id = form_id


class ConversationNotFound(StorageError):
    def __init__(self, conversation_id):
        super().__init__(f"Conversation {conversation_id} not found")
        self.conversation_id = conversation_id


class AuthError(Exception):
    """Base class for identity failures. ``code`` is stable for clients."""

    code: AuthErrorCode = AuthErrorCode.INVALID_CREDENTIALS
    default_message = "Authentication failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class AccountLocked(AuthError):
    code = AuthErrorCode.ACCOUNT_LOCKED
    default_message = "Account temporarily locked. Please try again later."

    def __init__(self, remaining_minutes: int):
        super().__init__(f"Account temporarily locked. Please try again in {remaining_minutes} minutes.")
        self.remaining_minutes = remaining_minutes


class InvalidCredentials(AuthError):
    code = AuthErrorCode.INVALID_CREDENTIALS
    default_message = "Invalid email or password"


class WeakPassword(AuthError):
    code = AuthErrorCode.WEAK_PASSWORD
    default_message = "Password is too weak"


class EmailTaken(AuthError):
    code = AuthErrorCode.EMAIL_TAKEN
    default_message = "A user with this email already exists"


class PasswordResetInvalid(AuthError):
    code = AuthErrorCode.PASSWORD_RESET_INVALID
    default_message = "Password reset link is invalid or has expired"


class OAuthError(AuthError):
    code = AuthErrorCode.OAUTH_ERROR
    default_message = "OAuth sign-in failed"
