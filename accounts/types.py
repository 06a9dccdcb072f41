"""
Type definitions for the accounts app.
"""
from enum import StrEnum


class AuthErrorCode(StrEnum):
    ACCOUNT_LOCKED = "account_locked"
    INVALID_CREDENTIALS = "invalid_credentials"
    WEAK_PASSWORD = "weak_password"
    EMAIL_TAKEN = "email_taken"
    PASSWORD_RESET_INVALID = "password_reset_invalid"
    OAUTH_ERROR = "oauth_error"
