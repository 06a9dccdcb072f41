"""
Accounts app models - users authenticated by email/password or Google OAuth.
"""
from django.contrib.auth.models import AbstractUser
from django.db import models

from formcraft.utils.base_model import DjangoBaseModel


class User(AbstractUser, DjangoBaseModel):
    """
    User model that extends Django's AbstractUser.

    Supports:
    - Email/password authentication
    - Google OAuth authentication
    - JWT token-based API authentication
    """
    email = models.EmailField(unique=True)
    username = models.CharField(max_length=150, unique=True, null=True, blank=True)

    google_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text='Google user ID for OAuth'
    )
    profile_image_url = models.URLField(
        max_length=500,
        blank=True,
        null=True,
        help_text='Profile image URL from OAuth provider'
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    def __str__(self):
        return self.email
