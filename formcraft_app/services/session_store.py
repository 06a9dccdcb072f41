"""
Session and identity gateway.

SessionStore wraps Django auth and SimpleJWT, and keeps the advisory
per-process state: failed sign-in attempts and last activity per user. One
instance is built per process and injected into the auth views.
"""
import hashlib
import hmac
import logging
import math
import secrets
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from formcraft_app.exceptions import (
    AccountLocked,
    EmailTaken,
    InvalidCredentials,
    OAuthError,
    PasswordResetInvalid,
    WeakPassword,
)

logger = logging.getLogger(__name__)
User = get_user_model()

MIN_PASSWORD_LENGTH = 8
WEAK_PASSWORDS = frozenset({"password", "123456", "qwerty", "admin", "letmein"})

RECENT_ACTIVITY_WINDOW = timedelta(minutes=5)
OAUTH_STATE_MAX_AGE_SECONDS = 600

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


def get_tokens_for_user(user) -> Dict[str, str]:
    """
    Generate JWT tokens for a user.
    """
    refresh = RefreshToken.for_user(user)
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def check_password_strength(password: str) -> None:
    """Raise WeakPassword for short or well-known passwords."""
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise WeakPassword(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if password.lower() in WEAK_PASSWORDS:
        raise WeakPassword("Please choose a stronger password")


def _generate_oauth_state() -> str:
    """Generate a signed OAuth state parameter for CSRF protection.

    Uses HMAC with the secret key to sign a timestamp, avoiding session dependency.
    """
    timestamp = str(int(time.time()))
    nonce = secrets.token_urlsafe(16)
    message = f"{timestamp}:{nonce}"
    signature = hmac.new(settings.SECRET_KEY.encode(), message.encode(), hashlib.sha256).hexdigest()[:16]
    return f"{message}:{signature}"


def _verify_oauth_state(state: str) -> bool:
    """Verify the signed OAuth state parameter.

    Returns True if valid and not expired (within 10 minutes).
    """
    parts = (state or "").split(":")
    if len(parts) != 3:
        return False
    timestamp, nonce, signature = parts

    try:
        issued_at = int(timestamp)
    except ValueError:
        return False
    if abs(int(time.time()) - issued_at) > OAUTH_STATE_MAX_AGE_SECONDS:
        return False

    message = f"{timestamp}:{nonce}"
    expected_signature = hmac.new(settings.SECRET_KEY.encode(), message.encode(), hashlib.sha256).hexdigest()[:16]
    return hmac.compare_digest(signature, expected_signature)


@dataclass
class LoginAttempts:
    count: int
    last_attempt: datetime


class LoginAttemptTracker:
    """
    Failed sign-in attempts per email.

    An email is locked once it reaches MAX_ATTEMPTS failures and stays locked
    until LOCKOUT_DURATION has passed since the last failure.
    """

    MAX_ATTEMPTS = 5
    LOCKOUT_DURATION = timedelta(minutes=15)

    def __init__(self, clock: Callable[[], datetime] = timezone.now):
        self._clock = clock
        self._attempts: Dict[str, LoginAttempts] = {}
        self._lock = threading.Lock()

    def remaining_lockout(self, email: str) -> Optional[timedelta]:
        with self._lock:
            attempts = self._attempts.get(email)
        if attempts is None or attempts.count < self.MAX_ATTEMPTS:
            return None
        remaining = self.LOCKOUT_DURATION - (self._clock() - attempts.last_attempt)
        return remaining if remaining > timedelta(0) else None

    def record_failure(self, email: str) -> int:
        with self._lock:
            current = self._attempts.get(email)
            count = (current.count if current else 0) + 1
            self._attempts[email] = LoginAttempts(count=count, last_attempt=self._clock())
        return count

    def reset(self, email: str) -> None:
        with self._lock:
            self._attempts.pop(email, None)


class SessionStore:
    """
    Identity operations for the REST API.

    Usage:
        store = get_session_store()
        user, tokens = store.sign_in("ada@example.com", "correct horse")
    """

    def __init__(
        self,
        attempt_tracker: Optional[LoginAttemptTracker] = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self._clock = clock
        self.attempts = attempt_tracker or LoginAttemptTracker(clock=clock)
        self._activity: Dict[str, datetime] = {}
        self._activity_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Email / password
    # ------------------------------------------------------------------

    def sign_up(self, email: str, password: str, first_name: str = "", last_name: str = "") -> Tuple[User, Dict[str, str]]:
        email = normalize_email(email)
        check_password_strength(password)
        if User.objects.filter(email__iexact=email).exists():
            raise EmailTaken()

        user = User(email=email, username=email, first_name=first_name or "", last_name=last_name or "")
        user.set_password(password)
        user.save()

        logger.info(f"User signed up: {user.email}")
        self.record_activity(user)
        return user, get_tokens_for_user(user)

    def sign_in(self, email: str, password: str, request=None) -> Tuple[User, Dict[str, str]]:
        email = normalize_email(email)

        remaining = self.attempts.remaining_lockout(email)
        if remaining is not None:
            raise AccountLocked(math.ceil(remaining.total_seconds() / 60))

        user = authenticate(request=request, username=email, password=password)
        if user is None or not user.is_active:
            count = self.attempts.record_failure(email)
            logger.warning(f"Failed sign-in for {email} ({count} attempts)")
            raise InvalidCredentials()

        self.attempts.reset(email)
        self.record_activity(user)
        logger.info(f"User logged in: {user.email}")
        return user, get_tokens_for_user(user)

    def refresh(self, refresh_token: str) -> Dict[str, str]:
        """Exchange a refresh token for a new access token (and a rotated refresh token)."""
        try:
            refresh = RefreshToken(refresh_token)
        except TokenError as e:
            raise InvalidCredentials("Invalid refresh token") from e

        tokens = {"access": str(refresh.access_token)}
        if settings.SIMPLE_JWT.get("ROTATE_REFRESH_TOKENS"):
            if settings.SIMPLE_JWT.get("BLACKLIST_AFTER_ROTATION"):
                refresh.blacklist()
            refresh.set_jti()
            refresh.set_exp()
            refresh.set_iat()
            tokens["refresh"] = str(refresh)
        return tokens

    def sign_out(self, user, refresh_token: Optional[str] = None) -> None:
        """Blacklist the refresh token and forget this user's advisory session state."""
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                logger.warning(f"Sign out with unusable refresh token: {str(e)}")

        with self._activity_lock:
            self._activity.pop(str(user.pk), None)
        self.attempts.reset(normalize_email(user.email))
        logger.info(f"User signed out: {user.email}")

    def current_user(self, request):
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        self.record_activity(user)
        return user

    # ------------------------------------------------------------------
    # Google OAuth
    # ------------------------------------------------------------------

    def google_authorization_url(self) -> str:
        client_id = settings.GOOGLE_OAUTH_CLIENT_ID
        if not client_id:
            raise OAuthError("Google OAuth not configured")

        params = {
            "client_id": client_id,
            "redirect_uri": settings.GOOGLE_OAUTH_REDIRECT_URI,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "offline",
            "prompt": "consent",
            "state": _generate_oauth_state(),
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def sign_in_with_google(self, code: str, state: str) -> Tuple[User, Dict[str, str], bool]:
        """Exchange the authorization code and get or create the matching user."""
        if not code:
            raise OAuthError("Authorization code not provided")
        if not _verify_oauth_state(state):
            logger.warning(f"Invalid OAuth state parameter: {state}")
            raise OAuthError("Invalid or expired state parameter. Please try again.")

        user_info = self._fetch_google_user_info(code)

        email = normalize_email(user_info.get("email"))
        if not email:
            raise OAuthError("Email not provided by Google")

        google_id = user_info.get("id")
        picture = user_info.get("picture")
        name_parts = (user_info.get("name") or "").split(maxsplit=1)
        first_name = name_parts[0] if len(name_parts) > 0 else ""
        last_name = name_parts[1] if len(name_parts) > 1 else ""

        with transaction.atomic():
            user, created = User.objects.get_or_create(
                email=email,
                defaults={
                    "google_id": google_id,
                    "first_name": first_name,
                    "last_name": last_name,
                    "username": email,
                    "profile_image_url": picture,
                    "is_active": True,
                },
            )
            if not created:
                updates = {
                    "google_id": google_id,
                    "profile_image_url": picture,
                    "first_name": first_name,
                    "last_name": last_name,
                }
                changed = [name for name, value in updates.items() if value and getattr(user, name) != value]
                for name in changed:
                    setattr(user, name, updates[name])
                if changed:
                    user.save(update_fields=changed + ["updated_at"])

        self.record_activity(user)
        logger.info(f"User authenticated via Google: {email} (new_user={created})")
        return user, get_tokens_for_user(user), created

    def _fetch_google_user_info(self, code: str) -> dict:
        try:
            token_response = requests.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": settings.GOOGLE_OAUTH_CLIENT_ID,
                    "client_secret": settings.GOOGLE_OAUTH_CLIENT_SECRET,
                    "redirect_uri": settings.GOOGLE_OAUTH_REDIRECT_URI,
                    "grant_type": "authorization_code",
                },
                timeout=10,
            )
            if token_response.status_code != 200:
                logger.error(f"Google OAuth token error: {token_response.text}")
                raise OAuthError("Failed to exchange authorization code")

            access_token = token_response.json().get("access_token")
            user_info_response = requests.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=10,
            )
            if user_info_response.status_code != 200:
                raise OAuthError("Failed to fetch user info from Google")
            return user_info_response.json()
        except requests.RequestException as e:
            logger.error(f"Google OAuth request failed: {str(e)}")
            raise OAuthError("Google sign-in is temporarily unavailable") from e

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def request_password_reset(self, email: str) -> None:
        """Email a reset link when the account exists. Silent otherwise."""
        email = normalize_email(email)
        user = User.objects.filter(email__iexact=email, is_active=True).first()
        if user is None:
            logger.info(f"Password reset requested for unknown email {email}")
            return

        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        frontend_url = getattr(settings, "FRONTEND_URL", "http://localhost:3000")
        reset_url = f"{frontend_url}/auth/reset-password?{urlencode({'uid': uid, 'token': token})}"
        app_name = getattr(settings, "APP_NAME", "FormCraft AI")

        plain_message = f"""
Hi {user.first_name or 'there'},

We received a request to reset your {app_name} password.

Click the link below to choose a new password:

{reset_url}

If you didn't request this email, you can safely ignore it.

- The {app_name} Team
        """.strip()

        try:
            send_mail(
                subject=f"Reset your {app_name} password",
                message=plain_message,
                from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
                recipient_list=[user.email],
                fail_silently=False,
            )
            logger.info(f"Password reset link sent to {user.email}")
        except Exception as e:
            logger.error(f"Failed to send password reset email to {user.email}: {str(e)}")
            if settings.DEBUG:
                logger.info(f"[DEBUG] Password reset URL: {reset_url}")

    def complete_password_reset(self, uid: str, token: str, new_password: str) -> User:
        try:
            user = User.objects.get(pk=force_str(urlsafe_base64_decode(uid)))
        except (User.DoesNotExist, ValueError, TypeError, OverflowError, ValidationError):
            raise PasswordResetInvalid()

        if not default_token_generator.check_token(user, token):
            raise PasswordResetInvalid()

        check_password_strength(new_password)
        user.set_password(new_password)
        user.save()
        self.attempts.reset(normalize_email(user.email))
        logger.info(f"Password reset completed for {user.email}")
        return user

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    def record_activity(self, user) -> None:
        with self._activity_lock:
            self._activity[str(user.pk)] = self._clock()

    def last_activity(self, user) -> Optional[datetime]:
        with self._activity_lock:
            return self._activity.get(str(user.pk))

    def security_status(self, user, session_valid: bool = True) -> Dict[str, object]:
        now = self._clock()
        last_activity = self.last_activity(user)
        joined = getattr(user, "date_joined", None) or now
        return {
            "session_valid": session_valid,
            "last_activity": last_activity,
            "last_activity_recent": last_activity is not None and now - last_activity < RECENT_ACTIVITY_WINDOW,
            "account_age_days": max(0, (now - joined).days),
        }


_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get the singleton SessionStore instance."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
