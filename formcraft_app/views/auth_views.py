"""
Authentication views for registration, login, token management, Google OAuth
and password reset. Identity logic lives in SessionStore.
"""

import json
import logging
from urllib.parse import quote

from django.conf import settings
from django.shortcuts import redirect
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from formcraft_app.exceptions import (
    AccountLocked,
    AuthError,
    EmailTaken,
    InvalidCredentials,
    OAuthError,
    PasswordResetInvalid,
    WeakPassword,
)
from formcraft_app.serializers.auth_serializers import (
    LoginSerializer,
    LogoutSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    RefreshSerializer,
    SignUpSerializer,
    UserSerializer,
)
from formcraft_app.services.session_store import SessionStore, get_session_store

logger = logging.getLogger(__name__)

AUTH_ERROR_STATUS = {
    AccountLocked: status.HTTP_429_TOO_MANY_REQUESTS,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    WeakPassword: status.HTTP_400_BAD_REQUEST,
    EmailTaken: status.HTTP_400_BAD_REQUEST,
    PasswordResetInvalid: status.HTTP_400_BAD_REQUEST,
    OAuthError: status.HTTP_400_BAD_REQUEST,
}


def auth_error_response(error: AuthError) -> Response:
    return Response(
        {"error": str(error), "code": error.code},
        status=AUTH_ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST),
    )


class SessionStoreMixin:
    """Views get the process SessionStore unless one is passed to ``as_view``."""

    session_store: SessionStore = None

    @property
    def store(self) -> SessionStore:
        return self.session_store or get_session_store()


class SignUpView(SessionStoreMixin, APIView):
    """
    POST /auth/signup
    Register a new user with email and password.
    """

    permission_classes = [AllowAny]

    def post(self, request):
        try:
            serializer = SignUpSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            user, tokens = self.store.sign_up(**serializer.validated_data)

            return Response(
                {
                    "user": UserSerializer(user).data,
                    "tokens": tokens,
                    "message": "User created successfully",
                },
                status=status.HTTP_201_CREATED,
            )

        except AuthError as e:
            return auth_error_response(e)
        except Exception as e:
            logger.error(f"Error in SignUpView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class LoginView(SessionStoreMixin, APIView):
    """
    POST /auth/login
    Authenticate user with email and password.
    Returns JWT access and refresh tokens.
    """

    permission_classes = [AllowAny]

    def post(self, request):
        try:
            serializer = LoginSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            user, tokens = self.store.sign_in(
                serializer.validated_data["email"],
                serializer.validated_data["password"],
                request=request,
            )

            return Response(
                {
                    "user": UserSerializer(user).data,
                    "tokens": tokens,
                },
                status=status.HTTP_200_OK,
            )

        except AuthError as e:
            return auth_error_response(e)
        except Exception as e:
            logger.error(f"Error in LoginView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class RefreshTokenView(SessionStoreMixin, APIView):
    """
    POST /auth/refresh
    Refresh access token using refresh token.
    """

    permission_classes = [AllowAny]

    def post(self, request):
        try:
            serializer = RefreshSerializer(data=request.data)
            if not serializer.is_valid():
                return Response({"error": "Refresh token is required"}, status=status.HTTP_400_BAD_REQUEST)

            return Response(self.store.refresh(serializer.validated_data["refresh"]), status=status.HTTP_200_OK)

        except InvalidCredentials:
            return Response({"error": "Invalid refresh token"}, status=status.HTTP_401_UNAUTHORIZED)
        except Exception as e:
            logger.error(f"Error in RefreshTokenView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class LogoutView(SessionStoreMixin, APIView):
    """
    POST /auth/logout
    Blacklist the refresh token and clear the session state.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        try:
            serializer = LogoutSerializer(data=request.data)
            refresh_token = serializer.validated_data.get("refresh") if serializer.is_valid() else None
            self.store.sign_out(request.user, refresh_token)
            return Response({"message": "Signed out"}, status=status.HTTP_200_OK)

        except Exception as e:
            logger.error(f"Error in LogoutView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class AuthMeView(SessionStoreMixin, APIView):
    """
    GET /auth/me
    Returns current authenticated user.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            user = self.store.current_user(request)
            return Response({"user": UserSerializer(user).data})

        except Exception as e:
            logger.error(f"Error in AuthMeView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class SecurityStatusView(SessionStoreMixin, APIView):
    """
    GET /auth/security-status
    Advisory session health for the signed-in user.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            return Response(self.store.security_status(request.user))

        except Exception as e:
            logger.error(f"Error in SecurityStatusView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================================================
# Password Reset Views
# ============================================================================


class PasswordResetRequestView(SessionStoreMixin, APIView):
    """
    POST /auth/password-reset
    Email a reset link. The response is the same whether or not the email exists.
    """

    permission_classes = [AllowAny]

    def post(self, request):
        try:
            serializer = PasswordResetRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            self.store.request_password_reset(serializer.validated_data["email"])
            return Response(
                {"message": "If an account exists for this email, a reset link has been sent."},
                status=status.HTTP_200_OK,
            )

        except Exception as e:
            logger.error(f"Error in PasswordResetRequestView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class PasswordResetConfirmView(SessionStoreMixin, APIView):
    """
    POST /auth/password-reset/confirm
    Set a new password from a reset link.
    """

    permission_classes = [AllowAny]

    def post(self, request):
        try:
            serializer = PasswordResetConfirmSerializer(data=request.data)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            self.store.complete_password_reset(**serializer.validated_data)
            return Response({"message": "Password updated"}, status=status.HTTP_200_OK)

        except AuthError as e:
            return auth_error_response(e)
        except Exception as e:
            logger.error(f"Error in PasswordResetConfirmView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


# ============================================================================
# Google OAuth Views
# ============================================================================


class GoogleOAuthView(SessionStoreMixin, APIView):
    """
    GET /auth/google
    Initiates Google OAuth flow.
    Returns OAuth URL for frontend to redirect to.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        try:
            return Response({"oauth_url": self.store.google_authorization_url()}, status=status.HTTP_200_OK)

        except OAuthError as e:
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except Exception as e:
            logger.error(f"Error in GoogleOAuthView: {str(e)}")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class GoogleOAuthCallbackView(SessionStoreMixin, APIView):
    """
    GET /auth/google/callback
    Handles Google OAuth callback.
    Redirects to the frontend with JWT tokens in the URL hash.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        frontend_url = getattr(settings, "FRONTEND_URL", "http://localhost:3000")
        try:
            error = request.GET.get("error")
            if error:
                raise OAuthError(f"OAuth error: {error}")

            user, tokens, _ = self.store.sign_in_with_google(request.GET.get("code"), request.GET.get("state"))

            user_json = json.dumps(UserSerializer(user).data)
            user_b64 = urlsafe_base64_encode(force_bytes(user_json))

            # Tokens go in the hash so they stay out of server logs
            return redirect(
                f"{frontend_url}/auth/google/callback"
                f"#access_token={tokens['access']}"
                f"&refresh_token={tokens['refresh']}"
                f"&user={user_b64}"
            )

        except Exception as e:
            logger.error(f"Error in GoogleOAuthCallbackView: {str(e)}")
            return redirect(f"{frontend_url}/auth/google/callback?error={quote(str(e))}")
