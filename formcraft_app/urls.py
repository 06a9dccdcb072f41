"""
URL configuration for formcraft_app.
"""
from django.urls import path

from .views import (
    analytics_views,
    auth_views,
    chat_views,
    form_views,
)

urlpatterns = [
    # Authentication endpoints
    path('auth/signup', auth_views.SignUpView.as_view(), name='auth-signup'),
    path('auth/login', auth_views.LoginView.as_view(), name='auth-login'),
    path('auth/refresh', auth_views.RefreshTokenView.as_view(), name='auth-refresh'),
    path('auth/logout', auth_views.LogoutView.as_view(), name='auth-logout'),
    path('auth/me', auth_views.AuthMeView.as_view(), name='auth-me'),
    path('auth/security-status', auth_views.SecurityStatusView.as_view(), name='auth-security-status'),
    path('auth/password-reset', auth_views.PasswordResetRequestView.as_view(), name='auth-password-reset'),
    path(
        'auth/password-reset/confirm',
        auth_views.PasswordResetConfirmView.as_view(),
        name='auth-password-reset-confirm',
    ),

    # Google OAuth endpoints
    path('auth/google', auth_views.GoogleOAuthView.as_view(), name='auth-google'),
    path('auth/google/callback', auth_views.GoogleOAuthCallbackView.as_view(), name='auth-google-callback'),

    # AI form operations
    path('forms/generate/', form_views.GenerateFormsView.as_view(), name='form-generate'),
    path('forms/refine/', form_views.RefineFormView.as_view(), name='form-refine'),
    path('forms/translate/', form_views.TranslateFormView.as_view(), name='form-translate'),

    # Forms
    path('forms/', form_views.FormListCreateView.as_view(), name='form-list'),
    path('forms/<uuid:form_id>/', form_views.FormDetailView.as_view(), name='form-detail'),
    path('forms/<uuid:form_id>/publish/', form_views.FormPublishView.as_view(published=True), name='form-publish'),
    path(
        'forms/<uuid:form_id>/unpublish/',
        form_views.FormPublishView.as_view(published=False),
        name='form-unpublish',
    ),
    path('forms/<uuid:form_id>/submissions/', form_views.FormSubmissionsView.as_view(), name='form-submissions'),

    # Analytics
    path('forms/<uuid:form_id>/analytics/', analytics_views.FormAnalyticsView.as_view(), name='form-analytics'),
    path(
        'forms/<uuid:form_id>/analytics/ask/',
        analytics_views.FormAnalyticsAskView.as_view(),
        name='form-analytics-ask',
    ),
    path('analytics/overview/', analytics_views.AnalyticsOverviewView.as_view(), name='analytics-overview'),

    # Conversations
    path('conversations/', chat_views.ConversationListCreateView.as_view(), name='conversation-list'),
    path(
        'conversations/<uuid:conversation_id>/',
        chat_views.ConversationDetailView.as_view(),
        name='conversation-detail',
    ),
    path(
        'conversations/<uuid:conversation_id>/messages/',
        chat_views.ConversationMessagesView.as_view(),
        name='conversation-messages',
    ),
]
