from . import analytics_views, auth_views, chat_views, form_views, public_views  # noqa: F401
