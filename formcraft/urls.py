from django.contrib import admin
from django.urls import path, include

from formcraft_app.views import public_views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('formcraft_app.urls')),

    # Public form links (outside /api/v1/)
    path('form/<uuid:form_id>/', public_views.PublicFormView.as_view(), name='public-form'),
    path('form/<uuid:form_id>/submit/', public_views.PublicFormSubmitView.as_view(), name='public-form-submit'),
]
