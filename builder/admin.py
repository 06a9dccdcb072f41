from django.contrib import admin

from builder.models import Form, FormSubmission, AnalyticsCache


@admin.register(Form)
class FormAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "published", "published_at", "created_at")
    list_filter = ("published",)
    search_fields = ("title", "user__email")


@admin.register(FormSubmission)
class FormSubmissionAdmin(admin.ModelAdmin):
    list_display = ("id", "form", "completion_time", "created_at")
    search_fields = ("form__title",)


@admin.register(AnalyticsCache)
class AnalyticsCacheAdmin(admin.ModelAdmin):
    list_display = ("form", "generated_at")
