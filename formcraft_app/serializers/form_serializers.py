"""
Serializers for forms, submissions and AI form operations.

Form documents are validated with the pydantic ``GeneratedForm`` model; the
serializers below only shape the request bodies around them.
"""
from pydantic import ValidationError
from rest_framework import serializers

from builder.models import Form, FormSubmission
from formcraft_app.services.form_store import row_to_form
from formcraft_app.types import DEFAULT_LANGUAGE, GeneratedForm, submission_data_adapter


def _pydantic_messages(error: ValidationError):
    return [
        f"{'.'.join(str(part) for part in err['loc']) or 'form'}: {err['msg']}"
        for err in error.errors()
    ]


class GeneratedFormField(serializers.JSONField):
    """A JSON form document, parsed into a GeneratedForm."""

    def to_internal_value(self, data):
        data = super().to_internal_value(data)
        try:
            return GeneratedForm.model_validate(data)
        except ValidationError as e:
            raise serializers.ValidationError(_pydantic_messages(e))

    def to_representation(self, value):
        if isinstance(value, GeneratedForm):
            return value.to_json_dict()
        return super().to_representation(value)


class FormRowSerializer(serializers.ModelSerializer):
    """Dashboard listing of a stored form."""
    form = serializers.SerializerMethodField()
    submission_count = serializers.SerializerMethodField()

    class Meta:
        model = Form
        fields = [
            "id",
            "title",
            "description",
            "published",
            "published_at",
            "created_at",
            "updated_at",
            "submission_count",
            "form",
        ]
        read_only_fields = fields

    def get_form(self, obj):
        form = row_to_form(obj)
        return form.to_json_dict() if form else None

    def get_submission_count(self, obj):
        return obj.submissions.count()


class FormSaveSerializer(serializers.Serializer):
    form = GeneratedFormField()


class GenerateFormsSerializer(serializers.Serializer):
    prompt = serializers.CharField(required=True, min_length=1, max_length=5000)
    language = serializers.CharField(required=False, default=DEFAULT_LANGUAGE, max_length=100)


class RefineFormSerializer(serializers.Serializer):
    form = GeneratedFormField()
    instruction = serializers.CharField(required=True, min_length=1, max_length=5000)


class TranslateFormSerializer(serializers.Serializer):
    form = GeneratedFormField()
    target_language = serializers.CharField(required=True, min_length=1, max_length=100)


class SubmissionCreateSerializer(serializers.Serializer):
    data = serializers.JSONField()
    completionTime = serializers.FloatField(
        source="completion_time", required=False, allow_null=True, min_value=0
    )

    def validate_data(self, value):
        try:
            return submission_data_adapter.validate_python(value)
        except ValidationError as e:
            raise serializers.ValidationError(_pydantic_messages(e))


class FormSubmissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = FormSubmission
        fields = ["id", "form", "data", "completion_time", "created_at"]
        read_only_fields = fields


class AskAnalyticsSerializer(serializers.Serializer):
    question = serializers.CharField(required=True, min_length=1, max_length=2000)
