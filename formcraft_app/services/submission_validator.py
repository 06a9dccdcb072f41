"""
Submission checks for the public form endpoint.

``validate_submission`` returns ``{field_id: message}``; an empty dict means
the submission may be stored.
"""
import re
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from builder.types import CHOICE_FIELD_TYPES, TEXT_LIKE_FIELD_TYPES, FieldType
from formcraft_app.types import FormField, GeneratedForm, SubmissionData

REQUIRED_MESSAGE = "This field is required"
INVALID_FORMAT_MESSAGE = "Invalid format"
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
INVALID_OPTION_MESSAGE = "Please choose one of the available options"
INVALID_VALUE_MESSAGE = "Invalid value"

NUMERIC_FIELD_TYPES = frozenset({FieldType.NUMBER, FieldType.SLIDER})


def _fmt(number) -> str:
    if isinstance(number, float) and number.is_integer():
        number = int(number)
    return str(number)


def is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return len(value) == 0
    return False


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _check_text(field: FormField, value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return INVALID_VALUE_MESSAGE
    validation = field.validation
    if validation:
        if validation.min is not None and len(value) < validation.min:
            return f"Minimum {_fmt(validation.min)} characters required"
        if validation.max is not None and len(value) > validation.max:
            return f"Maximum {_fmt(validation.max)} characters allowed"
        if validation.pattern and not re.search(validation.pattern, value):
            return INVALID_FORMAT_MESSAGE
    if field.type == FieldType.EMAIL:
        try:
            validate_email(value)
        except ValidationError:
            return INVALID_EMAIL_MESSAGE
    return None


def _check_number(field: FormField, value: Any) -> Optional[str]:
    number = _as_number(value)
    if number is None:
        return INVALID_VALUE_MESSAGE
    validation = field.validation
    if validation:
        if validation.min is not None and number < validation.min:
            return f"Value must be at least {_fmt(validation.min)}"
        if validation.max is not None and number > validation.max:
            return f"Value must be at most {_fmt(validation.max)}"
    return None


def _check_rating(field: FormField, value: Any) -> Optional[str]:
    number = _as_number(value)
    rating_max = field.validation.max if field.validation and field.validation.max is not None else 5
    if number is None or not 1 <= number <= rating_max:
        return f"Rating must be between 1 and {_fmt(rating_max)}"
    return None


def _check_choice(field: FormField, value: Any) -> Optional[str]:
    options = set(field.options or [])
    if field.type == FieldType.CHECKBOX:
        values = value if isinstance(value, list) else [value]
        if not all(isinstance(item, str) and item in options for item in values):
            return INVALID_OPTION_MESSAGE
        return None
    if not isinstance(value, str) or value not in options:
        return INVALID_OPTION_MESSAGE
    return None


def validate_field(field: FormField, value: Any) -> Optional[str]:
    """Error message for one answer, or None when it is acceptable."""
    if is_blank(value):
        return REQUIRED_MESSAGE if field.required else None

    if field.type in TEXT_LIKE_FIELD_TYPES:
        return _check_text(field, value)
    if field.type in NUMERIC_FIELD_TYPES:
        return _check_number(field, value)
    if field.type == FieldType.RATING:
        return _check_rating(field, value)
    if field.type in CHOICE_FIELD_TYPES:
        return _check_choice(field, value)
    if field.type == FieldType.SWITCH and not isinstance(value, bool):
        return INVALID_VALUE_MESSAGE
    return None


def validate_submission(form: GeneratedForm, data: SubmissionData) -> Dict[str, str]:
    errors = {}
    for field in form.fields:
        message = validate_field(field, data.get(field.id))
        if message:
            errors[field.id] = message
    return errors
