"""
Type definitions for the builder app.
"""
from enum import StrEnum


class FieldType(StrEnum):
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    DATE = "date"
    FILE = "file"
    PASSWORD = "password"
    SLIDER = "slider"
    SWITCH = "switch"
    RATING = "rating"


class FormTheme(StrEnum):
    MODERN = "modern"
    CLASSIC = "classic"
    MINIMAL = "minimal"
    COLORFUL = "colorful"


# Fields that must carry a non-empty options list
CHOICE_FIELD_TYPES = frozenset({FieldType.SELECT, FieldType.RADIO, FieldType.CHECKBOX})

# Fields whose min/max bound the number of characters
TEXT_LIKE_FIELD_TYPES = frozenset({FieldType.TEXT, FieldType.EMAIL, FieldType.TEXTAREA, FieldType.PASSWORD})
