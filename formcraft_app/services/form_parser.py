"""
Parse and repair form payloads returned by the model.

Model output arrives in one of three shapes:

    [form, form]              FORM_ARRAY
    {"forms": [form, form]}   FORMS_WRAPPER
    {"title": ..., "fields"}  SINGLE_FORM

``parse_form_payload`` classifies the payload, repairs each form into a valid
``GeneratedForm`` and returns ``ParseOk`` or ``ParseError``. It never raises.
"""
import logging
import math
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Collection, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from builder.types import CHOICE_FIELD_TYPES, FieldType, FormTheme
from formcraft.utils.enum_utils import safe_str_enum
from formcraft_app.types import (
    DEFAULT_LANGUAGE,
    DEFAULT_RATING_MAX,
    RATING_MAX_LOWER,
    RATING_MAX_UPPER,
    GeneratedForm,
    new_id,
)

logger = logging.getLogger(__name__)

UNTITLED_FORM = "Untitled Form"

DEFAULT_SLIDER = {"min": 0, "max": 100, "step": 1}


class PayloadShape(StrEnum):
    FORM_ARRAY = "form_array"
    FORMS_WRAPPER = "forms_wrapper"
    SINGLE_FORM = "single_form"


@dataclass(frozen=True)
class ParseOk:
    forms: List[GeneratedForm]
    shape: PayloadShape


@dataclass(frozen=True)
class ParseError:
    reason: str


ParseResult = Union[ParseOk, ParseError]


class FormRepairError(ValueError):
    """A raw form could not be turned into a valid GeneratedForm."""


def classify_payload(payload: Any) -> Optional[Tuple[PayloadShape, List[Any]]]:
    if isinstance(payload, list):
        return PayloadShape.FORM_ARRAY, payload
    if isinstance(payload, dict):
        if isinstance(payload.get("forms"), list):
            return PayloadShape.FORMS_WRAPPER, payload["forms"]
        if "fields" in payload:
            return PayloadShape.SINGLE_FORM, [payload]
    return None


def _as_number(value: Any) -> Optional[Union[int, float]]:
    """A finite number from model output, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _repair_options(raw_options: Any) -> List[str]:
    if not isinstance(raw_options, list):
        return []
    options = []
    for option in raw_options:
        if isinstance(option, dict):
            option = option.get("label") or option.get("value")
        text = _as_text(option)
        if text:
            options.append(text)
    return options


def _repair_validation(field_type: FieldType, raw_validation: Any) -> Optional[Dict[str, Any]]:
    raw_validation = raw_validation if isinstance(raw_validation, dict) else {}
    validation: Dict[str, Any] = {}
    for key in ("min", "max", "step"):
        number = _as_number(raw_validation.get(key))
        if number is not None:
            validation[key] = number

    pattern = raw_validation.get("pattern")
    if isinstance(pattern, str) and pattern:
        try:
            re.compile(pattern)
            validation["pattern"] = pattern
        except re.error:
            logger.debug(f"Dropping invalid pattern from model output: {pattern!r}")

    if field_type == FieldType.RATING:
        rating_max = int(validation.get("max") or DEFAULT_RATING_MAX)
        validation["max"] = max(RATING_MAX_LOWER, min(RATING_MAX_UPPER, rating_max))

    if field_type == FieldType.SLIDER:
        for key, default in DEFAULT_SLIDER.items():
            validation.setdefault(key, default)
        if validation["min"] >= validation["max"]:
            validation["min"], validation["max"] = DEFAULT_SLIDER["min"], DEFAULT_SLIDER["max"]
        if validation["step"] <= 0:
            validation["step"] = DEFAULT_SLIDER["step"]

    return validation or None


def repair_field(raw: Any) -> Optional[Dict[str, Any]]:
    """Normalize one raw field. Returns None when the field has no usable label."""
    if not isinstance(raw, dict):
        return None

    label = _as_text(raw.get("label"))
    if not label:
        return None

    field_type = safe_str_enum(raw.get("type"), FieldType.TEXT, FieldType)
    options = _repair_options(raw.get("options"))
    if field_type in CHOICE_FIELD_TYPES and not options:
        field_type = FieldType.TEXT

    field: Dict[str, Any] = {
        "id": _as_text(raw.get("id")) or new_id(),
        "type": field_type,
        "label": label,
        "required": _as_bool(raw.get("required", False)),
    }
    placeholder = _as_text(raw.get("placeholder"))
    if placeholder:
        field["placeholder"] = placeholder
    if field_type in CHOICE_FIELD_TYPES:
        field["options"] = options
    validation = _repair_validation(field_type, raw.get("validation"))
    if validation:
        field["validation"] = validation
    return field


def repair_form(raw: Any) -> GeneratedForm:
    """Normalize one raw form into a GeneratedForm or raise FormRepairError."""
    if not isinstance(raw, dict):
        raise FormRepairError("form is not an object")

    raw_fields = raw.get("fields")
    fields = [field for field in map(repair_field, raw_fields if isinstance(raw_fields, list) else []) if field]
    if not fields:
        raise FormRepairError("form has no usable fields")

    try:
        return GeneratedForm.model_validate(
            {
                "id": _as_text(raw.get("id")) or new_id(),
                "title": _as_text(raw.get("title")) or UNTITLED_FORM,
                "description": _as_text(raw.get("description")),
                "fields": fields,
                "theme": safe_str_enum(raw.get("theme"), FormTheme.MODERN, FormTheme),
                "language": _as_text(raw.get("language")) or DEFAULT_LANGUAGE,
            }
        )
    except ValidationError as e:
        raise FormRepairError(str(e)) from e


def parse_form_payload(payload: Any, *, accept: Collection[PayloadShape]) -> ParseResult:
    """
    Classify and repair a decoded model payload.

    Forms that cannot be repaired are skipped; the result is a ParseError when
    the shape is not accepted or no form survives.
    """
    classified = classify_payload(payload)
    if classified is None:
        return ParseError("payload is neither a form, a list of forms nor a forms wrapper")

    shape, raw_forms = classified
    if shape not in accept:
        return ParseError(f"unexpected {shape} payload")

    forms = []
    for index, raw_form in enumerate(raw_forms):
        try:
            forms.append(repair_form(raw_form))
        except (FormRepairError, ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Skipping form {index} from model output: {e}")

    if not forms:
        return ParseError("no valid forms in payload")
    return ParseOk(forms=forms, shape=shape)
