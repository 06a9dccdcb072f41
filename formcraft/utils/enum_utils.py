"""
Lenient enum lookup for strings that come from model output or settings.
"""
from enum import StrEnum
from typing import Optional, Type, TypeVar

E = TypeVar("E", bound=StrEnum)


def safe_str_enum(value, default: Optional[E], enum_type: Type[E]) -> Optional[E]:
    """
    Map ``value`` onto a member of ``enum_type`` by its value.

    Matching ignores case and surrounding whitespace. Anything that is not a
    string, or names no member, yields ``default``:

        >>> safe_str_enum(" Rating ", FieldType.TEXT, FieldType)
        FieldType.RATING
        >>> safe_str_enum("signature", FieldType.TEXT, FieldType)
        FieldType.TEXT
    """
    if not isinstance(value, str):
        return default
    wanted = value.strip().casefold()
    return next((member for member in enum_type if member.value == wanted), default)
