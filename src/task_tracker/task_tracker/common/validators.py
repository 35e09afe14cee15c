from __future__ import annotations

from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def text_or_none(value) -> Optional[str]:
    """Stripped string, or None for anything blank or not a string."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def require_choice(value, enum_cls: Type[E], message: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(message)


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
