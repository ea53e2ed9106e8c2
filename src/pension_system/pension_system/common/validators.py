from __future__ import annotations

import math
import re
from datetime import date
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date

E = TypeVar("E", bound=Enum)

EMAIL_RE = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")
MOBILE_RE = re.compile(r"^\+?\d{10,15}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value.strip()) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value.strip()


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or ""))


def is_mobile_phone(value: str) -> bool:
    digits = re.sub(r"[\s\-()]", "", value or "")
    return bool(MOBILE_RE.match(digits))


class FieldValidator:
    """Collects per-field errors from a JSON request body.

    Each accessor returns the cleaned value (or None when invalid) and records
    an error instead of raising, so one response can list every problem.
    """

    def __init__(self, data: Optional[dict], *, prefix: str = ""):
        self._data = data if isinstance(data, dict) else {}
        self._prefix = prefix
        self.errors: list[dict] = []

    def _fail(self, field: str, msg: str) -> None:
        self.errors.append({"field": self._prefix + field, "msg": msg, "value": self._data.get(field)})

    def has(self, field: str) -> bool:
        value = self._data.get(field)
        return value is not None and value != ""

    def text(
        self,
        field: str,
        msg: str,
        *,
        min_len: int = 0,
        max_len: Optional[int] = None,
        required: bool = True,
    ) -> Optional[str]:
        value = self._data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                self._fail(field, msg)
            return None
        value = str(value).strip()
        if len(value) < min_len or (max_len is not None and len(value) > max_len):
            self._fail(field, msg)
            return None
        return value

    def email(self, field: str, msg: str, *, required: bool = True) -> Optional[str]:
        value = normalize_email(self._data.get(field) or "")
        if not value:
            if required:
                self._fail(field, msg)
            return None
        if not is_valid_email(value):
            self._fail(field, msg)
            return None
        return value

    def phone(self, field: str, msg: str) -> Optional[str]:
        value = str(self._data.get(field) or "").strip()
        if not is_mobile_phone(value):
            self._fail(field, msg)
            return None
        return value

    def iso_date(self, field: str, msg: str, *, required: bool = True) -> Optional[date]:
        value = self._data.get(field)
        if not value:
            if required:
                self._fail(field, msg)
            return None
        try:
            return parse_iso_date(str(value))
        except ValueError:
            self._fail(field, msg)
            return None

    def number(
        self,
        field: str,
        msg: str,
        *,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        required: bool = True,
    ) -> Optional[float]:
        value = self._data.get(field)
        if value is None or value == "":
            if required:
                self._fail(field, msg)
            return None
        if isinstance(value, bool):
            self._fail(field, msg)
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            self._fail(field, msg)
            return None
        if not math.isfinite(number):
            self._fail(field, msg)
            return None
        if (min_value is not None and number < min_value) or (max_value is not None and number > max_value):
            self._fail(field, msg)
            return None
        return number

    def integer(
        self,
        field: str,
        msg: str,
        *,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
    ) -> Optional[int]:
        """Like `number` but refuses fractional values such as 4.5."""
        number = self.number(field, msg, min_value=min_value, max_value=max_value)
        if number is None:
            return None
        if not number.is_integer():
            self._fail(field, msg)
            return None
        return int(number)

    def choice(self, field: str, enum_cls: Type[E], msg: str, *, default: Optional[E] = None) -> Optional[E]:
        value = self._data.get(field)
        if value is None or value == "":
            if default is None:
                self._fail(field, msg)
            return default
        try:
            return enum_cls(value)
        except ValueError:
            self._fail(field, msg)
            return None

    def boolean(self, field: str, *, default: bool = False) -> bool:
        value = self._data.get(field)
        if value is None:
            return default
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    def raise_if_errors(self) -> None:
        if self.errors:
            raise ValidationError("Validation failed", errors=self.errors)
