"""Primitive type descriptors: strings, numbers, booleans, dates and formats."""

import ipaddress
import math
import re
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, ClassVar
from urllib.parse import urlparse

from endpoint_dsl.errors import CoercionError
from endpoint_dsl.types.base import TypeDescriptor

UUID_PATTERN = re.compile(
    r"\A[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}\Z",
    re.IGNORECASE,
)
EMAIL_PATTERN = re.compile(r"\A[\w+\-.]+@[a-z\d\-]+(\.[a-z\d\-]+)*\.[a-z]+\Z", re.IGNORECASE)
ISO_DATE_PATTERN = re.compile(r"\A\d{4}-\d{2}-\d{2}\Z")
ISO_DATETIME_PATTERN = re.compile(
    r"\A\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})\Z"
)

TRUE_STRINGS = {"true", "yes", "on", "1"}
FALSE_STRINGS = {"false", "no", "off", "0"}


def _type_label(value: Any) -> str:
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_datetime(text: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC."""
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def parse_date(text: str) -> date:
    """Parse an ISO-8601 date, or the date part of an ISO-8601 timestamp."""
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return parse_datetime(text).date()


def _format_error(value: str, fmt: str) -> str | None:
    if fmt == "email":
        return None if EMAIL_PATTERN.match(value) else "invalid email format"
    if fmt in ("uri", "url"):
        parsed = urlparse(value)
        return None if parsed.scheme and parsed.netloc else "invalid URI format"
    if fmt == "uuid":
        return None if UUID_PATTERN.match(value) else "invalid UUID format"
    if fmt == "date":
        try:
            date.fromisoformat(value)
        except ValueError:
            return "invalid date format"
        return None
    if fmt in ("date-time", "datetime"):
        try:
            parse_datetime(value)
        except ValueError:
            return "invalid datetime format"
        return None
    if fmt in ("ipv4", "ipv6"):
        try:
            address = ipaddress.ip_address(value)
        except ValueError:
            return f"invalid {fmt.upper()} format"
        expected = 4 if fmt == "ipv4" else 6
        return None if address.version == expected else f"invalid {fmt.upper()} format"
    return None


class String(TypeDescriptor):
    """Text with optional length, pattern, enum and format constraints."""

    type_name: ClassVar[str] = "String"
    json_type: ClassVar[str] = "string"

    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern | None = None
    enum: tuple[str, ...] | None = None
    format: str | None = None

    def _type_error(self, value: Any) -> str | None:
        if not isinstance(value, str):
            return f"expected string, got {_type_label(value)}"
        return None

    def _constraint_errors(self, value: Any) -> list[str]:
        errors = []
        if self.min_length is not None and len(value) < self.min_length:
            errors.append(f"length must be >= {self.min_length}")
        if self.max_length is not None and len(value) > self.max_length:
            errors.append(f"length must be <= {self.max_length}")
        if self.pattern is not None and not self.pattern.search(value):
            errors.append(f"must match pattern {self.pattern.pattern!r}")
        if self.enum is not None and value not in self.enum:
            errors.append(f"must be one of: {', '.join(self.enum)}")
        if self.format:
            problem = _format_error(value, self.format)
            if problem:
                errors.append(problem)
        return errors

    def _coerce_value(self, value: Any) -> Any:
        return value if isinstance(value, str) else str(value)

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.max_length is not None:
            schema["maxLength"] = self.max_length
        if self.pattern is not None:
            schema["pattern"] = self.pattern.pattern
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.format:
            schema["format"] = self.format


class UUID(String):
    """Hyphenated hexadecimal UUID string."""

    type_name: ClassVar[str] = "UUID"

    def _type_error(self, value: Any) -> str | None:
        if isinstance(value, uuid.UUID):
            return None
        return super()._type_error(value)

    def _constraint_errors(self, value: Any) -> list[str]:
        text = str(value)
        if not UUID_PATTERN.match(text):
            return ["invalid UUID format"]
        return super()._constraint_errors(text)

    def _coerce_value(self, value: Any) -> Any:
        return str(value).strip().lower()

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        super()._apply_schema(schema)
        schema["format"] = "uuid"
        schema["pattern"] = UUID_PATTERN.pattern


class Email(String):
    """E-mail address string."""

    type_name: ClassVar[str] = "Email"

    def _constraint_errors(self, value: Any) -> list[str]:
        if not EMAIL_PATTERN.match(value):
            return ["invalid email format"]
        return super()._constraint_errors(value)

    def _coerce_value(self, value: Any) -> Any:
        return str(value).strip()

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        super()._apply_schema(schema)
        schema["format"] = "email"


class Number(TypeDescriptor):
    """Shared range constraints for Integer and Float."""

    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: int | float | None = None
    exclusive_maximum: int | float | None = None
    multiple_of: int | float | None = None

    def _constraint_errors(self, value: Any) -> list[str]:
        errors = []
        if self.minimum is not None and value < self.minimum:
            errors.append(f"must be >= {self.minimum}")
        if self.maximum is not None and value > self.maximum:
            errors.append(f"must be <= {self.maximum}")
        if self.exclusive_minimum is not None and value <= self.exclusive_minimum:
            errors.append(f"must be > {self.exclusive_minimum}")
        if self.exclusive_maximum is not None and value >= self.exclusive_maximum:
            errors.append(f"must be < {self.exclusive_maximum}")
        if self.multiple_of and not self._is_multiple(value):
            errors.append(f"must be a multiple of {self.multiple_of}")
        return errors

    def _is_multiple(self, value: Any) -> bool:
        remainder = math.fmod(value, self.multiple_of)
        return math.isclose(remainder, 0, abs_tol=1e-9) or math.isclose(
            abs(remainder), abs(self.multiple_of), abs_tol=1e-9
        )

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        # OpenAPI 3.0 expresses exclusive bounds as booleans next to the bound
        if self.exclusive_minimum is not None:
            schema["minimum"] = self.exclusive_minimum
            schema["exclusiveMinimum"] = True
        if self.exclusive_maximum is not None:
            schema["maximum"] = self.exclusive_maximum
            schema["exclusiveMaximum"] = True
        if self.multiple_of:
            schema["multipleOf"] = self.multiple_of


class Integer(Number):
    type_name: ClassVar[str] = "Integer"
    json_type: ClassVar[str] = "integer"

    def _type_error(self, value: Any) -> str | None:
        if isinstance(value, bool) or not isinstance(value, int):
            return f"expected integer, got {_type_label(value)}"
        return None

    def _coerce_value(self, value: Any) -> Any:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                raise CoercionError(value, "Integer", "value is not finite")
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise CoercionError(value, "Integer", "invalid integer format") from None
        raise CoercionError(value, "Integer", f"cannot convert {_type_label(value)} to integer")


class Float(Number):
    type_name: ClassVar[str] = "Float"
    json_type: ClassVar[str] = "number"

    def _type_error(self, value: Any) -> str | None:
        if not _is_number(value):
            return f"expected number, got {_type_label(value)}"
        if not math.isfinite(value):
            return "must be a finite number"
        return None

    def _coerce_value(self, value: Any) -> Any:
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        if isinstance(value, (int, float)):
            result = float(value)
        elif isinstance(value, str):
            try:
                result = float(value.strip())
            except ValueError:
                raise CoercionError(value, "Float", "invalid float format") from None
        else:
            raise CoercionError(value, "Float", f"cannot convert {_type_label(value)} to float")
        if not math.isfinite(result):
            raise CoercionError(value, "Float", "value is not finite")
        return result

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        schema["format"] = "double"
        super()._apply_schema(schema)


class Boolean(TypeDescriptor):
    type_name: ClassVar[str] = "Boolean"
    json_type: ClassVar[str] = "boolean"

    def _type_error(self, value: Any) -> str | None:
        if not isinstance(value, bool):
            return f"expected boolean, got {_type_label(value)}"
        return None

    def _coerce_value(self, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            text = value.strip().lower()
            if text in TRUE_STRINGS:
                return True
            if text in FALSE_STRINGS:
                return False
        raise CoercionError(value, "Boolean", f"cannot convert {value!r} to boolean")


class Date(TypeDescriptor):
    """Calendar date, as a ``date`` object or an ISO-8601 string."""

    type_name: ClassVar[str] = "Date"
    json_type: ClassVar[str] = "string"

    format: str | None = None

    def _type_error(self, value: Any) -> str | None:
        if isinstance(value, date):
            return None
        if isinstance(value, str):
            try:
                parse_date(value)
            except ValueError:
                return f"invalid date: {value!r}"
            return None
        return f"expected date or ISO-8601 date string, got {_type_label(value)}"

    def _constraint_errors(self, value: Any) -> list[str]:
        if not isinstance(value, str) or not self.format:
            return []
        if self.format == "iso8601":
            return [] if ISO_DATE_PATTERN.match(value) else ["date must be in ISO-8601 format (YYYY-MM-DD)"]
        try:
            datetime.strptime(value, self.format)
        except ValueError:
            return [f"date does not match format {self.format}"]
        return []

    def _coerce_value(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return parse_date(value)
            except ValueError as exc:
                raise CoercionError(value, "Date", str(exc)) from exc
        if _is_number(value):
            return datetime.fromtimestamp(value, tz=timezone.utc).date()
        raise CoercionError(value, "Date", f"cannot convert {_type_label(value)} to date")

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        schema["format"] = "date"


class DateTime(TypeDescriptor):
    """Timestamp, as a ``datetime`` object or an ISO-8601 string."""

    type_name: ClassVar[str] = "DateTime"
    json_type: ClassVar[str] = "string"

    format: str | None = None

    def _type_error(self, value: Any) -> str | None:
        if isinstance(value, datetime):
            return None
        if isinstance(value, str):
            try:
                parse_datetime(value)
            except ValueError:
                return f"invalid datetime: {value!r}"
            return None
        return f"expected datetime or ISO-8601 datetime string, got {_type_label(value)}"

    def _constraint_errors(self, value: Any) -> list[str]:
        if not isinstance(value, str) or not self.format:
            return []
        if self.format in ("iso8601", "rfc3339"):
            if ISO_DATETIME_PATTERN.match(value):
                return []
            return [f"datetime must be in {self.format.upper()} format"]
        try:
            datetime.strptime(value, self.format)
        except ValueError:
            return [f"datetime does not match format {self.format}"]
        return []

    def _coerce_value(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time())
        if isinstance(value, str):
            try:
                return parse_datetime(value)
            except ValueError as exc:
                raise CoercionError(value, "DateTime", str(exc)) from exc
        if _is_number(value):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        raise CoercionError(value, "DateTime", f"cannot convert {_type_label(value)} to datetime")

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        schema["format"] = "date-time"
