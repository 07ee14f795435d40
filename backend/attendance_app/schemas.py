"""Boundary schemas for incoming form and JSON payloads.

Browser forms deliver everything as untyped strings; these models turn them
into typed values (or a ``ValidationError`` with per-field messages) before
anything reaches the services.
"""
import datetime as dt
from typing import Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from attendance_app.errors import ValidationError
from attendance_app.models import AttendanceStatus

STATUS_MESSAGE = "Status must be PRESENT, ABSENT, LATE, or EXCUSED"
ALL_SENTINEL = "all"


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _normalize_date(value):
    """Drop the time-of-day part of datetimes and ISO datetime strings."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str):
        value = value.strip()
        if len(value) > 10 and value[10] in ("T", " "):
            return value[:10]
    return value


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")


class AttendanceInput(_Schema):
    student_id: int = Field(alias="studentId")
    classroom_id: int = Field(alias="classroomId")
    date: dt.date
    status: AttendanceStatus

    @field_validator("student_id", "classroom_id", "date", "status", mode="before")
    @classmethod
    def _required(cls, value):
        value = _blank_to_none(value)
        if value is None:
            raise ValueError("This field is required")
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _day_only(cls, value):
        return _normalize_date(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        if isinstance(value, AttendanceStatus):
            return value
        if isinstance(value, str) and value.strip().upper() in AttendanceStatus.__members__:
            return AttendanceStatus[value.strip().upper()]
        raise ValueError(STATUS_MESSAGE)


class ClassroomInput(_Schema):
    name: str = Field(min_length=1, max_length=100)
    teacher: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)

    @field_validator("teacher", "description", mode="before")
    @classmethod
    def _optional(cls, value):
        return _blank_to_none(value)


class ClassroomUpdate(ClassroomInput):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class StudentInput(_Schema):
    first_name: str = Field(alias="firstName", min_length=1, max_length=100)
    last_name: str = Field(alias="lastName", min_length=1, max_length=100)
    classroom_id: int = Field(alias="classroomId")


class StudentUpdate(_Schema):
    first_name: Optional[str] = Field(default=None, alias="firstName", min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, alias="lastName", min_length=1, max_length=100)
    classroom_id: Optional[int] = Field(default=None, alias="classroomId")

    @field_validator("classroom_id", mode="before")
    @classmethod
    def _optional(cls, value):
        return _blank_to_none(value)


class AttendanceFilters(_Schema):
    classroom_id: Optional[int] = Field(default=None, alias="classroomId")
    date: Optional[dt.date] = None
    student_id: Optional[int] = Field(default=None, alias="studentId")

    @field_validator("classroom_id", mode="before")
    @classmethod
    def _classroom(cls, value):
        value = _blank_to_none(value)
        if isinstance(value, str) and value.strip().lower() == ALL_SENTINEL:
            return None
        return value

    @field_validator("student_id", mode="before")
    @classmethod
    def _student(cls, value):
        return _blank_to_none(value)

    @field_validator("date", mode="before")
    @classmethod
    def _day_only(cls, value):
        return _normalize_date(_blank_to_none(value))


def field_errors(exc, prefix=""):
    """Flatten a pydantic error into ``{field: [messages]}``."""
    errors = {}
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"]) or "__root__"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(f"{prefix}{loc}", []).append(message)
    return errors


def parse(schema, data, message="Invalid input data"):
    if data is None:
        raise ValidationError("No data received")
    try:
        return schema.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        raise ValidationError(message, field_errors=field_errors(exc)) from exc
    except (TypeError, ValueError) as exc:
        raise ValidationError(message) from exc


def parse_many(schema, items, message="Invalid attendance data"):
    """Validate every entry and report all failures at once, keyed by index."""
    if not isinstance(items, (list, tuple)) or not items:
        raise ValidationError("No attendance data provided")

    parsed, errors = [], {}
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            errors[str(index)] = ["Each attendance entry must be an object"]
            continue
        try:
            parsed.append(schema.model_validate(item))
        except pydantic.ValidationError as exc:
            errors.update(field_errors(exc, prefix=f"{index}."))

    if errors:
        raise ValidationError(message, field_errors=errors)
    return parsed
