from datetime import date, datetime

import pytest

from attendance_app.errors import ValidationError
from attendance_app.models import AttendanceStatus
from attendance_app.schemas import (
    AttendanceFilters,
    AttendanceInput,
    ClassroomInput,
    STATUS_MESSAGE,
    parse,
    parse_many,
)


def _entry(**overrides):
    data = {"studentId": "1", "classroomId": "2", "date": "2024-01-15", "status": "PRESENT"}
    data.update(overrides)
    return data


def test_form_strings_become_typed_values():
    entry = parse(AttendanceInput, _entry())
    assert entry.student_id == 1
    assert entry.classroom_id == 2
    assert entry.date == date(2024, 1, 15)
    assert entry.status is AttendanceStatus.PRESENT


def test_snake_case_keys_are_accepted():
    entry = parse(AttendanceInput, {"student_id": 1, "classroom_id": 2, "date": "2024-01-15", "status": "LATE"})
    assert entry.status is AttendanceStatus.LATE


@pytest.mark.parametrize("value", ["2024-01-15T23:59:59Z", "2024-01-15T08:00:00.000+02:00", "2024-01-15 10:30"])
def test_time_of_day_is_discarded(value):
    assert parse(AttendanceInput, _entry(date=value)).date == date(2024, 1, 15)


def test_datetime_object_is_truncated():
    assert parse(AttendanceInput, _entry(date=datetime(2024, 1, 15, 13, 45))).date == date(2024, 1, 15)


def test_status_is_case_insensitive():
    assert parse(AttendanceInput, _entry(status=" excused ")).status is AttendanceStatus.EXCUSED


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        parse(AttendanceInput, _entry(status="SICK"))
    assert excinfo.value.field_errors == {"status": [STATUS_MESSAGE]}


def test_missing_fields_are_reported_per_field():
    with pytest.raises(ValidationError) as excinfo:
        parse(AttendanceInput, {"studentId": "", "status": "PRESENT"})
    errors = excinfo.value.field_errors
    assert set(errors) == {"studentId", "classroomId", "date"}


def test_bad_date_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        parse(AttendanceInput, _entry(date="15/01/2024"))
    assert "date" in excinfo.value.field_errors


def test_none_payload():
    with pytest.raises(ValidationError, match="No data received"):
        parse(AttendanceInput, None)


def test_parse_many_reports_every_bad_entry():
    items = [_entry(), _entry(status="NOPE"), _entry(), _entry(studentId="x", date="")]
    with pytest.raises(ValidationError) as excinfo:
        parse_many(AttendanceInput, items)
    errors = excinfo.value.field_errors
    assert "1.status" in errors
    assert "3.studentId" in errors
    assert "3.date" in errors
    assert not any(key.startswith(("0.", "2.")) for key in errors)


@pytest.mark.parametrize("items", [[], None, {"studentId": 1}])
def test_parse_many_requires_a_list(items):
    with pytest.raises(ValidationError, match="No attendance data provided"):
        parse_many(AttendanceInput, items)


def test_filters_all_sentinel_means_no_classroom():
    filters = parse(AttendanceFilters, {"classroomId": "all", "date": "", "studentId": None})
    assert filters.classroom_id is None
    assert filters.date is None
    assert filters.student_id is None


def test_filters_parse_values():
    filters = parse(AttendanceFilters, {"classroom_id": "4", "date": "2024-01-15T00:00:00Z"})
    assert filters.classroom_id == 4
    assert filters.date == date(2024, 1, 15)


def test_classroom_name_is_trimmed_and_bounded():
    assert parse(ClassroomInput, {"name": "  Form 1A "}).name == "Form 1A"
    with pytest.raises(ValidationError) as excinfo:
        parse(ClassroomInput, {"name": "x" * 101})
    assert "name" in excinfo.value.field_errors
