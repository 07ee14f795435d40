"""Attendance record service.

One status per student per calendar day. Every write, single or bulk, goes
through ``_upsert`` so the (student, date) invariant has a single code path.
"""
import logging

from sqlalchemy import func, or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import contains_eager, joinedload

from attendance_app.errors import InvalidReferenceError, is_foreign_key_violation, storage_error
from attendance_app.models import AttendanceRecord, Classroom, Student
from attendance_app.models.base import utcnow
from attendance_app.schemas import AttendanceFilters, AttendanceInput, parse, parse_many
from attendance_app.services.base import get_or_404, read_guard, write_transaction
from attendance_app.services.stats import stats_from_counts
from attendance_app.signals import ATTENDANCE_PATHS, revalidate

logger = logging.getLogger(__name__)

UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _reference_error(exc):
    if is_foreign_key_violation(exc):
        return InvalidReferenceError()
    return storage_error(exc)


def _check_references(session, entries, indexed=False):
    """Raise InvalidReferenceError naming every entry with a missing student or classroom."""
    student_ids = {entry.student_id for entry in entries}
    classroom_ids = {entry.classroom_id for entry in entries}
    known_students = {
        student_id for (student_id,) in
        session.query(Student.id).filter(Student.id.in_(student_ids))
    }
    known_classrooms = {
        classroom_id for (classroom_id,) in
        session.query(Classroom.id).filter(Classroom.id.in_(classroom_ids))
    }

    errors = {}
    for index, entry in enumerate(entries):
        prefix = f"{index}." if indexed else ""
        if entry.student_id not in known_students:
            errors.setdefault(f"{prefix}studentId", []).append("Student not found")
        if entry.classroom_id not in known_classrooms:
            errors.setdefault(f"{prefix}classroomId", []).append("Classroom not found")

    if errors:
        raise InvalidReferenceError(field_errors=errors)


def _find(session, student_id, day):
    return session.query(AttendanceRecord).filter_by(student_id=student_id, date=day).one_or_none()


def _upsert(session, entry):
    """Create or overwrite the record for (student, date) without committing."""
    insert = UPSERT_DIALECTS.get(session.get_bind().dialect.name)
    if insert is None:
        return _select_then_write(session, entry)

    table = AttendanceRecord.__table__
    stmt = insert(AttendanceRecord).values(
        student_id=entry.student_id,
        classroom_id=entry.classroom_id,
        date=entry.date,
        status=entry.status,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["student_id", "date"],
        set_={
            "status": stmt.excluded.status,
            "classroom_id": stmt.excluded.classroom_id,
            "updated_at": utcnow(),
        },
        # identical repeats leave the row (and updated_at) untouched
        where=or_(
            table.c.status != stmt.excluded.status,
            table.c.classroom_id != stmt.excluded.classroom_id,
        ),
    )
    record = session.scalars(
        stmt.returning(AttendanceRecord),
        execution_options={"populate_existing": True},
    ).first()
    if record is None:
        record = _find(session, entry.student_id, entry.date)
    return record


def _select_then_write(session, entry):
    record = _find(session, entry.student_id, entry.date)
    if record is None:
        try:
            with session.begin_nested():
                record = AttendanceRecord(
                    student_id=entry.student_id,
                    classroom_id=entry.classroom_id,
                    date=entry.date,
                    status=entry.status,
                )
                session.add(record)
            return record
        except IntegrityError:
            # a concurrent writer inserted the row first; overwrite it
            record = _find(session, entry.student_id, entry.date)
            if record is None:
                raise
            logger.debug("Lost insert race for student=%s date=%s", entry.student_id, entry.date)

    if record.status != entry.status:
        record.status = entry.status
    if record.classroom_id != entry.classroom_id:
        record.classroom_id = entry.classroom_id
    session.flush()
    return record


def record_attendance(session, data):
    """
    Record one student's status for one day.

    Creates the record when absent and overwrites status and classroom when
    present. Raises ValidationError, InvalidReferenceError or
    StorageUnavailable.
    """
    entry = data if isinstance(data, AttendanceInput) else parse(AttendanceInput, data)

    with write_transaction(session, "record attendance", on_integrity_error=_reference_error):
        _check_references(session, [entry])
        record = _upsert(session, entry)

    logger.info(
        "Recorded attendance student=%s classroom=%s date=%s status=%s",
        entry.student_id, entry.classroom_id, entry.date.isoformat(), entry.status.name,
    )
    revalidate(*ATTENDANCE_PATHS, classroom_ids=(entry.classroom_id,))
    return record


def record_attendance_bulk(session, items):
    """
    Record a batch of attendance entries all-or-nothing.

    Every entry is validated and every reference checked before anything is
    written; the errors name all offending entries by index. Records come back
    in input order.
    """
    entries = parse_many(AttendanceInput, items)

    with write_transaction(session, "record bulk attendance", on_integrity_error=_reference_error):
        _check_references(session, entries, indexed=True)
        records = [_upsert(session, entry) for entry in entries]

    logger.info("Recorded %d attendance entries in one batch", len(entries))
    revalidate(*ATTENDANCE_PATHS, classroom_ids=tuple(sorted({e.classroom_id for e in entries})))
    return records


def delete_attendance(session, attendance_id):
    record = get_or_404(session, AttendanceRecord, attendance_id, "Attendance record not found")
    classroom_id = record.classroom_id

    with write_transaction(session, "delete attendance"):
        session.delete(record)

    revalidate(*ATTENDANCE_PATHS, classroom_ids=(classroom_id,))


def resolve_filters(filters):
    if isinstance(filters, AttendanceFilters):
        return filters
    return parse(AttendanceFilters, filters or {}, message="Invalid filters")


def apply_filters(query, filters):
    if filters.classroom_id is not None:
        query = query.filter(AttendanceRecord.classroom_id == filters.classroom_id)
    if filters.date is not None:
        query = query.filter(AttendanceRecord.date == filters.date)
    if filters.student_id is not None:
        query = query.filter(AttendanceRecord.student_id == filters.student_id)
    return query


def list_attendance(session, filters=None):
    """
    Records matching every given filter (classroomId, date, studentId), newest
    day first, then by student last name and first name.
    """
    filters = resolve_filters(filters)

    with read_guard(session, "list attendance"):
        query = (
            session.query(AttendanceRecord)
            .join(AttendanceRecord.student)
            .options(contains_eager(AttendanceRecord.student), joinedload(AttendanceRecord.classroom))
        )
        query = apply_filters(query, filters).order_by(
            AttendanceRecord.date.desc(),
            Student.last_name.asc(),
            Student.first_name.asc(),
            AttendanceRecord.id.asc(),
        )
        return query.all()


def get_attendance_stats(session, filters=None):
    filters = resolve_filters(filters)

    with read_guard(session, "compute attendance stats"):
        query = session.query(AttendanceRecord.status, func.count(AttendanceRecord.id))
        rows = apply_filters(query, filters).group_by(AttendanceRecord.status).all()

    return stats_from_counts({status: count for status, count in rows})
