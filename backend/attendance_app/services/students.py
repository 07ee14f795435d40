import logging

from sqlalchemy import func

from attendance_app.errors import DuplicateError, InvalidReferenceError
from attendance_app.models import AttendanceRecord, Classroom, Student
from attendance_app.schemas import StudentInput, StudentUpdate, parse
from attendance_app.services.base import get_or_404, read_guard, write_transaction
from attendance_app.services.student_codes import generate_student_code
from attendance_app.signals import revalidate
from attendance_utils.pagination import paginate, search_columns

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("first_name", "last_name", "student_code")


def _duplicate_code(exc=None):
    return DuplicateError(
        "A student with this ID already exists",
        field_errors={"studentId": ["This student ID is already taken"]},
    )


def _require_classroom(session, classroom_id):
    if session.get(Classroom, classroom_id) is None:
        raise InvalidReferenceError(
            "Invalid classroom reference",
            field_errors={"classroomId": ["Classroom not found"]},
        )


def _student_paths(*classroom_ids):
    return tuple(f"/classrooms/{cid}/students" for cid in classroom_ids) + ("/classrooms",)


def student_query(session, classroom_id=None, search=None):
    query = search_columns(session.query(Student), Student, search, SEARCH_COLUMNS)
    if classroom_id is not None:
        query = query.filter(Student.classroom_id == classroom_id)
    return query.order_by(Student.last_name.asc(), Student.first_name.asc(), Student.id.asc())


def list_students(session, classroom_id=None, search=None):
    with read_guard(session, "list students"):
        return student_query(session, classroom_id, search).all()


def page_students(session, page, per_page, classroom_id=None, search=None):
    """One page of students by name, with ``{student_id: attendance_count}`` for that page."""
    with read_guard(session, "list students"):
        paginated = paginate(student_query(session, classroom_id, search), page, per_page)
    return paginated, attendance_counts(session, [s.id for s in paginated.items])


def attendance_counts(session, student_ids):
    if not student_ids:
        return {}
    with read_guard(session, "count attendance"):
        rows = (
            session.query(AttendanceRecord.student_id, func.count(AttendanceRecord.id))
            .filter(AttendanceRecord.student_id.in_(student_ids))
            .group_by(AttendanceRecord.student_id)
            .all()
        )
    return dict(rows)


def get_student(session, student_id):
    return get_or_404(session, Student, student_id, "Student not found")


def create_student(session, data, rng=None):
    payload = parse(StudentInput, data)

    with write_transaction(session, "create student", on_integrity_error=_duplicate_code):
        _require_classroom(session, payload.classroom_id)
        student = Student(
            first_name=payload.first_name,
            last_name=payload.last_name,
            student_code=generate_student_code(session, rng=rng),
            classroom_id=payload.classroom_id,
        )
        session.add(student)

    logger.info("Created student %s in classroom %s", student.student_code, payload.classroom_id)
    revalidate(*_student_paths(payload.classroom_id))
    return student


def update_student(session, student_id, data):
    """Rename a student and/or move them to another classroom.

    Attendance already recorded keeps the classroom it was taken under.
    """
    payload = parse(StudentUpdate, data)
    student = get_student(session, student_id)
    previous_classroom_id = student.classroom_id
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}

    with write_transaction(session, "update student"):
        if "classroom_id" in changes:
            _require_classroom(session, changes["classroom_id"])
        for field, value in changes.items():
            setattr(student, field, value)

    revalidate(*_student_paths(previous_classroom_id, student.classroom_id))
    return student


def delete_student(session, student_id):
    """Delete a student and their whole attendance history."""
    student = get_student(session, student_id)
    classroom_id = student.classroom_id

    with write_transaction(session, "delete student"):
        session.delete(student)

    logger.info("Deleted student %s", student_id)
    revalidate(*_student_paths(classroom_id), "/attendance", "/dashboard")


def get_student_attendance_history(session, student_id):
    get_student(session, student_id)
    with read_guard(session, "load attendance history"):
        return (
            session.query(AttendanceRecord)
            .filter(AttendanceRecord.student_id == student_id)
            .order_by(AttendanceRecord.date.desc())
            .all()
        )
