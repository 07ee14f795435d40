import logging

from sqlalchemy import func

from attendance_app.errors import DuplicateError
from attendance_app.models import Classroom, Student
from attendance_app.schemas import ClassroomInput, ClassroomUpdate, parse
from attendance_app.services.base import get_or_404, read_guard, write_transaction
from attendance_app.signals import CLASSROOM_PATHS, revalidate
from attendance_utils.pagination import paginate, search_columns

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("name", "teacher")


def _duplicate_name(exc=None):
    return DuplicateError(
        "A classroom with this name already exists",
        field_errors={"name": ["This classroom name is already taken"]},
    )


def _ensure_unique_name(session, name, exclude_id=None):
    query = session.query(Classroom.id).filter(func.lower(Classroom.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Classroom.id != exclude_id)
    if query.first() is not None:
        raise _duplicate_name()


def classroom_query(session, search=None):
    query = search_columns(session.query(Classroom), Classroom, search, SEARCH_COLUMNS)
    return query.order_by(Classroom.created_at.desc(), Classroom.id.desc())


def student_counts(session, classroom_ids):
    if not classroom_ids:
        return {}
    with read_guard(session, "count students"):
        rows = (
            session.query(Student.classroom_id, func.count(Student.id))
            .filter(Student.classroom_id.in_(classroom_ids))
            .group_by(Student.classroom_id)
            .all()
        )
    return dict(rows)


def list_classrooms(session, search=None):
    with read_guard(session, "list classrooms"):
        return classroom_query(session, search).all()


def page_classrooms(session, page, per_page, search=None):
    """One page of classrooms, newest first, with ``{classroom_id: student_count}`` for that page."""
    with read_guard(session, "list classrooms"):
        paginated = paginate(classroom_query(session, search), page, per_page)
    return paginated, student_counts(session, [c.id for c in paginated.items])


def list_classrooms_with_students(session):
    """Roster view for taking attendance: classrooms by name, students by last then first name."""
    with read_guard(session, "list classrooms with students"):
        classrooms = session.query(Classroom).order_by(Classroom.name.asc()).all()
        students = (
            session.query(Student)
            .order_by(Student.last_name.asc(), Student.first_name.asc(), Student.id.asc())
            .all()
        )

    roster = {classroom.id: [] for classroom in classrooms}
    for student in students:
        roster.setdefault(student.classroom_id, []).append(student)
    return [(classroom, roster[classroom.id]) for classroom in classrooms]


def get_classroom(session, classroom_id):
    return get_or_404(session, Classroom, classroom_id, "Classroom not found")


def create_classroom(session, data):
    payload = parse(ClassroomInput, data)

    with write_transaction(session, "create classroom", on_integrity_error=_duplicate_name):
        _ensure_unique_name(session, payload.name)
        classroom = Classroom(
            name=payload.name,
            teacher=payload.teacher,
            description=payload.description,
        )
        session.add(classroom)

    logger.info("Created classroom %s (%s)", classroom.id, payload.name)
    revalidate(*CLASSROOM_PATHS)
    return classroom


def update_classroom(session, classroom_id, data):
    payload = parse(ClassroomUpdate, data)
    classroom = get_classroom(session, classroom_id)
    changes = payload.model_dump(exclude_unset=True)

    with write_transaction(session, "update classroom", on_integrity_error=_duplicate_name):
        if changes.get("name") is not None:
            _ensure_unique_name(session, changes["name"], exclude_id=classroom.id)
        else:
            changes.pop("name", None)
        for field, value in changes.items():
            setattr(classroom, field, value)

    revalidate(*CLASSROOM_PATHS, f"/classrooms/{classroom_id}/students")
    return classroom


def delete_classroom(session, classroom_id):
    """Delete a classroom together with its students and every attendance record taken under it."""
    classroom = get_classroom(session, classroom_id)

    with write_transaction(session, "delete classroom"):
        session.delete(classroom)

    logger.info("Deleted classroom %s", classroom_id)
    revalidate(*CLASSROOM_PATHS, "/attendance")
