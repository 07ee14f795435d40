from attendance_app.models import Classroom, Student
from attendance_app.services.attendance import resolve_filters, get_attendance_stats
from attendance_app.services.base import read_guard


def dashboard_summary(session, filters=None):
    """Totals and attendance figures for the dashboard, optionally narrowed to one classroom and day."""
    filters = resolve_filters(filters)

    with read_guard(session, "build dashboard summary"):
        classroom_query = session.query(Classroom)
        student_query = session.query(Student)
        if filters.classroom_id is not None:
            classroom_query = classroom_query.filter(Classroom.id == filters.classroom_id)
            student_query = student_query.filter(Student.classroom_id == filters.classroom_id)

        total_classrooms = classroom_query.count()
        total_students = student_query.count()

        # Classrooms for the frontend filter checkboxes
        classroom_list = [
            classroom.to_summary()
            for classroom in session.query(Classroom).order_by(Classroom.name).all()
        ]

    return {
        "totalClassrooms": total_classrooms,
        "totalStudents": total_students,
        "attendance": get_attendance_stats(session, filters),
        "classrooms": classroom_list,
    }
