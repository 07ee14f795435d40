from .attendance import (
    record_attendance,
    record_attendance_bulk,
    delete_attendance,
    list_attendance,
    get_attendance_stats,
)
from .stats import compute_stats, empty_stats
from .classrooms import (
    create_classroom,
    update_classroom,
    delete_classroom,
    get_classroom,
    list_classrooms,
    page_classrooms,
    list_classrooms_with_students,
)
from .students import (
    create_student,
    update_student,
    delete_student,
    get_student,
    list_students,
    page_students,
    get_student_attendance_history,
)
from .student_codes import generate_student_code
from .dashboard import dashboard_summary
