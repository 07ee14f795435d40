import random
from datetime import date, timedelta
from attendance_app.models import AttendanceRecord, AttendanceStatus, Classroom, Student
from attendance_app.services import create_classroom, create_student, record_attendance_bulk

FIRST_NAMES = [
    'James', 'Mary', 'John', 'Patricia', 'Robert', 'Jennifer', 'Michael', 'Linda',
    'William', 'Elizabeth', 'David', 'Barbara', 'Richard', 'Susan', 'Joseph', 'Jessica',
    'Thomas', 'Sarah', 'Christopher', 'Karen', 'Charles', 'Nancy', 'Daniel', 'Lisa',
    'Matthew', 'Betty', 'Anthony', 'Helen', 'Mark', 'Sandra', 'Donald', 'Donna',
    'Steven', 'Carol', 'Paul', 'Ruth', 'Andrew', 'Sharon', 'Joshua', 'Michelle',
    'Kenneth', 'Laura', 'Kimberly', 'Brian', 'George', 'Deborah',
]

LAST_NAMES = [
    'Smith', 'Johnson', 'Williams', 'Brown', 'Jones', 'Garcia', 'Miller', 'Davis',
    'Rodriguez', 'Martinez', 'Hernandez', 'Lopez', 'Gonzalez', 'Wilson', 'Anderson', 'Thomas',
    'Taylor', 'Moore', 'Jackson', 'Martin', 'Lee', 'Perez', 'Thompson', 'White',
    'Harris', 'Sanchez', 'Clark', 'Ramirez', 'Lewis', 'Robinson', 'Walker', 'Young',
]

TEACHERS = {
    1: {'A': 'Mrs. Johnson', 'B': 'Mr. Smith'},
    2: {'A': 'Ms. Davis', 'B': 'Mr. Wilson'},
    3: {'A': 'Mrs. Brown', 'B': 'Ms. Garcia'},
    4: {'A': 'Mr. Martinez', 'B': 'Mrs. Rodriguez'},
    5: {'A': 'Ms. Anderson', 'B': 'Mr. Thompson'},
}

# 80% present, 10% absent, 5% late, 5% excused
STATUS_WEIGHTS = [
    (AttendanceStatus.PRESENT, 0.80),
    (AttendanceStatus.ABSENT, 0.10),
    (AttendanceStatus.LATE, 0.05),
    (AttendanceStatus.EXCUSED, 0.05),
]


def clear_existing_data(session):
    session.query(AttendanceRecord).delete()
    session.query(Student).delete()
    session.query(Classroom).delete()
    session.commit()
    session.expunge_all()


def school_days(today, days):
    """Weekdays from ``days`` ago up to and including today, oldest first."""
    for offset in range(days, -1, -1):
        day = today - timedelta(days=offset)
        if day.weekday() < 5:
            yield day


def random_status(rng):
    statuses, weights = zip(*STATUS_WEIGHTS)
    return rng.choices(statuses, weights=weights, k=1)[0]


def seed_data(session, forms=5, days=30, rng=None, today=None):
    rng = rng or random.Random()
    today = today or date.today()

    clear_existing_data(session)

    for form in range(1, forms + 1):
        for section in ('A', 'B'):
            name = f"Form {form}{section}"
            teacher = TEACHERS.get(form, {}).get(section)
            classroom = create_classroom(session, {
                "name": name,
                "teacher": teacher,
                "description": f"{name} classroom with {teacher} as the teacher" if teacher else f"{name} classroom",
            })
            classroom_id = classroom.id

            students = [
                create_student(session, {
                    "firstName": rng.choice(FIRST_NAMES),
                    "lastName": rng.choice(LAST_NAMES),
                    "classroomId": classroom_id,
                }, rng=rng)
                for _ in range(rng.randint(12, 15))
            ]
            student_ids = [s.id for s in students]

            for day in school_days(today, days):
                record_attendance_bulk(session, [
                    {"studentId": sid, "classroomId": classroom_id, "date": day, "status": random_status(rng)}
                    for sid in student_ids
                ])

    return {
        "classrooms": session.query(Classroom).count(),
        "students": session.query(Student).count(),
        "attendance": session.query(AttendanceRecord).count(),
    }
