from attendance_app.extensions import db
from attendance_utils.serialization import to_dict
from .base import TimestampMixin

class Student(db.Model, TimestampMixin):
    __tablename__ = 'students'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False, index=True)
    student_code = db.Column(db.String(20), unique=True, nullable=False)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classrooms.id'), nullable=False, index=True)

    classroom = db.relationship('Classroom', back_populates='students')
    attendance_records = db.relationship('AttendanceRecord', back_populates='student', lazy=True, cascade="all, delete")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self, attendance_count=None, attendances=None):
        data = to_dict(self, rename={"student_code": "studentId"})
        data["attendanceCount"] = attendance_count if attendance_count is not None else len(self.attendance_records)
        if attendances is not None:
            data["attendances"] = [
                {
                    "id": a.id,
                    "date": a.date.isoformat(),
                    "status": a.status.name,
                    "classroomId": a.classroom_id,
                    "createdAt": a.created_at.isoformat(),
                    "updatedAt": a.updated_at.isoformat(),
                }
                for a in attendances
            ]
        return data

    def to_summary(self):
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "studentId": self.student_code,
        }

    def __repr__(self):
        return f"<Student {self.student_code} {self.full_name!r}>"
