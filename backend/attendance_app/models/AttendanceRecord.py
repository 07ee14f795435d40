from attendance_app.extensions import db
from attendance_utils.serialization import to_dict
from .base import TimestampMixin, AttendanceStatus

class AttendanceRecord(db.Model, TimestampMixin):
    __tablename__ = 'attendance_records'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False)
    # Classroom the record was taken under; can lag behind the student's current classroom
    classroom_id = db.Column(db.Integer, db.ForeignKey('classrooms.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False, index=True)

    student = db.relationship('Student', back_populates='attendance_records')
    classroom = db.relationship('Classroom', back_populates='attendance_records')

    __table_args__ = (
        db.UniqueConstraint('student_id', 'date', name='uq_attendance_student_date'),
    )

    def to_dict(self):
        data = to_dict(self)
        data["student"] = self.student.to_summary() if self.student else None
        data["classroom"] = self.classroom.to_summary() if self.classroom else None
        return data

    def __repr__(self):
        return f"<AttendanceRecord student={self.student_id} {self.date} {self.status.name}>"
