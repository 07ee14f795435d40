from attendance_app.extensions import db
from attendance_utils.serialization import to_dict
from .base import TimestampMixin

class Classroom(db.Model, TimestampMixin):
    __tablename__ = 'classrooms'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    teacher = db.Column(db.String(100), nullable=True)
    description = db.Column(db.String(255), nullable=True)

    students = db.relationship('Student', back_populates='classroom', lazy=True, cascade="all, delete")
    attendance_records = db.relationship('AttendanceRecord', back_populates='classroom', lazy=True, cascade="all, delete")

    def to_dict(self, student_count=None, students=None):
        data = to_dict(self)
        data["studentCount"] = student_count if student_count is not None else len(self.students)
        if students is not None:
            data["students"] = [s.to_summary() for s in students]
        return data

    def to_summary(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self):
        return f"<Classroom {self.id} {self.name!r}>"


# Classroom names are unique regardless of case
db.Index("uq_classrooms_name_lower", db.func.lower(Classroom.name), unique=True)
