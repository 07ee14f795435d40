from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

base_bp = Blueprint("base", __name__)

@base_bp.route("/")
def home():
    return jsonify({"message": "Welcome to the Classroom Attendance API!"})

@base_bp.route("/api/test-db")
def test_db():
    from attendance_app.extensions import db
    from attendance_app.models import Classroom, Student
    try:
        return {
            "status": "success",
            "classrooms": db.session.query(Classroom).count(),
            "students": db.session.query(Student).count(),
        }
    except SQLAlchemyError as e:
        db.session.rollback()
        return {"status": "error", "message": e.__class__.__name__}, 500
