from flask import Blueprint, request, jsonify
from attendance_app.extensions import db, limiter
from attendance_app.services import (
    create_student,
    update_student,
    delete_student,
    get_student,
    get_student_attendance_history,
    page_students,
)
from attendance_utils.audit import log_event
from attendance_utils.decorators import get_payload, structured_errors
from attendance_utils.pagination import page_args, pagination_meta

students_bp = Blueprint("students", __name__)


@students_bp.route('/list', methods=['GET'])
@structured_errors("Failed to fetch students")
def list_students():
    page, per_page, search = page_args()
    classroom_id = request.args.get("classroom_id", type=int) or request.args.get("classroomId", type=int)
    paginated, counts = page_students(db.session, page, per_page, classroom_id=classroom_id, search=search)

    return jsonify({
        "students": [s.to_dict(attendance_count=counts.get(s.id, 0)) for s in paginated.items],
        **pagination_meta(paginated)
    }), 200


@students_bp.route('/create', methods=['POST'])
@limiter.limit("60 per minute")
@structured_errors("Failed to create student. Please try again.")
def create():
    student = create_student(db.session, get_payload())

    log_event("STUDENT_CREATED", ip=request.remote_addr, description=f"student={student.student_code}")
    return jsonify({"success": True, "data": student.to_dict(attendance_count=0)}), 201


@students_bp.route('/<int:student_id>', methods=['GET'])
@structured_errors("Failed to fetch student data")
def get_one(student_id):
    student = get_student(db.session, student_id)
    include_attendance = request.args.get("include_attendance", "false").lower() in ["true", "1", "yes"]

    if include_attendance:
        history = get_student_attendance_history(db.session, student_id)
        return jsonify(student.to_dict(attendance_count=len(history), attendances=history)), 200
    return jsonify(student.to_dict()), 200


@students_bp.route('/<int:student_id>/attendance', methods=['GET'])
@structured_errors("Failed to fetch attendance history")
def attendance_history(student_id):
    history = get_student_attendance_history(db.session, student_id)
    return jsonify([r.to_dict() for r in history]), 200


@students_bp.route('/update/<int:student_id>', methods=['PUT'])
@limiter.limit("30 per minute")
@structured_errors("Failed to update student")
def update(student_id):
    student = update_student(db.session, student_id, get_payload())

    log_event("STUDENT_UPDATED", ip=request.remote_addr, description=f"student={student.student_code}")
    return jsonify({"success": True, "data": student.to_dict()}), 200


@students_bp.route('/<int:student_id>', methods=['DELETE'])
@limiter.limit("30 per minute")
@structured_errors("Failed to delete student")
def delete(student_id):
    delete_student(db.session, student_id)

    log_event("STUDENT_DELETED", ip=request.remote_addr, description=f"student={student_id}")
    return jsonify({"success": True, "message": "Student deleted successfully"}), 200
