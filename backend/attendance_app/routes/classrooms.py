from flask import Blueprint, request, jsonify
from attendance_app.extensions import db, limiter
from attendance_app.services import (
    create_classroom,
    update_classroom,
    delete_classroom,
    get_classroom,
    list_classrooms_with_students,
    page_classrooms,
    list_students,
)
from attendance_utils.audit import log_event
from attendance_utils.decorators import get_payload, structured_errors
from attendance_utils.pagination import page_args, pagination_meta

classrooms_bp = Blueprint('classrooms', __name__)


@classrooms_bp.route('/list', methods=['GET'])
@structured_errors("Failed to fetch classrooms")
def list_all():
    page, per_page, search = page_args()
    paginated, counts = page_classrooms(db.session, page, per_page, search=search)

    return jsonify({
        "classrooms": [c.to_dict(student_count=counts.get(c.id, 0)) for c in paginated.items],
        **pagination_meta(paginated)
    }), 200


@classrooms_bp.route('/with-students', methods=['GET'])
@structured_errors("Failed to fetch classrooms")
def with_students():
    roster = list_classrooms_with_students(db.session)
    return jsonify([
        classroom.to_dict(student_count=len(students), students=students)
        for classroom, students in roster
    ]), 200


@classrooms_bp.route('/create', methods=['POST'])
@limiter.limit("30 per minute")
@structured_errors("Failed to create classroom. Please try again.")
def create():
    classroom = create_classroom(db.session, get_payload())

    log_event("CLASSROOM_CREATED", ip=request.remote_addr, description=f"classroom={classroom.id} name={classroom.name}")
    return jsonify({"success": True, "data": classroom.to_dict(student_count=0)}), 201


@classrooms_bp.route('/<int:classroom_id>', methods=['GET'])
@structured_errors("Failed to fetch classroom")
def get_one(classroom_id):
    classroom = get_classroom(db.session, classroom_id)
    students = list_students(db.session, classroom_id=classroom.id)
    return jsonify(classroom.to_dict(student_count=len(students), students=students)), 200


@classrooms_bp.route('/update/<int:classroom_id>', methods=['PUT'])
@limiter.limit("30 per minute")
@structured_errors("Failed to update classroom")
def update(classroom_id):
    classroom = update_classroom(db.session, classroom_id, get_payload())

    log_event("CLASSROOM_UPDATED", ip=request.remote_addr, description=f"classroom={classroom_id}")
    return jsonify({"success": True, "data": classroom.to_dict()}), 200


@classrooms_bp.route('/<int:classroom_id>', methods=['DELETE'])
@limiter.limit("30 per minute")
@structured_errors("Failed to delete classroom")
def delete(classroom_id):
    delete_classroom(db.session, classroom_id)

    log_event("CLASSROOM_DELETED", ip=request.remote_addr, description=f"classroom={classroom_id}")
    return jsonify({"success": True, "message": "Classroom deleted successfully"}), 200
