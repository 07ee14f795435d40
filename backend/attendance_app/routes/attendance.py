from flask import Blueprint, request, jsonify
from attendance_app.extensions import db, limiter
from attendance_app.services import (
    record_attendance,
    record_attendance_bulk,
    delete_attendance,
    list_attendance,
    get_attendance_stats,
    empty_stats,
)
from attendance_utils.audit import log_event
from attendance_utils.decorators import get_payload, structured_errors, degrade_on_storage_failure

attendance_bp = Blueprint('attendance', __name__)

SHARED_BULK_FIELDS = ("date", "classroomId", "classroom_id")


def _bulk_items(payload):
    """
    Accept either a bare list of entries or {"records": [...], "date", "classroomId"},
    where the top-level date/classroom fill entries that leave them out.
    """
    if not isinstance(payload, dict):
        return payload

    items = payload.get("records")
    shared = {k: payload[k] for k in SHARED_BULK_FIELDS if payload.get(k) not in (None, "")}
    if not isinstance(items, list) or not shared:
        return items
    return [{**shared, **item} if isinstance(item, dict) else item for item in items]


@attendance_bp.route('/record', methods=['POST'])
@limiter.limit("120 per minute")
@structured_errors("Failed to create attendance record. Please try again.")
def record():
    attendance = record_attendance(db.session, get_payload())

    log_event(
        "ATTENDANCE_RECORDED",
        ip=request.remote_addr,
        description=f"student={attendance.student_id} date={attendance.date.isoformat()} status={attendance.status.name}",
    )
    return jsonify({"success": True, "data": attendance.to_dict()}), 201


@attendance_bp.route('/bulk', methods=['POST'])
@limiter.limit("30 per minute")
@structured_errors("Failed to save attendance records. Please try again.")
def record_bulk():
    records = record_attendance_bulk(db.session, _bulk_items(request.get_json(silent=True)))

    log_event(
        "ATTENDANCE_BULK_RECORDED",
        ip=request.remote_addr,
        description=f"{len(records)} records",
    )
    return jsonify({"success": True, "data": [r.to_dict() for r in records]}), 201


@attendance_bp.route('/list', methods=['GET'])
@structured_errors("Failed to fetch attendance records")
@degrade_on_storage_failure(list)
def list_records():
    records = list_attendance(db.session, request.args.to_dict())
    return jsonify({
        "success": True,
        "data": [r.to_dict() for r in records],
        "total": len(records),
    }), 200


@attendance_bp.route('/stats', methods=['GET'])
@structured_errors("Failed to calculate attendance stats")
@degrade_on_storage_failure(empty_stats)
def stats():
    return jsonify({"success": True, "data": get_attendance_stats(db.session, request.args.to_dict())}), 200


@attendance_bp.route('/<int:attendance_id>', methods=['DELETE'])
@limiter.limit("60 per minute")
@structured_errors("Failed to delete attendance record. Please try again.")
def delete(attendance_id):
    delete_attendance(db.session, attendance_id)

    log_event("ATTENDANCE_DELETED", ip=request.remote_addr, description=f"attendance={attendance_id}")
    return jsonify({"success": True, "message": "Attendance record deleted"}), 200
