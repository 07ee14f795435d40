from flask import Blueprint, request, jsonify
from attendance_app.extensions import db
from attendance_app.services import dashboard_summary
from attendance_utils.decorators import structured_errors

dashboard_bp = Blueprint('dashboard', __name__)

@dashboard_bp.route('/summary')
@structured_errors("Failed to build dashboard summary")
def summary():
    # classroom_id accepts "all" for every classroom
    filters = {
        "classroomId": request.args.get("classroom_id") or request.args.get("classroomId"),
        "date": request.args.get("date"),
    }
    return jsonify(dashboard_summary(db.session, filters)), 200
