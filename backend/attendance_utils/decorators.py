from functools import wraps
from flask import current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from attendance_app.errors import AttendanceAppError, StorageUnavailable
from attendance_app.extensions import db

def get_payload():
    """Request body as a plain dict (JSON or form-encoded), or whatever JSON was sent."""
    if request.is_json:
        return request.get_json(silent=True)
    return request.form.to_dict()

def structured_errors(fallback_message):
    """
    Operation boundary for API routes.
    Domain errors become {"success": false, "error", "fieldErrors"} with their
    status code; stray database errors are never passed through raw.
    Usage: @structured_errors("Failed to create classroom. Please try again.")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except AttendanceAppError as e:
                if isinstance(e, StorageUnavailable):
                    current_app.logger.warning("%s %s: %s", request.method, request.path, e.message)
                return jsonify(e.to_result()), e.status_code
            except SQLAlchemyError:
                db.session.rollback()
                current_app.logger.exception(fallback_message)
                return jsonify({"success": False, "error": fallback_message}), StorageUnavailable.status_code
        return wrapper
    return decorator

def degrade_on_storage_failure(empty_factory):
    """
    Read endpoints answer with an empty/zeroed payload and an error banner
    instead of failing when the database is unavailable.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except StorageUnavailable as e:
                current_app.logger.warning("Degrading %s: %s", request.path, e.message)
                return jsonify({"success": False, "error": e.message, "data": empty_factory()}), 200
        return wrapper
    return decorator
