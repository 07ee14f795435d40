from flask import request, jsonify, make_response
from attendance_utils.audit import log_event

def log_rate_limit_violation(request_limit):
    log_event(
        "RATE_LIMIT_EXCEEDED",
        ip=request.remote_addr,
        description=f"{request.method} {request.path} ({request_limit.limit})",
        level="WARNING",
    )

    return make_response(jsonify({
        "success": False,
        "error": "Rate limit exceeded. Please slow down."
    }), 429)
