from collections import Counter
from decimal import Decimal, ROUND_HALF_UP

from attendance_app.models import AttendanceStatus, ATTENDED_STATUSES


def empty_stats():
    return {
        "total": 0,
        "present": 0,
        "absent": 0,
        "late": 0,
        "excused": 0,
        "attendanceRate": "0.0",
    }


def _status_of(item):
    status = getattr(item, "status", item)
    if isinstance(status, AttendanceStatus):
        return status
    return AttendanceStatus[str(status).strip().upper()]


def attendance_rate(attended, total):
    """Percentage of attended records, one decimal, halves rounded up."""
    if not total:
        return "0.0"
    rate = Decimal(attended) * 100 / Decimal(total)
    return str(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def stats_from_counts(counts):
    counts = {_status_of(status): count for status, count in counts.items()}
    total = sum(counts.values())
    attended = sum(counts.get(status, 0) for status in ATTENDED_STATUSES)

    return {
        "total": total,
        "present": counts.get(AttendanceStatus.PRESENT, 0),
        "absent": counts.get(AttendanceStatus.ABSENT, 0),
        "late": counts.get(AttendanceStatus.LATE, 0),
        "excused": counts.get(AttendanceStatus.EXCUSED, 0),
        "attendanceRate": attendance_rate(attended, total),
    }


def compute_stats(records):
    """
    Aggregate attendance records (or bare statuses) into counts per status and
    an attendance rate. LATE and EXCUSED count as attended.
    """
    return stats_from_counts(Counter(_status_of(record) for record in records))
