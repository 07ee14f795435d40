from .base import TimestampMixin, AttendanceStatus, ATTENDED_STATUSES
from .Classroom import Classroom
from .Student import Student
from .AttendanceRecord import AttendanceRecord
