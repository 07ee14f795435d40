import logging
import random
import time
from datetime import date

from attendance_app.models import Student

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 100
SUFFIX_RANGE = range(1000, 10000)


def _code_exists(session, code):
    return session.query(Student.id).filter_by(student_code=code).first() is not None


def generate_student_code(session, today=None, rng=None):
    """
    Return an unused student code of the form ``YYYY-NNNN``.

    Tries random suffixes first, then picks from the year's remaining free
    suffixes. Only when every suffix of the year is taken does it fall back to
    the last four digits of the current timestamp, which is not checked and
    can collide.
    """
    rng = rng or random
    year = (today or date.today()).year

    for _ in range(MAX_ATTEMPTS):
        candidate = f"{year}-{rng.randrange(SUFFIX_RANGE.start, SUFFIX_RANGE.stop)}"
        if not _code_exists(session, candidate):
            return candidate

    taken = {
        code for (code,) in
        session.query(Student.student_code).filter(Student.student_code.like(f"{year}-%"))
    }
    free = [suffix for suffix in SUFFIX_RANGE if f"{year}-{suffix}" not in taken]
    if free:
        return f"{year}-{rng.choice(free)}"

    logger.warning("Student code space for %s is exhausted, using timestamp fallback", year)
    return f"{year}-{str(int(time.time() * 1000))[-4:]}"
