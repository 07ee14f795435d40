import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from attendance_app.errors import AttendanceAppError, NotFoundError, storage_error

logger = logging.getLogger(__name__)


@contextmanager
def write_transaction(session, action, on_integrity_error=None):
    """
    Run the block as one unit of work and commit it.

    Domain errors and storage failures roll the whole unit back. Constraint
    violations are translated by ``on_integrity_error`` (an exception factory)
    when given, otherwise they are reported as a storage failure.
    """
    try:
        yield session
        session.commit()
    except AttendanceAppError:
        session.rollback()
        raise
    except IntegrityError as exc:
        session.rollback()
        logger.warning("%s violated a constraint: %s", action, exc.orig)
        if on_integrity_error is not None:
            raise on_integrity_error(exc) from exc
        raise storage_error(exc) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("%s failed: %s", action, exc)
        raise storage_error(exc) from exc


@contextmanager
def read_guard(session, action):
    try:
        yield session
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("%s failed: %s", action, exc)
        raise storage_error(exc) from exc


def get_or_404(session, model, object_id, message):
    with read_guard(session, f"load {model.__name__}"):
        instance = session.get(model, object_id)
    if instance is None:
        raise NotFoundError(message)
    return instance
