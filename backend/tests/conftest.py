import pytest

from attendance_app import create_app
from attendance_app.config import TestingConfig
from attendance_app.extensions import db
from attendance_app.services import create_classroom, create_student


@pytest.fixture
def app(tmp_path):
    class Config(TestingConfig):
        AUDIT_LOG_FILE = str(tmp_path / "logs" / "audit.log")

    app = create_app(Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_classroom(session):
    def _make(name="Form 1A", **extra):
        return create_classroom(session, {"name": name, **extra})
    return _make


@pytest.fixture
def make_student(session):
    def _make(classroom, first_name="Alice", last_name="Johnson"):
        return create_student(session, {
            "firstName": first_name,
            "lastName": last_name,
            "classroomId": classroom.id,
        })
    return _make


@pytest.fixture
def classroom(make_classroom):
    return make_classroom()


@pytest.fixture
def alice(make_student, classroom):
    return make_student(classroom, "Alice", "Johnson")
