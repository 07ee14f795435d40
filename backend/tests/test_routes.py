from types import SimpleNamespace

import pytest

from attendance_app.errors import StorageUnavailable
from attendance_app.models import AttendanceRecord
from attendance_app.routes import attendance as attendance_routes
from attendance_utils.logging import log_rate_limit_violation


@pytest.fixture
def ids(classroom, alice, make_student):
    bob = make_student(classroom, "Bob", "Adams")
    return {"classroom": classroom.id, "alice": alice.id, "bob": bob.id}


def _entry(ids, student="alice", day="2024-01-15", status="PRESENT"):
    return {"studentId": ids[student], "classroomId": ids["classroom"], "date": day, "status": status}


def _unavailable(*args, **kwargs):
    raise StorageUnavailable()


def test_home(client):
    assert client.get("/").status_code == 200


def test_db_check(client, ids):
    body = client.get("/api/test-db").get_json()
    assert body == {"status": "success", "classrooms": 1, "students": 2}


def test_record_attendance(client, ids, app):
    response = client.post("/attendance/record", json=_entry(ids, day="2024-01-15T09:00:00Z", status="late"))

    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["date"] == "2024-01-15"
    assert body["data"]["status"] == "LATE"
    assert body["data"]["student"]["firstName"] == "Alice"
    assert body["data"]["classroom"]["id"] == ids["classroom"]

    with open(app.config["AUDIT_LOG_FILE"]) as audit:
        assert "ATTENDANCE_RECORDED" in audit.read()


def test_record_accepts_form_fields(client, ids, session):
    response = client.post("/attendance/record", data={
        "studentId": str(ids["bob"]),
        "classroomId": str(ids["classroom"]),
        "date": "2024-01-15",
        "status": "EXCUSED",
    })
    assert response.status_code == 201
    assert session.query(AttendanceRecord).count() == 1


def test_record_validation_error_shape(client, ids):
    response = client.post("/attendance/record", json=_entry(ids, status="SICK"))

    assert response.status_code == 400
    assert response.get_json() == {
        "success": False,
        "error": "Invalid input data",
        "fieldErrors": {"status": ["Status must be PRESENT, ABSENT, LATE, or EXCUSED"]},
    }


def test_record_unknown_student(client, ids):
    response = client.post("/attendance/record", json={**_entry(ids), "studentId": 4040})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid student or classroom reference"


def test_record_storage_failure(client, ids, monkeypatch):
    monkeypatch.setattr(attendance_routes, "record_attendance", _unavailable)
    response = client.post("/attendance/record", json=_entry(ids))
    assert response.status_code == 503
    assert response.get_json() == {"success": False, "error": "Database connection error. Please try again."}


def test_bulk_with_shared_date_and_classroom(client, ids, session):
    response = client.post("/attendance/bulk", json={
        "date": "2024-01-15",
        "classroomId": ids["classroom"],
        "records": [
            {"studentId": ids["alice"], "status": "PRESENT"},
            {"studentId": ids["bob"], "status": "ABSENT"},
        ],
    })

    assert response.status_code == 201
    assert [r["status"] for r in response.get_json()["data"]] == ["PRESENT", "ABSENT"]
    assert session.query(AttendanceRecord).count() == 2


def test_bulk_rejects_the_whole_batch(client, ids, session):
    response = client.post("/attendance/bulk", json=[
        _entry(ids, "alice"),
        _entry(ids, "bob", status="GONE"),
    ])

    assert response.status_code == 400
    assert "1.status" in response.get_json()["fieldErrors"]
    assert session.query(AttendanceRecord).count() == 0


def test_bulk_without_entries(client):
    response = client.post("/attendance/bulk", json={"records": []})
    assert response.status_code == 400
    assert response.get_json()["error"] == "No attendance data provided"


def test_list_and_stats(client, ids):
    client.post("/attendance/bulk", json=[
        _entry(ids, "alice", status="PRESENT"),
        _entry(ids, "bob", status="ABSENT"),
        _entry(ids, "alice", day="2024-01-16", status="LATE"),
    ])

    listed = client.get(f"/attendance/list?classroomId={ids['classroom']}&date=2024-01-15").get_json()
    assert listed["success"] is True
    assert listed["total"] == 2
    assert [r["student"]["firstName"] for r in listed["data"]] == ["Bob", "Alice"]

    stats = client.get("/attendance/stats?classroomId=all").get_json()
    assert stats["data"]["total"] == 3
    assert stats["data"]["attendanceRate"] == "66.7"


def test_list_with_bad_filter(client):
    response = client.get("/attendance/list?date=someday")
    assert response.status_code == 400
    assert "date" in response.get_json()["fieldErrors"]


def test_list_degrades_when_storage_is_down(client, monkeypatch):
    monkeypatch.setattr(attendance_routes, "list_attendance", _unavailable)
    response = client.get("/attendance/list")

    assert response.status_code == 200
    assert response.get_json() == {
        "success": False,
        "error": "Database connection error. Please try again.",
        "data": [],
    }


def test_stats_degrade_to_zero(client, monkeypatch):
    monkeypatch.setattr(attendance_routes, "get_attendance_stats", _unavailable)
    body = client.get("/attendance/stats").get_json()

    assert body["success"] is False
    assert body["data"]["total"] == 0
    assert body["data"]["attendanceRate"] == "0.0"


def test_delete_attendance_route(client, ids):
    created = client.post("/attendance/record", json=_entry(ids)).get_json()["data"]

    assert client.delete(f"/attendance/{created['id']}").status_code == 200
    missing = client.delete(f"/attendance/{created['id']}")
    assert missing.status_code == 404
    assert missing.get_json() == {"success": False, "error": "Attendance record not found"}


def test_create_classroom_conflict(client):
    assert client.post("/classrooms/create", json={"name": "Form 4A", "teacher": "Mr. Martinez"}).status_code == 201

    response = client.post("/classrooms/create", json={"name": "FORM 4a"})
    assert response.status_code == 409
    assert response.get_json()["fieldErrors"] == {"name": ["This classroom name is already taken"]}


def test_classroom_listing(client, ids):
    body = client.get("/classrooms/list").get_json()
    assert body["total"] == 1
    assert body["classrooms"][0]["studentCount"] == 2

    roster = client.get("/classrooms/with-students").get_json()
    assert [s["firstName"] for s in roster[0]["students"]] == ["Bob", "Alice"]


def test_student_lifecycle(client, ids):
    created = client.post("/students/create", json={
        "firstName": "Grace", "lastName": "Hopper", "classroomId": ids["classroom"],
    })
    assert created.status_code == 201
    student = created.get_json()["data"]
    assert student["studentId"].count("-") == 1
    assert student["attendanceCount"] == 0

    client.post("/attendance/record", json={
        "studentId": student["id"], "classroomId": ids["classroom"], "date": "2024-01-15", "status": "PRESENT",
    })
    detail = client.get(f"/students/{student['id']}?include_attendance=true").get_json()
    assert detail["attendanceCount"] == 1
    assert detail["attendances"][0]["status"] == "PRESENT"

    assert client.delete(f"/students/{student['id']}").status_code == 200
    assert client.get(f"/students/{student['id']}").status_code == 404


def test_student_search(client, ids):
    body = client.get(f"/students/list?classroomId={ids['classroom']}&search=ada").get_json()
    assert [s["firstName"] for s in body["students"]] == ["Bob"]


def test_dashboard_summary_route(client, ids):
    client.post("/attendance/record", json=_entry(ids))
    body = client.get("/dashboard/summary?classroom_id=all").get_json()

    assert body["totalClassrooms"] == 1
    assert body["totalStudents"] == 2
    assert body["attendance"]["present"] == 1


def test_unknown_route_is_json(client):
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_rate_limit_breach_response(app):
    with app.test_request_context("/attendance/record", method="POST"):
        response = log_rate_limit_violation(SimpleNamespace(limit="120 per 1 minute"))

    assert response.status_code == 429
    assert response.get_json()["error"] == "Rate limit exceeded. Please slow down."
    with open(app.config["AUDIT_LOG_FILE"]) as audit:
        assert "RATE_LIMIT_EXCEEDED" in audit.read()


def test_list_endpoints_search_and_paginate(client, ids, make_classroom):
    make_classroom("Form 5B", teacher="Mr. Thompson")

    classrooms = client.get("/classrooms/list?search=thompson").get_json()
    assert [c["name"] for c in classrooms["classrooms"]] == ["Form 5B"]
    assert classrooms["classrooms"][0]["studentCount"] == 0

    students = client.get(f"/students/list?classroomId={ids['classroom']}&per_page=1&page=2").get_json()
    assert students["total"] == 2
    assert students["pages"] == 2
    assert [s["firstName"] for s in students["students"]] == ["Alice"]
