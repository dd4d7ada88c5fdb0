from datetime import date, datetime

import pytest
from sqlalchemy import select, text

import config
from exceptions import ConflictError
from models import Attendance, LeaveRequest, LeaveStatus, Notification
from services import leave_service


def _request_leave(actor, start="2024-03-01", end="2024-03-03", leave_type="Paid"):
    return actor.client.post(
        "/leave",
        json={"leaveType": leave_type, "startDate": start, "endDate": end, "reason": "Family function"},
    )


def _attendance_rows(session_scope, user_id):
    with session_scope() as db:
        rows = db.scalars(
            select(Attendance).where(Attendance.user_id == user_id).order_by(Attendance.date)
        ).all()
        return [(row.date, row.status) for row in rows]


def test_approval_marks_every_day_as_leave(alice, admin, clock, session_scope):
    # An existing Present day inside the window is overridden
    clock.set(2024, 3, 1, 9, 0)
    assert alice.client.post("/attendance", json={"action": "checkin"}).status_code == 200

    r = _request_leave(alice)
    assert r.status_code == 200, r.text
    leave_id = r.json()["leaveId"]

    r = admin.client.put(f"/leave/{leave_id}", json={"status": "Approved", "adminComment": "Enjoy"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["leave"]["status"] == "Approved"
    assert body["attendanceDaysUpdated"] == 3

    assert _attendance_rows(session_scope, alice.id) == [
        (date(2024, 3, 1), "Leave"),
        (date(2024, 3, 2), "Leave"),
        (date(2024, 3, 3), "Leave"),
    ]

    with session_scope() as db:
        notes = db.scalars(select(Notification).where(Notification.user_id == alice.id)).all()
        assert [n.type for n in notes] == ["LEAVE_UPDATE"]


def test_rejection_has_no_attendance_side_effect(alice, admin, session_scope):
    leave_id = _request_leave(alice).json()["leaveId"]

    r = admin.client.put(f"/leave/{leave_id}", json={"status": "Rejected"})
    assert r.status_code == 200
    assert r.json()["leave"]["status"] == "Rejected"
    assert r.json()["attendanceDaysUpdated"] == 0
    assert _attendance_rows(session_scope, alice.id) == []

    notes = alice.client.get("/notifications").json()
    assert len(notes) == 1
    assert notes[0]["title"] == "Leave request rejected"
    assert notes[0]["read"] is False


def test_reviewed_requests_are_terminal(alice, admin):
    leave_id = _request_leave(alice).json()["leaveId"]
    assert admin.client.put(f"/leave/{leave_id}", json={"status": "Approved"}).status_code == 200

    r = admin.client.put(f"/leave/{leave_id}", json={"status": "Rejected"})
    assert r.status_code == 409


def test_only_admin_reviews(alice, hr):
    leave_id = _request_leave(alice).json()["leaveId"]

    for actor in (alice, hr):
        r = actor.client.put(f"/leave/{leave_id}", json={"status": "Approved"})
        assert r.status_code == 403
        assert r.json()["detail"] == "Admin access only"


def test_review_unknown_request(admin):
    r = admin.client.put("/leave/999", json={"status": "Approved"})
    assert r.status_code == 404


def test_review_rejects_unknown_status(alice, admin):
    leave_id = _request_leave(alice).json()["leaveId"]
    r = admin.client.put(f"/leave/{leave_id}", json={"status": "Pending"})
    assert r.status_code == 400


@pytest.mark.parametrize(
    "payload",
    [
        {"leaveType": "Paid", "startDate": "2024-03-05", "endDate": "2024-03-01"},
        {"leaveType": "Vacation", "startDate": "2024-03-01", "endDate": "2024-03-02"},
        {"leaveType": "Paid", "startDate": "2024-03-01"},
    ],
)
def test_invalid_requests(alice, payload):
    r = alice.client.post("/leave", json=payload)
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_only_employees_request_leave(admin):
    r = _request_leave(admin)
    assert r.status_code == 403
    assert r.json()["detail"] == "Employee access only"


def test_overlap_with_approved_leave(alice, admin):
    leave_id = _request_leave(alice).json()["leaveId"]
    admin.client.put(f"/leave/{leave_id}", json={"status": "Approved"})

    r = _request_leave(alice, start="2024-03-03", end="2024-03-05")
    assert r.status_code == 400

    # Pending requests do not block each other
    assert _request_leave(alice, start="2024-03-10", end="2024-03-11").status_code == 200
    assert _request_leave(alice, start="2024-03-11", end="2024-03-12").status_code == 200


def test_notice_period_policy(alice, clock, monkeypatch):
    monkeypatch.setattr(config, "LEAVE_ENFORCE_NOTICE_PERIOD", True)
    clock.set(2024, 3, 4, 9, 0)

    assert _request_leave(alice, start="2024-03-05", end="2024-03-05").status_code == 400
    assert _request_leave(alice, start="2024-03-06", end="2024-03-06").status_code == 200
    assert _request_leave(alice, start="2024-03-05", end="2024-03-05", leave_type="Sick").status_code == 200
    assert _request_leave(alice, start="2024-03-04", end="2024-03-04", leave_type="Unpaid").status_code == 200


def test_pending_queue(alice, bob, admin, hr):
    _request_leave(alice)
    second = _request_leave(bob, start="2024-04-01", end="2024-04-02").json()["leaveId"]
    admin.client.put(f"/leave/{second}", json={"status": "Rejected"})

    r = hr.client.get("/leave/pending")
    assert r.status_code == 200
    leaves = r.json()["leaves"]
    assert len(leaves) == 1
    assert leaves[0]["employeeName"] == "Alice Anders"
    assert leaves[0]["employeeEmail"] == alice.email
    assert leaves[0]["employeeId"] == "DXALAN20240001"

    r = alice.client.get("/leave/pending")
    assert r.status_code == 403
    assert r.json()["detail"] == "Admin/HR access only"


def test_leave_visibility(alice, bob, hr):
    leave_id = _request_leave(alice).json()["leaveId"]

    assert alice.client.get(f"/leave/{leave_id}").status_code == 200
    assert hr.client.get(f"/leave/{leave_id}").status_code == 200
    assert bob.client.get(f"/leave/{leave_id}").status_code == 403

    assert bob.client.get("/leave").json()["leaves"] == []
    assert bob.client.get(f"/leave?userId={alice.id}").status_code == 403
    assert len(hr.client.get(f"/leave?userId={alice.id}").json()["leaves"]) == 1


def test_failed_approval_rolls_back(alice, admin, session_scope, monkeypatch):
    leave_id = _request_leave(alice).json()["leaveId"]

    def boom(db, leave):
        raise RuntimeError("notification store unavailable")

    monkeypatch.setattr(leave_service.notification_service, "notify_leave_reviewed", boom)

    with session_scope() as db:
        with pytest.raises(RuntimeError):
            leave_service.review_leave_request(
                db,
                leave_id=leave_id,
                status=LeaveStatus.APPROVED,
                reviewer_id=admin.id,
                admin_comment=None,
                now=datetime(2024, 3, 4, 12, 0),
            )

    with session_scope() as db:
        assert db.get(LeaveRequest, leave_id).status == "Pending"
    assert _attendance_rows(session_scope, alice.id) == []


def test_review_loses_to_concurrent_review(alice, admin, session_scope):
    leave_id = _request_leave(alice).json()["leaveId"]

    with session_scope() as db:
        # This session still holds the request as Pending while the row moves on
        assert db.get(LeaveRequest, leave_id).status == "Pending"
        db.execute(text("UPDATE leave_requests SET status = 'Rejected' WHERE id = :id"), {"id": leave_id})

        with pytest.raises(ConflictError):
            leave_service.review_leave_request(
                db,
                leave_id=leave_id,
                status=LeaveStatus.APPROVED,
                reviewer_id=admin.id,
                admin_comment=None,
                now=datetime(2024, 3, 4, 12, 0),
            )

    assert _attendance_rows(session_scope, alice.id) == []
    with session_scope() as db:
        assert db.scalars(select(Notification).where(Notification.user_id == alice.id)).all() == []
