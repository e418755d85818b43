from __future__ import annotations

from dataclasses import replace
from datetime import datetime, time

import pytest
from flask import Flask

from src.school_attendance.school_attendance.attendance.controller import register as register_attendance
from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.container import wire
from src.school_attendance.school_attendance.core.exceptions import StoreError
from src.school_attendance.school_attendance.notifications.controller import register as register_notifications
from src.school_attendance.school_attendance.notifications.model import InboxItem, NotificationEvent

NOW = datetime(2026, 3, 2, 16, 30)


class FakeAttendanceRepo:
    def __init__(self):
        self.rows: dict[int, AttendanceRecord] = {}
        self.sessions = []
        self.down = False

    def exists_for_session(self, *, class_id, subject_id, work_date):
        if self.down:
            raise StoreError("check posted attendance failed")
        return any((s.class_id, s.subject_id, s.work_date) == (class_id, subject_id, work_date) for s in self.sessions)

    def insert_posting(self, records, session):
        for r in records:
            aid = len(self.rows) + 1
            self.rows[aid] = AttendanceRecord(attendance_id=aid, **r.__dict__)
        self.sessions.append(session)
        return len(records)

    def get_by_id(self, attendance_id):
        return self.rows.get(attendance_id)

    def list_records(self, *, class_id=None, subject_id=None, student_id=None, start_date=None, end_date=None):
        out = list(self.rows.values())
        if class_id is not None:
            out = [r for r in out if r.class_id == class_id]
        if subject_id is not None:
            out = [r for r in out if r.subject_id == subject_id]
        if student_id is not None:
            out = [r for r in out if r.student_id == student_id]
        if start_date is not None:
            out = [r for r in out if r.work_date >= start_date]
        if end_date is not None:
            out = [r for r in out if r.work_date <= end_date]
        return out

    def update_record(self, *, attendance_id, status, arrival_time, late_minutes):
        if attendance_id not in self.rows:
            return False
        self.rows[attendance_id] = replace(
            self.rows[attendance_id], status=status, arrival_time=arrival_time, late_minutes=late_minutes
        )
        return True

    def list_sessions(self, *, class_id, subject_id=None, start_date=None, end_date=None):
        return [s for s in self.sessions if s.class_id == class_id]


class FakeNotificationsRepo:
    def __init__(self):
        self.events = {}
        self.rows = {}

    def create_event(self, draft, user_ids, *, created_at):
        nid = len(self.events) + 1
        self.events[nid] = NotificationEvent(
            notification_id=nid,
            type=draft.type,
            title=draft.title,
            message=draft.message,
            target_type=draft.target.target_type,
            target_id=draft.target.target_id,
            priority=draft.priority,
            created_by=draft.created_by,
            entity_type=draft.entity_type,
            entity_id=draft.entity_id,
            created_at=created_at,
        )
        for u in user_ids:
            self.rows[(nid, u)] = False
        return nid

    def list_inbox(self, user_id, *, unread_only=False, limit=100):
        return [
            InboxItem(event=self.events[nid], is_read=is_read)
            for (nid, u), is_read in self.rows.items()
            if u == user_id and not (unread_only and is_read)
        ][:limit]

    def count_unread(self, user_id):
        return sum(1 for (_, u), is_read in self.rows.items() if u == user_id and not is_read)

    def mark_read(self, *, notification_id, user_id, read_at):
        if (notification_id, user_id) not in self.rows:
            return False
        self.rows[(notification_id, user_id)] = True
        return True

    def mark_all_read(self, *, user_id, read_at):
        keys = [k for k, is_read in self.rows.items() if k[1] == user_id and not is_read]
        for k in keys:
            self.rows[k] = True
        return len(keys)

    def mark_deleted(self, *, notification_id, user_id):
        return self.rows.pop((notification_id, user_id), None) is not None


class FakeRoster:
    def list_student_ids(self, *, class_id=None):
        return ["s1", "s2", "s3"]

    def list_enrolled_student_ids(self, *, class_id, subject_id):
        return ["s1"]


class OkChannel:
    def deliver(self, user_id, title, body, data):
        return True


@pytest.fixture()
def env():
    attendance_repo = FakeAttendanceRepo()
    notifications_repo = FakeNotificationsRepo()
    container = wire(
        attendance_repo=attendance_repo,
        notifications_repo=notifications_repo,
        roster_repo=FakeRoster(),
        channel=OkChannel(),
        class_start=time(16, 0),
        grace_minutes=15,
        clock=lambda: NOW,
    )
    app = Flask(__name__)
    register_attendance(app, container)
    register_notifications(app, container)
    return app.test_client(), attendance_repo, notifications_repo


POSTING = {
    "class_id": "c1",
    "subject_id": "math",
    "date": "2026-03-02",
    "recorder_id": "t1",
    "entries": [
        {"student_id": "s1", "status": "present", "arrival_time": "16:05"},
        {"student_id": "s2", "status": "present", "arrival_time": "16:16"},
        {"student_id": "s3", "status": "absent"},
    ],
}


def test_post_attendance_then_reject_second_post(env):
    client, attendance_repo, notifications_repo = env

    resp = client.post("/api/attendance/post", json=POSTING)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["posted_count"] == 3
    assert body["session"]["late_count"] == 1
    assert {a["student_id"] for a in body["affected"]} == {"s2", "s3"}
    assert len(notifications_repo.events) == 2

    again = client.post("/api/attendance/post", json=POSTING)
    assert again.status_code == 409
    assert again.get_json()["success"] is False
    assert len(attendance_repo.rows) == 3


def test_post_with_unknown_status_is_bad_request(env):
    client, attendance_repo, _ = env
    payload = dict(POSTING, entries=[{"student_id": "s1", "status": "sick"}])

    resp = client.post("/api/attendance/post", json=payload)

    assert resp.status_code == 400
    assert attendance_repo.rows == {}


def test_post_with_bad_time_is_bad_request(env):
    client, _, _ = env
    payload = dict(POSTING, entries=[{"student_id": "s1", "status": "present", "arrival_time": "4pm"}])

    assert client.post("/api/attendance/post", json=payload).status_code == 400


def test_store_outage_is_service_unavailable(env):
    client, attendance_repo, _ = env
    attendance_repo.down = True

    assert client.post("/api/attendance/post", json=POSTING).status_code == 503


def test_correct_attendance(env):
    client, _, _ = env
    client.post("/api/attendance/post", json=POSTING)

    resp = client.put("/api/attendance/3", json={"status": "present", "arrival_time": "16:02", "corrected_by": "t2"})

    assert resp.status_code == 200
    assert resp.get_json()["record"]["status"] == "present"
    assert resp.get_json()["record"]["arrival_time"] == "16:02:00"
    assert client.put("/api/attendance/99", json={"status": "present", "corrected_by": "t2"}).status_code == 404


def test_session_and_stats(env):
    client, _, _ = env
    client.post("/api/attendance/post", json=POSTING)

    session = client.get("/api/attendance/session?class_id=c1&subject_id=math&date=2026-03-02").get_json()
    assert session["posted"] is True
    assert len(session["records"]) == 3

    stats = client.get("/api/attendance/stats?class_id=c1").get_json()
    assert stats["summary"]["attendance_rate"] == 67
    assert stats["by_student"]["s3"]["absent_days"] == 1

    assert client.get("/api/attendance/stats").status_code == 400


def test_publish_and_inbox(env):
    client, _, _ = env

    resp = client.post(
        "/api/notifications",
        json={
            "type": "announcement",
            "title": "Trip",
            "message": "Bring lunch",
            "target_type": "class",
            "target_id": "c1",
        },
    )
    assert resp.status_code == 201
    nid = resp.get_json()["notification_id"]
    assert resp.get_json()["sent"] == 3

    inbox = client.get("/api/notifications?user_id=s1").get_json()
    assert inbox["unread_count"] == 1
    assert inbox["notifications"][0]["title"] == "Trip"

    assert client.post(f"/api/notifications/{nid}/read?user_id=s1").status_code == 200
    assert client.get("/api/notifications?user_id=s1&unread_only=1").get_json()["notifications"] == []
    assert client.post("/api/notifications/read-all?user_id=s2").get_json()["updated"] == 1
    assert client.delete(f"/api/notifications/{nid}?user_id=s3").status_code == 200
    assert client.delete(f"/api/notifications/{nid}?user_id=s3").status_code == 404


def test_publish_with_unknown_type_is_bad_request(env):
    client, _, _ = env

    resp = client.post(
        "/api/notifications",
        json={"type": "party", "title": "x", "message": "y", "target_type": "class", "target_id": "c1"},
    )

    assert resp.status_code == 400


def test_student_ids_must_be_a_list(env):
    client, _, notifications_repo = env

    resp = client.post(
        "/api/notifications",
        json={"type": "announcement", "title": "x", "message": "y", "target_type": "students", "student_ids": "s12"},
    )

    assert resp.status_code == 400
    assert notifications_repo.events == {}


def test_publish_to_explicit_students(env):
    client, _, notifications_repo = env

    resp = client.post(
        "/api/notifications",
        json={
            "type": "timetable_changed",
            "title": "New timetable",
            "message": "Math moves to Tuesday",
            "target_type": "students",
            "student_ids": ["s1", "s12"],
        },
    )

    assert resp.status_code == 201
    assert resp.get_json()["sent"] == 2
    assert sorted(u for _, u in notifications_repo.rows) == ["s1", "s12"]


def test_non_string_date_and_time_are_bad_requests(env):
    client, attendance_repo, _ = env

    assert client.post("/api/attendance/post", json=dict(POSTING, date=20260302)).status_code == 400
    payload = dict(POSTING, entries=[{"student_id": "s1", "status": "present", "arrival_time": 1605}])
    assert client.post("/api/attendance/post", json=payload).status_code == 400
    assert client.get("/api/attendance/session?class_id=c1&subject_id=math&date=03-02-2026").status_code == 400
    assert attendance_repo.rows == {}
