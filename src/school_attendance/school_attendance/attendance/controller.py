from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.http import json_endpoint, optional_date, optional_time
from ..container import Container
from ..core.exceptions import ValidationError
from .model import AttendanceRecord


def _record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "student_id": r.student_id,
        "class_id": r.class_id,
        "subject_id": r.subject_id,
        "date": r.work_date.strftime("%Y-%m-%d"),
        "status": r.status.value,
        "arrival_time": r.arrival_time.strftime("%H:%M:%S") if r.arrival_time else None,
        "late_minutes": r.late_minutes,
        "marked_by": r.marked_by,
        "created_at": r.created_at.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/post", methods=["POST"], endpoint="api_post_attendance")
    @json_endpoint
    def api_post_attendance():
        data = request.get_json(silent=True) or {}
        work_date = optional_date(data.get("date"), "date") or now_local().date()

        draft = container.attendance_service.new_draft(
            class_id=data.get("class_id"),
            subject_id=data.get("subject_id"),
            work_date=work_date,
        )
        for entry in data.get("entries") or []:
            draft.set_status(
                entry.get("student_id"),
                entry.get("status"),
                optional_time(entry.get("arrival_time"), "arrival_time"),
            )

        result = container.posting_coordinator.post_draft(draft, recorder_id=data.get("recorder_id"))
        s = result.session
        return jsonify(
            {
                "success": True,
                "message": "Attendance marked successfully",
                "posted_count": result.posted_count,
                "session": {
                    "class_id": s.class_id,
                    "subject_id": s.subject_id,
                    "date": s.work_date.strftime("%Y-%m-%d"),
                    "total_students": s.total_students,
                    "present_count": s.present_count,
                    "late_count": s.late_count,
                    "absent_count": s.absent_count,
                },
                "affected": [
                    {"student_id": a.student_id, "status": a.status.value, "late_minutes": a.late_minutes}
                    for a in result.affected
                ],
            }
        ), 201

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="api_update_attendance")
    @json_endpoint
    def api_update_attendance(attendance_id: int):
        data = request.get_json(silent=True) or {}
        record = container.attendance_service.update_attendance(
            attendance_id,
            status=data.get("status"),
            arrival_time=optional_time(data.get("arrival_time"), "arrival_time"),
            corrected_by=data.get("corrected_by"),
        )
        return jsonify({"success": True, "record": _record_to_dict(record)}), 200

    @app.route("/api/attendance/session", methods=["GET"], endpoint="api_attendance_session")
    @json_endpoint
    def api_attendance_session():
        work_date = optional_date(request.args.get("date"), "date") or now_local().date()
        records = container.attendance_service.get_session_records(
            class_id=request.args.get("class_id"),
            subject_id=request.args.get("subject_id"),
            work_date=work_date,
        )
        return jsonify(
            {
                "success": True,
                "posted": bool(records),
                "records": [_record_to_dict(r) for r in records.values()],
            }
        ), 200

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="api_attendance_stats")
    @json_endpoint
    def api_attendance_stats():
        start = optional_date(request.args.get("start"), "start")
        end = optional_date(request.args.get("end"), "end")
        subject_id = request.args.get("subject_id") or None

        if request.args.get("student_id"):
            report = container.report_service.student_report(
                student_id=request.args["student_id"],
                subject_id=subject_id,
                start=start,
                end=end,
            )
        elif request.args.get("class_id"):
            report = container.report_service.class_report(
                class_id=request.args["class_id"],
                subject_id=subject_id,
                start=start,
                end=end,
            )
        else:
            raise ValidationError("student_id or class_id is required")

        return jsonify({"success": True, **report.to_dict()}), 200
