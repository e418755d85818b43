from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import flag, json_endpoint, optional_str_list
from ..container import Container
from ..core.enums import NotificationType, Priority, TargetType
from ..core.exceptions import ValidationError
from .model import InboxItem, NotificationEventDraft, NotificationTarget


def _enum(enum_cls, value, field_name: str, default=None):
    if value in (None, "") and default is not None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")


def _item_to_dict(item: InboxItem) -> dict:
    e = item.event
    return {
        "notification_id": e.notification_id,
        "type": e.type.value,
        "title": e.title,
        "message": e.message,
        "priority": e.priority.value,
        "entity_type": e.entity_type,
        "entity_id": e.entity_id,
        "created_by": e.created_by,
        "created_at": e.created_at.isoformat(),
        "is_read": item.is_read,
        "read_at": item.read_at.isoformat() if item.read_at else None,
    }


def register(app: Flask, container: Container) -> None:
    service = container.notification_service

    @app.route("/api/notifications", methods=["POST"], endpoint="api_publish_notification")
    @json_endpoint
    def api_publish_notification():
        data = request.get_json(silent=True) or {}
        target = NotificationTarget(
            target_type=_enum(TargetType, data.get("target_type"), "target_type"),
            target_id=data.get("target_id"),
            subject_id=data.get("subject_id"),
            student_ids=optional_str_list(data.get("student_ids"), "student_ids"),
        )
        draft = NotificationEventDraft(
            type=_enum(NotificationType, data.get("type"), "type"),
            title=data.get("title") or "",
            message=data.get("message") or "",
            target=target,
            priority=_enum(Priority, data.get("priority"), "priority", default=Priority.MEDIUM),
            created_by=data.get("created_by"),
            entity_type=data.get("entity_type"),
            entity_id=data.get("entity_id"),
        )
        report = service.publish(draft)
        return jsonify({"success": True, **report.to_dict()}), 201

    @app.route("/api/notifications", methods=["GET"], endpoint="api_inbox")
    @json_endpoint
    def api_inbox():
        user_id = request.args.get("user_id")
        items = service.list_inbox(user_id, unread_only=flag(request.args.get("unread_only")))
        return jsonify(
            {
                "success": True,
                "unread_count": service.unread_count(user_id),
                "notifications": [_item_to_dict(i) for i in items],
            }
        ), 200

    @app.route("/api/notifications/<int:notification_id>/read", methods=["POST"], endpoint="api_mark_read")
    @json_endpoint
    def api_mark_read(notification_id: int):
        service.mark_read(notification_id, user_id=request.args.get("user_id"))
        return jsonify({"success": True}), 200

    @app.route("/api/notifications/read-all", methods=["POST"], endpoint="api_mark_all_read")
    @json_endpoint
    def api_mark_all_read():
        updated = service.mark_all_read(user_id=request.args.get("user_id"))
        return jsonify({"success": True, "updated": updated}), 200

    @app.route("/api/notifications/<int:notification_id>", methods=["DELETE"], endpoint="api_delete_notification")
    @json_endpoint
    def api_delete_notification(notification_id: int):
        service.delete(notification_id, user_id=request.args.get("user_id"))
        return jsonify({"success": True}), 200
