from __future__ import annotations

from flask import Flask, jsonify

from ..auth.middleware import current_principal, require_auth
from ..common.datetime_utils import isoformat_or_none
from ..common.http import request_payload
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    tokens = container.tokens

    @app.route("/api/developers", methods=["GET"], endpoint="api_developers")
    @require_auth(tokens, Role.ADMIN)
    def api_developers():
        developers = container.attendance_service.list_developers()
        return jsonify([dev.to_attendance_view() for dev in developers])

    @app.route("/api/my-attendance", methods=["GET"], endpoint="api_my_attendance")
    @require_auth(tokens, Role.DEVELOPER)
    def api_my_attendance():
        user = container.attendance_service.get_attendance(current_principal().email)
        return jsonify(
            {
                "attendance": user.attendance.value,
                "lastAttendanceUpdate": isoformat_or_none(user.last_attendance_update),
            }
        )

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance")
    @require_auth(tokens, Role.DEVELOPER)
    def api_attendance():
        status = request_payload().get("status")
        user = container.attendance_service.mark_attendance(current_principal().email, status)
        attendance = user.attendance.value
        return jsonify({"message": f"Attendance marked as {attendance}", "attendance": attendance})
