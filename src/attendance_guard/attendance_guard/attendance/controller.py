from __future__ import annotations

from flask import Flask, g

from ..common.web import client_address, deny_response, iso, json_body, json_ok, login_required, presented_device_id
from ..container import Container
from ..core.results import Deny
from .model import Punch


def _punch_json(punch: Punch) -> dict:
    return {
        "id": punch.punch_id,
        "userId": punch.identity_id,
        "type": punch.punch_type.value,
        "deviceId": punch.device_id,
        "networkAddress": punch.network_address,
        "punchedAt": iso(punch.punched_at),
    }


def register(app: Flask, container: Container) -> None:
    login = login_required(container.identities_repo)

    @app.route("/api/attendance/authorize", methods=["POST"], endpoint="api_attendance_authorize")
    @login
    def api_attendance_authorize():
        """Dry run of the punch checks; nothing is recorded."""
        decision = container.attendance_gate.authorize(g.identity, presented_device_id(), client_address())
        if isinstance(decision, Deny):
            return deny_response(decision)
        return json_ok({"allowed": True})

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    @login
    def api_attendance_mark():
        data = json_body()
        result = container.punch_service.mark(
            g.identity,
            punch_type=container.punch_service.parse_type(data.get("type")),
            device_id=presented_device_id(),
            client_address=client_address(),
        )
        if isinstance(result, Deny):
            return deny_response(result)
        return json_ok(_punch_json(result.value), 201)
