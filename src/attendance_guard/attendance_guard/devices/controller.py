from __future__ import annotations

from typing import Optional

from flask import Flask, g

from ..common.web import admin_required, err_response, iso, json_body, json_error, json_ok, login_required
from ..container import Container
from ..core.results import Err
from .model import DeviceBinding


def binding_json(binding: Optional[DeviceBinding]) -> Optional[dict]:
    if binding is None:
        return None
    return {"deviceId": binding.device_id, "name": binding.label, "registeredAt": iso(binding.bound_at)}


def register(app: Flask, container: Container) -> None:
    login = login_required(container.identities_repo)
    admin = admin_required(container.identities_repo)

    @app.route("/api/devices/binding", methods=["GET"], endpoint="api_my_device_binding")
    @login
    def api_my_device_binding():
        binding = container.device_binding_service.current_device(g.identity.identity_id)
        return json_ok({"registeredDevice": binding_json(binding)})

    @app.route("/api/admin/employees/<int:user_id>/device", methods=["GET"], endpoint="api_admin_employee_device")
    @admin
    def api_admin_employee_device(user_id: int):
        if container.identities_repo.get_by_id(user_id) is None:
            return json_error("not_found", "User not found", 404)
        binding = container.device_binding_service.current_device(user_id)
        return json_ok({"userId": user_id, "registeredDevice": binding_json(binding)})

    @app.route("/api/admin/employees/<int:user_id>/device", methods=["PUT"], endpoint="api_admin_bind_device")
    @admin
    def api_admin_bind_device(user_id: int):
        data = json_body()
        result = container.review_workflow.admin_immediate_bind(
            current_role=g.identity.role,
            admin_id=g.identity.identity_id,
            identity_id=user_id,
            device_id=data.get("deviceId"),
            label=data.get("name") or data.get("label"),
        )
        if isinstance(result, Err):
            return err_response(result)
        return json_ok({"userId": user_id, "registeredDevice": binding_json(result.value)})
