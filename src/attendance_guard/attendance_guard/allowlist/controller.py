from __future__ import annotations

from flask import Flask, g

from ..common.web import admin_required, err_response, json_body, json_ok
from ..container import Container
from ..core.exceptions import ValidationError
from ..core.results import Err


def _network_list(data: dict, key: str) -> list:
    value = data.get(key)
    if not isinstance(value, list):
        raise ValidationError(f"{key} must be an array")
    return value


def register(app: Flask, container: Container) -> None:
    admin = admin_required(container.identities_repo)
    service = container.allowlist_service

    @app.route("/api/admin/settings/company-ips", methods=["GET"], endpoint="api_get_company_ips")
    @admin
    def api_get_company_ips():
        return json_ok({"ips": list(service.get_company_allowlist(current_role=g.identity.role))})

    @app.route("/api/admin/settings/company-ips", methods=["PUT"], endpoint="api_set_company_ips")
    @admin
    def api_set_company_ips():
        networks = _network_list(json_body(), "ips")
        stored = service.set_company_allowlist(current_role=g.identity.role, networks=networks)
        return json_ok({"message": "Company IP allowlist updated", "ips": list(stored)})

    @app.route("/api/admin/employees/<int:user_id>/allowed-ips", methods=["PATCH"], endpoint="api_set_employee_ips")
    @admin
    def api_set_employee_ips(user_id: int):
        networks = _network_list(json_body(), "allowedIPs")
        result = service.set_user_allowlist(current_role=g.identity.role, identity_id=user_id, networks=networks)
        if isinstance(result, Err):
            return err_response(result)
        return json_ok({"message": "Employee IP allowlist updated", "userId": user_id, "allowedIPs": list(result.value)})
