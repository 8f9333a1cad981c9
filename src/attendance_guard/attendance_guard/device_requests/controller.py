from __future__ import annotations

from flask import Flask, g, request

from ..common.web import (
    admin_required,
    err_response,
    iso,
    json_body,
    json_ok,
    login_required,
    presented_device_id,
)
from ..container import Container
from ..core.results import Err
from ..devices.controller import binding_json
from ..devices.model import DeviceBinding
from .model import ChangeRequest, DeviceMeta


def request_json(item: ChangeRequest) -> dict:
    meta = item.requested_device_meta
    return {
        "id": item.request_id,
        "userId": item.identity_id,
        "requestedDeviceId": item.requested_device_id,
        "requestedDeviceMeta": {"name": meta.label, "userAgent": meta.user_agent, "note": meta.note},
        "status": item.status.value,
        "requestedAt": iso(item.requested_at),
        "reviewedBy": item.reviewed_by,
        "reviewedAt": iso(item.reviewed_at),
        "adminNote": item.admin_note,
    }


def register(app: Flask, container: Container) -> None:
    login = login_required(container.identities_repo)
    admin = admin_required(container.identities_repo)
    workflow = container.review_workflow

    @app.route("/api/devices/request-change", methods=["POST"], endpoint="api_device_request_change")
    @login
    def api_device_request_change():
        data = json_body()
        meta = DeviceMeta(
            label=data.get("name") or data.get("label"),
            user_agent=request.headers.get("User-Agent"),
            note=data.get("note"),
        )
        result = workflow.request_change(
            identity=g.identity,
            device_id=data.get("deviceId") or presented_device_id(),
            meta=meta,
        )
        if isinstance(result, Err):
            return err_response(result)
        if isinstance(result.value, DeviceBinding):
            return json_ok({"message": "Admin device registered", "registeredDevice": binding_json(result.value)})
        return json_ok({"message": "Device change request submitted", "request": request_json(result.value)}, 201)

    @app.route("/api/devices/my-requests", methods=["GET"], endpoint="api_my_device_requests")
    @login
    def api_my_device_requests():
        items = container.ledger.list_by_identity(g.identity.identity_id)
        return json_ok([request_json(item) for item in items])

    @app.route("/api/devices/requests", methods=["GET"], endpoint="api_pending_device_requests")
    @admin
    def api_pending_device_requests():
        items = workflow.list_pending(current_role=g.identity.role)
        return json_ok([request_json(item) for item in items])

    @app.route("/api/admin/employees/<int:user_id>/requests", methods=["GET"], endpoint="api_admin_employee_requests")
    @admin
    def api_admin_employee_requests(user_id: int):
        items = workflow.list_for_identity(current_role=g.identity.role, identity_id=user_id)
        return json_ok([request_json(item) for item in items])

    @app.route("/api/devices/requests/<int:request_id>/approve", methods=["POST"], endpoint="api_approve_device_request")
    @admin
    def api_approve_device_request(request_id: int):
        result = workflow.approve(
            current_role=g.identity.role,
            request_id=request_id,
            reviewer_id=g.identity.identity_id,
            note=json_body().get("note"),
        )
        if isinstance(result, Err):
            return err_response(result)
        return json_ok({"message": "Request approved", "request": request_json(result.value)})

    @app.route("/api/devices/requests/<int:request_id>/reject", methods=["POST"], endpoint="api_reject_device_request")
    @admin
    def api_reject_device_request(request_id: int):
        result = workflow.reject(
            current_role=g.identity.role,
            request_id=request_id,
            reviewer_id=g.identity.identity_id,
            note=json_body().get("note"),
        )
        if isinstance(result, Err):
            return err_response(result)
        return json_ok({"message": "Request rejected", "request": request_json(result.value)})

    @app.route("/api/devices/requests/<int:request_id>/note", methods=["PATCH"], endpoint="api_annotate_device_request")
    @admin
    def api_annotate_device_request(request_id: int):
        result = workflow.annotate(current_role=g.identity.role, request_id=request_id, note=json_body().get("note"))
        if isinstance(result, Err):
            return err_response(result)
        return json_ok(request_json(result.value))

    @app.route("/api/devices/requests/<int:request_id>", methods=["DELETE"], endpoint="api_delete_device_request")
    @login
    def api_delete_device_request(request_id: int):
        result = container.ledger.delete(
            request_id=request_id,
            requester_id=g.identity.identity_id,
            requester_role=g.identity.role,
        )
        if isinstance(result, Err):
            return err_response(result)
        return json_ok({"message": "Request deleted"})
