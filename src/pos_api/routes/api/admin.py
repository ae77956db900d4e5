"""
Admin API - Staff, kitchen screens and the order status catalog
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from cosmo_pos.schemas import (
    CreateKitchenScreenRequest,
    CreateOrderStatusRequest,
    CreateUserRequest,
)
from cosmo_pos.serializers import (
    error_response,
    serialize_order_status,
    serialize_record,
    serialize_user,
    success_response,
)
from pos_api.decorators import admin_required, get_controller

admin_bp = Blueprint("admin", __name__)


@admin_bp.get("/users")
@admin_required
def list_users():
    users = get_controller().list_users()
    return jsonify(success_response([serialize_user(u) for u in users])), HTTPStatus.OK


@admin_bp.post("/users")
@admin_required
def create_user():
    payload = CreateUserRequest.model_validate(request.get_json(silent=True) or {})
    user = get_controller().add_user(payload)
    return jsonify(success_response(serialize_user(user))), HTTPStatus.CREATED


@admin_bp.delete("/users/<user_id>")
@admin_required
def delete_user(user_id: str):
    get_controller().delete_user(user_id)
    return jsonify(success_response(None, "User removed")), HTTPStatus.OK


@admin_bp.get("/customers")
@admin_required
def list_customers():
    customers = get_controller().list_customers()
    return jsonify(success_response([serialize_record(c) for c in customers])), HTTPStatus.OK


@admin_bp.post("/kitchen/screens")
@admin_required
def create_screen():
    payload = CreateKitchenScreenRequest.model_validate(request.get_json(silent=True) or {})
    screen = get_controller().add_kitchen_screen(payload)
    if screen is None:
        return jsonify(error_response("Failed to add kitchen screen")), HTTPStatus.BAD_GATEWAY
    return jsonify(success_response(serialize_record(screen))), HTTPStatus.CREATED


@admin_bp.delete("/kitchen/screens/<int:screen_id>")
@admin_required
def delete_screen(screen_id: int):
    removed = get_controller().remove_kitchen_screen(screen_id)
    return jsonify(success_response({"removed": removed})), HTTPStatus.OK


@admin_bp.get("/order-statuses")
def list_order_statuses():
    controller = get_controller()
    catalog = controller.status_catalog()
    statuses = controller.list_order_statuses()
    return jsonify(
        success_response([serialize_order_status(s, catalog) for s in statuses])
    ), HTTPStatus.OK


@admin_bp.post("/order-statuses")
@admin_required
def create_order_status():
    controller = get_controller()
    payload = CreateOrderStatusRequest.model_validate(request.get_json(silent=True) or {})
    status = controller.add_order_status(payload)
    if status is None:
        return jsonify(error_response("Failed to add status")), HTTPStatus.BAD_GATEWAY
    return jsonify(
        success_response(serialize_order_status(status, controller.status_catalog()))
    ), HTTPStatus.CREATED


@admin_bp.delete("/order-statuses/<int:status_id>")
@admin_required
def delete_order_status(status_id: int):
    removed = get_controller().remove_order_status(status_id)
    return jsonify(success_response({"removed": removed})), HTTPStatus.OK
