"""
Orders API - Checkout, order history, status updates and receipts
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from cosmo_pos.schemas import (
    CheckoutRequest,
    ReceiptEmailRequest,
    ReceiptSmsRequest,
    StatusUpdateRequest,
)
from cosmo_pos.serializers import error_response, serialize_order, success_response
from pos_api.decorators import get_controller, login_required

orders_bp = Blueprint("orders", __name__)


@orders_bp.post("/checkout")
@login_required
def checkout():
    controller = get_controller()
    payload = CheckoutRequest.model_validate(request.get_json(silent=True) or {})
    order = controller.checkout(payload)
    data = serialize_order(order, controller.status_catalog(), controller.currency_symbol)
    return jsonify(success_response(data)), HTTPStatus.CREATED


@orders_bp.get("/orders")
@login_required
def list_orders():
    """
    Order history.

    Query params:
        - status: str (optional) - Filter by status label ("All" for every status)
        - search: str (optional) - Match on order id, staff name or order type
        - sort: str (optional) - id, date, total, status or type (default date)
        - direction: asc|desc (default desc)
    """
    controller = get_controller()
    orders = controller.order_history(
        status=request.args.get("status"),
        search=request.args.get("search"),
        sort_by=request.args.get("sort", "date"),
        descending=request.args.get("direction", "desc").lower() != "asc",
    )
    catalog = controller.status_catalog()
    symbol = controller.currency_symbol
    response = jsonify(success_response([serialize_order(o, catalog, symbol) for o in orders]))
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return response, HTTPStatus.OK


@orders_bp.get("/orders/<order_id>")
@login_required
def get_order(order_id: str):
    controller = get_controller()
    order = controller.get_order(order_id)
    data = serialize_order(order, controller.status_catalog(), controller.currency_symbol)
    return jsonify(success_response(data)), HTTPStatus.OK


@orders_bp.post("/orders/<order_id>/status")
@login_required
def update_status(order_id: str):
    """
    Move an order to the given status, or to the next default status when
    no status is given.
    """
    controller = get_controller()
    payload = StatusUpdateRequest.model_validate(request.get_json(silent=True) or {})
    order = controller.update_order_status(order_id, payload.status)
    data = serialize_order(order, controller.status_catalog(), controller.currency_symbol)
    return jsonify(success_response(data)), HTTPStatus.OK


@orders_bp.post("/orders/<order_id>/receipt/email")
@login_required
def email_receipt(order_id: str):
    payload = ReceiptEmailRequest.model_validate(request.get_json(silent=True) or {})
    sent = get_controller().send_receipt_email(order_id, payload.email)
    if not sent:
        return jsonify(
            error_response("Could not send email. Please check connection.")
        ), HTTPStatus.BAD_GATEWAY
    return jsonify(success_response({"sent": True})), HTTPStatus.OK


@orders_bp.post("/orders/<order_id>/receipt/sms")
@login_required
def sms_receipt(order_id: str):
    payload = ReceiptSmsRequest.model_validate(request.get_json(silent=True) or {})
    sent = get_controller().send_receipt_sms(order_id, payload.phone, payload.message)
    if not sent:
        return jsonify(
            error_response("Could not send SMS via Gateway. Please check connection.")
        ), HTTPStatus.BAD_GATEWAY
    return jsonify(success_response({"sent": True})), HTTPStatus.OK
