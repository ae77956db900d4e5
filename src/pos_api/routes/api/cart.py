"""
Cart API - Active cart of the signed-in staff member
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from cosmo_pos.schemas import AddToCartRequest, UpdateCartNoteRequest, UpdateCartQuantityRequest
from cosmo_pos.serializers import serialize_cart, serialize_cart_item, success_response
from pos_api.decorators import get_controller, login_required

cart_bp = Blueprint("cart", __name__)


def _cart_payload():
    controller = get_controller()
    items, totals = controller.cart()
    return serialize_cart(items, totals, controller.currency_symbol)


@cart_bp.get("/cart")
@login_required
def get_cart():
    return jsonify(success_response(_cart_payload())), HTTPStatus.OK


@cart_bp.post("/cart/items")
@login_required
def add_item():
    payload = AddToCartRequest.model_validate(request.get_json(silent=True) or {})
    get_controller().add_to_cart(
        payload.product_id, payload.quantity, payload.notes, payload.selected_options
    )
    return jsonify(success_response(_cart_payload())), HTTPStatus.CREATED


@cart_bp.patch("/cart/items/<int:index>/quantity")
@login_required
def update_quantity(index: int):
    payload = UpdateCartQuantityRequest.model_validate(request.get_json(silent=True) or {})
    item = get_controller().update_cart_quantity(index, payload.delta)
    return jsonify(success_response(serialize_cart_item(item, index))), HTTPStatus.OK


@cart_bp.patch("/cart/items/<int:index>/note")
@login_required
def update_note(index: int):
    payload = UpdateCartNoteRequest.model_validate(request.get_json(silent=True) or {})
    item = get_controller().update_cart_note(index, payload.note)
    return jsonify(success_response(serialize_cart_item(item, index))), HTTPStatus.OK


@cart_bp.delete("/cart/items/<int:index>")
@login_required
def remove_item(index: int):
    get_controller().remove_from_cart(index)
    return jsonify(success_response(_cart_payload())), HTTPStatus.OK


@cart_bp.delete("/cart")
@login_required
def clear_cart():
    get_controller().clear_cart()
    return jsonify(success_response(_cart_payload())), HTTPStatus.OK
