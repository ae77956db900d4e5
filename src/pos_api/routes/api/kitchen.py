"""
Kitchen API - Kitchen display queue and screens
"""

from http import HTTPStatus

from flask import Blueprint, jsonify

from cosmo_pos.serializers import serialize_record, success_response
from pos_api.decorators import get_controller, login_required

kitchen_bp = Blueprint("kitchen", __name__)


@kitchen_bp.get("/kitchen/queue")
@login_required
def kitchen_queue():
    """Kitchen-active orders, oldest first."""
    tickets = get_controller().kitchen_queue()
    response = jsonify(success_response([ticket.to_dict() for ticket in tickets]))
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return response, HTTPStatus.OK


@kitchen_bp.get("/kitchen/screens")
def list_screens():
    screens = get_controller().list_kitchen_screens()
    return jsonify(success_response([serialize_record(s) for s in screens])), HTTPStatus.OK
