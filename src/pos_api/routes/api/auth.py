"""
Auth API - PIN sign-in for terminal staff
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from cosmo_pos.schemas import LoginRequest
from cosmo_pos.serializers import serialize_user, success_response
from pos_api.decorators import get_controller

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/auth/login")
def login():
    payload = LoginRequest.model_validate(request.get_json(silent=True) or {})
    user = get_controller().login(payload.pin)
    return jsonify(success_response(serialize_user(user))), HTTPStatus.OK


@auth_bp.post("/auth/logout")
def logout():
    get_controller().logout()
    return jsonify(success_response(None, "Signed out")), HTTPStatus.OK


@auth_bp.get("/auth/me")
def me():
    user = get_controller().current_user()
    return jsonify(success_response(serialize_user(user) if user else None)), HTTPStatus.OK
