"""
System API - Connectivity, refresh, notices and the recorded error channel
"""

from http import HTTPStatus

from flask import Blueprint, jsonify

from cosmo_pos.serializers import success_response
from pos_api.decorators import admin_required, get_controller

system_bp = Blueprint("system", __name__)


@system_bp.get("/system/status")
def status():
    return jsonify(success_response(get_controller().status_snapshot())), HTTPStatus.OK


@system_bp.post("/system/refresh")
def refresh():
    connected = get_controller().refresh()
    return jsonify(success_response({"connected": connected})), HTTPStatus.OK


@system_bp.get("/system/notices")
def list_notices():
    return jsonify(success_response(get_controller().notices())), HTTPStatus.OK


@system_bp.delete("/system/notices/<notice_id>")
def dismiss_notice(notice_id: str):
    dismissed = get_controller().dismiss_notice(notice_id)
    return jsonify(success_response({"dismissed": dismissed})), HTTPStatus.OK


@system_bp.get("/system/errors")
@admin_required
def recorded_errors():
    return jsonify(success_response(get_controller().recorded_errors())), HTTPStatus.OK
