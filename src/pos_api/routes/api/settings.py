"""
Settings API - Printer and store settings kept on the terminal
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from cosmo_pos.logging_config import get_logger
from cosmo_pos.serializers import serialize_record, success_response
from cosmo_pos.validation import ValidationError
from pos_api.decorators import admin_required, get_controller

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)


def _json_object() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


@settings_bp.get("/settings")
def get_settings():
    printer, store = get_controller().settings()
    return jsonify(
        success_response({"printer": serialize_record(printer), "store": serialize_record(store)})
    ), HTTPStatus.OK


@settings_bp.put("/settings/printer")
@admin_required
def update_printer_settings():
    settings = get_controller().update_printer_settings(_json_object())
    logger.info("Printer settings updated", extra={"printer": settings.printer_name})
    return jsonify(success_response(serialize_record(settings))), HTTPStatus.OK


@settings_bp.put("/settings/store")
@admin_required
def update_store_settings():
    settings = get_controller().update_store_settings(_json_object())
    logger.info("Store settings updated", extra={"store": settings.name})
    return jsonify(success_response(serialize_record(settings))), HTTPStatus.OK
