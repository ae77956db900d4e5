"""
Catalog API - Products, categories and inventory views
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from cosmo_pos.schemas import CreateCategoryRequest, ProductRequest
from cosmo_pos.serializers import (
    error_response,
    serialize_product,
    serialize_record,
    success_response,
)
from pos_api.decorators import admin_required, get_controller

catalog_bp = Blueprint("catalog", __name__)


def _threshold() -> int:
    return get_controller().config.low_stock_threshold


@catalog_bp.get("/products")
def list_products():
    """
    Query params:
        - category: str (optional) - Filter by category name
        - search: str (optional) - Match on product name
    """
    category = request.args.get("category")
    search = (request.args.get("search") or "").strip().lower()
    products = get_controller().list_products()
    if category and category.lower() != "all":
        products = [p for p in products if p.category.lower() == category.lower()]
    if search:
        products = [p for p in products if search in p.name.lower()]
    threshold = _threshold()
    return jsonify(
        success_response([serialize_product(p, threshold) for p in products])
    ), HTTPStatus.OK


@catalog_bp.get("/products/<product_id>")
def get_product(product_id: str):
    product = get_controller().get_product(product_id)
    return jsonify(success_response(serialize_product(product, _threshold()))), HTTPStatus.OK


@catalog_bp.get("/products/low-stock")
def low_stock():
    products = get_controller().low_stock()
    threshold = _threshold()
    return jsonify(
        success_response([serialize_product(p, threshold) for p in products])
    ), HTTPStatus.OK


@catalog_bp.get("/products/expiring")
def expiring_soon():
    products = get_controller().expiring_soon()
    return jsonify(success_response([serialize_product(p) for p in products])), HTTPStatus.OK


@catalog_bp.post("/products")
@admin_required
def create_product():
    payload = ProductRequest.model_validate(request.get_json(silent=True) or {})
    product = get_controller().add_product(payload)
    return jsonify(success_response(serialize_product(product))), HTTPStatus.CREATED


@catalog_bp.put("/products/<product_id>")
@admin_required
def update_product(product_id: str):
    payload = ProductRequest.model_validate(request.get_json(silent=True) or {})
    product = get_controller().update_product(product_id, payload)
    return jsonify(success_response(serialize_product(product))), HTTPStatus.OK


@catalog_bp.delete("/products/<product_id>")
@admin_required
def delete_product(product_id: str):
    get_controller().delete_product(product_id)
    return jsonify(success_response(None, "Product deleted")), HTTPStatus.OK


@catalog_bp.get("/categories")
def list_categories():
    categories = get_controller().list_categories()
    return jsonify(success_response([serialize_record(c) for c in categories])), HTTPStatus.OK


@catalog_bp.post("/categories")
@admin_required
def create_category():
    payload = CreateCategoryRequest.model_validate(request.get_json(silent=True) or {})
    category = get_controller().add_category(payload.name)
    if category is None:
        return jsonify(error_response("Failed to add category")), HTTPStatus.BAD_GATEWAY
    return jsonify(success_response(serialize_record(category))), HTTPStatus.CREATED


@catalog_bp.delete("/categories/<int:category_id>")
@admin_required
def delete_category(category_id: int):
    removed = get_controller().delete_category(category_id)
    return jsonify(success_response({"removed": removed})), HTTPStatus.OK
