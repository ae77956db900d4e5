"""
POS API - Modular Blueprint Structure

Each module handles one resource of the terminal.
"""

import logging

from flask import Blueprint

logger = logging.getLogger(__name__)

# Create main API blueprint
api_bp = Blueprint("api", __name__)

# Import and register sub-blueprints
from .admin import admin_bp
from .auth import auth_bp
from .cart import cart_bp
from .catalog import catalog_bp
from .kitchen import kitchen_bp
from .orders import orders_bp
from .settings import settings_bp
from .system import system_bp

api_bp.register_blueprint(auth_bp)
api_bp.register_blueprint(catalog_bp)
api_bp.register_blueprint(cart_bp)
api_bp.register_blueprint(orders_bp)
api_bp.register_blueprint(kitchen_bp)
api_bp.register_blueprint(admin_bp)
api_bp.register_blueprint(settings_bp)
api_bp.register_blueprint(system_bp)

__all__ = ["api_bp"]
