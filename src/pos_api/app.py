"""
Factory for the POS terminal API (REST).
Serves the terminal endpoints under /api.
"""

from __future__ import annotations

import atexit

from flask import Flask, jsonify
from flask_cors import CORS

from cosmo_pos.config import AppConfig, load_config
from cosmo_pos.controller import PosController
from cosmo_pos.db import init_db, init_engine
from cosmo_pos.error_handlers import register_error_handlers
from cosmo_pos.logging_config import configure_logging
from cosmo_pos.models import Base
from cosmo_pos.supabase.client import RemoteStore
from pos_api.routes.api import api_bp

CONTROLLER_KEY = "pos_controller"


def create_app(
    config: AppConfig | None = None,
    store: RemoteStore | None = None,
    start_controller: bool = True,
) -> Flask:
    app = Flask(__name__)
    config = config or load_config("cosmo-pos-api")

    configure_logging(config.app_name, config.log_level)

    # Local settings database
    init_engine(config)
    init_db(Base.metadata)

    # Basic Config
    app.config["SECRET_KEY"] = config.secret_key
    app.config["APP_NAME"] = config.restaurant_name
    app.config["DEBUG_MODE"] = config.debug_mode
    app.config["POS_CONFIG"] = config

    controller = PosController(config, store=store)
    app.extensions[CONTROLLER_KEY] = controller
    if start_controller:
        controller.start()
        atexit.register(controller.stop)

    app.register_blueprint(api_bp, url_prefix="/api")

    register_error_handlers(app)

    CORS(app, resources={r"/api/*": {"origins": "*"}})

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "service": config.app_name}), 200

    app.logger.info(f"{config.restaurant_name} POS API ready")
    return app
