"""Decorators for route protection based on the signed-in terminal user."""

from __future__ import annotations

from functools import wraps
from http import HTTPStatus

from flask import current_app, jsonify

from cosmo_pos.constants import Roles
from cosmo_pos.controller import PosController
from cosmo_pos.serializers import error_response


def get_controller() -> PosController:
    return current_app.extensions["pos_controller"]


def login_required(f):
    """Require a staff member to be signed in on the terminal."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_controller().current_user() is None:
            return jsonify(error_response("Sign in required")), HTTPStatus.UNAUTHORIZED
        return f(*args, **kwargs)

    return decorated_function


def admin_required(f):
    """Require the signed-in user to hold the Admin role."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = get_controller().current_user()
        if user is None:
            return jsonify(error_response("Sign in required")), HTTPStatus.UNAUTHORIZED
        if not Roles.is_admin(user.role):
            return jsonify(error_response("Admin access required")), HTTPStatus.FORBIDDEN
        return f(*args, **kwargs)

    return decorated_function
