"""
PIN sign-in for terminal staff.
"""

from __future__ import annotations

import logging

from cosmo_pos.constants import NoticeType
from cosmo_pos.schemas import User
from cosmo_pos.security import verify_legacy_pin, verify_pin
from cosmo_pos.services.catalog_service import PIN_HASH_PREFIX
from cosmo_pos.state import AppState
from cosmo_pos.validation import ValidationError, validate_pin

logger = logging.getLogger(__name__)


def pin_matches(user: User, pin: str) -> bool:
    stored = user.pin or ""
    if stored.startswith(PIN_HASH_PREFIX):
        return verify_pin(pin, user.id, stored[len(PIN_HASH_PREFIX) :])
    return verify_legacy_pin(pin, stored)


def login(state: AppState, pin: str) -> User:
    validate_pin(pin)
    for user in state.cache.users:
        if pin_matches(user, pin):
            state.current_user = user
            state.notify(f"Welcome back, {user.name}", NoticeType.SUCCESS)
            logger.info("Staff signed in", extra={"user_id": user.id, "role": user.role.value})
            return user
    logger.warning("Rejected PIN sign-in attempt")
    raise ValidationError("Invalid PIN")


def logout(state: AppState) -> None:
    if state.current_user:
        logger.info("Staff signed out", extra={"user_id": state.current_user.id})
    state.current_user = None
    state.active_tab = "pos"
