"""
Security helpers for hashing staff PINs.
"""

from __future__ import annotations

import hashlib
import os
import secrets


def _get_salt() -> str:
    return os.getenv("PIN_HASH_SALT", "cosmo-pos-pin-salt")


def _hash_payload(payload: str) -> str:
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def hash_pin(pin: str | None, user_id: str | None = None) -> str:
    """
    Hash a PIN bound to its user id. Only the hash is stored; the raw PIN is discarded.
    """
    pin = (pin or "").strip()
    payload = f"{(user_id or '').strip()}:{pin}:{_get_salt()}"
    return _hash_payload(payload)


def verify_pin(pin: str | None, user_id: str | None, stored_hash: str | None) -> bool:
    """
    Compare a candidate PIN against the stored hash.
    """
    if not stored_hash:
        return False
    candidate = hash_pin(pin, user_id)
    return secrets.compare_digest(candidate, stored_hash)


def verify_legacy_pin(pin: str | None, stored_pin: str | None) -> bool:
    """Rows created before hashing still carry a plaintext PIN."""
    if not stored_pin or not pin:
        return False
    return secrets.compare_digest(pin.strip(), stored_pin.strip())
