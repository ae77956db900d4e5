"""HTTP API for the POS terminal."""

from pos_api.app import create_app

__all__ = ["create_app"]
