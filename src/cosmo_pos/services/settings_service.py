"""Service for the terminal-local printer and store settings."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select

from cosmo_pos.constants import LOCAL_SETTING_PRINTER, LOCAL_SETTING_STORE
from cosmo_pos.db import get_session
from cosmo_pos.models import LocalSetting
from cosmo_pos.schemas import PrinterSettings, StoreSettings

logger = logging.getLogger(__name__)


class SettingsService:
    """Persists settings blobs as JSON and rehydrates them over defaults."""

    MODELS: dict[str, type[BaseModel]] = {
        LOCAL_SETTING_PRINTER: PrinterSettings,
        LOCAL_SETTING_STORE: StoreSettings,
    }

    @classmethod
    def _model_for(cls, key: str) -> type[BaseModel]:
        try:
            return cls.MODELS[key]
        except KeyError:
            raise KeyError(f"Unknown settings key: {key}") from None

    @classmethod
    def defaults(cls, key: str, overrides: dict[str, Any] | None = None) -> BaseModel:
        """Built-in defaults, optionally adjusted by terminal configuration."""
        model = cls._model_for(key)
        base = model().model_dump(by_alias=True)
        if overrides:
            base.update({k: v for k, v in overrides.items() if k in base})
        return model.model_validate(base)

    @classmethod
    def merge(
        cls, key: str, raw: str | None, overrides: dict[str, Any] | None = None
    ) -> BaseModel:
        """
        Overlay a stored blob on the defaults.

        Missing keys keep their defaults, unknown keys are dropped, an invalid
        value falls back to the default for that key only and an unparseable
        blob yields pure defaults.
        """
        model = cls._model_for(key)
        defaults = cls.defaults(key, overrides)
        if not raw:
            return defaults
        try:
            stored = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Stored {key} is not valid JSON; using defaults")
            return defaults
        if not isinstance(stored, dict):
            logger.warning(f"Stored {key} is not an object; using defaults")
            return defaults

        base = defaults.model_dump(by_alias=True)
        merged = dict(base)
        for name, value in stored.items():
            if name not in base:
                continue
            try:
                model.model_validate({**merged, name: value})
            except PydanticValidationError:
                logger.warning(f"Stored {key} has an invalid {name}; keeping the default")
                continue
            merged[name] = value
        return model.model_validate(merged)

    @classmethod
    def load(cls, key: str, overrides: dict[str, Any] | None = None) -> BaseModel:
        with get_session() as session:
            setting = (
                session.execute(select(LocalSetting).where(LocalSetting.key == key))
                .scalars()
                .first()
            )
            raw = setting.value if setting else None
        return cls.merge(key, raw, overrides)

    @classmethod
    def save(cls, key: str, values: BaseModel | dict[str, Any]) -> BaseModel:
        """
        Persist a settings blob. A dict is applied as a partial update on top
        of what is currently stored.
        """
        model = cls._model_for(key)
        if isinstance(values, dict):
            current = cls.load(key).model_dump(by_alias=True)
            values = model.model_validate({**current, **values})
        payload = json.dumps(values.model_dump(by_alias=True, mode="json"))

        with get_session() as session:
            setting = session.get(LocalSetting, key)
            if setting is None:
                session.add(LocalSetting(key=key, value=payload))
            else:
                setting.value = payload
        logger.info(f"Saved {key}")
        return values

    @classmethod
    def load_printer_settings(cls) -> PrinterSettings:
        return cls.load(LOCAL_SETTING_PRINTER)

    @classmethod
    def load_store_settings(cls, overrides: dict[str, Any] | None = None) -> StoreSettings:
        return cls.load(LOCAL_SETTING_STORE, overrides)
