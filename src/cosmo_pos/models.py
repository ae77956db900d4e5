"""
SQLAlchemy ORM models for terminal-local storage.

Remote entities live in the hosted database and are mirrored in memory;
only the terminal's own settings blobs are persisted locally.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class LocalSetting(Base):
    """
    Key/value settings blob (JSON text) stored on the terminal.
    """

    __tablename__ = "cosmo_local_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )
