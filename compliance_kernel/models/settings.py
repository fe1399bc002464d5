"""
Module: compliance_kernel.models.settings
Responsibility: ORM persistence for the engine's principals -- the
    administrator, the governance principal, and the carbon asset contract
    collaborator reference.

Invariants enforced:
    ES-1 -- At most one settings row (UNIQUE settings_key, always "default").
"""

from __future__ import annotations

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from compliance_kernel.db.base import Base

DEFAULT_SETTINGS_KEY = "default"


class EngineSettingsModel(Base):
    """Singleton row naming the engine's principals."""

    __tablename__ = "engine_settings"

    settings_key: Mapped[str] = mapped_column(
        String(32), nullable=False, unique=True, default=DEFAULT_SETTINGS_KEY,
    )
    admin: Mapped[str] = mapped_column(String(128), nullable=False)
    governance: Mapped[str] = mapped_column(String(128), nullable=False)
    carbon_asset_contract: Mapped[str] = mapped_column(String(128), nullable=False)
    initialized_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<EngineSettings admin={self.admin} governance={self.governance}>"
