"""
Module: compliance_kernel.selectors.settings_selector
Responsibility: Read access to the engine's principals.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select

from compliance_kernel.exceptions import EngineNotInitializedError
from compliance_kernel.models.settings import DEFAULT_SETTINGS_KEY, EngineSettingsModel
from compliance_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class EngineSettings:
    """Principals the engine was initialized with."""

    admin: str
    governance: str
    carbon_asset_contract: str
    initialized_at: int


class SettingsSelector(BaseSelector):
    """Reads the singleton settings row."""

    def find(self) -> EngineSettings | None:
        model = self.session.execute(
            select(EngineSettingsModel).where(
                EngineSettingsModel.settings_key == DEFAULT_SETTINGS_KEY,
            )
        ).scalar_one_or_none()
        if model is None:
            return None
        return EngineSettings(
            admin=model.admin,
            governance=model.governance,
            carbon_asset_contract=model.carbon_asset_contract,
            initialized_at=model.initialized_at,
        )

    def get(self) -> EngineSettings:
        """
        Raises:
            EngineNotInitializedError: if initialize() has not run.
        """
        settings = self.find()
        if settings is None:
            raise EngineNotInitializedError()
        return settings
