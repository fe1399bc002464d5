"""
compliance_kernel.services.settings_service -- Engine principals and role checks.

Responsibility:
    One-shot initialization of the admin, governance and carbon asset
    contract principals, and the role checks every gated operation runs
    before touching state.

Invariants enforced:
    ES-1 -- initialize() succeeds once per store.
    ES-2 -- A gated operation proceeds only when ``caller`` equals the
            principal stored for the required role.  Authenticating the
            caller (signature, session, token) happens before this layer.

Failure modes:
    - EngineAlreadyInitializedError on a second initialize().
    - EngineNotInitializedError when a role check runs before initialize().
    - NotAuthorizedError when the caller does not hold the role.
    - InvalidAccountError when a principal is empty or too long.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from compliance_kernel.domain.clock import Clock, SystemClock
from compliance_kernel.domain.jurisdiction import validate_account
from compliance_kernel.exceptions import (
    EngineAlreadyInitializedError,
    NotAuthorizedError,
)
from compliance_kernel.logging_config import get_logger
from compliance_kernel.models.settings import EngineSettingsModel
from compliance_kernel.selectors.settings_selector import EngineSettings, SettingsSelector
from compliance_kernel.services.base import BaseService

logger = get_logger("services.settings")

ADMIN_ROLE = "admin"
GOVERNANCE_ROLE = "governance"


class SettingsService(BaseService):
    """Initializes principals and enforces role membership."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._selector = SettingsSelector(session)

    def initialize(
        self,
        admin: str,
        governance: str,
        carbon_asset_contract: str,
    ) -> EngineSettings:
        existing = self._selector.find()
        if existing is not None:
            raise EngineAlreadyInitializedError(existing.admin)
        for principal in (admin, governance, carbon_asset_contract):
            validate_account(principal)

        model = EngineSettingsModel(
            admin=admin,
            governance=governance,
            carbon_asset_contract=carbon_asset_contract,
            initialized_at=self._clock.timestamp(),
        )
        self.session.add(model)
        self.session.flush()

        logger.info(
            "engine_initialized",
            extra={
                "admin": admin,
                "governance": governance,
                "carbon_asset_contract": carbon_asset_contract,
            },
        )
        return self._selector.get()

    def require_admin(self, caller: str) -> None:
        self._require(caller, ADMIN_ROLE, self._selector.get().admin)

    def require_governance(self, caller: str) -> None:
        self._require(caller, GOVERNANCE_ROLE, self._selector.get().governance)

    def _require(self, caller: str, role: str, principal: str) -> None:
        if caller != principal:
            logger.warning(
                "caller_not_authorized",
                extra={"caller": caller, "required_role": role},
            )
            raise NotAuthorizedError(caller, role)
