"""
compliance_kernel.services.jurisdiction_service -- Administrator-managed directory.

Invariants enforced:
    JD-1 -- Last write wins; the previous label is overwritten, not kept.
    JD-2 -- Only real labels are stored: never empty, never the wildcard token.

Failure modes:
    - NotAuthorizedError if caller is not the administrator.
    - InvalidJurisdictionError / ReservedJurisdictionError on bad labels.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from compliance_kernel.domain.jurisdiction import validate_account, validate_jurisdiction_label
from compliance_kernel.logging_config import LogContext, get_logger
from compliance_kernel.models.jurisdiction import AddressJurisdictionModel
from compliance_kernel.services.base import BaseService
from compliance_kernel.services.settings_service import SettingsService

logger = get_logger("services.jurisdictions")


class JurisdictionService(BaseService):
    """Write side of the jurisdiction directory."""

    def __init__(self, session: Session, settings: SettingsService):
        super().__init__(session)
        self._settings = settings

    def set_address_jurisdiction(self, caller: str, account: str, jurisdiction: str) -> None:
        self._settings.require_admin(caller)
        validate_account(account)
        validate_jurisdiction_label(jurisdiction)

        model = self.session.execute(
            select(AddressJurisdictionModel).where(
                AddressJurisdictionModel.account == account,
            )
        ).scalar_one_or_none()

        previous = None
        if model is None:
            model = AddressJurisdictionModel(
                account=account,
                jurisdiction=jurisdiction,
                created_by=caller,
            )
            self.session.add(model)
        else:
            previous = model.jurisdiction
            model.jurisdiction = jurisdiction
            model.updated_by = caller
        self.session.flush()

        with LogContext.bind(actor=caller):
            logger.info(
                "address_jurisdiction_set",
                extra={
                    "account": account,
                    "jurisdiction": jurisdiction,
                    "previous_jurisdiction": previous,
                },
            )
