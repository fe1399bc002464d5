"""
Module: compliance_kernel.selectors.jurisdiction_selector
Responsibility: Unauthenticated reads of the account -> jurisdiction directory.
"""

from __future__ import annotations

from sqlalchemy import select

from compliance_kernel.models.jurisdiction import AddressJurisdictionModel
from compliance_kernel.selectors.base import BaseSelector


class JurisdictionSelector(BaseSelector):
    """Read-only directory lookups."""

    def get_address_jurisdiction(self, account: str) -> str | None:
        """Jurisdiction label for ``account``, or None if never set."""
        return self.session.execute(
            select(AddressJurisdictionModel.jurisdiction).where(
                AddressJurisdictionModel.account == account,
            )
        ).scalar_one_or_none()

    def get_directory(self) -> dict[str, str]:
        """Every account with a label, ordered by account."""
        rows = self.session.execute(
            select(
                AddressJurisdictionModel.account,
                AddressJurisdictionModel.jurisdiction,
            ).order_by(AddressJurisdictionModel.account)
        ).all()
        return {account: jurisdiction for account, jurisdiction in rows}
