"""
Module: compliance_kernel.models.jurisdiction
Responsibility: ORM persistence for the account -> jurisdiction directory.

Invariants enforced:
    JD-1 -- One label per account (UNIQUE account); last write wins, no
            history is kept.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from compliance_kernel.db.base import TrackedBase


class AddressJurisdictionModel(TrackedBase):
    """Jurisdiction label assigned to one account."""

    __tablename__ = "address_jurisdictions"

    account: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    jurisdiction: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"<AddressJurisdiction {self.account}={self.jurisdiction}>"
